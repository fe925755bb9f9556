from __future__ import annotations

from dataclasses import dataclass

from buildconf.core.config import Config, load_config
from buildconf.core.layout import Layout, detect_root
from buildconf.core.result import Err
from buildconf.output.console import ConsoleProtocol, RichConsole
from buildconf.platform.detection import Platform, detect_platform
from buildconf.tools.http import HttpClient


@dataclass(frozen=True, slots=True)
class CLIContext:
    layout: Layout
    platform: Platform
    config: Config
    console: ConsoleProtocol
    http: HttpClient | None = None


def build_context() -> CLIContext:
    """Detect the working tree and load its optional buildconf.toml."""
    console = RichConsole()
    root = detect_root()

    config = Config()
    config_path = Layout(root=root).config_path
    if config_path.exists():
        config_result = load_config(config_path)
        if isinstance(config_result, Err):
            console.warning(f"{config_result.error.message}; using defaults")
        else:
            config = config_result.value

    layout = Layout(
        root=root,
        release_name=config.paths.release,
        debug_name=config.paths.debug,
        deps_name=config.paths.deps,
    )
    return CLIContext(
        layout=layout,
        platform=detect_platform(),
        config=config,
        console=console,
    )
