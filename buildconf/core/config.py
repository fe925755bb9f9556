"""Typed configuration loading.

An optional ``buildconf.toml`` at the working-tree root can override where
toolchains are downloaded from, how they are downloaded, the output directory
names and the collaborator scripts. Every key is optional.

Example:
    [toolchain]
    base_url = "https://mirror.example.com/dato-deps"
    transport = "curl"

    [paths]
    release = "build-release"
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, cast

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_float, get_int, get_str, get_table

__all__ = [
    "Config",
    "ConfigError",
    "CollaboratorsConfig",
    "PathsConfig",
    "ToolchainConfig",
    "Transport",
    "DEFAULT_BASE_URL",
    "load_config",
]

DEFAULT_BASE_URL = "http://s3-us-west-2.amazonaws.com/dato-deps"

Transport = Literal["auto", "urllib", "wget", "curl"]
_TRANSPORTS: tuple[str, ...] = ("auto", "urllib", "wget", "curl")


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ToolchainConfig:
    """Where and how toolchain bundles are fetched.

    ``version`` overrides the platform default bundle version when set.
    """

    base_url: str = DEFAULT_BASE_URL
    version: int | None = None
    transport: Transport = "auto"
    timeout: float = 300.0


@dataclass(frozen=True, slots=True)
class PathsConfig:
    """Directory names relative to the working-tree root."""

    release: str = "release"
    debug: str = "debug"
    deps: str = "deps"


@dataclass(frozen=True, slots=True)
class CollaboratorsConfig:
    """External installer scripts, relative to the working-tree root."""

    python_installer: str = "oss_local_scripts/install_python_toolchain.sh"
    r_installer: str = "oss_local_scripts/install_r_toolchain.sh"


@dataclass(frozen=True, slots=True)
class Config:
    toolchain: ToolchainConfig = field(default_factory=ToolchainConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    collaborators: CollaboratorsConfig = field(default_factory=CollaboratorsConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Raises:
            ValueError: On a value outside its allowed set.
        """
        toolchain: StrDict = get_table(data, "toolchain") or {}
        paths: StrDict = get_table(data, "paths") or {}
        collaborators: StrDict = get_table(data, "collaborators") or {}

        transport = get_str(toolchain, "transport") or "auto"
        if transport not in _TRANSPORTS:
            raise ValueError(
                f"toolchain.transport must be one of {', '.join(_TRANSPORTS)}, got {transport!r}"
            )

        defaults = CollaboratorsConfig()
        return cls(
            toolchain=ToolchainConfig(
                base_url=(get_str(toolchain, "base_url") or DEFAULT_BASE_URL).rstrip("/"),
                version=get_int(toolchain, "version"),
                transport=cast(Transport, transport),
                timeout=get_float(toolchain, "timeout") or 300.0,
            ),
            paths=PathsConfig(
                release=get_str(paths, "release") or "release",
                debug=get_str(paths, "debug") or "debug",
                deps=get_str(paths, "deps") or "deps",
            ),
            collaborators=CollaboratorsConfig(
                python_installer=get_str(collaborators, "python_installer")
                or defaults.python_installer,
                r_installer=get_str(collaborators, "r_installer") or defaults.r_installer,
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))
