"""Working-tree layout.

The orchestrator owns a fixed set of paths below the working-tree root:
build-output directories, the dependency prefix holding the extracted
toolchain, the version marker and the downloaded archives.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

__all__ = ["Layout", "detect_root", "GENERATED_ARTIFACTS"]

# Leftovers of earlier configure runs, removed by cleanup and before a fresh
# toolchain install.
GENERATED_ARTIFACTS: tuple[str, ...] = (
    "cmake",
    "patches",
    "description.json",
    "dummy.cpp",
    "miniconda.sh",
)


@dataclass(frozen=True, slots=True)
class Layout:
    """Paths of a working tree.

    Attributes:
        root: Source root; the build generator is pointed at it.
        release_name: Release output directory name (relative to root).
        debug_name: Debug output directory name (relative to root).
        deps_name: Dependency directory name (relative to root).
    """

    root: Path
    release_name: str = "release"
    debug_name: str = "debug"
    deps_name: str = "deps"

    @property
    def release_dir(self) -> Path:
        return self.root / self.release_name

    @property
    def debug_dir(self) -> Path:
        return self.root / self.debug_name

    @property
    def deps_dir(self) -> Path:
        return self.root / self.deps_name

    @property
    def deps_prefix(self) -> Path:
        """Install prefix of the extracted toolchain (deps/local)."""
        return self.deps_dir / "local"

    @property
    def toolchain_bin_dir(self) -> Path:
        return self.deps_prefix / "bin"

    @property
    def compiler_path(self) -> Path:
        """The compiler whose presence means a usable toolchain is installed."""
        return self.toolchain_bin_dir / "cc"

    @property
    def version_marker(self) -> Path:
        return self.root / "deps_version"

    @property
    def doc_dir(self) -> Path:
        return self.root / "doc"

    @property
    def config_path(self) -> Path:
        return self.root / "buildconf.toml"

    def output_dir(self, build_type: str) -> Path:
        """Output directory for a build type ("Release" or "Debug")."""
        return self.release_dir if build_type == "Release" else self.debug_dir

    def downloaded_archives(self) -> list[Path]:
        """Toolchain archives sitting in the root (``*.tar.gz``)."""
        if not self.root.is_dir():
            return []
        return sorted(p for p in self.root.glob("*.tar.gz") if p.is_file())

    def generated_paths(self) -> list[Path]:
        """Everything a previous run generated, archives excluded."""
        return [
            self.release_dir,
            self.debug_dir,
            self.deps_dir,
            *(self.root / name for name in GENERATED_ARTIFACTS),
            self.version_marker,
        ]

    def __str__(self) -> str:
        return str(self.root)


def detect_root(*, env_var: str = "BUILDCONF_ROOT") -> Path:
    """Working-tree root: ``$BUILDCONF_ROOT`` if it names a directory, else cwd."""
    env_value = os.environ.get(env_var)
    if env_value:
        env_path = Path(env_value).expanduser().resolve()
        if env_path.is_dir():
            return env_path
    return Path.cwd().resolve()
