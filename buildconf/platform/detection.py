"""Operating-system family detection.

Toolchain bundles are published per OS family, so this is the only platform
axis the orchestrator cares about.
"""

from __future__ import annotations

import sys as _sys
from enum import Enum, auto
from functools import lru_cache

__all__ = ["Platform", "detect_platform", "platform_from_name"]


class Platform(Enum):
    """Operating system family."""

    LINUX = auto()
    MACOS = auto()
    WINDOWS = auto()  # Windows-class shells: MSYS, Cygwin, native win32
    UNKNOWN = auto()

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def exe_suffix(self) -> str:
        return ".exe" if self == Platform.WINDOWS else ""

    def exe_name(self, name: str) -> str:
        """Example: exe_name("gcc") -> "gcc.exe" on Windows, "gcc" elsewhere."""
        return f"{name}{self.exe_suffix}"


def platform_from_name(system: str) -> Platform:
    """Map a ``sys.platform``-style string to a Platform."""
    system = system.lower()
    if system.startswith("linux"):
        return Platform.LINUX
    if system.startswith("darwin"):
        return Platform.MACOS
    if system.startswith(("win32", "cygwin", "msys")):
        return Platform.WINDOWS
    return Platform.UNKNOWN


@lru_cache(maxsize=1)
def detect_platform() -> Platform:
    """Detect the current operating system (cached)."""
    return platform_from_name(_sys.platform)
