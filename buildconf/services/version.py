"""Version oracle: is the installed toolchain bundle current?

Bundle versions are plain integers compared numerically, so 9 < 13 holds even
though "9" > "13" as strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from buildconf.core.state import read_marker
from buildconf.platform.detection import Platform

__all__ = ["DEFAULT_VERSIONS", "VersionOracle", "default_version_for"]

DEFAULT_VERSIONS: dict[Platform, int] = {
    Platform.LINUX: 13,
    Platform.MACOS: 12,
    Platform.WINDOWS: 12,
}


def default_version_for(platform: Platform) -> int | None:
    """Current default bundle version for a platform; None if unsupported."""
    return DEFAULT_VERSIONS.get(platform)


@dataclass(frozen=True, slots=True)
class VersionOracle:
    """Compares recorded bundle versions against the current default.

    Attributes:
        default_version: Version a default install would record. None on an
            unsupported platform, where every marker is stale.
        marker_path: The persisted version marker.
    """

    default_version: int | None
    marker_path: Path

    @classmethod
    def for_platform(
        cls, platform: Platform, marker_path: Path, *, override: int | None = None
    ) -> VersionOracle:
        version = override if override is not None else default_version_for(platform)
        return cls(default_version=version, marker_path=marker_path)

    def current_marker(self) -> int | None:
        return read_marker(self.marker_path)

    def is_stale(self, marker: int | None) -> bool:
        """True if marker is absent or older than the default version."""
        if marker is None or self.default_version is None:
            return True
        return marker < self.default_version
