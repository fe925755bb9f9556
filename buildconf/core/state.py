"""Persisted on-disk state.

All disk inspection the planner depends on happens here, once, at startup.
The resulting snapshot is immutable and passed down explicitly so the planner
can be tested with fixtures instead of a real tree.

The version marker is a text file holding a single integer: the version of
the toolchain bundle currently installed. Absent or malformed means unknown.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from buildconf.core.layout import Layout
from buildconf.platform.files import atomic_write_text

__all__ = ["PersistedState", "read_marker", "read_persisted_state", "write_marker"]


@dataclass(frozen=True, slots=True)
class PersistedState:
    """Snapshot of the on-disk facts read at startup.

    Attributes:
        has_existing_toolchain: A compiler exists at deps/local/bin/cc.
        recorded_version: Integer from the version marker, or None.
    """

    has_existing_toolchain: bool = False
    recorded_version: int | None = None


def read_marker(path: Path) -> int | None:
    """Read the version marker; None if missing or not an integer."""
    try:
        text = path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError):
        return None
    try:
        return int(text)
    except ValueError:
        return None


def write_marker(path: Path, version: int) -> None:
    atomic_write_text(path, f"{version}\n")


def read_persisted_state(layout: Layout) -> PersistedState:
    return PersistedState(
        has_existing_toolchain=layout.compiler_path.exists(),
        recorded_version=read_marker(layout.version_marker),
    )
