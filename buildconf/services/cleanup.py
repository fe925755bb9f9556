"""Cleanup executor.

Removes everything configure generated or downloaded: build-output
directories, the dependency tree, leftover generator artifacts, the version
marker and downloaded archives. Removal is best-effort: a path that cannot be
removed is reported and the rest of the batch still runs.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from buildconf.core.layout import Layout
from buildconf.output.console import ConsoleProtocol, Style
from buildconf.platform.files import remove_path

__all__ = ["Aborted", "CleanupExecutor", "CleanupOutcome", "Removed", "CONFIRMATION", "PROMPT"]

CONFIRMATION = "yes"
PROMPT = "Are you sure you want to continue? (yes or no)"


@dataclass(frozen=True, slots=True)
class Removed:
    """Cleanup ran.

    Attributes:
        removed: Paths that existed and were deleted.
        failed: Paths that could not be deleted, with the reason.
    """

    removed: tuple[Path, ...]
    failed: tuple[tuple[Path, str], ...] = ()


@dataclass(frozen=True, slots=True)
class Aborted:
    """The user did not confirm; nothing was touched."""

    answer: str


CleanupOutcome = Removed | Aborted


class CleanupExecutor:
    """Deletes generated artifacts after confirmation.

    Args:
        layout: Working-tree layout.
        console: Output sink.
        ask: Prompts the user and returns the raw answer. Only the exact
            answer "yes" confirms.
    """

    def __init__(
        self,
        *,
        layout: Layout,
        console: ConsoleProtocol,
        ask: Callable[[str], str] | None = None,
    ) -> None:
        self._layout = layout
        self._console = console
        self._ask = ask

    def targets(self, *, include_archives: bool = True) -> list[Path]:
        paths = self._layout.generated_paths()
        if include_archives:
            paths.extend(self._layout.downloaded_archives())
        return paths

    def cleanup(self, *, force: bool) -> CleanupOutcome:
        self._console.warning(
            "This completely erases all build folders including dependencies!"
        )
        if not force:
            answer = self._ask(PROMPT) if self._ask else ""
            if answer != CONFIRMATION:
                self._console.print("Doing nothing!")
                return Aborted(answer=answer)

        return self.remove(self.targets())

    def reset_generated(self) -> Removed:
        """Remove generated artifacts but keep downloaded archives.

        Runs before a fresh toolchain install, without confirmation.
        """
        return self.remove(self.targets(include_archives=False))

    def remove(self, paths: list[Path]) -> Removed:
        self._console.print("cleaning up", Style.DIM)
        removed: list[Path] = []
        failed: list[tuple[Path, str]] = []
        for path in paths:
            try:
                if remove_path(path):
                    removed.append(path)
                    self._console.print(f"  removed {path}", Style.DIM)
            except OSError as e:
                failed.append((path, str(e)))
                self._console.warning(f"could not remove {path}: {e}")
        return Removed(removed=tuple(removed), failed=tuple(failed))
