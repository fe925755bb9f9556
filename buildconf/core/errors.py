"""Exit codes and the typed error taxonomy of a configure run.

Errors are plain frozen dataclasses grouped into unions by category. They are
returned inside ``Err`` and only converted to an exit status by the CLI
(see ``buildconf.output.errors``).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path

__all__ = [
    "ErrorCode",
    "UnknownFlag",
    "ConflictingPythonVariants",
    "UnsupportedPlatform",
    "NoDownloadMechanism",
    "FetchFailed",
    "ExtractFailed",
    "CollaboratorFailed",
    "UserInputError",
    "EnvError",
    "AcquisitionError",
    "CollaboratorError",
    "ConfigureError",
]


class ErrorCode(IntEnum):
    """Process exit codes.

    - 0: Success (including --cmake_only / --python_only runs)
    - 1: User input or environment problem, --help, and any --cleanup run
    - 4: Toolchain acquisition failed (download or extraction)

    Collaborator failures are not listed: the collaborator's own exit status
    becomes the exit status of the run.
    """

    OK = 0
    USER_ERROR = 1
    ACQUISITION_ERROR = 4

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK


# -----------------------------------------------------------------------------
# User input
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class UnknownFlag:
    flag: str
    hint: str = "To get help, run: buildconf --help"

    @property
    def message(self) -> str:
        return f"Unrecognized option: {self.flag}"


@dataclass(frozen=True, slots=True)
class ConflictingPythonVariants:
    variants: tuple[str, ...]
    hint: str = "Pass only one of --python3 and --python3.5"

    @property
    def message(self) -> str:
        return f"Two versions of Python specified ({', '.join(self.variants)}). Pick one."


# -----------------------------------------------------------------------------
# Environment
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class UnsupportedPlatform:
    platform: str
    hint: str | None = None

    @property
    def message(self) -> str:
        return f"Unknown toolchain for the operating system: {self.platform}"


@dataclass(frozen=True, slots=True)
class NoDownloadMechanism:
    transport: str
    hint: str = "Install wget or curl, or set [toolchain] transport = \"urllib\""

    @property
    def message(self) -> str:
        return f"Unable to find {self.transport}! Cannot proceed with automatic install."


# -----------------------------------------------------------------------------
# Acquisition
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FetchFailed:
    source: str
    reason: str
    hint: str | None = None

    @property
    def message(self) -> str:
        return f"failed to fetch {self.source}: {self.reason}"


@dataclass(frozen=True, slots=True)
class ExtractFailed:
    archive: Path
    reason: str
    hint: str = "Remove the archive and run again to download a fresh copy"

    @property
    def message(self) -> str:
        return f"failed to extract {self.archive}: {self.reason}"


# -----------------------------------------------------------------------------
# Collaborators
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CollaboratorFailed:
    name: str
    returncode: int
    hint: str | None = None

    @property
    def message(self) -> str:
        return f"{self.name} failed (exit {self.returncode})"


UserInputError = UnknownFlag | ConflictingPythonVariants
EnvError = UnsupportedPlatform | NoDownloadMechanism
AcquisitionError = FetchFailed | ExtractFailed
CollaboratorError = CollaboratorFailed

ConfigureError = UserInputError | EnvError | AcquisitionError | CollaboratorError
