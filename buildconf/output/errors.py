"""Error presentation and exit-code mapping for configure runs."""

from __future__ import annotations

from typing import TYPE_CHECKING

from buildconf.core.errors import (
    CollaboratorFailed,
    ConfigureError,
    ConflictingPythonVariants,
    ErrorCode,
    ExtractFailed,
    FetchFailed,
    NoDownloadMechanism,
    UnknownFlag,
    UnsupportedPlatform,
)
from buildconf.output.console import Style

if TYPE_CHECKING:
    from buildconf.output.console import ConsoleProtocol

__all__ = ["print_configure_error", "configure_error_exit_code"]


def print_configure_error(error: ConfigureError, console: ConsoleProtocol) -> None:
    """Print an error with its hint, if any."""
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def configure_error_exit_code(error: ConfigureError) -> int:
    match error:
        case UnknownFlag() | ConflictingPythonVariants():
            return int(ErrorCode.USER_ERROR)
        case UnsupportedPlatform() | NoDownloadMechanism():
            return int(ErrorCode.USER_ERROR)
        case FetchFailed() | ExtractFailed():
            return int(ErrorCode.ACQUISITION_ERROR)
        case CollaboratorFailed(returncode=rc):
            # A collaborator that could not even start reports -1.
            return rc if rc > 0 else int(ErrorCode.USER_ERROR)
    return int(ErrorCode.USER_ERROR)
