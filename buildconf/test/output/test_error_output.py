"""Tests for buildconf.output.errors module."""

from __future__ import annotations

from pathlib import Path

import pytest

from buildconf.core.errors import (
    CollaboratorFailed,
    ConfigureError,
    ConflictingPythonVariants,
    ExtractFailed,
    FetchFailed,
    NoDownloadMechanism,
    UnknownFlag,
    UnsupportedPlatform,
)
from buildconf.output.console import MockConsole, Style
from buildconf.output.errors import configure_error_exit_code, print_configure_error


class TestExitCode:
    @pytest.mark.parametrize(
        ("error", "code"),
        [
            (UnknownFlag(flag="--x"), 1),
            (ConflictingPythonVariants(variants=("--python3", "--python3.5")), 1),
            (UnsupportedPlatform(platform="unknown"), 1),
            (NoDownloadMechanism(transport="curl"), 1),
            (FetchFailed(source="u", reason="r"), 4),
            (ExtractFailed(archive=Path("a.tar.gz"), reason="r"), 4),
            (CollaboratorFailed(name="runtime installer", returncode=7), 7),
            (CollaboratorFailed(name="runtime installer", returncode=-1), 1),
        ],
    )
    def test_mapping(self, error: ConfigureError, code: int) -> None:
        assert configure_error_exit_code(error) == code


class TestPrint:
    def test_message_and_hint(self) -> None:
        console = MockConsole()
        print_configure_error(UnknownFlag(flag="--bogus"), console)

        assert console.has_error()
        assert console.find("Unrecognized option: --bogus")
        assert console.outputs[-1].style == Style.DIM
        assert console.outputs[-1].message.startswith("hint:")

    def test_no_hint(self) -> None:
        console = MockConsole()
        print_configure_error(UnsupportedPlatform(platform="unknown"), console)
        assert len(console.outputs) == 1
