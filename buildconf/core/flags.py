"""Parsed command-line flags.

A FlagSet is built once from the command line and is read-only afterwards.
Everything downstream (planner, resolver, emitter) is a function of it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

__all__ = ["BuildProfile", "FlagSet", "PythonVariant", "DEFAULT_TOOLCHAIN"]

DEFAULT_TOOLCHAIN = "default"


class PythonVariant(Enum):
    """Python runtime the build is configured against."""

    PY27 = "2.7"
    PY34 = "3.4"
    PY35 = "3.5"

    def __str__(self) -> str:
        return self.value

    @property
    def flag(self) -> str:
        """Command-line flag that selects this variant."""
        return {
            PythonVariant.PY27: "(default)",
            PythonVariant.PY34: "--python3",
            PythonVariant.PY35: "--python3.5",
        }[self]

    @property
    def library_name(self) -> str:
        """Value of the PYTHON_VERSION definition, also passed to the runtime installer."""
        return {
            PythonVariant.PY27: "python2.7",
            PythonVariant.PY34: "python3.4m",
            PythonVariant.PY35: "python3.5m",
        }[self]

    @property
    def dll_name(self) -> str:
        return f"python{self.value.replace('.', '')}.dll"


class BuildProfile(Enum):
    """One of the two parallel output configurations."""

    RELEASE = "Release"
    DEBUG = "Debug"

    def __str__(self) -> str:
        return self.value

    @property
    def build_type(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class FlagSet:
    """The parsed command line.

    Attributes:
        cleanup: --cleanup
        cleanup_if_invalid: --cleanup_if_invalid
        default_yes: --yes, answers the cleanup prompt
        cmake_only: --cmake_only
        python_only: --python_only
        toolchain_spec: --toolchain value: "", "default", a path or a URL
        use_cuda: --cuda / --no_cuda (default off)
        python_variants: every non-default variant requested, in flag order.
            More than one is a user error reported by the planner.
        r_integration: --R_integration
        extra_definitions: -D values, in the order given
    """

    cleanup: bool = False
    cleanup_if_invalid: bool = False
    default_yes: bool = False
    cmake_only: bool = False
    python_only: bool = False
    toolchain_spec: str = ""
    use_cuda: bool = False
    python_variants: tuple[PythonVariant, ...] = ()
    r_integration: bool = False
    extra_definitions: tuple[str, ...] = ()

    @property
    def python_variant(self) -> PythonVariant:
        """Selected variant; the first one requested, else Python 2.7."""
        if self.python_variants:
            return self.python_variants[0]
        return PythonVariant.PY27

    @property
    def has_explicit_toolchain(self) -> bool:
        return self.toolchain_spec != ""

    @property
    def wants_default_toolchain(self) -> bool:
        return self.toolchain_spec in ("", DEFAULT_TOOLCHAIN)
