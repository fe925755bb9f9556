"""Config emitter.

Assembles the definition set handed to the build generator (cmake) and runs
it once per build profile: Release first, then Debug. Both runs share the
same definitions apart from CMAKE_BUILD_TYPE, and each writes into its own
output directory after its cache file has been cleared.
"""

from __future__ import annotations

import os
import platform as _platform
import shutil
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from buildconf.core.errors import CollaboratorFailed
from buildconf.core.flags import BuildProfile, FlagSet
from buildconf.core.layout import Layout
from buildconf.core.result import Err, Ok, Result
from buildconf.output.console import ConsoleProtocol, Style
from buildconf.platform.detection import Platform
from buildconf.platform.files import remove_path
from buildconf.platform.process import run, run_silent

__all__ = ["ConfigEmitter", "DefinitionSet", "ToolchainPaths", "CYTHON_BUILD_SUBDIR"]

# The generator does not notice when cython sources go away, so their build
# files are purged before every configure.
CYTHON_BUILD_SUBDIR = Path("oss_src/unity/python/sframe/cython")

_MSYS_GENERATOR = "MSYS Makefiles"
_VERSION_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class ToolchainPaths:
    """Binaries the build is configured with.

    Attributes:
        cc: C compiler (absolute path, or a bare name on Windows-class hosts)
        cxx: C++ compiler
        cmake: Build generator
        linker: Linker override, None to let cmake pick
    """

    cc: str
    cxx: str
    cmake: str
    linker: str | None = None


@dataclass(frozen=True, slots=True)
class DefinitionSet:
    """Ordered ``-D`` definitions plus an optional generator name."""

    definitions: tuple[str, ...]
    generator: str | None = None

    def with_build_type(self, profile: BuildProfile) -> DefinitionSet:
        return DefinitionSet(
            definitions=(f"CMAKE_BUILD_TYPE={profile.build_type}", *self.definitions),
            generator=self.generator,
        )

    def to_args(self) -> list[str]:
        args: list[str] = []
        if self.generator:
            args += ["-G", self.generator]
        for definition in self.definitions:
            args += ["-D", definition]
        return args


class ConfigEmitter:
    def __init__(
        self,
        *,
        layout: Layout,
        platform: Platform,
        console: ConsoleProtocol,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        self._layout = layout
        self._platform = platform
        self._console = console
        self._which = which

    def toolchain_paths(self) -> ToolchainPaths:
        bin_dir = self._layout.toolchain_bin_dir
        if self._platform == Platform.WINDOWS:
            cc, cxx = self._platform.exe_name("gcc"), self._platform.exe_name("g++")
        else:
            cc, cxx = str(bin_dir / "cc"), str(bin_dir / "c++")

        linker: str | None = None
        if (bin_dir / "ld.gold").exists():
            linker = str(bin_dir / "ld.gold")
        elif (bin_dir / "ld").exists():
            linker = str(bin_dir / "ld")

        return ToolchainPaths(cc=cc, cxx=cxx, cmake=str(bin_dir / "cmake"), linker=linker)

    def definitions(self, flags: FlagSet, paths: ToolchainPaths) -> DefinitionSet:
        """Definitions shared by every profile, in emission order."""
        variant = flags.python_variant
        defs: list[str] = list(flags.extra_definitions)
        defs.append(f"PYTHON_VERSION={variant.library_name}")
        defs.append(f"R_INTEGRATION:BOOL={'TRUE' if flags.r_integration else 'FALSE'}")
        defs.append(f"CMAKE_C_COMPILER={self._lookup(paths.cc)}")
        defs.append(f"CMAKE_CXX_COMPILER={self._lookup(paths.cxx)}")
        if paths.linker:
            defs.append(f"CMAKE_LINKER={paths.linker}")

        if self._platform != Platform.WINDOWS:
            return DefinitionSet(definitions=tuple(defs))

        ar = self._which("ar")
        if ar:
            defs.append(f"CMAKE_AR={Path(ar).as_posix()}")
        lib_dir = self._layout.deps_prefix / "lib"
        defs.append(f"PYTHON_LIBRARY:FILEPATH={(lib_dir / variant.dll_name).as_posix()}")
        python = self._layout.deps_dir / "conda" / "bin" / "python"
        defs.append(f"PYTHON_EXECUTABLE:FILEPATH={python.as_posix()}")
        return DefinitionSet(definitions=tuple(defs), generator=_MSYS_GENERATOR)

    def emit(self, profile: BuildProfile, paths: ToolchainPaths, flags: FlagSet) -> DefinitionSet:
        return self.definitions(flags, paths).with_build_type(profile)

    def command(self, definitions: DefinitionSet, paths: ToolchainPaths) -> list[str]:
        return [paths.cmake, *definitions.to_args(), str(self._layout.root)]

    def configure(
        self,
        profile: BuildProfile,
        definitions: DefinitionSet,
        paths: ToolchainPaths,
    ) -> Result[Path, CollaboratorFailed]:
        """Run the build generator for one profile in its output directory."""
        out_dir = self._layout.output_dir(profile.build_type)
        try:
            remove_path(out_dir / CYTHON_BUILD_SUBDIR)
            out_dir.mkdir(parents=True, exist_ok=True)
            (out_dir / "CMakeCache.txt").unlink(missing_ok=True)
        except OSError as e:
            return Err(CollaboratorFailed(name="build generator", returncode=-1, hint=str(e)))

        cmd = self.command(definitions.with_build_type(profile), paths)
        self._console.print(" ".join(cmd), Style.DIM)
        result = run_silent(cmd, cwd=out_dir, env=self._env())
        if isinstance(result, Err):
            return Err(
                CollaboratorFailed(
                    name=f"build generator ({profile})",
                    returncode=result.error.returncode,
                    hint=result.error.stderr or None,
                )
            )
        return Ok(out_dir)

    def configure_all(self, flags: FlagSet) -> Result[tuple[Path, ...], CollaboratorFailed]:
        """Configure Release, then Debug; stop at the first failure."""
        self._layout.doc_dir.mkdir(parents=True, exist_ok=True)
        paths = self.toolchain_paths()
        self.banner(paths)
        definitions = self.definitions(flags, paths)

        configured: list[Path] = []
        for profile in (BuildProfile.RELEASE, BuildProfile.DEBUG):
            self._console.header(str(profile))
            result = self.configure(profile, definitions, paths)
            if isinstance(result, Err):
                return result
            configured.append(result.value)
        return Ok(tuple(configured))

    def banner(self, paths: ToolchainPaths) -> None:
        self._console.header("BUILD CONFIGURATION")
        self._console.print("System Information:")
        self._console.print(_platform.platform(), Style.DIM)
        self._console.print("Compiler Information:")
        for binary in (paths.cc, paths.cxx, paths.cmake):
            result = run(
                [binary, "--version"],
                cwd=self._layout.root,
                timeout=_VERSION_TIMEOUT_SECONDS,
            )
            if isinstance(result, Err):
                self._console.warning(f"{binary} --version: {result.error.stderr or result.error}")
                continue
            first_line = result.value.strip().splitlines()[:1]
            self._console.print(first_line[0] if first_line else binary, Style.DIM)

    def _lookup(self, name: str) -> str:
        """Absolute path of a compiler via PATH lookup; the name itself if not found."""
        return self._which(name) or name

    def _env(self) -> dict[str, str] | None:
        if self._platform != Platform.WINDOWS:
            return None
        env = dict(os.environ)
        env["PATH"] = os.pathsep.join(p for p in (env.get("PATH", ""), "/mingw64/bin") if p)
        return env
