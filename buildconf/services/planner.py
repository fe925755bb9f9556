"""Stage planner.

Decides which of the three setup stages run, and whether a cleanup happens
first, from the parsed flags and the persisted-state snapshot. The decision
is a pure function: identical inputs always give an identical plan.

Rule order:
    1. all three stages start enabled
    2. an existing toolchain with no --toolchain flag skips toolchain install
    3. --cmake_only, then --python_only, override the stage gates; when both
       are given --python_only is applied last and wins
"""

from __future__ import annotations

from dataclasses import dataclass

from buildconf.core.errors import ConflictingPythonVariants
from buildconf.core.flags import FlagSet
from buildconf.core.result import Err, Ok, Result
from buildconf.core.state import PersistedState
from buildconf.services.version import VersionOracle

__all__ = ["StagePlan", "plan"]


@dataclass(frozen=True, slots=True)
class StagePlan:
    """What a configure run will do.

    Attributes:
        run_toolchain_install: Acquire and extract a toolchain bundle.
        run_runtime_install: Run the language-runtime dependency installer.
        run_configure: Emit build-generator configuration for both profiles.
        do_cleanup: Remove all generated and downloaded artifacts first.
        cleanup_is_forced: Skip the interactive confirmation.
        exit_after_cleanup: Stop once cleanup is done (--cleanup).
        reuses_existing_toolchain: Toolchain install was skipped because one
            is already installed.
    """

    run_toolchain_install: bool
    run_runtime_install: bool
    run_configure: bool
    do_cleanup: bool = False
    cleanup_is_forced: bool = False
    exit_after_cleanup: bool = False
    reuses_existing_toolchain: bool = False


def plan(
    flags: FlagSet,
    persisted: PersistedState,
    oracle: VersionOracle,
) -> Result[StagePlan, ConflictingPythonVariants]:
    if len(flags.python_variants) > 1:
        return Err(ConflictingPythonVariants(tuple(v.flag for v in flags.python_variants)))

    if flags.cleanup:
        return Ok(
            StagePlan(
                run_toolchain_install=False,
                run_runtime_install=False,
                run_configure=False,
                do_cleanup=True,
                cleanup_is_forced=flags.default_yes,
                exit_after_cleanup=True,
            )
        )

    do_cleanup = False
    has_existing = persisted.has_existing_toolchain
    if flags.cleanup_if_invalid and oracle.is_stale(persisted.recorded_version):
        do_cleanup = True
        has_existing = False

    run_toolchain = True
    run_runtime = True
    run_configure = True

    reuses_existing = has_existing and not flags.has_explicit_toolchain
    if reuses_existing:
        run_toolchain = False

    if flags.cmake_only:
        run_toolchain, run_runtime, run_configure = False, False, True
    if flags.python_only:
        run_toolchain, run_runtime, run_configure = False, True, False

    return Ok(
        StagePlan(
            run_toolchain_install=run_toolchain,
            run_runtime_install=run_runtime,
            run_configure=run_configure,
            do_cleanup=do_cleanup,
            cleanup_is_forced=do_cleanup,
            reuses_existing_toolchain=reuses_existing,
        )
    )
