"""Configure service.

Runs one configure pass, strictly in sequence:

    read persisted state -> plan -> cleanup? -> toolchain install?
        -> runtime install? -> R install? -> configure Release, Debug?

Any failure stops the remaining stages and is returned as an Err; nothing is
retried and nothing already done is rolled back. Re-running is safe because
every stage is idempotent given unchanged on-disk state.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from buildconf.core.config import Config
from buildconf.core.errors import ConfigureError, ErrorCode
from buildconf.core.flags import FlagSet
from buildconf.core.layout import Layout
from buildconf.core.result import Err, Ok, Result
from buildconf.core.state import PersistedState, read_persisted_state
from buildconf.output.console import ConsoleProtocol, Style
from buildconf.platform.detection import Platform
from buildconf.services.cleanup import CleanupExecutor, CleanupOutcome
from buildconf.services.collaborators import Collaborators
from buildconf.services.emitter import ConfigEmitter
from buildconf.services.planner import StagePlan, plan
from buildconf.services.toolchain import NoToolchain, ToolchainResolver, ToolchainSource
from buildconf.services.version import VersionOracle
from buildconf.tools.fetch import ArchiveFetcher
from buildconf.tools.http import HttpClient, select_http_client

__all__ = ["ConfigureService", "RunOutcome"]


@dataclass(frozen=True, slots=True)
class RunOutcome:
    """What a successful run did.

    Attributes:
        plan: The stage plan that was executed.
        cleanup: Cleanup result, if a cleanup was planned.
        toolchain: The toolchain source used, if the install stage ran.
        configured: Output directories the build generator wrote into.
    """

    plan: StagePlan
    cleanup: CleanupOutcome | None = None
    toolchain: ToolchainSource | None = None
    configured: tuple[Path, ...] = ()

    @property
    def exit_code(self) -> int:
        # --cleanup always ends the run with a non-zero status, confirmed or not.
        if self.plan.exit_after_cleanup:
            return int(ErrorCode.USER_ERROR)
        return int(ErrorCode.OK)


class ConfigureService:
    def __init__(
        self,
        *,
        layout: Layout,
        platform: Platform,
        config: Config,
        console: ConsoleProtocol,
        ask: Callable[[str], str] | None = None,
        http: HttpClient | None = None,
    ) -> None:
        self._layout = layout
        self._platform = platform
        self._config = config
        self._console = console
        self._ask = ask
        self._http = http

        self._oracle = VersionOracle.for_platform(
            platform,
            layout.version_marker,
            override=config.toolchain.version,
        )
        self._cleanup = CleanupExecutor(layout=layout, console=console, ask=ask)

    @property
    def oracle(self) -> VersionOracle:
        return self._oracle

    def run(self, flags: FlagSet) -> Result[RunOutcome, ConfigureError]:
        persisted = read_persisted_state(self._layout)

        planned = plan(flags, persisted, self._oracle)
        if isinstance(planned, Err):
            return planned
        stage_plan = planned.value

        if flags.cmake_only and flags.python_only:
            self._console.warning("--cmake_only and --python_only both given; --python_only wins")
        self._report_staleness(persisted)

        cleanup: CleanupOutcome | None = None
        if stage_plan.do_cleanup:
            cleanup = self._cleanup.cleanup(force=stage_plan.cleanup_is_forced)
            if stage_plan.exit_after_cleanup:
                return Ok(RunOutcome(plan=stage_plan, cleanup=cleanup))

        if stage_plan.reuses_existing_toolchain:
            self._console.info(
                "Existing toolchain detected, using existing toolchain to configure."
            )

        toolchain: ToolchainSource | None = None
        if stage_plan.run_toolchain_install:
            installed = self._install_toolchain(flags, stage_plan)
            if isinstance(installed, Err):
                return installed
            toolchain = installed.value

        collaborators = Collaborators(
            root=self._layout.root,
            config=self._config.collaborators,
            console=self._console,
        )
        if stage_plan.run_runtime_install:
            self._console.header("Runtime dependencies")
            runtime = collaborators.install_runtime(flags.python_variant)
            if isinstance(runtime, Err):
                return runtime

        if flags.r_integration:
            self._console.header("R integration")
            r_result = collaborators.install_r()
            if isinstance(r_result, Err):
                return r_result

        if not stage_plan.run_configure:
            return Ok(RunOutcome(plan=stage_plan, cleanup=cleanup, toolchain=toolchain))

        emitter = ConfigEmitter(
            layout=self._layout,
            platform=self._platform,
            console=self._console,
        )
        configured = emitter.configure_all(flags)
        if isinstance(configured, Err):
            return configured

        return Ok(
            RunOutcome(
                plan=stage_plan,
                cleanup=cleanup,
                toolchain=toolchain,
                configured=configured.value,
            )
        )

    def _install_toolchain(
        self, flags: FlagSet, stage_plan: StagePlan
    ) -> Result[ToolchainSource, ConfigureError]:
        self._console.header("Toolchain")
        resolver = ToolchainResolver(
            layout=self._layout,
            platform=self._platform,
            oracle=self._oracle,
            fetcher=self._fetcher(),
            console=self._console,
            base_url=self._config.toolchain.base_url,
        )

        resolved = resolver.resolve(flags, has_toolchain=stage_plan.reuses_existing_toolchain)
        if isinstance(resolved, Err):
            return resolved
        kept = resolver.preserve(resolved.value)
        if isinstance(kept, Err):
            return kept

        if not isinstance(kept.value, NoToolchain):
            # A fresh toolchain is never mixed with the previous one.
            self._cleanup.reset_generated()
        return resolver.install(kept.value)

    def _fetcher(self) -> ArchiveFetcher:
        if self._http is not None:
            return ArchiveFetcher(self._http)
        transport = self._config.toolchain.transport
        timeout = self._config.toolchain.timeout
        return ArchiveFetcher(
            select_http=lambda: select_http_client(transport, timeout=timeout)
        )

    def _report_staleness(self, persisted: PersistedState) -> None:
        if not persisted.has_existing_toolchain:
            return
        if persisted.recorded_version is None:
            self._console.warning(
                "Your dependency toolchain is either using a custom version, or is out of date."
            )
        elif self._oracle.is_stale(persisted.recorded_version):
            self._console.warning("Your dependency toolchain is out of date.")
        else:
            return
        self._console.print(
            "hint: run with --cleanup to get a new dependency version", Style.DIM
        )
