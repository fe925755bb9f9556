"""External installer scripts.

The language-runtime installer and the optional R-runtime installer are
opaque shell scripts. They run in the working-tree root, block until done,
and must exit 0.
"""

from __future__ import annotations

import os
from pathlib import Path

from buildconf.core.config import CollaboratorsConfig
from buildconf.core.errors import CollaboratorFailed
from buildconf.core.flags import PythonVariant
from buildconf.core.result import Err, Ok, Result
from buildconf.output.console import ConsoleProtocol, Style
from buildconf.platform.process import run_silent

__all__ = ["Collaborators"]


class Collaborators:
    def __init__(
        self,
        *,
        root: Path,
        config: CollaboratorsConfig,
        console: ConsoleProtocol,
    ) -> None:
        self._root = root
        self._config = config
        self._console = console

    def install_runtime(self, variant: PythonVariant) -> Result[None, CollaboratorFailed]:
        """Run the runtime-dependency installer for a Python variant.

        The variant reaches the script as ``PYTHON_VERSION`` (e.g. python3.5m).
        """
        env = {**os.environ, "PYTHON_VERSION": variant.library_name}
        return self._run("runtime installer", self._config.python_installer, env)

    def install_r(self) -> Result[None, CollaboratorFailed]:
        return self._run("R installer", self._config.r_installer, None)

    def _run(
        self, name: str, script: str, env: dict[str, str] | None
    ) -> Result[None, CollaboratorFailed]:
        path = Path(script)
        if not path.is_absolute():
            path = self._root / path

        cmd = [str(path)]
        self._console.print(" ".join(cmd), Style.DIM)
        result = run_silent(cmd, cwd=self._root, env=env)
        if isinstance(result, Err):
            hint = result.error.stderr or None
            return Err(CollaboratorFailed(name=name, returncode=result.error.returncode, hint=hint))
        return Ok(None)
