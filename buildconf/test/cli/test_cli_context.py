"""Tests for buildconf.cli.context module."""

from __future__ import annotations

from pathlib import Path

import pytest

from buildconf.cli.context import build_context
from buildconf.core.config import Config


class TestBuildContext:
    def test_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BUILDCONF_ROOT", str(tmp_path))

        ctx = build_context()

        assert ctx.layout.root == tmp_path.resolve()
        assert ctx.config == Config()
        assert ctx.http is None

    def test_reads_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "buildconf.toml").write_text(
            '[paths]\nrelease = "out/rel"\n\n[toolchain]\nversion = 20\n', encoding="utf-8"
        )
        monkeypatch.setenv("BUILDCONF_ROOT", str(tmp_path))

        ctx = build_context()

        assert ctx.layout.release_dir == tmp_path.resolve() / "out/rel"
        assert ctx.config.toolchain.version == 20

    def test_invalid_config_warns_and_uses_defaults(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        (tmp_path / "buildconf.toml").write_text("[paths\n", encoding="utf-8")
        monkeypatch.setenv("BUILDCONF_ROOT", str(tmp_path))

        ctx = build_context()

        assert ctx.config == Config()
        assert "warning:" in capsys.readouterr().out
