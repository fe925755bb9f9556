"""Tests for buildconf.services.cleanup module."""

from __future__ import annotations

from pathlib import Path

import pytest

from buildconf.core.layout import Layout
from buildconf.output.console import MockConsole
from buildconf.services.cleanup import PROMPT, Aborted, CleanupExecutor, Removed


def _populate(root: Path) -> list[Path]:
    (root / "release" / "oss_src").mkdir(parents=True)
    (root / "debug").mkdir()
    (root / "deps" / "local" / "bin").mkdir(parents=True)
    (root / "deps" / "local" / "bin" / "cc").write_text("", encoding="utf-8")
    (root / "cmake").mkdir()
    (root / "patches").mkdir()
    for name in ("description.json", "dummy.cpp", "miniconda.sh", "deps_version"):
        (root / name).write_text("x", encoding="utf-8")
    (root / "dato_deps_linux_no_cuda.tar.gz").write_bytes(b"")
    (root / "src").mkdir()
    return sorted(root.iterdir())


class TestCleanup:
    def test_forced_removes_everything(self, tmp_path: Path) -> None:
        _populate(tmp_path)
        executor = CleanupExecutor(layout=Layout(root=tmp_path), console=MockConsole())

        outcome = executor.cleanup(force=True)

        assert isinstance(outcome, Removed)
        assert [p.name for p in tmp_path.iterdir()] == ["src"]
        assert outcome.failed == ()

    def test_confirmed(self, tmp_path: Path) -> None:
        _populate(tmp_path)
        prompts: list[str] = []

        def ask(message: str) -> str:
            prompts.append(message)
            return "yes"

        executor = CleanupExecutor(layout=Layout(root=tmp_path), console=MockConsole(), ask=ask)
        outcome = executor.cleanup(force=False)

        assert isinstance(outcome, Removed)
        assert prompts == [PROMPT]
        assert not (tmp_path / "deps").exists()

    @pytest.mark.parametrize("answer", ["no", "y", "YES", "yes ", ""])
    def test_anything_but_yes_aborts(self, tmp_path: Path, answer: str) -> None:
        before = _populate(tmp_path)
        console = MockConsole()
        executor = CleanupExecutor(
            layout=Layout(root=tmp_path), console=console, ask=lambda _m: answer
        )

        outcome = executor.cleanup(force=False)

        assert outcome == Aborted(answer=answer)
        assert sorted(tmp_path.iterdir()) == before
        assert console.find("Doing nothing!")

    def test_no_prompt_available_aborts(self, tmp_path: Path) -> None:
        before = _populate(tmp_path)
        executor = CleanupExecutor(layout=Layout(root=tmp_path), console=MockConsole())

        assert isinstance(executor.cleanup(force=False), Aborted)
        assert sorted(tmp_path.iterdir()) == before

    def test_warns_first(self, tmp_path: Path) -> None:
        console = MockConsole()
        CleanupExecutor(layout=Layout(root=tmp_path), console=console).cleanup(force=True)
        assert console.outputs[0].message.startswith("warning:")

    def test_empty_tree(self, tmp_path: Path) -> None:
        outcome = CleanupExecutor(layout=Layout(root=tmp_path), console=MockConsole()).cleanup(
            force=True
        )
        assert outcome == Removed(removed=())


class TestResetGenerated:
    def test_keeps_archives(self, tmp_path: Path) -> None:
        _populate(tmp_path)
        executor = CleanupExecutor(layout=Layout(root=tmp_path), console=MockConsole())

        executor.reset_generated()

        assert sorted(p.name for p in tmp_path.iterdir()) == [
            "dato_deps_linux_no_cuda.tar.gz",
            "src",
        ]


class TestRemove:
    def test_failure_is_reported_and_batch_continues(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        import buildconf.services.cleanup as cleanup_mod

        (tmp_path / "a").mkdir()
        (tmp_path / "b").mkdir()
        real_remove = cleanup_mod.remove_path

        def flaky_remove(path: Path) -> bool:
            if path.name == "a":
                raise PermissionError("denied")
            return real_remove(path)

        monkeypatch.setattr(cleanup_mod, "remove_path", flaky_remove)
        console = MockConsole()
        executor = CleanupExecutor(layout=Layout(root=tmp_path), console=console)

        outcome = executor.remove([tmp_path / "a", tmp_path / "b"])

        assert outcome.removed == (tmp_path / "b",)
        assert outcome.failed == ((tmp_path / "a", "denied"),)
        assert console.has_warning()
        assert (tmp_path / "a").exists()
