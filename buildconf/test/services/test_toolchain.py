"""Tests for buildconf.services.toolchain module."""

from __future__ import annotations

import io
import tarfile
from pathlib import Path

import pytest

from buildconf.core.config import DEFAULT_BASE_URL
from buildconf.core.errors import NoDownloadMechanism
from buildconf.core.flags import FlagSet
from buildconf.core.layout import Layout
from buildconf.core.result import Err, Ok
from buildconf.core.state import read_marker
from buildconf.output.console import MockConsole
from buildconf.platform.detection import Platform
from buildconf.services.toolchain import (
    LocalFile,
    NoToolchain,
    RemoteURL,
    ToolchainResolver,
    default_toolchain_url,
)
from buildconf.services.version import VersionOracle
from buildconf.tools.fetch import ArchiveFetcher
from buildconf.tools.http import MockHttpClient

LINUX_URL = f"{DEFAULT_BASE_URL}/13/dato_deps_linux_no_cuda.tar.gz"


def _tarball_bytes() -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        data = b"#!/bin/sh\n"
        info = tarfile.TarInfo("deps/local/bin/cc")
        info.size = len(data)
        info.mode = 0o755
        tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


def _resolver(
    root: Path,
    *,
    platform: Platform = Platform.LINUX,
    http: MockHttpClient | None = None,
    fetcher: ArchiveFetcher | None = None,
) -> ToolchainResolver:
    layout = Layout(root=root)
    return ToolchainResolver(
        layout=layout,
        platform=platform,
        oracle=VersionOracle.for_platform(platform, layout.version_marker),
        fetcher=fetcher or ArchiveFetcher(http or MockHttpClient()),
        console=MockConsole(),
    )


class TestDefaultToolchainUrl:
    @pytest.mark.parametrize(
        ("platform", "cuda", "variant"),
        [
            (Platform.LINUX, False, "linux_no_cuda"),
            (Platform.LINUX, True, "linux_default"),
            (Platform.MACOS, False, "mac_default"),
            (Platform.MACOS, True, "mac_default"),
            (Platform.WINDOWS, False, "win_default"),
            (Platform.WINDOWS, True, "win_default"),
        ],
    )
    def test_table(self, platform: Platform, cuda: bool, variant: str) -> None:
        result = default_toolchain_url(platform, use_cuda=cuda, version=12)
        assert result == Ok(f"{DEFAULT_BASE_URL}/12/dato_deps_{variant}.tar.gz")

    def test_custom_base_url(self) -> None:
        result = default_toolchain_url(
            Platform.LINUX, use_cuda=False, version=13, base_url="https://mirror/deps/"
        )
        assert result == Ok("https://mirror/deps/13/dato_deps_linux_no_cuda.tar.gz")

    def test_unknown_platform(self) -> None:
        result = default_toolchain_url(Platform.UNKNOWN, use_cuda=False, version=1)
        assert isinstance(result, Err)


class TestResolve:
    def test_default(self, tmp_path: Path) -> None:
        resolver = _resolver(tmp_path)

        result = resolver.resolve(FlagSet(), has_toolchain=False)

        assert result == Ok(RemoteURL(LINUX_URL, default_version=13))
        assert not (tmp_path / "deps_version").exists()

    def test_existing_toolchain_no_flag(self, tmp_path: Path) -> None:
        result = _resolver(tmp_path).resolve(FlagSet(), has_toolchain=True)
        assert result == Ok(NoToolchain())

    def test_disk_checked_without_snapshot(self, tmp_path: Path) -> None:
        resolver = _resolver(tmp_path)
        assert resolver.has_usable_toolchain() is False

        (tmp_path / "deps/local/bin").mkdir(parents=True)
        (tmp_path / "deps/local/bin/cc").write_text("", encoding="utf-8")

        assert resolver.has_usable_toolchain() is True
        assert resolver.resolve(FlagSet()) == Ok(NoToolchain())

    def test_snapshot_wins_over_disk(self, tmp_path: Path) -> None:
        (tmp_path / "deps/local/bin").mkdir(parents=True)
        (tmp_path / "deps/local/bin/cc").write_text("", encoding="utf-8")

        result = _resolver(tmp_path).resolve(FlagSet(), has_toolchain=False)

        assert isinstance(result, Ok)
        assert isinstance(result.value, RemoteURL)

    def test_explicit_default_reinstalls(self, tmp_path: Path) -> None:
        result = _resolver(tmp_path).resolve(
            FlagSet(toolchain_spec="default"), has_toolchain=True
        )

        assert isinstance(result, Ok)
        assert isinstance(result.value, RemoteURL)

    def test_local_file(self, tmp_path: Path) -> None:
        archive = tmp_path / "custom.tar.gz"
        archive.write_bytes(b"")

        result = _resolver(tmp_path).resolve(
            FlagSet(toolchain_spec=str(archive)), has_toolchain=True
        )

        assert result == Ok(LocalFile(archive))

    def test_remote_url(self, tmp_path: Path) -> None:
        url = "https://host/dato-deps/1/dato_deps_linux_gcc_4.9.2.tar.gz"
        result = _resolver(tmp_path).resolve(FlagSet(toolchain_spec=url), has_toolchain=False)
        assert result == Ok(RemoteURL(url))

    def test_unknown_platform(self, tmp_path: Path) -> None:
        resolver = _resolver(tmp_path, platform=Platform.UNKNOWN)
        result = resolver.resolve(FlagSet(), has_toolchain=False)
        assert isinstance(result, Err)


class TestRecord:
    def test_default_writes_marker(self, tmp_path: Path) -> None:
        _resolver(tmp_path).record(RemoteURL(LINUX_URL, default_version=13))
        assert read_marker(tmp_path / "deps_version") == 13

    def test_custom_source_leaves_marker_alone(self, tmp_path: Path) -> None:
        resolver = _resolver(tmp_path)
        resolver.record(RemoteURL("https://host/custom.tar.gz"))
        resolver.record(LocalFile(tmp_path / "mine.tar.gz"))
        assert not (tmp_path / "deps_version").exists()


class TestPreserve:
    def test_archive_under_deps_copied_to_root(self, tmp_path: Path) -> None:
        archive = tmp_path / "deps" / "mine.tar.gz"
        archive.parent.mkdir()
        archive.write_bytes(_tarball_bytes())

        result = _resolver(tmp_path).preserve(LocalFile(archive))

        assert result == Ok(LocalFile(tmp_path / "mine.tar.gz"))
        assert (tmp_path / "mine.tar.gz").read_bytes() == archive.read_bytes()

    def test_archive_elsewhere_untouched(self, tmp_path: Path) -> None:
        archive = tmp_path / "elsewhere" / "mine.tar.gz"
        archive.parent.mkdir()
        archive.write_bytes(b"")

        result = _resolver(tmp_path).preserve(LocalFile(archive))

        assert result == Ok(LocalFile(archive))
        assert not (tmp_path / "mine.tar.gz").exists()

    def test_remote_untouched(self, tmp_path: Path) -> None:
        source = RemoteURL(LINUX_URL, default_version=13)
        assert _resolver(tmp_path).preserve(source) == Ok(source)


class TestInstall:
    def test_default_download_and_extract(self, tmp_path: Path) -> None:
        http = MockHttpClient()
        http.set_download(LINUX_URL, _tarball_bytes())
        source = RemoteURL(LINUX_URL, default_version=13)

        result = _resolver(tmp_path, http=http).install(source)

        assert result == Ok(source)
        assert (tmp_path / "deps/local/bin/cc").exists()
        assert (tmp_path / "dato_deps_linux_no_cuda.tar.gz").exists()
        assert read_marker(tmp_path / "deps_version") == 13
        assert http.calls == [("download", LINUX_URL)]

    def test_archive_already_present(self, tmp_path: Path) -> None:
        http = MockHttpClient()
        (tmp_path / "dato_deps_linux_no_cuda.tar.gz").write_bytes(_tarball_bytes())

        result = _resolver(tmp_path, http=http).install(RemoteURL(LINUX_URL, default_version=13))

        assert isinstance(result, Ok)
        assert http.calls == []
        assert (tmp_path / "deps/local/bin/cc").exists()

    def test_local_archive_used_in_place(self, tmp_path: Path) -> None:
        archive = tmp_path / "elsewhere" / "mine.tar.gz"
        archive.parent.mkdir()
        archive.write_bytes(_tarball_bytes())
        root = tmp_path / "root"
        root.mkdir()

        result = _resolver(root).install(LocalFile(archive))

        assert isinstance(result, Ok)
        assert (root / "deps/local/bin/cc").exists()
        assert not (root / "mine.tar.gz").exists()

    def test_local_archive_needs_no_transport(self, tmp_path: Path) -> None:
        archive = tmp_path / "mine.tar.gz"
        archive.write_bytes(_tarball_bytes())
        resolver = _resolver(
            tmp_path,
            fetcher=ArchiveFetcher(
                select_http=lambda: Err(NoDownloadMechanism(transport="wget"))
            ),
        )

        result = resolver.install(LocalFile(archive))

        assert isinstance(result, Ok)
        assert (tmp_path / "deps/local/bin/cc").exists()

    def test_missing_local_archive(self, tmp_path: Path) -> None:
        result = _resolver(tmp_path).install(LocalFile(tmp_path / "missing.tar.gz"))
        assert isinstance(result, Err)

    def test_download_failure(self, tmp_path: Path) -> None:
        result = _resolver(tmp_path).install(RemoteURL(LINUX_URL, default_version=13))
        assert isinstance(result, Err)
        assert not (tmp_path / "deps").exists()

    def test_nothing_to_do(self, tmp_path: Path) -> None:
        http = MockHttpClient()

        result = _resolver(tmp_path, http=http).install(NoToolchain())

        assert result == Ok(NoToolchain())
        assert http.calls == []
