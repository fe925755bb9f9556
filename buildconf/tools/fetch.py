"""Archive fetcher.

Retrieves a toolchain archive from a local path or a URL into a destination
file. Fetching is idempotent: if the destination already exists it is returned
as-is without any I/O (its integrity is not re-checked).
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import unquote, urlparse

from buildconf.core.errors import FetchFailed, NoDownloadMechanism
from buildconf.core.result import Err, Ok, Result

if TYPE_CHECKING:
    from collections.abc import Callable

    from buildconf.tools.http import HttpClient

__all__ = ["ArchiveFetcher", "FetchResult", "archive_name", "is_remote"]

_REMOTE_SCHEMES = ("http", "https", "ftp")


def is_remote(source: str) -> bool:
    """True if source is a network locator rather than a filesystem path."""
    return urlparse(source).scheme.lower() in _REMOTE_SCHEMES


def _local_path(source: str) -> Path:
    parsed = urlparse(source)
    if parsed.scheme.lower() == "file":
        return Path(unquote(parsed.path))
    return Path(source).expanduser()


def archive_name(source: str) -> str:
    """File name an archive is stored under: the last path segment of source."""
    if is_remote(source):
        return Path(unquote(urlparse(source).path)).name or "toolchain.tar.gz"
    return _local_path(source).name


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Result of a fetch.

    Attributes:
        path: Path to the fetched file
        from_cache: True if the destination already existed
        size: File size in bytes
    """

    path: Path
    from_cache: bool
    size: int


class ArchiveFetcher:
    """Fetches archives via local copy or an HttpClient transport.

    The transport is either given up front or picked by ``select_http`` the
    first time a remote download is needed.

    Usage:
        fetcher = ArchiveFetcher(RealHttpClient())
        result = fetcher.fetch(url, root / archive_name(url))
    """

    def __init__(
        self,
        http: HttpClient | None = None,
        *,
        select_http: Callable[[], Result[HttpClient, NoDownloadMechanism]] | None = None,
    ) -> None:
        if http is None and select_http is None:
            raise ValueError("ArchiveFetcher needs an HttpClient or a select_http callable")
        self._http = http
        self._select_http = select_http

    def _client(self) -> Result[HttpClient, NoDownloadMechanism]:
        if self._http is None:
            assert self._select_http is not None
            selected = self._select_http()
            if isinstance(selected, Err):
                return selected
            self._http = selected.value
        return Ok(self._http)

    def fetch(
        self,
        source: str,
        dest: Path,
        *,
        progress: Callable[[int, int], None] | None = None,
    ) -> Result[FetchResult, FetchFailed | NoDownloadMechanism]:
        """Fetch source into dest unless dest already exists.

        A failed download removes whatever partial file it left behind.
        """
        if dest.exists():
            return Ok(FetchResult(path=dest, from_cache=True, size=dest.stat().st_size))

        if not is_remote(source):
            return self._copy_local(source, dest)

        client = self._client()
        if isinstance(client, Err):
            return client

        result = client.value.download(source, dest, progress=progress)
        if isinstance(result, Err):
            dest.unlink(missing_ok=True)
            return Err(FetchFailed(source=source, reason=str(result.error)))

        return Ok(FetchResult(path=dest, from_cache=False, size=dest.stat().st_size))

    def _copy_local(self, source: str, dest: Path) -> Result[FetchResult, FetchFailed]:
        src = _local_path(source)
        if not src.is_file():
            return Err(
                FetchFailed(
                    source=source,
                    reason="no such file",
                    hint="Pass an existing archive path or an http(s) URL to --toolchain",
                )
            )
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(src, dest)
        except OSError as e:
            dest.unlink(missing_ok=True)
            return Err(FetchFailed(source=source, reason=str(e)))
        return Ok(FetchResult(path=dest, from_cache=False, size=dest.stat().st_size))
