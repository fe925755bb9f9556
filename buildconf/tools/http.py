"""Download transports.

This module provides:
- HttpClient: Protocol for downloading a URL to a file (injectable for tests)
- RealHttpClient: urllib implementation
- CommandHttpClient: delegates to an external wget or curl binary
- MockHttpClient: canned responses for tests
- select_http_client: picks a transport from the configured preference
"""

from __future__ import annotations

import shutil
import ssl
import subprocess
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from buildconf import __version__
from buildconf.core.errors import NoDownloadMechanism
from buildconf.core.result import Err, Ok, Result

if TYPE_CHECKING:
    from collections.abc import Callable

    from buildconf.core.config import Transport

__all__ = [
    "CommandHttpClient",
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    "select_http_client",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """Download failure.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network or tool errors)
        message: Human-readable error message
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    """Downloads a URL to a local file."""

    def download(
        self,
        url: str,
        dest: Path,
        progress: Callable[[int, int], None] | None = None,
    ) -> Result[Path, HttpError]:
        """Download URL to dest.

        Args:
            url: URL to download
            dest: Destination path
            progress: Optional callback(downloaded, total) for progress

        Returns:
            Ok with dest path, or Err with HttpError
        """
        ...


class RealHttpClient:
    """HTTP client using urllib with system certificates."""

    def __init__(
        self, timeout: float = 300.0, user_agent: str = f"buildconf/{__version__}"
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def download(
        self,
        url: str,
        dest: Path,
        progress: Callable[[int, int], None] | None = None,
    ) -> Result[Path, HttpError]:
        try:
            req = urllib.request.Request(url, headers={"User-Agent": self.user_agent})
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                total = int(response.headers.get("Content-Length", 0))
                downloaded = 0
                chunk_size = 64 * 1024

                dest.parent.mkdir(parents=True, exist_ok=True)
                with open(dest, "wb") as f:
                    while True:
                        chunk = response.read(chunk_size)
                        if not chunk:
                            break
                        f.write(chunk)
                        downloaded += len(chunk)
                        if progress:
                            progress(downloaded, total)

                return Ok(dest)

        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Download timed out"))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))


class CommandHttpClient:
    """Downloads by running wget or curl.

    Output of the tool streams to the terminal; no progress callback.
    """

    def __init__(self, tool: str, executable: str) -> None:
        self.tool = tool
        self.executable = executable

    def command(self, url: str, dest: Path) -> list[str]:
        if self.tool == "wget":
            return [self.executable, url, "-O", str(dest)]
        return [self.executable, "--fail", "--location", url, "-o", str(dest)]

    def download(
        self,
        url: str,
        dest: Path,
        progress: Callable[[int, int], None] | None = None,
    ) -> Result[Path, HttpError]:
        dest.parent.mkdir(parents=True, exist_ok=True)
        try:
            proc = subprocess.run(self.command(url, dest), check=False)
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        if proc.returncode != 0:
            return Err(
                HttpError(url=url, status=0, message=f"{self.tool} exited with {proc.returncode}")
            )
        return Ok(dest)


def select_http_client(
    transport: Transport,
    *,
    timeout: float = 300.0,
    which: Callable[[str], str | None] = shutil.which,
) -> Result[HttpClient, NoDownloadMechanism]:
    """Pick the download transport.

    "auto" and "urllib" use the built-in client. "wget" and "curl" require the
    tool on PATH.
    """
    if transport in ("auto", "urllib"):
        return Ok(RealHttpClient(timeout=timeout))

    executable = which(transport)
    if executable is None:
        return Err(NoDownloadMechanism(transport=transport))
    return Ok(CommandHttpClient(transport, executable))


class MockHttpClient:
    """Mock HTTP client for testing.

    Usage:
        client = MockHttpClient()
        client.set_download("https://example.com/deps.tar.gz", b"...")
    """

    def __init__(self) -> None:
        self._download_responses: dict[str, bytes | HttpError] = {}
        self.calls: list[tuple[str, str]] = []

    def set_download(self, url: str, response: bytes | HttpError) -> None:
        self._download_responses[url] = response

    def download(
        self,
        url: str,
        dest: Path,
        progress: Callable[[int, int], None] | None = None,
    ) -> Result[Path, HttpError]:
        self.calls.append(("download", url))

        if url not in self._download_responses:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))

        response = self._download_responses[url]
        if isinstance(response, HttpError):
            return Err(response)

        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(response)
        if progress:
            progress(len(response), len(response))
        return Ok(dest)
