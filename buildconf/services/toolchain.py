"""Toolchain resolver.

Chooses where the toolchain bundle comes from and installs it:

- an explicit ``--toolchain`` path or URL is used as given
- ``--toolchain=default``, or no flag with no usable toolchain installed,
  selects the published bundle for the current OS family and accelerator
  preference; installing it records its version in the marker file
- no flag with a usable toolchain installed needs nothing
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from buildconf.core.config import DEFAULT_BASE_URL
from buildconf.core.errors import (
    AcquisitionError,
    ConfigureError,
    NoDownloadMechanism,
    UnsupportedPlatform,
)
from buildconf.core.flags import DEFAULT_TOOLCHAIN, FlagSet
from buildconf.core.layout import Layout
from buildconf.core.result import Err, Ok, Result
from buildconf.core.state import write_marker
from buildconf.output.console import ConsoleProtocol, Style
from buildconf.platform.detection import Platform
from buildconf.services.version import VersionOracle
from buildconf.tools.extract import ArchiveExtractor, ExtractResult
from buildconf.tools.fetch import ArchiveFetcher, archive_name, is_remote

__all__ = [
    "LocalFile",
    "NoToolchain",
    "RemoteURL",
    "ToolchainResolver",
    "ToolchainSource",
    "default_toolchain_url",
]


@dataclass(frozen=True, slots=True)
class NoToolchain:
    """Nothing to acquire; the installed toolchain is used."""


@dataclass(frozen=True, slots=True)
class LocalFile:
    path: Path


@dataclass(frozen=True, slots=True)
class RemoteURL:
    """A network locator.

    Attributes:
        url: Archive URL.
        default_version: Bundle version when this is the published default.
    """

    url: str
    default_version: int | None = None


ToolchainSource = NoToolchain | LocalFile | RemoteURL


def default_toolchain_url(
    platform: Platform,
    *,
    use_cuda: bool,
    version: int,
    base_url: str = DEFAULT_BASE_URL,
) -> Result[str, UnsupportedPlatform]:
    """Canonical bundle URL for an OS family and accelerator preference.

    Windows-class and macOS publish a single bundle; Linux has a CUDA and a
    CUDA-less one.
    """
    match platform:
        case Platform.MACOS:
            variant = "mac_default"
        case Platform.WINDOWS:
            variant = "win_default"
        case Platform.LINUX:
            variant = "linux_default" if use_cuda else "linux_no_cuda"
        case _:
            return Err(UnsupportedPlatform(platform=str(platform)))
    return Ok(f"{base_url.rstrip('/')}/{version}/dato_deps_{variant}.tar.gz")


class ToolchainResolver:
    def __init__(
        self,
        *,
        layout: Layout,
        platform: Platform,
        oracle: VersionOracle,
        fetcher: ArchiveFetcher,
        console: ConsoleProtocol,
        extractor: ArchiveExtractor | None = None,
        base_url: str = DEFAULT_BASE_URL,
    ) -> None:
        self._layout = layout
        self._platform = platform
        self._oracle = oracle
        self._fetcher = fetcher
        self._extractor = extractor or ArchiveExtractor()
        self._console = console
        self._base_url = base_url

    def has_usable_toolchain(self) -> bool:
        return self._layout.compiler_path.exists()

    def resolve(
        self, flags: FlagSet, *, has_toolchain: bool | None = None
    ) -> Result[ToolchainSource, UnsupportedPlatform]:
        """Pick the toolchain source.

        A configure run passes ``has_toolchain`` from its persisted-state
        snapshot. Left as None, the disk is checked instead.
        """
        spec = flags.toolchain_spec
        if has_toolchain is None:
            has_toolchain = self.has_usable_toolchain()
        if not flags.wants_default_toolchain:
            local = Path(spec).expanduser()
            if local.exists() or not is_remote(spec):
                return Ok(LocalFile(local))
            return Ok(RemoteURL(spec))

        if spec != DEFAULT_TOOLCHAIN and has_toolchain:
            return Ok(NoToolchain())

        version = self._oracle.default_version
        if version is None:
            return Err(UnsupportedPlatform(platform=str(self._platform)))

        url = default_toolchain_url(
            self._platform,
            use_cuda=flags.use_cuda,
            version=version,
            base_url=self._base_url,
        )
        if isinstance(url, Err):
            return url
        return Ok(RemoteURL(url.value, default_version=version))

    def preserve(
        self, source: ToolchainSource
    ) -> Result[ToolchainSource, AcquisitionError | NoDownloadMechanism]:
        """Copy a local archive that sits inside a generated directory to the root.

        The pre-install reset deletes generated directories but keeps archives
        in the root.
        """
        if not isinstance(source, LocalFile) or not source.path.is_file():
            return Ok(source)

        archive = source.path.resolve()
        generated = [p.resolve() for p in self._layout.generated_paths()]
        if not any(archive.is_relative_to(p) for p in generated):
            return Ok(source)

        dest = self._layout.root / archive.name
        self._console.print(f"Keeping {archive.name} out of {archive.parent}", Style.DIM)
        copied = self._fetcher.fetch(str(archive), dest)
        if isinstance(copied, Err):
            return copied
        return Ok(LocalFile(copied.value.path))

    def record(self, source: ToolchainSource) -> None:
        """Write the version marker when the published default was selected."""
        if isinstance(source, RemoteURL) and source.default_version is not None:
            write_marker(self._layout.version_marker, source.default_version)

    def acquire(
        self, source: ToolchainSource
    ) -> Result[Path | None, AcquisitionError | NoDownloadMechanism]:
        """Materialize the archive locally; None for NoToolchain.

        A local archive is used in place. A remote one is stored in the root
        under its own file name and not downloaded again while that file
        exists.
        """
        match source:
            case NoToolchain():
                return Ok(None)
            case LocalFile(path=path) if path.is_file():
                return Ok(path)
            case LocalFile(path=path):
                source_str = str(path)
            case RemoteURL(url=url):
                source_str = url

        dest = self._layout.root / archive_name(source_str)
        self._console.print(f"Downloading {dest.name} from {source_str} ...", Style.DIM)
        result = self._fetcher.fetch(source_str, dest)
        if isinstance(result, Err):
            return result
        if result.value.from_cache:
            self._console.print(f"{dest.name} already present, not downloading again", Style.DIM)
        return Ok(result.value.path)

    def extract(self, archive: Path) -> Result[ExtractResult, AcquisitionError]:
        self._console.print(f"Extracting {archive.name} ...", Style.DIM)
        return self._extractor.extract(archive, self._layout.root)

    def install(self, source: ToolchainSource) -> Result[ToolchainSource, ConfigureError]:
        """Record, acquire and extract a resolved source in one blocking sequence."""
        self.record(source)

        archive = self.acquire(source)
        if isinstance(archive, Err):
            return archive
        if archive.value is None:
            return Ok(source)

        extracted = self.extract(archive.value)
        if isinstance(extracted, Err):
            return extracted
        self._console.success(f"toolchain extracted ({extracted.value.files_count} files)")
        return Ok(source)
