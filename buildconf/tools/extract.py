"""Archive extraction into the working tree.

Archives are unpacked into a staging directory next to their destination and
only moved into place once the whole archive extracted cleanly, so a corrupt
or truncated archive never leaves a half-written toolchain behind. Existing
files are overwritten, which makes repeated extraction of the same archive
idempotent.

Supported formats: .tar.gz/.tgz, .tar.xz/.txz, .tar.bz2, .zip
"""

from __future__ import annotations

import contextlib
import os
import shutil
import stat
import tarfile
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from buildconf.core.errors import ExtractFailed
from buildconf.core.result import Err, Ok, Result
from buildconf.platform.files import remove_path

__all__ = ["ArchiveExtractor", "ExtractResult"]


@dataclass(frozen=True, slots=True)
class ExtractResult:
    """Result of an extraction.

    Attributes:
        dest: Directory the archive was extracted into
        files_count: Number of files (and links) placed
    """

    dest: Path
    files_count: int


def _tar_mode(name: str) -> str | None:
    # Path.suffixes is unreliable for names like "dato_deps_4.9.2.tar.gz".
    if name.endswith((".tar.gz", ".tgz")):
        return "r:gz"
    if name.endswith((".tar.xz", ".txz")):
        return "r:xz"
    if name.endswith((".tar.bz2", ".tbz2")):
        return "r:bz2"
    if name.endswith(".tar"):
        return "r:"
    return None


def _safe_relative_path(member_name: str) -> Path | None:
    """Return a sanitized relative extraction path, or None if unsafe."""
    normalized = member_name.replace("\\", "/")
    if normalized.startswith("/"):
        return None

    parts = [p for p in PurePosixPath(normalized).parts if p != "."]
    if not parts:
        return None
    if any(part in {"", ".."} for part in parts):
        return None
    if parts[0].endswith(":"):
        return None
    return Path(*parts)


def _is_within_root(root: Path, target: Path) -> bool:
    try:
        return target.resolve().is_relative_to(root.resolve())
    except OSError:
        return False


class ArchiveExtractor:
    """Extracts toolchain archives.

    Usage:
        result = ArchiveExtractor().extract(archive, layout.root)
        if is_ok(result):
            print(f"Extracted {result.value.files_count} files")
    """

    def extract(self, archive: Path, dest: Path) -> Result[ExtractResult, ExtractFailed]:
        """Extract archive into dest, overwriting existing files."""
        if not archive.is_file():
            return Err(ExtractFailed(archive=archive, reason="archive not found"))

        name = archive.name.lower()
        tar_mode = _tar_mode(name)
        if tar_mode is None and not name.endswith(".zip"):
            return Err(ExtractFailed(archive=archive, reason="unsupported archive format"))

        try:
            dest.mkdir(parents=True, exist_ok=True)
            staging = Path(tempfile.mkdtemp(prefix=".extract-", dir=str(dest)))
        except OSError as e:
            return Err(ExtractFailed(archive=archive, reason=f"IO error: {e}"))

        try:
            if tar_mode is not None:
                self._extract_tar(archive, staging, tar_mode)
            else:
                self._extract_zip(archive, staging)
            count = self._move_into_place(staging, dest)
        except (tarfile.TarError, EOFError) as e:
            return Err(ExtractFailed(archive=archive, reason=f"tar extraction failed: {e}"))
        except zipfile.BadZipFile as e:
            return Err(ExtractFailed(archive=archive, reason=f"invalid zip file: {e}"))
        except OSError as e:
            return Err(ExtractFailed(archive=archive, reason=f"IO error: {e}"))
        finally:
            shutil.rmtree(staging, ignore_errors=True)

        return Ok(ExtractResult(dest=dest, files_count=count))

    def _extract_tar(self, archive: Path, staging: Path, mode: str) -> None:
        root = staging.resolve()
        with tarfile.open(archive, mode) as tar:  # type: ignore[call-overload]
            for member in tar.getmembers():
                rel_path = _safe_relative_path(member.name)
                if rel_path is None:
                    continue
                full_path = staging / rel_path
                if not _is_within_root(root, full_path.parent):
                    continue

                if member.isdir():
                    full_path.mkdir(parents=True, exist_ok=True)
                    continue

                full_path.parent.mkdir(parents=True, exist_ok=True)

                if member.issym():
                    # Toolchains ship versioned-library and linker symlinks.
                    link_target = full_path.parent / member.linkname
                    if os.path.isabs(member.linkname) or not _is_within_root(root, link_target):
                        continue
                    with contextlib.suppress(FileNotFoundError):
                        full_path.unlink()
                    os.symlink(member.linkname, full_path)
                    continue

                if member.islnk():
                    linked = _safe_relative_path(member.linkname)
                    if linked is None or not (staging / linked).is_file():
                        continue
                    shutil.copy2(staging / linked, full_path)
                    continue

                if not member.isreg():
                    continue

                src = tar.extractfile(member)
                if src is None:
                    continue
                with src, open(full_path, "wb") as dst:
                    shutil.copyfileobj(src, dst)

                perms = member.mode & 0o777
                if perms:
                    with contextlib.suppress(OSError):
                        os.chmod(full_path, perms)

    def _extract_zip(self, archive: Path, staging: Path) -> None:
        root = staging.resolve()
        with zipfile.ZipFile(archive, "r") as zf:
            for info in zf.infolist():
                if info.is_dir():
                    continue

                rel_path = _safe_relative_path(info.filename)
                if rel_path is None:
                    continue

                file_type_bits = (info.external_attr >> 16) & 0o170000
                if file_type_bits == stat.S_IFLNK:
                    continue

                full_path = staging / rel_path
                if not _is_within_root(root, full_path):
                    continue

                full_path.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(info) as src, open(full_path, "wb") as dst:
                    shutil.copyfileobj(src, dst)

                unix_attrs = (info.external_attr >> 16) & 0o777
                if unix_attrs:
                    with contextlib.suppress(OSError):
                        full_path.chmod(unix_attrs)

    def _move_into_place(self, staging: Path, dest: Path) -> int:
        """Move every staged file and link to the same relative path under dest."""
        count = 0
        for dirpath, dirnames, filenames in os.walk(staging):
            current = Path(dirpath)
            rel_dir = current.relative_to(staging)
            (dest / rel_dir).mkdir(parents=True, exist_ok=True)

            linked_dirs = [d for d in dirnames if (current / d).is_symlink()]
            for name in [*filenames, *linked_dirs]:
                src = current / name
                target = dest / rel_dir / name
                if target.is_dir() and not target.is_symlink():
                    remove_path(target)
                os.replace(src, target)
                count += 1

            dirnames[:] = [d for d in dirnames if d not in linked_dirs]
        return count
