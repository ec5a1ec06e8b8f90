"""Container abstraction over package folders, tars and gzip-tars.

WHY: A Unity package reaches us in one of three shapes: an extracted
directory tree, a plain tar, or a gzip-compressed tar (the usual
``.unitypackage``). Their native APIs are incompatible (a random-access
directory walk versus a forward-only archive stream) but their logical
shape is identical: a flat bag of relatively-pathed byte blobs grouped
into GUID buckets. Downstream code should be written once against that
shape.

HOW: PackageKind is a closed enum. Package is an immutable (kind, path)
pair classified from the filesystem. Package.open() returns a
PackageHandle that owns the medium; its entries() hands the cursor over
to a single-pass iterator of PackageEntry objects. Every operation on
PackageEntry dispatches on the kind.

RULES:
- Classification is directory check, then magic bytes; never the extension
- entries() may be called once per handle; open() again to re-traverse
- Only regular files are yielded, for every kind
- Entry paths are relative and use forward slashes
- Archive entries stream: read an entry before advancing the iterator
- Read failures raise EntryReadError tagged with the entry path
"""

from __future__ import annotations

import enum
import logging
import os
import tarfile
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from unitypackage_util.config import GUID_MIN_LENGTH
from unitypackage_util.core.errors import (
    EntryReadError,
    NotAContainerError,
    PackageConsumedError,
    PackageNotFoundError,
    PackageReadError,
)
from unitypackage_util.core.sniff import SNIFF_LENGTH, is_gzip, is_tar

logger = logging.getLogger(__name__)

# Everything the tar/gzip layers raise for unreadable or truncated data
_ARCHIVE_ERRORS = (tarfile.TarError, EOFError, zlib.error, OSError)


class PackageKind(str, enum.Enum):
    """The three container shapes a package can take.

    Values double as the display names used by ``info``.
    """

    FOLDER = "Folder"
    TAR = "Tar"
    TAR_GZ = "TarGz"


_TAR_STREAM_MODES = {
    PackageKind.TAR: "r|",
    PackageKind.TAR_GZ: "r|gz",
}


def _normalize_path(name: str) -> str:
    """Normalize an archive member name to a relative forward-slash path."""
    path = name.replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    return path.lstrip("/")


@dataclass(frozen=True)
class Package:
    """An immutable handle to one package container.

    RULES:
    - kind is fixed at construction
    - Folder paths are canonicalized (resolved) so entry paths are stable
    - Build with Package.from_path(); the constructor does no checks
    """

    kind: PackageKind
    path: Path

    @classmethod
    def from_path(cls, path: str | os.PathLike) -> Package:
        """Classify ``path`` as a folder, tar or gzip-tar package.

        Raises:
            PackageNotFoundError: The path does not exist or is neither a
                regular file nor a directory, or cannot be read.
            NotAContainerError: The file is neither a tar nor a gzip stream.
        """
        target = Path(path)

        if target.is_dir():
            root = target.resolve()
            logger.debug("Classified %s as folder package", root)
            return cls(PackageKind.FOLDER, root)

        if not target.is_file():
            raise PackageNotFoundError(
                str(target), f"Path is not a file or directory: {target}"
            )

        try:
            with open(target, "rb") as f:
                head = f.read(SNIFF_LENGTH)
        except OSError as e:
            raise PackageNotFoundError(
                str(target), f"Cannot read {target}: {e.strerror or e}"
            ) from e

        if is_gzip(head):
            kind = PackageKind.TAR_GZ
        elif is_tar(head):
            kind = PackageKind.TAR
        else:
            raise NotAContainerError(str(target), "file is not a tar or tar.gz")

        logger.debug("Classified %s as %s package", target, kind.value)
        return cls(kind, target)

    def open(self) -> PackageHandle:
        """Open the underlying medium and return a fresh handle."""
        return PackageHandle(self)

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.path}"


class PackageHandle:
    """An open, single-use reader over a package's medium.

    WHY: Archive readers are forward-only streams. Once the entry iterator
    exists it owns the stream position, so the handle must refuse a second
    traversal rather than silently yield nothing.

    HOW: For tar kinds the archive is opened in tarfile's stream mode
    (``r|`` / ``r|gz``), which never seeks backwards and never buffers
    more than the member being read. For folders the walk is started
    lazily by entries().

    RULES:
    - entries() succeeds once; later calls, or a call on a closed archive
      handle, raise PackageConsumedError
    - The archive is closed when iteration finishes or on close()
    """

    def __init__(self, package: Package) -> None:
        self.package = package
        self._archive: Optional[tarfile.TarFile] = None
        self._consumed = False

        mode = _TAR_STREAM_MODES.get(package.kind)
        if mode is not None:
            try:
                self._archive = tarfile.open(package.path, mode=mode)
            except _ARCHIVE_ERRORS as e:
                raise PackageReadError(str(package.path), str(e)) from e
            logger.debug("Opened %s in stream mode %r", package.path, mode)

    def __enter__(self) -> PackageHandle:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._archive is not None:
            self._archive.close()
            self._archive = None

    def entries(self) -> Iterator[PackageEntry]:
        """Hand the cursor over to a lazy, single-pass entry iterator."""
        if self._consumed:
            raise PackageConsumedError(str(self.package))
        self._consumed = True

        if self.package.kind is PackageKind.FOLDER:
            return self._walk_folder(self.package.path)
        if self._archive is None:
            # closed before iterating
            raise PackageConsumedError(str(self.package))
        return self._walk_archive()

    def _walk_folder(self, root: Path) -> Iterator[PackageEntry]:
        def _on_error(err: OSError) -> None:
            raise EntryReadError(str(err.filename or root), err.strerror or str(err)) from err

        for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
            dirnames.sort()
            for filename in sorted(filenames):
                full_path = Path(dirpath) / filename
                if not full_path.is_file():
                    continue
                yield PackageEntry.from_file(root, full_path)

    def _walk_archive(self) -> Iterator[PackageEntry]:
        archive = self._archive
        source = str(self.package.path)
        try:
            while True:
                try:
                    member = archive.next()
                except _ARCHIVE_ERRORS as e:
                    raise EntryReadError(source, str(e)) from e
                if member is None:
                    break
                if not member.isfile():
                    continue
                yield PackageEntry.from_member(self.package.kind, archive, member)
        finally:
            self.close()


class PackageEntry:
    """One file inside a package, uniform across container kinds.

    RULES:
    - path is relative to the container root, forward-slash separated
    - guid is the first path segment; buckets shorter than
      GUID_MIN_LENGTH are container bookkeeping (see is_asset_entry)
    - Folder size/content come from stat/read, archive ones from the
      member header and the archive stream
    """

    __slots__ = ("kind", "path", "_file", "_archive", "_member")

    def __init__(
        self,
        kind: PackageKind,
        path: str,
        file: Optional[Path] = None,
        archive: Optional[tarfile.TarFile] = None,
        member: Optional[tarfile.TarInfo] = None,
    ) -> None:
        self.kind = kind
        self.path = path
        self._file = file
        self._archive = archive
        self._member = member

    @classmethod
    def from_file(cls, root: Path, file: Path) -> PackageEntry:
        return cls(PackageKind.FOLDER, file.relative_to(root).as_posix(), file=file)

    @classmethod
    def from_member(
        cls,
        kind: PackageKind,
        archive: tarfile.TarFile,
        member: tarfile.TarInfo,
    ) -> PackageEntry:
        return cls(kind, _normalize_path(member.name), archive=archive, member=member)

    def __repr__(self) -> str:
        return f"PackageEntry({self.kind.value}, {self.path!r})"

    @property
    def guid(self) -> str:
        return self.path.split("/", 1)[0]

    @property
    def name(self) -> str:
        """The GUID-relative part of the path, e.g. ``"asset.meta"``."""
        _, _, rest = self.path.partition("/")
        return rest

    def is_asset_entry(self) -> bool:
        return len(self.guid) >= GUID_MIN_LENGTH

    def size(self) -> int:
        if self.kind is PackageKind.FOLDER:
            try:
                return self._file.stat().st_size
            except OSError as e:
                raise EntryReadError(self.path, e.strerror or str(e)) from e
        return self._member.size

    def read_to_end(self) -> bytes:
        if self.kind is PackageKind.FOLDER:
            try:
                return self._file.read_bytes()
            except OSError as e:
                raise EntryReadError(self.path, e.strerror or str(e)) from e
        return self._read_member()

    def read_to_string(self) -> str:
        data = self.read_to_end()
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EntryReadError(self.path, f"not valid UTF-8 text ({e.reason})") from e

    def _read_member(self) -> bytes:
        try:
            fileobj = self._archive.extractfile(self._member)
        except _ARCHIVE_ERRORS as e:
            raise EntryReadError(self.path, str(e)) from e
        if fileobj is None:
            raise EntryReadError(self.path, "not a regular file")

        try:
            with fileobj:
                data = fileobj.read()
        except tarfile.StreamError as e:
            raise EntryReadError(
                self.path, "entry is no longer readable once the iterator has advanced"
            ) from e
        except _ARCHIVE_ERRORS as e:
            raise EntryReadError(self.path, str(e)) from e

        if len(data) != self._member.size:
            raise EntryReadError(
                self.path,
                f"truncated ({len(data)} of {self._member.size} bytes)",
            )
        return data
