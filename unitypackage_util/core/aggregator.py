"""Per-GUID aggregation of package entries into records.

WHY: Inside a package every asset is a GUID bucket of up to three files
that arrive in arbitrary order (and, for archives, only once each). The
commands need those files joined per GUID: the logical pathname, the
sniffed content type, and the decoded asset/meta structures.

HOW: One pass over the entries of a freshly opened package. Entries in
buckets shorter than GUID_MIN_LENGTH are skipped. ``pathname`` yields its
first line, ``asset.meta`` goes through decode_meta, ``asset`` is sniffed
and, when it starts with ``%YAML``, goes through decode_asset. Records are
built incrementally in first-seen GUID order.

RULES:
- A record may end up with any subset of its four fields set
- Each lookup opens the package itself; handles are never reused
- Per-entry failures propagate unless keep_going is set, in which case
  they are logged and the field is left unset
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from unitypackage_util.config import ASSET_FILE, ASSET_META_FILE, PATHNAME_FILE
from unitypackage_util.core.decode import decode_asset, decode_meta
from unitypackage_util.core.errors import (
    EntryReadError,
    MalformedDialectError,
    PackageNotFoundError,
)
from unitypackage_util.core.package import Package, PackageEntry
from unitypackage_util.core.sniff import is_dialect_yaml, sniff_content_type

logger = logging.getLogger(__name__)

EntryCallback = Callable[[str, str], None]


@dataclass
class Record:
    """Everything known about one GUID bucket.

    RULES:
    - pathname: first line of the ``pathname`` file (e.g. "Assets/Foo.prefab")
    - content_type: sniffed type of the ``asset`` body, None if unknown
    - asset: decoded documents, only for YAML-dialect asset bodies
    - asset_meta: decoded meta mapping
    """

    pathname: Optional[str] = None
    content_type: Optional[str] = None
    asset: Optional[List[Dict[str, Any]]] = None
    asset_meta: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pathname": self.pathname,
            "content_type": self.content_type,
            "asset": self.asset,
            "asset_meta": self.asset_meta,
        }


def _first_line(text: str) -> str:
    return text.split("\n", 1)[0].rstrip("\r")


def _fill_record(record: Record, entry: PackageEntry) -> None:
    if entry.name == PATHNAME_FILE:
        record.pathname = _first_line(entry.read_to_string())
    elif entry.name == ASSET_META_FILE:
        record.asset_meta = decode_meta(entry.read_to_string())
    elif entry.name == ASSET_FILE:
        buffer = entry.read_to_end()
        record.content_type = sniff_content_type(buffer)
        if is_dialect_yaml(buffer):
            try:
                text = buffer.decode("utf-8")
            except UnicodeDecodeError as e:
                raise EntryReadError(entry.path, f"not valid UTF-8 text ({e.reason})") from e
            record.asset = decode_asset(text)


def collect_records(
    package: Package,
    *,
    keep_going: bool = False,
    on_entry: Optional[EntryCallback] = None,
) -> Dict[str, Record]:
    """Walk ``package`` once and build one Record per GUID bucket.

    Args:
        package: The package to read; it is opened here.
        keep_going: Log and skip entries that fail to read or decode
                    instead of raising.
        on_entry: Called with (guid, name) before each handled entry.

    Returns:
        Records keyed by GUID, in first-seen order.

    Raises:
        EntryReadError: An entry could not be read (unless keep_going).
        MalformedDialectError: A body could not be decoded (unless
            keep_going); the error names the offending entry.
    """
    records: Dict[str, Record] = {}

    with package.open() as handle:
        for entry in handle.entries():
            if not entry.is_asset_entry():
                continue

            record = records.setdefault(entry.guid, Record())
            if entry.name not in (PATHNAME_FILE, ASSET_FILE, ASSET_META_FILE):
                continue

            if on_entry is not None:
                on_entry(entry.guid, entry.name)

            try:
                _fill_record(record, entry)
            except MalformedDialectError as e:
                error = e.with_source(entry.path)
                if not keep_going:
                    raise error from e
                logger.warning("Skipping %s: %s", entry.path, error)
            except EntryReadError as e:
                if not keep_going:
                    raise
                logger.warning("Skipping %s: %s", entry.path, e)

    logger.debug("Collected %d records from %s", len(records), package)
    return records


def list_pathnames(
    package: Package,
    directory: Optional[str] = None,
) -> List[Tuple[str, str]]:
    """Return (guid, pathname) pairs sorted by pathname.

    When ``directory`` is given, only pathnames whose parent directory is
    exactly ``directory`` are kept (``"Assets"`` keeps ``Assets/Foo.prefab``
    but not ``Assets/Sub/Bar.prefab``).
    """
    contents: List[Tuple[str, str]] = []

    with package.open() as handle:
        for entry in handle.entries():
            if not entry.is_asset_entry() or entry.name != PATHNAME_FILE:
                continue

            pathname = _first_line(entry.read_to_string())
            if directory is not None and posixpath.dirname(pathname) != directory:
                continue
            contents.append((entry.guid, pathname))

    contents.sort(key=lambda item: item[1])
    return contents


def _find_entry_bytes(package: Package, looking_for: str) -> bytes:
    with package.open() as handle:
        for entry in handle.entries():
            if entry.path == looking_for:
                return entry.read_to_end()
    raise PackageNotFoundError(looking_for, f"Could not find {looking_for} in package")


def find_pathname(package: Package, guid: str) -> str:
    """Return the logical pathname stored for ``guid``.

    Raises:
        PackageNotFoundError: The package has no ``<guid>/pathname`` entry.
    """
    looking_for = f"{guid}/{PATHNAME_FILE}"
    data = _find_entry_bytes(package, looking_for)
    try:
        return _first_line(data.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise EntryReadError(looking_for, f"not valid UTF-8 text ({e.reason})") from e


def read_package_file(package: Package, guid: str, meta: bool = False) -> bytes:
    """Return the raw bytes of ``<guid>/asset`` (or ``<guid>/asset.meta``).

    Raises:
        PackageNotFoundError: The entry does not exist in the package.
    """
    name = ASSET_META_FILE if meta else ASSET_FILE
    return _find_entry_bytes(package, f"{guid}/{name}")
