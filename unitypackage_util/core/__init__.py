"""Core container, dialect and aggregation modules.

WHY: The core package holds the two subsystems doing the real work (the
container abstraction and the dialect transformer) plus the thin layer
that joins them into per-GUID records. Commands and formatters build on
these and must not reach into container or dialect internals.

HOW: package.py opens folders, tars and gzip-tars behind one entry
interface; dialect.py rewrites Unity's YAML dialect into standard YAML;
decode.py parses and validates the result; aggregator.py groups entries
by GUID; sniff.py recognizes content by magic bytes; errors.py holds the
exception taxonomy.

RULES:
- package.py and dialect.py do not import each other
- Transform calls are pure: no state survives a call
"""

from unitypackage_util.core.aggregator import (
    Record,
    collect_records,
    find_pathname,
    list_pathnames,
    read_package_file,
)
from unitypackage_util.core.decode import decode_asset, decode_meta
from unitypackage_util.core.dialect import asset_meta_yaml_cleanup, asset_yaml_cleanup
from unitypackage_util.core.package import Package, PackageEntry, PackageHandle, PackageKind

__all__ = [
    "Package",
    "PackageEntry",
    "PackageHandle",
    "PackageKind",
    "Record",
    "asset_meta_yaml_cleanup",
    "asset_yaml_cleanup",
    "collect_records",
    "decode_asset",
    "decode_meta",
    "find_pathname",
    "list_pathnames",
    "read_package_file",
]
