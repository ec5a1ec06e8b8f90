"""Decode YAML-dialect bodies into plain Python structures.

WHY: The transformer produces standard YAML text; consumers want lists
and dicts they can serialize to JSON. The decoded values are also the
public output contract of the tool (documents always carry
``_class_id``, ``_file_id``, ``_extra``, ``type`` and ``content``), so
they are checked against JSON Schemas before being handed out.

HOW: Transform, parse with a PyYAML SafeLoader subclass that resolves
plain scalars by YAML 1.2 core rules, validate with jsonschema against
the schemas in ``unitypackage_util/schemas``.

RULES:
- Asset bodies decode to a list of document mappings (empty documents dropped)
- Meta bodies decode to exactly one mapping
- ``Off``, ``yes``, ``1:30`` and dates stay strings
- A repeated mapping key is malformed, never silently merged
- YAML parse failures and schema violations raise MalformedDialectError
"""

from __future__ import annotations

import json
import re
from collections.abc import Hashable
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema
import yaml
from yaml.constructor import ConstructorError

from unitypackage_util.core.dialect import asset_meta_yaml_cleanup, asset_yaml_cleanup
from unitypackage_util.core.errors import MalformedDialectError

_SCHEMA_DIR = Path(__file__).resolve().parent.parent / "schemas"
ASSET_DOCUMENT_SCHEMA_PATH = _SCHEMA_DIR / "asset_document.schema.json"
ASSET_META_SCHEMA_PATH = _SCHEMA_DIR / "asset_meta.schema.json"

_CACHED_SCHEMAS: Dict[Path, Dict[str, Any]] = {}


class _UnityLoader(yaml.SafeLoader):
    """SafeLoader resolving plain scalars by the YAML 1.2 core schema.

    WHY: Unity writes YAML 1.1 headers but its values are plain strings.
    Under 1.1 rules a GameObject named ``Off`` loads as False and a tag
    like ``1:30`` as the sexagesimal int 90. Repeated keys would also be
    merged last-one-wins.

    RULES:
    - bool is only true/false; int is decimal, 0o octal or 0x hex
    - No sexagesimal numbers, no timestamps
    - A repeated key in one mapping is a ConstructorError
    """

    def construct_mapping(self, node, deep=False):
        seen = set()
        for key_node, _ in node.value:
            if key_node.tag == "tag:yaml.org,2002:merge":
                continue
            key = self.construct_object(key_node, deep=deep)
            if not isinstance(key, Hashable):
                continue
            if key in seen:
                raise ConstructorError(
                    "while constructing a mapping", node.start_mark,
                    f"found duplicate key {key!r}", key_node.start_mark,
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def _construct_core_int(loader: _UnityLoader, node: yaml.ScalarNode) -> int:
    value = loader.construct_scalar(node)
    if value[:2] in ("0x", "0o"):
        return int(value, 0)
    return int(value, 10)


_REPLACED_TAGS = {
    "tag:yaml.org,2002:bool",
    "tag:yaml.org,2002:int",
    "tag:yaml.org,2002:float",
    "tag:yaml.org,2002:timestamp",
}

_UnityLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in _REPLACED_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
_UnityLoader.add_implicit_resolver(
    "tag:yaml.org,2002:bool",
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)
_UnityLoader.add_implicit_resolver(
    "tag:yaml.org,2002:int",
    re.compile(r"^(?:[-+]?[0-9]+|0o[0-7]+|0x[0-9a-fA-F]+)$"),
    list("-+0123456789"),
)
_UnityLoader.add_implicit_resolver(
    "tag:yaml.org,2002:float",
    re.compile(
        r"^(?:[-+]?(?:\.[0-9]+|[0-9]+\.[0-9]*)(?:[eE][-+]?[0-9]+)?"
        r"|[-+]?[0-9]+[eE][-+]?[0-9]+"
        r"|[-+]?\.(?:inf|Inf|INF)"
        r"|\.(?:nan|NaN|NAN))$"
    ),
    list("-+0123456789."),
)
_UnityLoader.add_constructor("tag:yaml.org,2002:int", _construct_core_int)


def _get_schema(path: Path) -> Dict[str, Any]:
    """Load a JSON schema from disk, cached after the first call."""
    schema = _CACHED_SCHEMAS.get(path)
    if schema is None:
        with open(path, encoding="utf-8") as f:
            schema = json.load(f)
        _CACHED_SCHEMAS[path] = schema
    return schema


def _validate(instance: Any, schema_path: Path, what: str) -> None:
    try:
        jsonschema.validate(instance=instance, schema=_get_schema(schema_path))
    except jsonschema.ValidationError as e:
        location = "/".join(str(part) for part in e.absolute_path) or "<root>"
        raise MalformedDialectError(f"{what} does not match the output contract at {location}: {e.message}") from e


def decode_asset(raw: str) -> List[Dict[str, Any]]:
    """Transform and parse an ``asset`` body into its list of documents."""
    text = asset_yaml_cleanup(raw)
    try:
        documents = [doc for doc in yaml.load_all(text, Loader=_UnityLoader) if doc is not None]
    except yaml.YAMLError as e:
        raise MalformedDialectError(f"transformed asset is not valid YAML: {e}") from e

    for index, document in enumerate(documents):
        _validate(document, ASSET_DOCUMENT_SCHEMA_PATH, f"asset document {index}")
    return documents


def decode_meta(raw: str) -> Dict[str, Any]:
    """Transform and parse an ``asset.meta`` body into one mapping."""
    text = asset_meta_yaml_cleanup(raw)
    try:
        meta: Optional[Any] = yaml.load(text, Loader=_UnityLoader)
    except yaml.YAMLError as e:
        raise MalformedDialectError(f"transformed meta is not valid YAML: {e}") from e

    _validate(meta, ASSET_META_SCHEMA_PATH, "asset meta")
    return meta
