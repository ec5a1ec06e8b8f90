"""Unity YAML dialect to standard YAML transformer.

WHY: Unity serializes assets in a YAML look-alike that generic parsers
reject or misread: documents open with ``--- !u!<class> &<fileID>``
headers carrying non-standard tags, the document body sits under a
type-tag key (``Prefab:``), some MonoBehaviour documents repeat
``m_Name``, and 64-bit ``fileID`` references lose precision or sign in
JSON number handling. Meta files additionally scatter common header
fields around the importer block.

HOW: Two single-pass, line-oriented rewrites. Each call owns a small
state dataclass (AssetState / MetaState) threaded through the lines;
nothing is shared between calls. Header values are remembered and
attached to the next top-level line as ``_class_id``/``_file_id``/
``_extra``/``type`` keys with the body nested under ``content:``. Meta
header fields are hoisted and re-emitted once, in a fixed order, after
the importer block.

RULES:
- Output is valid YAML; asset output is one mapping per ``---`` document
- ``fileID: N`` (N may be negative) becomes ``fileID: "N"`` everywhere
- Only content-level ``m_Name`` fields are counted; the Nth (N > 1) in a
  document is renamed ``m_Name<N-1>``
- A line that does not fit its recognized category raises
  MalformedDialectError; partially-correct output is never returned
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import List, Optional

from unitypackage_util.config import UNITY_DOCUMENT_MARKER
from unitypackage_util.core.errors import MalformedDialectError

# Signed 64-bit range for fileID values
_INT64_MIN = -(2 ** 63)
_INT64_MAX = 2 ** 63 - 1

_INT_RE = re.compile(r"-?[0-9]+")
_FILE_ID_RE = re.compile(r"fileID: (-?[0-9]+)\b")
_TAG_LINE_RE = re.compile(r"([^\s:]+):\s*")

_M_NAME_FIELD = "  m_Name:"

# Scalars safe to emit unquoted; anything else is emitted JSON-quoted,
# which is also a valid YAML double-quoted scalar.
_PLAIN_SCALAR_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_.\-]*")
_YAML_RESERVED_WORDS = frozenset({"yes", "no", "true", "false", "on", "off", "null", "y", "n"})


def _yaml_scalar(value: str) -> str:
    if _PLAIN_SCALAR_RE.fullmatch(value) and value.lower() not in _YAML_RESERVED_WORDS:
        return value
    return json.dumps(value)


def _quote_file_ids(line: str) -> str:
    return _FILE_ID_RE.sub(r'fileID: "\1"', line)


def _physical_lines(text: str) -> List[str]:
    """Split on line feeds only; other Unicode line breaks stay inside the line."""
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _parse_tag(line: str, line_number: int) -> str:
    match = _TAG_LINE_RE.fullmatch(line)
    if match is None:
        raise MalformedDialectError("expected a type tag like 'Prefab:'", line_number, line)
    return match.group(1)


# ---------------------------------------------------------------------------
# Asset bodies
# ---------------------------------------------------------------------------


@dataclass
class AssetState:
    """Per-call state of the asset-body transform.

    class_id / file_id / extra come from the last document header and are
    attached to the next top-level line; m_name_count resets per document.
    """

    class_id: int = 0
    file_id: int = 0
    extra: Optional[str] = None
    m_name_count: int = 0


def _parse_file_id(token: str) -> int:
    """``&123`` -> 123; anything unparsable or outside int64 -> 0."""
    token = token.replace("&", "")
    if not _INT_RE.fullmatch(token):
        return 0
    value = int(token)
    if value < _INT64_MIN or value > _INT64_MAX:
        return 0
    return value


def _read_document_header(state: AssetState, line: str, line_number: int) -> str:
    tokens = line[len(UNITY_DOCUMENT_MARKER):].split()
    if not tokens or not _INT_RE.fullmatch(tokens[0]):
        raise MalformedDialectError("unparsable class id in document header", line_number, line)

    state.class_id = int(tokens[0])
    state.file_id = _parse_file_id(tokens[1]) if len(tokens) > 1 else 0
    state.extra = " ".join(tokens[2:]) or None
    state.m_name_count = 0
    return "---\n"


def _expand_type_tag(state: AssetState, line: str, line_number: int) -> str:
    tag = _parse_tag(line, line_number)
    extra = _yaml_scalar(state.extra) if state.extra else '""'
    return (
        f"_class_id: {state.class_id}\n"
        f'_file_id: "{state.file_id}"\n'
        f"_extra: {extra}\n"
        f"type: {_yaml_scalar(tag)}\n"
        "content:\n"
    )


def _rewrite_field(state: AssetState, line: str) -> str:
    line = _quote_file_ids(line)
    if line.startswith(_M_NAME_FIELD):
        state.m_name_count += 1
        if state.m_name_count > 1:
            line = line.replace("m_Name:", f"m_Name{state.m_name_count - 1}:", 1)
    return line + "\n"


def _clean_asset_line(state: AssetState, line: str, line_number: int) -> str:
    if line.startswith(UNITY_DOCUMENT_MARKER):
        return _read_document_header(state, line, line_number)
    if not line or line.startswith("%"):
        # %YAML / %TAG directives and blank lines
        return ""
    if not line.startswith(" ") and not line.startswith("'"):
        return _expand_type_tag(state, line, line_number)
    return _rewrite_field(state, line)


def asset_yaml_cleanup(yaml: str) -> str:
    """Rewrite a YAML-dialect ``asset`` body into standard YAML.

    Each ``--- !u!<class> &<fileID> [extra]`` document becomes::

        ---
        _class_id: <class>
        _file_id: "<fileID>"
        _extra: <extra or "">
        type: <Tag>
        content:
          <original indented fields>

    Raises:
        MalformedDialectError: A header has no integer class id, or a
            top-level line is not a bare ``Tag:``.
    """
    state = AssetState()
    return "".join(
        _clean_asset_line(state, line, line_number)
        for line_number, line in enumerate(_physical_lines(yaml), start=1)
    )


# ---------------------------------------------------------------------------
# Meta bodies
# ---------------------------------------------------------------------------


@dataclass
class MetaState:
    """Per-call state of the meta-body transform.

    Header fields are collected here and emitted once at the end.
    """

    file_format_version: int = 2
    guid: str = ""
    time_created: str = ""
    license_type: str = ""
    folder_asset: Optional[bool] = None
    labels: List[str] = field(default_factory=list)
    inside_labels: bool = False
    importer: Optional[str] = None


def _header_value(line: str) -> str:
    return line.partition(":")[2].strip()


def _read_inline_labels(state: MetaState, value: str, line: str, line_number: int) -> None:
    if not (value.startswith("[") and value.endswith("]")):
        raise MalformedDialectError("labels must be a list", line_number, line)
    for item in value[1:-1].split(","):
        item = item.strip()
        if item:
            state.labels.append(item)


def _clean_meta_line(state: MetaState, line: str, line_number: int) -> str:
    if state.inside_labels and not line.startswith("-"):
        state.inside_labels = False

    if state.inside_labels:
        state.labels.append(line.strip()[1:].strip())
        return ""

    if not line:
        return ""

    if line.startswith(" "):
        return _quote_file_ids(line) + "\n"

    if line.startswith("fileFormatVersion:"):
        value = _header_value(line)
        if not _INT_RE.fullmatch(value):
            raise MalformedDialectError("unparsable fileFormatVersion", line_number, line)
        state.file_format_version = int(value)
    elif line.startswith("guid:"):
        state.guid = _header_value(line)
    elif line.startswith("timeCreated:"):
        state.time_created = _header_value(line)
    elif line.startswith("licenseType:"):
        state.license_type = _header_value(line)
    elif line.startswith("folderAsset:"):
        state.folder_asset = True if _header_value(line) == "yes" else None
    elif line.startswith("labels:"):
        value = _header_value(line)
        if value:
            _read_inline_labels(state, value, line, line_number)
        else:
            state.inside_labels = True
    else:
        tag = _parse_tag(line, line_number)
        if state.importer is not None:
            raise MalformedDialectError(
                f"second importer block after {state.importer!r}", line_number, line
            )
        state.importer = tag
        return f"type: {_yaml_scalar(tag)}\ncontent:\n"
    return ""


def _meta_trailer(state: MetaState) -> str:
    lines = [
        f"fileFormatVersion: {state.file_format_version}",
        f"guid: {json.dumps(state.guid)}",
    ]
    if state.folder_asset:
        lines.append("folderAsset: true")
    if state.labels:
        lines.append("labels:")
        lines.extend(f"- {json.dumps(label)}" for label in state.labels)
    return "\n".join(lines) + "\n"


def asset_meta_yaml_cleanup(yaml: str) -> str:
    """Rewrite an ``asset.meta`` body into one standard YAML mapping.

    The importer block (``DefaultImporter:`` and its fields) becomes
    ``type``/``content``; ``fileFormatVersion``, ``guid``, ``folderAsset``
    (only when ``yes``) and ``labels`` (only when non-empty) are appended
    in that order. ``timeCreated`` and ``licenseType`` are consumed.

    Raises:
        MalformedDialectError: Unparsable fileFormatVersion, a top-level
            line that is not a known header or ``Tag:``, or a second
            importer block.
    """
    state = MetaState()
    body = "".join(
        _clean_meta_line(state, line, line_number)
        for line_number, line in enumerate(_physical_lines(yaml), start=1)
    )
    return body + _meta_trailer(state)
