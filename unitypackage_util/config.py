"""Configuration constants, dialect markers, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. Dialect markers, bucket file names, exit codes and
converter defaults are plain data, not buried in logic.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level values; the ones a user may reasonably want to change can
be overridden via environment variables.

RULES:
- GUID buckets shorter than GUID_MIN_LENGTH are container bookkeeping
- The external converter binary is configurable, never hardcoded in callers
- All defaults can be overridden via environment variables
"""

from __future__ import annotations

import os
import sys

from dotenv import load_dotenv

# Load .env from the project root (where the tool is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Dialect markers and signatures
# ---------------------------------------------------------------------------

UNITY_DOCUMENT_MARKER = "--- !u!"
"""Prefix of every document header line in an asset body."""

YAML_SIGNATURE = b"%YAML"
"""Asset bodies starting with this are in the YAML dialect."""

FBX_SIGNATURE = b"Kaydara FBX Binary"

# ---------------------------------------------------------------------------
# GUID bucket layout
# ---------------------------------------------------------------------------

PATHNAME_FILE = "pathname"
ASSET_FILE = "asset"
ASSET_META_FILE = "asset.meta"

GUID_MIN_LENGTH = int(os.getenv("UNITYPACKAGE_GUID_MIN_LENGTH", "32"))

# ---------------------------------------------------------------------------
# External converter (FBX -> glTF)
# ---------------------------------------------------------------------------

_DEFAULT_FBX2GLTF = "FBX2glTF.exe" if sys.platform.startswith("win") else "./FBX2glTF"

FBX2GLTF_PROGRAM = os.getenv("UNITYPACKAGE_FBX2GLTF", _DEFAULT_FBX2GLTF)
FBX2GLTF_ARGS: list[str] = os.getenv("UNITYPACKAGE_FBX2GLTF_ARGS", "-IO").split()

# ---------------------------------------------------------------------------
# Output and logging
# ---------------------------------------------------------------------------

DEFAULT_OUTPUT_FORMAT = os.getenv("UNITYPACKAGE_OUTPUT_FORMAT", "json")
LOG_LEVEL = os.getenv("UNITYPACKAGE_LOG_LEVEL", "WARNING").upper()

# Exit codes follow sysexits.h
EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_DATAERR = 65
EXIT_NOINPUT = 66
