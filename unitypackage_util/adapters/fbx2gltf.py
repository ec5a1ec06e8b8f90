"""Adapter: pipe binary FBX bytes through the external FBX2glTF converter.

WHY: Packages ship meshes as binary FBX, which most web and engine
importers cannot load. FBX2glTF converts them to glTF. The tool treats
the converter as an opaque pipe: bytes in, bytes out, no format contract.

HOW: subprocess.run() with the buffer on stdin and stdout captured. The
program path and its arguments come from config (overridable through
UNITYPACKAGE_FBX2GLTF / UNITYPACKAGE_FBX2GLTF_ARGS) or the call.

RULES:
- A converter that cannot be started raises ConverterError
- A non-zero exit raises ConverterError carrying the converter's stderr
- The input buffer is never modified
"""

from __future__ import annotations

import logging
import subprocess
from typing import List, Optional

from unitypackage_util import config
from unitypackage_util.core.errors import ConverterError

logger = logging.getLogger(__name__)


def convert_fbx2gltf(
    buf: bytes,
    program: Optional[str] = None,
    args: Optional[List[str]] = None,
) -> bytes:
    """Convert ``buf`` with FBX2glTF and return the converter's output."""
    command = [program or config.FBX2GLTF_PROGRAM]
    command.extend(config.FBX2GLTF_ARGS if args is None else args)
    logger.debug("Running %s on %d bytes", command, len(buf))

    try:
        result = subprocess.run(command, input=buf, capture_output=True, check=False)
    except OSError as e:
        raise ConverterError(f"Could not run {command[0]}: {e}") from e

    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace").strip()
        raise ConverterError(
            f"{command[0]} exited with status {result.returncode}"
            + (f": {stderr}" if stderr else "")
        )
    return result.stdout
