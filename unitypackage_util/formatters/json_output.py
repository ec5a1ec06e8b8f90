"""JSON output formatter.

WHY: JSON is the default output of every command; importers on the other
side (engine plugins, scripts) read it with stock parsers.

RULES:
- Compact output has no whitespace between tokens
- Pretty output is indented by two spaces
- Non-ASCII text is written as-is
- Values JSON has no type for (YAML timestamps, ...) are written as strings
"""

from __future__ import annotations

import json
from typing import Any

from unitypackage_util.formatters.base import BaseFormatter, FormatterOutput


class JSONFormatter(BaseFormatter):

    @property
    def name(self) -> str:
        return "JSON"

    def format(self, payload: Any) -> FormatterOutput:
        if self.pretty:
            content = json.dumps(payload, indent=2, ensure_ascii=False, default=str)
        else:
            content = json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)
        return FormatterOutput(suffix=".json", content=content, media_type="application/json")
