"""Standard YAML output formatter.

WHY: Some users diff package contents or read them by eye; plain YAML is
friendlier for that than JSON, and unlike the engine dialect it loads
in any YAML library.

HOW: yaml.safe_dump with key order preserved. Pretty output uses block
style throughout; compact output lets PyYAML pick flow style for leaf
collections.

RULES:
- Output is standard YAML, never the engine dialect
- Key order is the payload's insertion order
"""

from __future__ import annotations

from typing import Any

import yaml

from unitypackage_util.formatters.base import BaseFormatter, FormatterOutput


class YAMLFormatter(BaseFormatter):

    @property
    def name(self) -> str:
        return "YAML"

    def format(self, payload: Any) -> FormatterOutput:
        content = yaml.safe_dump(
            payload,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False if self.pretty else None,
        )
        return FormatterOutput(suffix=".yaml", content=content, media_type="application/yaml")
