"""Output formatter registry.

WHY: The CLI needs a single lookup to find the right formatter by name.
A central dict makes it trivial to add new formats: create the formatter
class, import it here, add one line.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``FORMATTERS["json"](pretty=True)``.

RULES:
- Keys are lowercase identifiers (used as --format values)
- Values are BaseFormatter subclasses (not instances)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from unitypackage_util.formatters.json_output import JSONFormatter
from unitypackage_util.formatters.yaml_output import YAMLFormatter

if TYPE_CHECKING:
    from unitypackage_util.formatters.base import BaseFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "json": JSONFormatter,
    "yaml": YAMLFormatter,
}
