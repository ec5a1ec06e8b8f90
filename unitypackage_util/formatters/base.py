"""Abstract base formatter and output container.

WHY: Every command produces a plain Python payload (records, pathname
lists, decoded documents) but the caller chooses how it is serialized.
This base class gives the CLI one interface over every output format.

HOW: BaseFormatter is an ABC with two requirements: a ``name`` property
and a ``format()`` method. FormatterOutput is a plain dataclass that
bundles a file suffix with its content and MIME type.

RULES:
- Subclasses MUST implement ``name`` and ``format()``
- ``pretty`` is a constructor option; formatters without a compact form
  may ignore it
- ``suffix`` starts with a dot, e.g. ``".json"``
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass
class FormatterOutput:
    """One serialized payload.

    Attributes:
        suffix: File suffix to use when the payload is written to disk.
        content: The serialized text.
        media_type: MIME type for the content, e.g. ``"application/json"``.
    """

    suffix: str
    content: str
    media_type: str


class BaseFormatter(ABC):
    """Abstract base for all output formatters.

    To add a new output format:
    1. Create a new file in formatters/
    2. Subclass BaseFormatter
    3. Implement format() and name
    4. Register in FORMATTERS dict in formatters/__init__.py
    """

    def __init__(self, pretty: bool = False) -> None:
        self.pretty = pretty

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'JSON'."""

    @abstractmethod
    def format(self, payload: Any) -> FormatterOutput:
        """Serialize a payload made of dicts, lists and scalars."""
