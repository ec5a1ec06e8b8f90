"""Typed exceptions for container access and dialect decoding.

WHY: Callers (CLI, tests, scripts) need to tell a bad input path apart
from a truncated archive or a malformed asset body, and report the
offending path, entry or line. One small hierarchy under a common base
keeps ``except UnityPackageError`` available for catch-all handling.

RULES:
- Every exception carries the identifier it is about (path, entry, line)
- Structural failures (not a container, not found) abort the operation
- Per-entry failures are raised from the entry, never from the iterator
  as a whole, so a traversal can be continued
"""

from __future__ import annotations


class UnityPackageError(Exception):
    """Base class for every error raised by unitypackage_util."""


class NotAContainerError(UnityPackageError, ValueError):
    """Raised when a path is neither a directory, a tar nor a gzip-tar."""

    def __init__(self, path: str, detail: str = "") -> None:
        self.path = path
        message = f"Not a package container: {path}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class PackageNotFoundError(UnityPackageError, LookupError):
    """Raised when a package path, or an entry inside a package, is missing.

    ``target`` is the filesystem path or the ``<guid>/<name>`` entry path.
    """

    def __init__(self, target: str, message: str | None = None) -> None:
        self.target = target
        super().__init__(message or f"Could not find {target}")


class EntryReadError(UnityPackageError, OSError):
    """Raised when reading an entry (or the archive stream) fails.

    WHY: Truncated archives, permission errors and undecodable text all
    surface here, tagged with the path the failure is about, so a bulk
    traversal can report the entry and decide whether to carry on.
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to read {path}: {reason}")

    def __str__(self) -> str:
        return f"Failed to read {self.path}: {self.reason}"


class PackageReadError(EntryReadError):
    """Raised when an archive cannot be opened as a tar stream at all."""


class PackageConsumedError(UnityPackageError, RuntimeError):
    """Raised when entries() is called twice on the same handle."""

    def __init__(self, source: str) -> None:
        self.source = source
        super().__init__(
            f"Entries of {source} were already iterated; open the package again"
        )


class MalformedDialectError(UnityPackageError, ValueError):
    """Raised when a body cannot be decoded from the YAML dialect.

    ``line_number`` is 1-based and, with ``line``, is set when the
    transformer rejects a specific line. ``source`` names the entry when
    the error is raised while decoding package contents.
    """

    def __init__(
        self,
        message: str,
        line_number: int | None = None,
        line: str | None = None,
        source: str | None = None,
    ) -> None:
        self.message = message
        self.line_number = line_number
        self.line = line
        self.source = source
        super().__init__(self._render())

    def _render(self) -> str:
        text = self.message
        if self.line_number is not None:
            text = f"line {self.line_number}: {text}: {self.line!r}"
        if self.source:
            text = f"{self.source}: {text}"
        return text

    def with_source(self, source: str) -> "MalformedDialectError":
        """Return a copy of this error attributed to ``source``."""
        return MalformedDialectError(
            self.message,
            line_number=self.line_number,
            line=self.line,
            source=source,
        )


class ConverterError(UnityPackageError):
    """Raised when the external media converter fails or cannot be run."""
