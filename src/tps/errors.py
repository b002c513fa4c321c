# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Error types raised while extracting tracing provider specifications."""

import ast


class TracingSpecError(RuntimeError):
    """Represent any provider specification failure."""


class ValidationError(TracingSpecError):
    """Represent a declaration that cannot be lowered to static probes.

    Attributes:
        message: Human-readable reason for the rejection.
        lineno: Source line of the offending node, when known.
        col_offset: Source column of the offending node, when known.
        source: Canonical text of the offending node, when known.
    """

    def __init__(self, message: str, node: ast.AST | None = None) -> None:
        self.message = message
        self.lineno: int | None = getattr(node, "lineno", None)
        self.col_offset: int | None = getattr(node, "col_offset", None)
        self.source: str | None = _render(node)
        super().__init__(self._format())

    def _format(self) -> str:
        text = self.message
        if self.lineno is not None:
            text = f"{text} (line {self.lineno})"
        if self.source:
            text = f"{text}: {self.source}"
        return text


class ExtractionError(ValidationError):
    """Represent a method that cannot be turned into a probe."""


class FormatError(TracingSpecError):
    """Represent malformed or tampered serialized provider input."""


def _render(node: ast.AST | None) -> str | None:
    if node is None:
        return None
    try:
        text = ast.unparse(node)
    except (AttributeError, TypeError, ValueError):
        return None
    # keep only the header line of classes and functions
    for line in text.splitlines():
        if not line.startswith("@"):
            return line
    return text or None
