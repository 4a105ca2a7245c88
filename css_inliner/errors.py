"""Error types raised while inlining a document."""

from __future__ import annotations


class InlinerError(Exception):
    """Base class for errors that abort processing of a document."""


class ParseError(InlinerError):
    """Raised when a stylesheet contains a syntax error."""

    def __init__(
        self,
        reason: str,
        line: int | None = None,
        column: int | None = None,
        source: str = "<css input>",
    ):
        self.reason = reason
        self.line = line
        self.column = column
        self.source = source
        if line is None:
            message = f"{source}: {reason}"
        else:
            message = f"{source}:{line}:{column}: {reason}"
        super().__init__(message)


class LoadError(InlinerError):
    """Raised when an external stylesheet cannot be resolved or read."""

    def __init__(self, message: str, identifier: str | None = None, code: str | None = None):
        self.identifier = identifier
        self.code = code
        super().__init__(message)
