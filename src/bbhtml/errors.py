"""Conversion diagnostics.

The converter never fails on malformed markup; it degrades to literal text.
When asked to, it records what it degraded as `ParseError` values, and in
strict mode it stops at the first one with `StrictModeError`.
"""

UNKNOWN_TAG = "unknown-tag"
MISPLACED_TAG = "misplaced-tag"
UNSUPPORTED_TAG_ARGUMENT = "unsupported-tag-argument"
INVALID_FIRST_CHARACTER_OF_TAG_NAME = "invalid-first-character-of-tag-name"
INVALID_CHARACTER_IN_TAG_NAME = "invalid-character-in-tag-name"
UNMATCHED_END_TAG = "unmatched-end-tag"
MISNESTED_END_TAG = "misnested-end-tag"
EOF_IN_TAG = "eof-in-tag"
UNCLOSED_TAG = "unclosed-tag"


class ParseError:
    """Represents a parse error with location information."""

    __slots__ = ("code", "column", "line", "message")

    def __init__(self, code, line=None, column=None, message=None):
        self.code = code
        self.line = line
        self.column = column
        self.message = message or code

    def __repr__(self):
        if self.line is not None and self.column is not None:
            return f"ParseError({self.code!r}, line={self.line}, column={self.column})"
        return f"ParseError({self.code!r})"

    def __str__(self):
        location = ""
        if self.line is not None and self.column is not None:
            location = f"({self.line},{self.column}): "
        if self.message != self.code:
            return f"{location}{self.code} - {self.message}"
        return f"{location}{self.code}"

    def __eq__(self, other):
        if not isinstance(other, ParseError):
            return NotImplemented
        return self.code == other.code and self.line == other.line and self.column == other.column

    __hash__ = None  # Unhashable since we define __eq__


class StrictModeError(Exception):
    """Raised by strict conversion at the first recorded `ParseError`."""

    def __init__(self, error):
        super().__init__(str(error))
        self.error = error
