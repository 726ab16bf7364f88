"""Exception types raised by the document model and schema lookups."""

from __future__ import annotations


class MarkStateError(Exception):
    """Base class for all markstate errors."""


class UnknownMarkKind(MarkStateError, LookupError):
    def __init__(self, name: str) -> None:
        super().__init__(f"There is no mark kind named '{name}'")
        self.name = name


class UnknownNodeKind(MarkStateError, LookupError):
    def __init__(self, name: str) -> None:
        super().__init__(f"There is no node kind named '{name}'")
        self.name = name


class InvalidRange(MarkStateError, ValueError):
    """A selection range is inverted or falls outside the document."""


class SchemaError(MarkStateError, ValueError):
    """A schema configuration cannot be built."""
