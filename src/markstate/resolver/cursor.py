"""Mark activity for an empty selection."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from markstate.model.schema import Mark, MarkKind

from .attributes import object_includes


def resolve_cursor(marks: Iterable[Mark], kind: MarkKind | None, attributes: Mapping[str, Any]) -> bool:
    """Whether the next character typed at the cursor would carry the mark."""
    for mark in marks:
        if kind is not None and mark.kind.name != kind.name:
            continue
        if object_includes(mark.attrs, attributes, strict=False):
            return True
    return False
