"""Public entry points for mark activity queries."""

from __future__ import annotations

from typing import Any, Mapping

from markstate.model.schema import MarkKind, Schema
from markstate.model.state import EditorState

from .cursor import resolve_cursor
from .ranges import resolve_ranges


def get_mark_kind(kind_or_name: MarkKind | str, schema: Schema) -> MarkKind:
    """Resolve a mark name against the schema; kinds pass through unchanged."""
    if isinstance(kind_or_name, str):
        return schema.mark_kind(kind_or_name)
    return kind_or_name


def is_mark_active(
    state: EditorState,
    kind_or_name: MarkKind | str | None = None,
    attributes: Mapping[str, Any] | None = None,
) -> bool:
    """Report whether a mark is active for the current selection.

    With an empty selection the mark is active when the next typed character
    would carry it. Otherwise it is active when matching marks, together with
    marks that exclude it, cover every selected position able to hold it.
    Passing no kind asks about any mark at all.

    Raises :class:`~markstate.errors.UnknownMarkKind` when a name does not
    resolve in the schema.
    """
    kind = get_mark_kind(kind_or_name, state.schema) if kind_or_name else None
    attributes = attributes or {}

    if state.selection.empty:
        return resolve_cursor(state.cursor_marks(), kind, attributes)
    return resolve_ranges(state.doc, state.selection.ranges, kind, attributes)


def active_marks(state: EditorState, attributes: Mapping[str, Any] | None = None) -> dict[str, bool]:
    """Activity of every mark kind in the schema, in schema order."""
    return {name: is_mark_active(state, kind, attributes) for name, kind in state.schema.marks.items()}
