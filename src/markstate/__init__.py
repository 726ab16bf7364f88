"""Mark activity queries over rich-text documents."""

from .errors import InvalidRange, MarkStateError, SchemaError, UnknownMarkKind, UnknownNodeKind
from .model import DEFAULT_SCHEMA, Document, EditorState, Mark, MarkKind, Node, NodeKind, Schema, Selection, SelectionRange
from .resolver import active_marks, get_mark_kind, is_mark_active, object_includes

__all__ = [
    "DEFAULT_SCHEMA",
    "Document",
    "EditorState",
    "InvalidRange",
    "Mark",
    "MarkKind",
    "MarkStateError",
    "Node",
    "NodeKind",
    "Schema",
    "SchemaError",
    "Selection",
    "SelectionRange",
    "UnknownMarkKind",
    "UnknownNodeKind",
    "active_marks",
    "get_mark_kind",
    "is_mark_active",
    "object_includes",
]
