"""Document model package."""

from .document import Builder, Document, Node, ResolvedPos
from .schema import DEFAULT_SCHEMA, Mark, MarkKind, NodeKind, Schema, load_schema
from .state import EditorState, Selection, SelectionRange

__all__ = [
    "Builder",
    "DEFAULT_SCHEMA",
    "Document",
    "EditorState",
    "Mark",
    "MarkKind",
    "Node",
    "NodeKind",
    "ResolvedPos",
    "Schema",
    "Selection",
    "SelectionRange",
    "load_schema",
]
