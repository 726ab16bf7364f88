"""Immutable document tree with flat position addressing."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Mapping

from markstate.errors import InvalidRange

from .schema import AttrValue, Mark, NodeKind, Schema

# Return False to skip a node's children.
Visitor = Callable[["Node", int], "bool | None"]


@dataclass(frozen=True, slots=True)
class Node:
    kind: NodeKind
    content: tuple[Node, ...] = ()
    marks: tuple[Mark, ...] = ()
    text: str | None = None
    attrs: Mapping[str, AttrValue] = field(default_factory=dict, compare=False)

    @property
    def is_text(self) -> bool:
        return self.kind.is_text

    @property
    def is_leaf(self) -> bool:
        return self.kind.leaf

    @property
    def content_size(self) -> int:
        return sum(child.node_size for child in self.content)

    @property
    def node_size(self) -> int:
        if self.is_text:
            return len(self.text or "")
        if self.is_leaf:
            return 1
        return self.content_size + 2

    @property
    def text_content(self) -> str:
        if self.is_text:
            return self.text or ""
        return "".join(child.text_content for child in self.content)

    def nodes_between(self, start: int, end: int, visit: Visitor, offset: int = 0) -> None:
        """Call ``visit(node, pos)`` for every descendant overlapping ``[start, end)``.

        Positions are relative to this node's content; ``offset`` is the
        absolute position of that content's first unit.
        """
        pos = 0
        for child in self.content:
            if pos >= end:
                break
            child_end = pos + child.node_size
            if child_end > start and visit(child, offset + pos) is not False and child.content:
                inner = pos + 1
                child.nodes_between(
                    max(0, start - inner),
                    min(child.content_size, end - inner),
                    visit,
                    offset + inner,
                )
            pos = child_end

    def find_index(self, offset: int) -> tuple[int, int]:
        """Return ``(index, child_start)`` for the child at content ``offset``.

        An offset that falls exactly on a child boundary resolves to the child
        after it.
        """
        if offset == 0:
            return 0, 0
        if offset == self.content_size:
            return len(self.content), offset
        pos = 0
        for index, child in enumerate(self.content):
            child_end = pos + child.node_size
            if child_end >= offset:
                if child_end == offset:
                    return index + 1, child_end
                return index, pos
            pos = child_end
        raise InvalidRange(f"Offset {offset} outside of node content (size {self.content_size})")


@dataclass(frozen=True, slots=True)
class ResolvedPos:
    """A document position together with the innermost node containing it."""

    pos: int
    parent: Node
    parent_offset: int
    index: int
    text_offset: int

    def marks(self) -> tuple[Mark, ...]:
        """Marks that content inserted at this position would inherit."""
        parent = self.parent
        if not parent.content:
            return ()
        if self.text_offset:
            return parent.content[self.index].marks

        before = parent.content[self.index - 1] if self.index > 0 else None
        after = parent.content[self.index] if self.index < len(parent.content) else None
        if before is None:
            before, after = after, None

        return tuple(
            mark
            for mark in before.marks
            if mark.kind.inclusive or (after is not None and mark.is_in_set(after.marks))
        )


@dataclass(frozen=True, slots=True)
class Document:
    schema: Schema
    root: Node

    @property
    def content_size(self) -> int:
        return self.root.content_size

    def nodes_between(self, start: int, end: int, visit: Visitor) -> None:
        self.root.nodes_between(start, end, visit)

    def descendants(self) -> list[tuple[Node, int]]:
        """Every ``(node, pos)`` pair in document order."""
        found: list[tuple[Node, int]] = []
        self.nodes_between(0, self.content_size, lambda node, pos: found.append((node, pos)))
        return found

    def resolve(self, pos: int) -> ResolvedPos:
        if not 0 <= pos <= self.content_size:
            raise InvalidRange(f"Position {pos} out of range (0..{self.content_size})")

        node = self.root
        parent_offset = pos
        while True:
            index, child_start = node.find_index(parent_offset)
            remainder = parent_offset - child_start
            if not remainder:
                return ResolvedPos(pos, node, parent_offset, index, 0)
            child = node.content[index]
            if child.is_text:
                return ResolvedPos(pos, node, parent_offset, index, remainder)
            node = child
            parent_offset = remainder - 1


class Builder:
    """Shorthand for assembling documents against a schema."""

    def __init__(self, schema: Schema) -> None:
        self.schema = schema

    def doc(self, *content: Node) -> Document:
        return Document(self.schema, Node(self.schema.node_kind("doc"), tuple(content)))

    def node(self, name: str, *content: Node, marks: tuple[Mark | str, ...] = (), **attrs: AttrValue) -> Node:
        kind = self.schema.node_kind(name)
        values = {key: attrs.get(key, default) for key, default in kind.defaults.items()}
        return Node(kind, tuple(content), self._marks(marks), attrs=MappingProxyType(values))

    def text(self, value: str, *marks: Mark | str) -> Node:
        return Node(self.schema.node_kind("text"), marks=self._marks(marks), text=value)

    def mark(self, name: str, **attrs: AttrValue) -> Mark:
        return self.schema.mark(name, **attrs)

    def _marks(self, marks: tuple[Mark | str, ...]) -> tuple[Mark, ...]:
        resolved = [self.schema.mark(mark) if isinstance(mark, str) else mark for mark in marks]
        rank = {name: idx for idx, name in enumerate(self.schema.marks)}
        return tuple(sorted(resolved, key=lambda mark: rank.get(mark.name, len(rank))))
