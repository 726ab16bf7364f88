"""Selection ranges and the read-only editor state snapshot."""

from __future__ import annotations

from dataclasses import dataclass

from markstate.errors import InvalidRange

from .document import Document, ResolvedPos
from .schema import Mark, Schema


@dataclass(frozen=True, slots=True)
class SelectionRange:
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise InvalidRange(f"Range start {self.start} is after its end {self.end}")

    @property
    def empty(self) -> bool:
        return self.start == self.end


@dataclass(frozen=True, slots=True)
class Selection:
    ranges: tuple[SelectionRange, ...]

    def __post_init__(self) -> None:
        if not self.ranges:
            raise InvalidRange("A selection needs at least one range")

    @classmethod
    def cursor(cls, pos: int) -> Selection:
        return cls((SelectionRange(pos, pos),))

    @classmethod
    def between(cls, anchor: int, head: int) -> Selection:
        return cls((SelectionRange(min(anchor, head), max(anchor, head)),))

    @classmethod
    def of(cls, *pairs: tuple[int, int]) -> Selection:
        return cls(tuple(SelectionRange(start, end) for start, end in pairs))

    @property
    def start(self) -> int:
        return min(r.start for r in self.ranges)

    @property
    def end(self) -> int:
        return max(r.end for r in self.ranges)

    @property
    def empty(self) -> bool:
        return all(r.empty for r in self.ranges)


@dataclass(frozen=True, slots=True)
class EditorState:
    """Snapshot of what the mark resolver reads: document, selection, stored marks.

    ``stored_marks`` is ``None`` when nothing is stored; an empty tuple means
    the next typed character carries no marks at all.
    """

    doc: Document
    selection: Selection
    stored_marks: tuple[Mark, ...] | None = None

    def __post_init__(self) -> None:
        size = self.doc.content_size
        for r in self.selection.ranges:
            if r.start < 0 or r.end > size:
                raise InvalidRange(f"Range {r.start}..{r.end} outside of document (0..{size})")

    @property
    def schema(self) -> Schema:
        return self.doc.schema

    @property
    def cursor(self) -> ResolvedPos:
        return self.doc.resolve(self.selection.start)

    def cursor_marks(self) -> tuple[Mark, ...]:
        if self.stored_marks is not None:
            return self.stored_marks
        return self.cursor.marks()
