"""Mark activity for a non-empty, possibly multi-range selection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from markstate.model.document import Document, Node
from markstate.model.schema import Mark, MarkKind, Schema
from markstate.model.state import SelectionRange

from .attributes import object_includes

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MarkRange:
    mark: Mark
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start


@dataclass(slots=True)
class Coverage:
    """Per-call tallies collected while walking the selected ranges."""

    selection_range: int = 0
    matched_range: int = 0
    excluded_range: int = 0

    @property
    def total(self) -> int:
        # Excluding marks only count once the target mark occurs at all.
        if self.matched_range > 0:
            return self.matched_range + self.excluded_range
        return self.matched_range

    @property
    def active(self) -> bool:
        if self.selection_range == 0:
            return False
        return self.total >= self.selection_range


def collect_mark_ranges(
    doc: Document,
    ranges: Iterable[SelectionRange],
    kind: MarkKind | None,
) -> tuple[int, list[MarkRange]]:
    """Walk the selected ranges and return the eligible length plus every mark occurrence."""
    schema = doc.schema
    selection_range = 0
    mark_ranges: list[MarkRange] = []

    for selected in ranges:
        start, end = selected.start, selected.end

        def visit(node: Node, pos: int) -> bool | None:
            nonlocal selection_range
            # Containers such as code blocks cannot carry the mark; their span
            # must not count as unmarked selection.
            if not node.is_text and kind is not None and not schema.allows(node.kind, kind):
                return False
            if not node.is_text and not node.marks:
                return None

            rel_start = max(start, pos)
            rel_end = min(end, pos + node.node_size)
            selection_range += rel_end - rel_start
            mark_ranges.extend(MarkRange(mark, rel_start, rel_end) for mark in node.marks)
            return None

        doc.nodes_between(start, end, visit)

    return selection_range, mark_ranges


def measure_coverage(
    schema: Schema,
    selection_range: int,
    mark_ranges: list[MarkRange],
    kind: MarkKind | None,
    attributes: Mapping[str, Any],
) -> Coverage:
    coverage = Coverage(selection_range=selection_range)
    for mark_range in mark_ranges:
        mark = mark_range.mark
        if kind is None or mark.kind.name == kind.name:
            if object_includes(mark.attrs, attributes, strict=False):
                coverage.matched_range += mark_range.length
        if kind is None or (mark.kind.name != kind.name and schema.excludes(mark.kind, kind)):
            coverage.excluded_range += mark_range.length
    return coverage


def resolve_ranges(
    doc: Document,
    ranges: Iterable[SelectionRange],
    kind: MarkKind | None,
    attributes: Mapping[str, Any],
) -> bool:
    """Whether the mark covers every selected position that could carry it."""
    selection_range, mark_ranges = collect_mark_ranges(doc, ranges, kind)
    if selection_range == 0:
        logger.debug("No eligible content in selection for %s", kind.name if kind else "any mark")
        return False

    coverage = measure_coverage(doc.schema, selection_range, mark_ranges, kind, attributes)
    logger.debug(
        "Coverage for %s: selected=%d matched=%d excluded=%d",
        kind.name if kind else "any mark",
        coverage.selection_range,
        coverage.matched_range,
        coverage.excluded_range,
    )
    return coverage.active
