"""Resolver package."""

from .active import active_marks, get_mark_kind, is_mark_active
from .attributes import object_includes
from .cursor import resolve_cursor
from .ranges import Coverage, MarkRange, collect_mark_ranges, measure_coverage, resolve_ranges

__all__ = [
    "Coverage",
    "MarkRange",
    "active_marks",
    "collect_mark_ranges",
    "get_mark_kind",
    "is_mark_active",
    "measure_coverage",
    "object_includes",
    "resolve_cursor",
    "resolve_ranges",
]
