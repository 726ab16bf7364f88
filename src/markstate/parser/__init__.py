"""Parser package."""

from .md_parser import MarkdownParser, parse_markdown

__all__ = [
    "MarkdownParser",
    "parse_markdown",
]
