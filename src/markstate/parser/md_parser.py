"""Markdown loader that builds a marked document tree."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from markstate.model.document import Builder, Document, Node
from markstate.model.schema import DEFAULT_SCHEMA, Mark, Schema

logger = logging.getLogger(__name__)

# Placeholder for a hard line break inside paragraph text.
_BREAK = "\x00"


class MarkdownParser:
    """Parse a Markdown file into a document against a schema."""

    def __init__(self, schema: Schema | None = None) -> None:
        self.schema = schema or DEFAULT_SCHEMA

    def parse(self, input_path: Path) -> Document:
        input_path = Path(input_path)
        raw = input_path.read_text(encoding="utf-8", errors="ignore")
        return parse_markdown(raw, self.schema)


def parse_markdown(text: str, schema: Schema | None = None) -> Document:
    builder = Builder(schema or DEFAULT_SCHEMA)
    # NUL is reserved for hard breaks inside paragraph text.
    blocks = _parse_blocks(text.replace(_BREAK, "").splitlines(), builder)
    logger.debug("Parsed %d top-level blocks", len(blocks))
    return builder.doc(*blocks)


# ---------------------------------------------------------------------------
# Block parsing
# ---------------------------------------------------------------------------

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.+?)(?:\s+#+)?\s*$")
_FENCE_RE = re.compile(r"^\s*(`{3,}|~{3,})(.*)$")
_RULE_RE = re.compile(r"^(?:-{3,}|\*{3,}|_{3,})$")
_QUOTE_RE = re.compile(r"^\s*>\s?")


def _parse_blocks(lines: list[str], builder: Builder) -> list[Node]:
    blocks: list[Node] = []
    paragraph: list[str] = []

    def flush() -> None:
        if paragraph:
            blocks.append(_make_paragraph(paragraph, builder))
            paragraph.clear()

    i = 0
    while i < len(lines):
        line = lines[i]
        stripped = line.strip()

        fence = _FENCE_RE.match(line)
        if fence:
            flush()
            marker = fence.group(1)
            language = fence.group(2).strip() or None
            body: list[str] = []
            i += 1
            while i < len(lines) and not lines[i].strip().startswith(marker):
                body.append(lines[i])
                i += 1
            i += 1  # closing fence
            code = "\n".join(body)
            content = (builder.text(code),) if code else ()
            blocks.append(builder.node("code_block", *content, language=language))
            continue

        heading = _HEADING_RE.match(line)
        if heading:
            flush()
            inline = _parse_inline(heading.group(2), (), builder)
            blocks.append(builder.node("heading", *inline, level=len(heading.group(1))))
            i += 1
            continue

        if _RULE_RE.match(stripped):
            flush()
            blocks.append(builder.node("horizontal_rule"))
            i += 1
            continue

        if _QUOTE_RE.match(line):
            flush()
            quoted: list[str] = []
            while i < len(lines) and _QUOTE_RE.match(lines[i]):
                quoted.append(_QUOTE_RE.sub("", lines[i], count=1))
                i += 1
            blocks.append(builder.node("blockquote", *_parse_blocks(quoted, builder)))
            continue

        if not stripped:
            flush()
            i += 1
            continue

        paragraph.append(line)
        i += 1

    flush()
    return blocks


def _make_paragraph(lines: list[str], builder: Builder) -> Node:
    parts: list[str] = []
    for idx, line in enumerate(lines):
        last = idx == len(lines) - 1
        hard = not last and (line.endswith("  ") or line.endswith("\\"))
        content = line.strip()
        if hard and content.endswith("\\"):
            content = content[:-1].rstrip()
        parts.append(content)
        if not last:
            parts.append(_BREAK if hard else " ")
    return builder.node("paragraph", *_parse_inline("".join(parts), (), builder))


# ---------------------------------------------------------------------------
# Inline parsing
# ---------------------------------------------------------------------------

_INLINE_RE = re.compile(
    r"!\[(?P<alt>[^\]]*)\]\((?P<src>[^)\s]+)(?:\s+\"(?P<img_title>[^\"]*)\")?\)"
    r"|`(?P<code>[^`]+)`"
    r"|\[(?P<label>[^\]]+)\]\((?P<href>[^)\s]+)(?:\s+\"(?P<title>[^\"]*)\")?\)"
    r"|\*\*(?P<bold>.+?)\*\*"
    r"|(?<!\w)__(?P<bold_alt>.+?)__(?!\w)"
    r"|~~(?P<strike>.+?)~~"
    r"|\*(?P<italic>[^*]+?)\*"
    r"|(?<!\w)_(?P<italic_alt>[^_]+?)_(?!\w)",
    re.DOTALL,
)


def _parse_inline(text: str, marks: tuple[Mark, ...], builder: Builder) -> list[Node]:
    nodes: list[Node] = []
    pos = 0
    for m in _INLINE_RE.finditer(text):
        nodes.extend(_plain(text[pos:m.start()], marks, builder))
        pos = m.end()

        if m.group("src") is not None:
            nodes.append(
                builder.node(
                    "image",
                    marks=marks,
                    src=m.group("src"),
                    alt=m.group("alt") or None,
                    title=m.group("img_title"),
                )
            )
        elif m.group("code") is not None:
            code_marks = _add_mark(marks, builder.mark("code"), builder.schema)
            nodes.append(builder.text(m.group("code"), *code_marks))
        elif m.group("href") is not None:
            link = builder.mark("link", href=m.group("href"), title=m.group("title"))
            nodes.extend(_parse_inline(m.group("label"), _add_mark(marks, link, builder.schema), builder))
        else:
            name, body = _emphasis(m)
            inner = _add_mark(marks, builder.mark(name), builder.schema)
            nodes.extend(_parse_inline(body, inner, builder))

    nodes.extend(_plain(text[pos:], marks, builder))
    return nodes


def _emphasis(m: re.Match[str]) -> tuple[str, str]:
    for group, name in (
        ("bold", "bold"),
        ("bold_alt", "bold"),
        ("strike", "strike"),
        ("italic", "italic"),
        ("italic_alt", "italic"),
    ):
        if m.group(group) is not None:
            return name, m.group(group)
    raise ValueError(f"Unhandled inline match: {m.group(0)!r}")


def _plain(text: str, marks: tuple[Mark, ...], builder: Builder) -> list[Node]:
    nodes: list[Node] = []
    for idx, chunk in enumerate(text.split(_BREAK)):
        if idx:
            nodes.append(builder.node("hard_break", marks=marks))
        if chunk:
            nodes.append(builder.text(chunk, *marks))
    return nodes


def _add_mark(marks: tuple[Mark, ...], mark: Mark, schema: Schema) -> tuple[Mark, ...]:
    """Add ``mark`` to a set, dropping marks it excludes.

    The set is unchanged when one of its marks excludes the new one.
    """
    kept: list[Mark] = []
    for other in marks:
        if other == mark:
            return marks
        if other.kind != mark.kind and schema.excludes(other.kind, mark.kind):
            return marks
        if schema.excludes(mark.kind, other.kind):
            continue
        kept.append(other)
    kept.append(mark)
    return tuple(kept)
