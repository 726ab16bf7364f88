"""Render a document and its toolbar state into a standalone HTML page."""

from __future__ import annotations

import html
from dataclasses import asdict, dataclass
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from markstate.model.document import Node
from markstate.model.schema import Mark
from markstate.model.state import EditorState
from markstate.resolver import active_marks

_MARK_TAGS = {
    "bold": "strong",
    "italic": "em",
    "strike": "s",
    "code": "code",
}

_BLOCK_TAGS = {
    "paragraph": "p",
    "blockquote": "blockquote",
}


@dataclass(slots=True)
class ToolbarItem:
    name: str
    active: bool


class HTMLRenderer:
    """Render editor state into the toolbar template."""

    def __init__(self, template_path: Path | None = None) -> None:
        if template_path is None:
            template_path = Path(__file__).resolve().parent.parent / "template" / "toolbar.html"

        loader = FileSystemLoader(str(template_path.parent))
        self._env = Environment(loader=loader, autoescape=True, trim_blocks=True, lstrip_blocks=True)
        self._template_name = template_path.name

    def render(self, state: EditorState, *, title: str | None = None, dark_mode: bool = False) -> str:
        toolbar = [ToolbarItem(name=name, active=active) for name, active in active_marks(state).items()]
        body = "\n".join(self.render_node(node) for node in state.doc.root.content)

        template = self._env.get_template(self._template_name)
        return template.render(
            page_title=title or "markstate",
            toolbar=[asdict(item) for item in toolbar],
            ranges=[{"start": r.start, "end": r.end} for r in state.selection.ranges],
            body=body,
            dark_mode=dark_mode,
        )

    def render_node(self, node: Node) -> str:
        if node.is_text:
            return self._wrap_marks(html.escape(node.text or ""), node.marks)

        name = node.kind.name
        if name == "image":
            alt = html.escape(str(node.attrs.get("alt") or ""))
            src = html.escape(str(node.attrs.get("src") or ""))
            return self._wrap_marks(f'<img src="{src}" alt="{alt}">', node.marks)
        if name == "hard_break":
            return self._wrap_marks("<br>", node.marks)
        if name == "horizontal_rule":
            return "<hr>"
        if name == "code_block":
            language = node.attrs.get("language")
            cls = f' class="language-{html.escape(str(language))}"' if language else ""
            return f"<pre><code{cls}>{html.escape(node.text_content)}</code></pre>"

        inner = "".join(self.render_node(child) for child in node.content)
        if name == "heading":
            level = max(1, min(6, int(node.attrs.get("level") or 1)))
            return f"<h{level}>{inner}</h{level}>"
        tag = _BLOCK_TAGS.get(name, "div")
        return f"<{tag}>{inner}</{tag}>"

    def _wrap_marks(self, content: str, marks: tuple[Mark, ...]) -> str:
        for mark in reversed(marks):
            if mark.name == "link":
                href = html.escape(str(mark.attrs.get("href") or ""))
                title = mark.attrs.get("title")
                title_attr = f' title="{html.escape(str(title))}"' if title else ""
                content = f'<a href="{href}"{title_attr}>{content}</a>'
                continue
            tag = _MARK_TAGS.get(mark.name, "span")
            extra = "" if mark.name in _MARK_TAGS else f' data-mark="{html.escape(mark.name)}"'
            content = f"<{tag}{extra}>{content}</{tag}>"
        return content
