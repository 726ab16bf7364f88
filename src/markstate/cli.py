"""markstate CLI entrypoint."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import click
import yaml

from markstate.errors import MarkStateError
from markstate.model.schema import DEFAULT_SCHEMA, Schema, load_schema
from markstate.model.state import EditorState, Selection, SelectionRange
from markstate.parser.md_parser import MarkdownParser
from markstate.renderer.html_renderer import HTMLRenderer
from markstate.resolver import active_marks, is_mark_active


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--range",
    "-r",
    "ranges",
    multiple=True,
    metavar="START:END",
    help="Selected range; repeat for multi-range selections. A single number places the cursor.",
)
@click.option("--mark", "-m", "mark_name", type=str, default=None, help="Mark kind to query (default: every kind)")
@click.option("--any-mark", is_flag=True, help="Ask whether any mark at all is active")
@click.option("--attr", "attrs", multiple=True, metavar="KEY=VALUE", help="Required mark attribute")
@click.option("--stored-mark", "stored", multiple=True, metavar="NAME", help="Mark stored at the cursor")
@click.option("--no-stored-marks", is_flag=True, help="Cursor carries an explicitly empty set of stored marks")
@click.option("--schema", "schema_path", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None)
@click.option("--tree", is_flag=True, help="Print node positions instead of querying")
@click.option("--output", "-o", type=click.Path(path_type=Path), default=None, help="Write an HTML toolbar preview")
@click.option("--dark-mode", is_flag=True, help="Enable dark mode stylesheet")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(
    input_path: Path,
    ranges: tuple[str, ...],
    mark_name: str | None,
    any_mark: bool,
    attrs: tuple[str, ...],
    stored: tuple[str, ...],
    no_stored_marks: bool,
    schema_path: Path | None,
    tree: bool,
    output: Path | None,
    dark_mode: bool,
    verbose: bool,
) -> None:
    """Report which marks are active for a selection in a Markdown document."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        schema = load_schema(schema_path) if schema_path else DEFAULT_SCHEMA
        doc = MarkdownParser(schema).parse(input_path)

        if tree:
            for node, pos in doc.descendants():
                click.echo(_describe(node, pos))
            return

        state = EditorState(
            doc=doc,
            selection=_parse_selection(ranges, doc.content_size),
            stored_marks=_stored_marks(schema, stored, no_stored_marks),
        )
        attributes = _parse_attrs(attrs)

        if mark_name or any_mark:
            active = is_mark_active(state, None if any_mark else mark_name, attributes)
            label = "any mark" if any_mark else mark_name
            click.echo(f"{label}: {'active' if active else 'inactive'}")
        else:
            for name, active in active_marks(state, attributes).items():
                click.echo(f"{name}: {'active' if active else 'inactive'}")

        if output is not None:
            html = HTMLRenderer().render(state, title=input_path.name, dark_mode=dark_mode)
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(html, encoding="utf-8")
            click.echo(f"Rendered: {output}")
    except MarkStateError as exc:
        raise click.ClickException(str(exc)) from exc


def _parse_selection(ranges: tuple[str, ...], doc_size: int) -> Selection:
    if not ranges:
        return Selection.of((0, doc_size))

    parsed: list[SelectionRange] = []
    for raw in ranges:
        start, sep, end = raw.partition(":")
        try:
            first = int(start)
            second = int(end) if sep else first
        except ValueError:
            raise click.BadParameter(f"Expected START:END, got {raw!r}", param_hint="--range") from None
        parsed.append(SelectionRange(first, second))
    return Selection(tuple(parsed))


def _parse_attrs(attrs: tuple[str, ...]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for raw in attrs:
        key, sep, value = raw.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"Expected KEY=VALUE, got {raw!r}", param_hint="--attr")
        try:
            result[key.strip()] = yaml.safe_load(value) if value else ""
        except yaml.YAMLError:
            raise click.BadParameter(f"Cannot read value of {raw!r}", param_hint="--attr") from None
    return result


def _stored_marks(schema: Schema, names: tuple[str, ...], explicit_empty: bool):
    if names:
        return tuple(schema.mark(name) for name in names)
    if explicit_empty:
        return ()
    return None


def _describe(node, pos: int) -> str:
    span = f"[{pos}, {pos + node.node_size})"
    marks = ",".join(mark.name for mark in node.marks)
    suffix = f" {node.text!r}" if node.is_text else ""
    return f"{span} {node.kind.name}{f' <{marks}>' if marks else ''}{suffix}"


if __name__ == "__main__":  # pragma: no cover
    main()
