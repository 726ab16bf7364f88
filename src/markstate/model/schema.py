"""Schema collaborator: mark kinds, node kinds and the relations between them."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Union

import yaml

from markstate.errors import SchemaError, UnknownMarkKind, UnknownNodeKind

logger = logging.getLogger(__name__)

AttrValue = Union[str, int, float, bool, None]

# Relation token meaning "every mark kind".
ALL_MARKS = "_"


@dataclass(frozen=True, slots=True)
class MarkKind:
    """Named category of a mark, compared by name only."""

    name: str
    defaults: Mapping[str, AttrValue] = field(default_factory=dict, compare=False)
    inclusive: bool = field(default=True, compare=False)
    group: str | None = field(default=None, compare=False)

    def create(self, attrs: Mapping[str, AttrValue] | None = None) -> Mark:
        """Build a mark, filling declared attributes from their defaults."""
        given = attrs or {}
        values = {key: given.get(key, default) for key, default in self.defaults.items()}
        return Mark(self, MappingProxyType(values))


@dataclass(frozen=True, slots=True, eq=False)
class Mark:
    kind: MarkKind
    attrs: Mapping[str, AttrValue] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.kind.name

    def is_in_set(self, marks: tuple[Mark, ...]) -> bool:
        return any(self == other for other in marks)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mark):
            return NotImplemented
        return self.kind == other.kind and dict(self.attrs) == dict(other.attrs)

    def __hash__(self) -> int:
        return hash((self.kind, tuple(sorted(self.attrs.items(), key=lambda item: item[0]))))


@dataclass(frozen=True, slots=True)
class NodeKind:
    name: str
    group: str | None = None
    leaf: bool = False
    is_text: bool = False
    defaults: Mapping[str, AttrValue] = field(default_factory=dict, compare=False)


class Schema:
    """Lookup tables for node and mark kinds plus the Excludes and Allows relations."""

    def __init__(
        self,
        nodes: Mapping[str, NodeKind],
        marks: Mapping[str, MarkKind],
        excluded: Mapping[str, frozenset[str]],
        allowed: Mapping[str, frozenset[str] | None],
    ) -> None:
        if "doc" not in nodes:
            raise SchemaError("Schema is missing a 'doc' node kind")
        if "text" not in nodes:
            raise SchemaError("Schema is missing a 'text' node kind")
        self.nodes = dict(nodes)
        self.marks = dict(marks)
        self._excluded = dict(excluded)
        self._allowed = dict(allowed)

    @classmethod
    def from_dict(cls, spec: Mapping[str, Any]) -> Schema:
        if not isinstance(spec, Mapping):
            raise SchemaError("Schema definition must be a mapping")
        node_specs = _section(spec, "nodes")
        mark_specs = _section(spec, "marks")

        marks: dict[str, MarkKind] = {}
        for name, mark_spec in mark_specs.items():
            mark_spec = _entry(mark_spec, "mark", name)
            marks[name] = MarkKind(
                name=name,
                defaults=MappingProxyType(dict(mark_spec.get("attrs") or {})),
                inclusive=bool(mark_spec.get("inclusive", True)),
                group=mark_spec.get("group"),
            )

        nodes: dict[str, NodeKind] = {}
        for name, node_spec in node_specs.items():
            node_spec = _entry(node_spec, "node", name)
            is_text = name == "text" or bool(node_spec.get("text", False))
            nodes[name] = NodeKind(
                name=name,
                group=node_spec.get("group"),
                leaf=is_text or bool(node_spec.get("leaf", False)),
                is_text=is_text,
                defaults=MappingProxyType(dict(node_spec.get("attrs") or {})),
            )

        excluded: dict[str, frozenset[str]] = {}
        for name, mark_spec in mark_specs.items():
            expr = (mark_spec or {}).get("excludes")
            if expr is None:
                excluded[name] = frozenset({name})
            else:
                excluded[name] = _gather_marks(marks, str(expr))

        allowed: dict[str, frozenset[str] | None] = {}
        for name, node_spec in node_specs.items():
            expr = (node_spec or {}).get("marks")
            if expr is None or expr == ALL_MARKS:
                allowed[name] = None
            else:
                allowed[name] = _gather_marks(marks, str(expr))

        logger.debug("Built schema with %d node kinds and %d mark kinds", len(nodes), len(marks))
        return cls(nodes=nodes, marks=marks, excluded=excluded, allowed=allowed)

    def mark_kind(self, name: str) -> MarkKind:
        try:
            return self.marks[name]
        except KeyError:
            raise UnknownMarkKind(name) from None

    def node_kind(self, name: str) -> NodeKind:
        try:
            return self.nodes[name]
        except KeyError:
            raise UnknownNodeKind(name) from None

    def mark(self, name: str, **attrs: AttrValue) -> Mark:
        return self.mark_kind(name).create(attrs)

    def excludes(self, kind: MarkKind, other: MarkKind) -> bool:
        """Whether content carrying ``kind`` may not also carry ``other``."""
        return other.name in self._excluded.get(kind.name, frozenset())

    def allows(self, node_kind: NodeKind, mark_kind: MarkKind) -> bool:
        """Whether nodes of ``node_kind`` may carry marks of ``mark_kind``."""
        if node_kind.name not in self._allowed:
            return True
        allowed = self._allowed[node_kind.name]
        return allowed is None or mark_kind.name in allowed


def _section(spec: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = spec.get(key) or {}
    if not isinstance(value, Mapping):
        raise SchemaError(f"Schema '{key}' must be a mapping of names to definitions")
    return value


def _entry(value: Any, what: str, name: str) -> Mapping[str, Any]:
    value = value or {}
    if not isinstance(value, Mapping):
        raise SchemaError(f"Definition of {what} kind '{name}' must be a mapping")
    if "attrs" in value and not isinstance(value["attrs"] or {}, Mapping):
        raise SchemaError(f"Attributes of {what} kind '{name}' must be a mapping")
    return value


def _gather_marks(marks: Mapping[str, MarkKind], expr: str) -> frozenset[str]:
    found: set[str] = set()
    for token in expr.split():
        if token == ALL_MARKS:
            found.update(marks)
            continue
        if token in marks:
            found.add(token)
            continue
        in_group = [name for name, kind in marks.items() if kind.group and token in kind.group.split()]
        if not in_group:
            raise SchemaError(f"Unknown mark kind or group: '{token}'")
        found.update(in_group)
    return frozenset(found)


DEFAULT_SCHEMA_SPEC: dict[str, Any] = {
    "nodes": {
        "doc": {},
        "paragraph": {"group": "block"},
        "heading": {"group": "block", "attrs": {"level": 1}},
        "blockquote": {"group": "block"},
        "code_block": {"group": "block", "marks": "", "attrs": {"language": None}},
        "horizontal_rule": {"group": "block", "leaf": True, "marks": ""},
        "image": {"group": "inline", "leaf": True, "attrs": {"src": None, "alt": None, "title": None}},
        "hard_break": {"group": "inline", "leaf": True},
        "text": {"group": "inline"},
    },
    "marks": {
        "link": {"attrs": {"href": None, "target": "_blank", "title": None}, "inclusive": False},
        "bold": {},
        "italic": {},
        "strike": {},
        "code": {"excludes": ALL_MARKS},
    },
}

DEFAULT_SCHEMA = Schema.from_dict(DEFAULT_SCHEMA_SPEC)


def load_schema(path: Path) -> Schema:
    """Load a schema definition from a YAML file."""
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            spec = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise SchemaError(f"Schema file {path} is not valid YAML: {exc}") from exc
    if not isinstance(spec, dict):
        raise SchemaError(f"Schema file {path} must contain a mapping")
    return Schema.from_dict(spec)
