"""
Filter specification → SQLAlchemy query.

A ``SearchDefinition`` declares, per model, which attributes may be
filtered or sorted and which named scopes exist. ``build_search`` reads a
filter specification key by key:

- a scope name applies that scope (``represented: true``);
- ``s`` sorts (``"title asc"`` or a list of them);
- anything else must be ``<attribute>[_or_<attribute>...]_<predicate>``,
  e.g. ``title_cont``, ``title_or_identifier_i_cont``, ``priority_flag_true``.

Keys that match none of these raise ``InvalidFilterField``. Blank values
are ignored once the key itself has been validated. The base query is
never modified; every step returns a new ``Select``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import Boolean, DateTime, Enum, Integer, Select, String, Uuid, and_, or_
from sqlalchemy.orm import InstrumentedAttribute
from sqlalchemy.sql.elements import ColumnElement

from describer.core.exceptions import InvalidFilterField
from describer.services.filter_params import FilterSpec

logger = logging.getLogger(__name__)

SORT_KEY = "s"

_TRUE_VALUES = {"1", "t", "true", "y", "yes", "on"}
_FALSE_VALUES = {"0", "f", "false", "n", "no", "off"}


@dataclass(frozen=True)
class SearchAttribute:
    """
    A filterable column, optionally reached through a relationship.

    Attributes reached ``through`` a relationship are matched with an EXISTS
    subquery (``relationship.any(...)``) and cannot be sorted on.
    """

    column: InstrumentedAttribute
    through: InstrumentedAttribute | None = None

    @property
    def sortable(self) -> bool:
        return self.through is None

    def clause(self, build: Callable[[Any], ColumnElement[bool]]) -> ColumnElement[bool]:
        condition = build(self.column)
        if self.through is not None:
            return self.through.any(condition)
        return condition


@dataclass(frozen=True)
class SearchScope:
    """A named, opaque query transform; ``takes_argument`` scopes receive the value."""

    apply: Callable[..., Select]
    takes_argument: bool = False


@dataclass(frozen=True)
class SearchDefinition:
    attributes: Mapping[str, SearchAttribute]
    scopes: Mapping[str, SearchScope] = field(default_factory=dict)


@dataclass(frozen=True)
class Search:
    """The result of applying a filter specification to a base query."""

    query: Select
    conditions: tuple[str, ...]
    sorts: tuple[str, ...]

    def result(self) -> Select:
        return self.query


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def _text(value: Any) -> str:
    return str(value)


def _any_of(op: str) -> Callable[[Any, Any], ColumnElement[bool]]:
    return lambda col, terms: or_(*(getattr(col, op)(t, autoescape=True) for t in terms))


def _all_of(op: str) -> Callable[[Any, Any], ColumnElement[bool]]:
    return lambda col, terms: and_(*(getattr(col, op)(t, autoescape=True) for t in terms))


# value handling: "cast" → typed scalar, "cast_list" → typed list,
# "text" → string, "terms" → list of strings, "flag" → boolean switch
_PREDICATES: dict[str, tuple[str, Callable[[Any, Any], ColumnElement[bool]]]] = {
    "eq": ("cast", lambda col, v: col == v),
    "not_eq": ("cast", lambda col, v: col != v),
    "lt": ("cast", lambda col, v: col < v),
    "lteq": ("cast", lambda col, v: col <= v),
    "gt": ("cast", lambda col, v: col > v),
    "gteq": ("cast", lambda col, v: col >= v),
    "in": ("cast_list", lambda col, v: col.in_(v)),
    "not_in": ("cast_list", lambda col, v: col.not_in(v)),
    "cont": ("text", lambda col, v: col.contains(v, autoescape=True)),
    "i_cont": ("text", lambda col, v: col.icontains(v, autoescape=True)),
    "start": ("text", lambda col, v: col.startswith(v, autoescape=True)),
    "end": ("text", lambda col, v: col.endswith(v, autoescape=True)),
    "cont_any": ("terms", _any_of("contains")),
    "cont_all": ("terms", _all_of("contains")),
    "i_cont_any": ("terms", _any_of("icontains")),
    "i_cont_all": ("terms", _all_of("icontains")),
    "null": ("flag", lambda col, on: col.is_(None) if on else col.is_not(None)),
    "not_null": ("flag", lambda col, on: col.is_not(None) if on else col.is_(None)),
    "present": (
        "flag",
        lambda col, on: and_(col.is_not(None), col != "") if on else or_(col.is_(None), col == ""),
    ),
    "blank": (
        "flag",
        lambda col, on: or_(col.is_(None), col == "") if on else and_(col.is_not(None), col != ""),
    ),
    "true": ("flag", lambda col, on: col.is_(True) if on else col.is_not(True)),
    "false": ("flag", lambda col, on: col.is_(False) if on else col.is_not(False)),
}

# longest suffix first so "not_eq" wins over "eq" and "i_cont_all" over "cont_all"
_PREDICATE_NAMES = sorted(_PREDICATES, key=len, reverse=True)

# predicates that compare against strings; only valid on text columns
_TEXT_PREDICATES = {
    name for name, (kind, _) in _PREDICATES.items() if kind in ("text", "terms")
} | {"present", "blank"}

# value kinds that take exactly one value
_SCALAR_KINDS = ("cast", "text", "flag")


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"Not a boolean: {value!r}")


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple)):
        return all(is_blank(v) for v in value)
    return False


def _cast(column: InstrumentedAttribute, value: Any) -> Any:
    column_type = column.type
    if isinstance(column_type, Boolean):
        return parse_bool(value)
    if isinstance(column_type, Enum):
        enum_class = column_type.enum_class
        return enum_class(value) if enum_class is not None else str(value)
    if isinstance(column_type, Integer):
        return int(value)
    if isinstance(column_type, DateTime):
        return value if isinstance(value, datetime) else datetime.fromisoformat(str(value))
    if isinstance(column_type, Uuid):
        return value if isinstance(value, UUID) else UUID(str(value))
    return value


def _is_textual(column: InstrumentedAttribute) -> bool:
    return isinstance(column.type, String) and not isinstance(column.type, Enum)


def _split_predicate(key: str) -> tuple[str, str] | None:
    for name in _PREDICATE_NAMES:
        suffix = "_" + name
        if key.endswith(suffix) and len(key) > len(suffix):
            return key[: -len(suffix)], name
    return None


def _resolve_attributes(
    definition: SearchDefinition, key: str, attribute_expr: str
) -> list[SearchAttribute]:
    attributes = []
    for name in attribute_expr.split("_or_"):
        attribute = definition.attributes.get(name)
        if attribute is None:
            raise InvalidFilterField(key)
        attributes.append(attribute)
    return attributes


def _condition(
    definition: SearchDefinition, key: str, value: Any
) -> ColumnElement[bool] | None:
    parsed = _split_predicate(key)
    if parsed is None:
        raise InvalidFilterField(key)
    attribute_expr, predicate = parsed
    attributes = _resolve_attributes(definition, key, attribute_expr)
    if predicate in _TEXT_PREDICATES and not all(_is_textual(a.column) for a in attributes):
        raise InvalidFilterField(key, f"Filter {key} only applies to text attributes")

    if is_blank(value):
        return None

    kind, build = _PREDICATES[predicate]
    if isinstance(value, Mapping) or (kind in _SCALAR_KINDS and isinstance(value, (list, tuple))):
        raise InvalidFilterField(key, f"Filter {key} takes a single value")

    def builder(column: InstrumentedAttribute) -> ColumnElement[bool]:
        try:
            if kind == "cast":
                operand = _cast(column, value)
            elif kind == "cast_list":
                items = value if isinstance(value, (list, tuple)) else [value]
                operand = [_cast(column, item) for item in items if not is_blank(item)]
            elif kind == "text":
                operand = _text(value)
            elif kind == "terms":
                items = value if isinstance(value, (list, tuple)) else [value]
                operand = [_text(item) for item in items if not is_blank(item)]
            else:
                operand = parse_bool(value)
        except (TypeError, ValueError):
            raise InvalidFilterField(key, f"Invalid value {value!r} for filter {key}") from None
        return build(column, operand)

    clauses = [attribute.clause(builder) for attribute in attributes]
    return clauses[0] if len(clauses) == 1 else or_(*clauses)


def _sorts(definition: SearchDefinition, value: Any) -> list[tuple[str, Any]]:
    entries = value if isinstance(value, (list, tuple)) else [value]
    orderings = []
    for entry in entries:
        if is_blank(entry):
            continue
        parts = str(entry).split()
        name = parts[0]
        direction = parts[1].lower() if len(parts) > 1 else "asc"
        attribute = definition.attributes.get(name)
        if attribute is None or not attribute.sortable or direction not in ("asc", "desc"):
            raise InvalidFilterField(SORT_KEY, f"Cannot sort by {entry!r}")
        column = attribute.column
        orderings.append((str(entry), column.desc() if direction == "desc" else column.asc()))
    return orderings


def apply_scope(
    definition: SearchDefinition, query: Select, name: str, value: Any = True
) -> Select:
    """Apply one named scope; a false-ish value leaves the query untouched."""
    scope = definition.scopes.get(name)
    if scope is None:
        raise InvalidFilterField(name, f"Unknown scope: {name}")
    if scope.takes_argument:
        if is_blank(value):
            return query
        try:
            return scope.apply(query, value)
        except ValueError:
            raise InvalidFilterField(name, f"Invalid value {value!r} for scope {name}") from None
    try:
        enabled = parse_bool(value)
    except ValueError:
        raise InvalidFilterField(name, f"Invalid value {value!r} for scope {name}") from None
    return scope.apply(query) if enabled else query


def build_search(definition: SearchDefinition, spec: FilterSpec, base_query: Select) -> Search:
    """Compose ``spec`` onto ``base_query``; raises ``InvalidFilterField`` on unknown keys."""
    query = base_query
    conditions: list[str] = []
    sorts: list[str] = []

    for key, value in spec.items():
        if key == SORT_KEY:
            for label, ordering in _sorts(definition, value):
                query = query.order_by(ordering)
                sorts.append(label)
        elif key in definition.scopes:
            query = apply_scope(definition, query, key, value)
            conditions.append(key)
        else:
            clause = _condition(definition, key, value)
            if clause is not None:
                query = query.where(clause)
                conditions.append(key)

    logger.debug("Built search with conditions=%s sorts=%s", conditions, sorts)
    return Search(query=query, conditions=tuple(conditions), sorts=tuple(sorts))
