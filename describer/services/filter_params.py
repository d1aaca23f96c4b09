"""
Filter parameter normalization.

Turns the free-form ``q`` mapping from a listing request into an immutable
filter specification:

- keys ending in ``_cont_all`` or ``_any`` have their value split into
  terms on whitespace and commas;
- the reserved ``scope`` key (a name or list of names) is removed and each
  named scope becomes its own ``name: True`` entry.

Unknown keys are left in place; the query builder rejects them.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

FilterSpec = Mapping[str, Any]

SCOPE_KEY = "scope"

_MULTI_TERM_KEY = re.compile(r"_(cont_all|any)$")
_TERM_SEPARATOR = re.compile(r"[\s,]+")


def split_terms(value: Any) -> tuple[str, ...]:
    """Split a value (or each item of a list) into non-empty search terms."""
    if value is None:
        return ()
    items = value if isinstance(value, (list, tuple)) else [value]
    terms: list[str] = []
    for item in items:
        terms.extend(term for term in _TERM_SEPARATOR.split(str(item)) if term)
    return tuple(terms)


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({str(k): _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


def _scope_names(value: Any) -> list[str]:
    if value is None:
        return []
    names = value if isinstance(value, (list, tuple)) else [value]
    return [str(name) for name in names if name not in (None, "")]


def normalize_filter_params(raw: Mapping[str, Any] | None) -> FilterSpec:
    """Build a read-only filter specification from raw ``q`` parameters."""
    params: dict[str, Any] = {}
    for key, value in (raw or {}).items():
        key = str(key)
        if _MULTI_TERM_KEY.search(key):
            value = split_terms(value)
        params[key] = _freeze(value)

    for name in _scope_names(params.pop(SCOPE_KEY, None)):
        params[name] = True

    return MappingProxyType(params)


def filter_spec_to_params(spec: FilterSpec) -> dict[str, Any]:
    """Plain dict/list copy of a filter specification, for link rendering."""
    return _thaw(spec)
