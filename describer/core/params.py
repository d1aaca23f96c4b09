"""
Bracket-notation query parameters.

Listing endpoints accept ``q[title_cont]=mona&q[scope][]=represented&page[number]=2``.
``parse_nested_params`` turns a multi-dict of such keys into nested dicts;
``encode_nested_params`` is its inverse and is used to render pagination links.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import urlencode

_KEY_PART = re.compile(r"\[([^\]]*)\]")


def _split_key(key: str) -> list[str]:
    head, _, rest = key.partition("[")
    if not rest:
        return [head]
    return [head, *_KEY_PART.findall("[" + rest)]


def parse_nested_params(items: Iterable[tuple[str, str]]) -> dict[str, Any]:
    """
    Build nested dicts from ``key[sub][]=value`` pairs.

    A trailing ``[]`` collects values into a list; a repeated plain key keeps
    its last value.
    """
    result: dict[str, Any] = {}
    for key, value in items:
        parts = _split_key(key)
        is_list = len(parts) > 1 and parts[-1] == ""
        if is_list:
            parts = parts[:-1]

        node = result
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = node[part] = {}
            node = child

        leaf = parts[-1]
        if is_list:
            existing = node.get(leaf)
            if not isinstance(existing, list):
                existing = node[leaf] = []
            existing.append(value)
        else:
            node[leaf] = value
    return result


def _flatten(prefix: str, value: Any) -> list[tuple[str, str]]:
    if isinstance(value, Mapping):
        pairs: list[tuple[str, str]] = []
        for key, child in value.items():
            pairs.extend(_flatten(f"{prefix}[{key}]" if prefix else str(key), child))
        return pairs
    if isinstance(value, (list, tuple)):
        return [(f"{prefix}[]", _scalar(item)) for item in value]
    return [(prefix, _scalar(value))]


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode_nested_params(params: Mapping[str, Any]) -> str:
    """Render nested params back into a bracket-notation query string."""
    return urlencode(_flatten("", params))
