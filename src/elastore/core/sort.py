"""Sort builder — Translates a query's ``order`` value into engine sort clauses."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def build_sort(spec: Any) -> list[Any]:
    """Build the ``sort`` array for a search body.

    Accepted shapes:
      - ``"name"`` → ``["name"]``
      - ``["name", "asc", "age", "desc"]`` → one clause per (field, direction) pair
      - a list of clause mappings, passed through unchanged
      - any nesting of the above, flattened in order

    Pair clauses carry ``unmapped_type`` so multi-index sorts do not fail on
    indices that lack the field.
    """
    result: list[Any] = []
    _append_sort(result, spec)
    return result


def _append_sort(result: list[Any], spec: Any) -> None:
    if isinstance(spec, str):
        result.append(spec)
        return
    if not isinstance(spec, (list, tuple)) or not spec:
        return

    if isinstance(spec[0], str):
        for i in range(0, len(spec) - 1, 2):
            field, direction = spec[i], spec[i + 1]
            result.append({field: {"order": str(direction).lower(), "unmapped_type": True}})
        if len(spec) % 2:
            # trailing field without a direction sorts by the engine default
            result.append(spec[-1])
        return

    for item in spec:
        if isinstance(item, (list, tuple)):
            _append_sort(result, item)
        elif isinstance(item, Mapping):
            result.append(item)
