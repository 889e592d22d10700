"""Result hydration — Turns raw search hits into application documents.

A hit is hydrated by dropping its transient ``sort`` values, lifting any
selected ``fields`` to the top level and, on request, copying ``_id`` into
an ``id`` key. List responses additionally get pagination metadata derived
from the request's ``size``/``from``.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any

from elastore.models.result import PageMeta, ResultSet

logger = logging.getLogger(__name__)

EMPTY_RESPONSE: dict[str, Any] = {"hits": {"total": 0, "hits": []}}


def hydrate_hit(
    hit: Any,
    only_source: bool = False,
    include_id: bool = False,
) -> dict[str, Any] | None:
    """Hydrate one raw hit.

    Args:
        hit: The raw hit (``_id``, ``_source``, optional ``fields``/``sort``).
        only_source: Return the ``_source`` document alone when the hit has
            one; a hit without a source (or a null one) is hydrated whole.
        include_id: Set ``id`` on the result from the hit's ``_id``.

    Returns:
        The hydrated document, or None if the hit is malformed.
    """
    try:
        item = dict(hit)
        item.pop("sort", None)
        if only_source and item.get("_source") is not None:
            result = dict(item["_source"])
        else:
            fields = item.pop("fields", None)
            if fields:
                for name, value in fields.items():
                    item[name] = value
            result = item
        if include_id:
            result["id"] = item.get("_id")
    except (TypeError, ValueError, AttributeError):
        logger.debug("Skipping malformed hit: %r", hit)
        return None
    return result


def total_hits(hits: Mapping[str, Any]) -> int:
    """Total match count, accepting both ``5`` and ``{"value": 5, ...}``."""
    total = hits.get("total", 0)
    if isinstance(total, Mapping):
        total = total.get("value", 0)
    return int(total or 0)


def hydrate_list(
    response: Mapping[str, Any],
    only_source: bool = False,
    include_id: bool = False,
    payload: Mapping[str, Any] | None = None,
) -> ResultSet:
    """Hydrate a full search response into a ``ResultSet``.

    Malformed hits are skipped. ``page_count`` is set when the request body
    had a non-zero ``size``; ``current_page`` when it also had ``from``.

    Args:
        response: The raw search response.
        only_source: See ``hydrate_hit``.
        include_id: See ``hydrate_hit``.
        payload: The request payload the response answers.
    """
    hits = response.get("hits") or {}
    result: list[dict[str, Any]] = []
    for hit in hits.get("hits") or []:
        item = hydrate_hit(hit, only_source=only_source, include_id=include_id)
        if item is None:
            continue
        result.append(item)

    meta = PageMeta(total_count=total_hits(hits), current_count=len(result))
    body = (payload or {}).get("body") or {}
    size = body.get("size") if isinstance(body, Mapping) else None
    if size:
        meta.page_count = math.ceil(meta.total_count / size)
        offset = body.get("from")
        if offset is not None:
            meta.current_page = offset // size + 1
    return ResultSet(result=result, meta=meta)
