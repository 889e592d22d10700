"""Query builder — Compiles ORM-style query specs into search request payloads.

A query spec is a mapping with the keys ``where``, ``limit``, ``offset``,
``order``, ``attributes`` and ``raw``; any other key is copied into the
request body as-is. The result is a payload of the form::

    {"index": "users", "type": "user", "body": {"query": {...}, "size": 10, ...}}

``body.query`` is left out entirely when nothing constrains the search,
which the engine reads as "match all".
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from elastore.core.sort import build_sort
from elastore.store.base.exceptions import ValidationError

MATCH = "match"
RANGE = "range"
TERM_KEYS = ("terms", "term")


def build_find(index: str, doc_type: str, spec: Any = None, raw: bool = False) -> dict[str, Any]:
    """Build a search payload for ``index``/``doc_type`` from a query spec.

    Args:
        index: Target index name.
        doc_type: Document type.
        spec: Query spec mapping, or a scalar document id.
        raw: Treat ``spec`` as a complete engine payload and only inject
            ``index`` and ``type``.

    Returns:
        The request payload.

    Raises:
        ValidationError: If ``raw`` is set and ``spec`` is not a mapping.
    """
    if raw:
        if not isinstance(spec, Mapping):
            raise ValidationError("Raw query must be a mapping", code="ES.QUERY")
        payload = dict(spec)
        payload["index"] = index
        payload["type"] = doc_type
        return payload

    body: dict[str, Any] = {"query": {}}
    payload: dict[str, Any] = {"index": index, "type": doc_type, "body": body}

    if not isinstance(spec, Mapping):
        if isinstance(spec, (str, int, float)) and not isinstance(spec, bool):
            body["query"]["ids"] = {"values": [spec]}
        else:
            del body["query"]
        return payload

    for key, value in spec.items():
        if key == "where":
            if value is None or (isinstance(value, Mapping) and not value):
                continue
            body["query"] = build_where(value)
        elif key == "limit":
            body["size"] = value
        elif key == "offset":
            body["from"] = value
        elif key == "order":
            body["sort"] = build_sort(value)
        elif key == "attributes":
            body["fields"] = value
        elif key == "raw":
            if isinstance(value, Mapping):
                body.update(value)
        else:
            body[key] = value

    if body.get("query") == {}:
        del body["query"]
    return payload


def build_where(where: Any) -> dict[str, Any]:
    """Compile a ``where`` mapping into a query clause.

    When two or more of the match, term(s) and range families appear
    together they are combined under ``bool.must``; term(s) clauses are
    split into one must-clause per field. Otherwise the single clause is
    used directly, and a mapping without any of them is a literal match.
    """
    if not isinstance(where, Mapping):
        return {MATCH: where}

    families = sum((MATCH in where, any(k in where for k in TERM_KEYS), RANGE in where))
    if families >= 2:
        must: list[dict[str, Any]] = []
        for key, value in where.items():
            if key in TERM_KEYS and isinstance(value, Mapping):
                must.extend({key: {field: field_value}} for field, field_value in value.items())
            else:
                must.append({key: value})
        return {"bool": {"must": must}}

    if RANGE in where:
        return {RANGE: where[RANGE]}
    for key in TERM_KEYS:
        if key in where:
            return {key: where[key]}
    if MATCH in where:
        return {MATCH: where[MATCH]}
    return {MATCH: dict(where)}


def build_count_body(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Reduce a search payload's body to what the count API accepts."""
    body = payload.get("body") or {}
    if isinstance(body, Mapping) and "query" in body:
        return {"query": body["query"]}
    return {}


def build_bulk(index: str, doc_type: str, items: Any) -> list[dict[str, Any]]:
    """Build the alternating action/document sequence of a bulk index request."""
    if not isinstance(items, (list, tuple)):
        items = [items]
    operations: list[dict[str, Any]] = []
    for item in items:
        operations.append({"index": {"_index": index, "_type": doc_type}})
        operations.append(item)
    return operations


def extract_flags(spec: Any) -> tuple[Any, bool, bool]:
    """Split the ``source``/``id`` pseudo-flags off a query spec.

    Returns:
        ``(spec_copy, only_source, include_id)``. The caller's spec is not
        modified; flags are only recognised when set to ``True``.
    """
    if spec is None:
        return {}, False, False
    if not isinstance(spec, Mapping):
        return spec, False, False
    spec = dict(spec)
    only_source = spec.get("source") is True
    include_id = spec.get("id") is True
    if only_source:
        del spec["source"]
    if include_id:
        del spec["id"]
    return spec, only_source, include_id
