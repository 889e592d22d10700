"""Index handle — Per-index document operations.

Handles carry no state beyond their name and the connection they are bound
to, so they can be discarded and recreated at any time.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from elastore.config.settings import DebugSettings
from elastore.core.hydration import EMPTY_RESPONSE, hydrate_hit, hydrate_list
from elastore.core.query import build_bulk, build_count_body, build_find, extract_flags
from elastore.models.result import FindResult, ResultSet
from elastore.store.base.exceptions import (
    BulkCreateError,
    CountError,
    CreateError,
    DestroyError,
    FindAllError,
    FindError,
    MappingError,
    UpdateError,
    ValidationError,
    is_index_not_found,
    is_not_found,
)


class IndexHandle:
    """CRUD gateway for a single index.

    Args:
        name: Index name (lowercased).
        client: The live ``AsyncOpenSearch`` connection.
        logger: Store-namespaced logger.
        debug: Trace switches per operation family.
        doc_types: Forward the document type to the engine.
    """

    def __init__(
        self,
        name: str,
        client: Any,
        logger: logging.Logger | None = None,
        debug: DebugSettings | None = None,
        doc_types: bool = False,
    ) -> None:
        self.name = name.lower()
        self._client = client
        self._logger = logger or logging.getLogger(__name__)
        self._debug = debug or DebugSettings()
        self._doc_types = doc_types

    def __repr__(self) -> str:
        return f"IndexHandle({self.name!r})"

    # ── Schema ───────────────────────────────────────────────────────────

    async def put_mapping(self, doc_type: str, fields: Mapping[str, Any] | None = None) -> Any:
        """Save the field mapping of ``doc_type``.

        Raises:
            ValidationError: If ``doc_type`` is not a string.
            MappingError: If the engine rejects the mapping.
        """
        self._check_type(doc_type, "putMapping", "ES.MAPPING")
        payload = {
            "index": self.name,
            "type": doc_type,
            "body": {"properties": dict(fields) if isinstance(fields, Mapping) else {}},
        }
        self._trace("create", "PutMapping %s.%s %s", self.name, doc_type, payload["body"])
        try:
            response = await self._client.indices.put_mapping(**self._request(payload))
        except Exception as e:
            self._fail(e, "could not create mapping for %s", doc_type)
            raise MappingError("Could not save index mapping", cause=e) from e
        self._logger.debug("Updated mapping for index %s type %s", self.name, doc_type)
        return response

    # ── Create ───────────────────────────────────────────────────────────

    async def create(
        self,
        doc_type: str,
        data: Mapping[str, Any] | None = None,
        opts: Mapping[str, Any] | None = None,
    ) -> Any:
        """Index one document. ``data["id"]``, when set, becomes the document id.

        Raises:
            ValidationError: If ``doc_type`` is not a string.
            CreateError: If the engine rejects the document.
        """
        self._check_type(doc_type, "create", "ES.CREATE")
        if not isinstance(data, Mapping):
            data = {}
        payload: dict[str, Any] = {"index": self.name, "type": doc_type, "body": data}
        if opts:
            payload.update(opts)
        if "id" in data:
            payload["id"] = data["id"]
        self._trace("create", "Create %s.%s %s", self.name, doc_type, data)
        try:
            return await self._client.index(**self._request(payload))
        except Exception as e:
            self._fail(e, "could not create type %s", doc_type)
            raise CreateError("Could not store entry.", cause=e) from e

    async def create_bulk(
        self,
        doc_type: str,
        items: Mapping[str, Any] | list[Mapping[str, Any]],
        opts: Mapping[str, Any] | None = None,
    ) -> Any:
        """Index many documents in a single bulk request.

        Raises:
            ValidationError: If ``doc_type`` is not a string.
            BulkCreateError: If the bulk request fails.
        """
        self._check_type(doc_type, "createBulk", "ES.CREATE_BULK")
        operations = build_bulk(self.name, doc_type, items)
        if not self._doc_types:
            for action in operations[::2]:
                action["index"].pop("_type", None)
        payload: dict[str, Any] = dict(opts or {})
        payload["body"] = operations
        self._trace("create", "CreateBulk %s.%s %d items", self.name, doc_type, len(operations) // 2)
        try:
            return await self._client.bulk(**payload)
        except Exception as e:
            self._fail(e, "could not bulk create type %s", doc_type)
            raise BulkCreateError("Could not store entries.", cause=e) from e

    # ── Read ─────────────────────────────────────────────────────────────

    async def find_raw(self, doc_type: str, body: Any, meta: Mapping[str, Any] | None = None) -> Any:
        """Search with a caller-built body.

        Returns:
            The ``hits`` section of the response, or the response itself
            when it has none.
        """
        self._check_type(doc_type, "findRaw", "ES.FIND")
        payload = dict(meta or {})
        payload.update(index=self.name, type=doc_type, body=body)
        self._trace("read", "FindRaw %s.%s %s", self.name, doc_type, body)
        try:
            response = await self._client.search(**self._request(payload))
        except Exception as e:
            self._fail(e, "could not findRaw type %s", doc_type)
            raise FindError("Could not query store for entry", status_code=400, cause=e) from e
        hits = response.get("hits") if isinstance(response, Mapping) else None
        return hits if isinstance(hits, Mapping) else response

    async def find(self, doc_type: str, query: Any = None, raw: bool = False) -> FindResult:
        """Find the first document matching ``query``.

        ``query`` may set ``source=True`` to return only ``_source`` and
        ``id=True`` to copy ``_id`` into the document.

        Raises:
            ValidationError: If ``doc_type`` is not a string.
            FindError: If the search fails for a reason other than a missing index.
        """
        self._check_type(doc_type, "find", "ES.FIND")
        query, only_source, include_id = extract_flags(query)
        payload = build_find(self.name, doc_type, query, raw)
        body = payload.get("body")
        payload["body"] = {**body, "size": 1} if isinstance(body, Mapping) else {"size": 1}
        self._trace("read", "Find %s.%s %s", self.name, doc_type, payload["body"])
        try:
            response = await self._client.search(**self._request(payload))
        except Exception as e:
            if is_index_not_found(e):
                return FindResult(result=None, meta=dict(EMPTY_RESPONSE["hits"]))
            self._fail(e, "could not find type %s", doc_type)
            raise FindError("Could not query store for entry", cause=e) from e

        hits = response.get("hits") or {}
        first = next(iter(hits.get("hits") or []), None)
        result = None
        if first is not None:
            result = hydrate_hit(first, only_source=only_source, include_id=include_id)
        return FindResult(result=result, meta=dict(hits))

    async def find_all(self, doc_type: str, query: Any = None, raw: bool = False) -> ResultSet:
        """Find every document matching ``query``, with pagination metadata.

        A missing index yields an empty result set.

        Raises:
            ValidationError: If ``doc_type`` is not a string.
            FindAllError: If the search fails for a reason other than a missing index.
        """
        self._check_type(doc_type, "findAll", "ES.FIND_ALL")
        query, only_source, include_id = extract_flags(query)
        payload = build_find(self.name, doc_type, query, raw)
        self._trace("read", "FindAll %s.%s %s", self.name, doc_type, payload.get("body"))
        try:
            response = await self._client.search(**self._request(payload))
        except Exception as e:
            if is_index_not_found(e):
                return hydrate_list(EMPTY_RESPONSE, payload=payload)
            self._fail(e, "could not findAll type %s", doc_type)
            raise FindAllError("Could not query store for entries", cause=e) from e
        return hydrate_list(response, only_source=only_source, include_id=include_id, payload=payload)

    async def count_raw(self, doc_type: str, body: Any, meta: Mapping[str, Any] | None = None) -> int:
        """Count with a caller-built body."""
        self._check_type(doc_type, "countRaw", "ES.COUNT")
        payload = dict(meta or {})
        payload.update(index=self.name, type=doc_type, body=body)
        self._trace("read", "CountRaw %s.%s %s", self.name, doc_type, body)
        try:
            response = await self._client.count(**self._request(payload))
        except Exception as e:
            self._fail(e, "could not countRaw type %s", doc_type)
            raise CountError("Could not query store for entry count", status_code=400, cause=e) from e
        return response.get("count", 0) or 0

    async def count(self, doc_type: str, query: Any = None, raw: bool = False) -> int:
        """Count documents matching ``query``. A missing index counts as 0.

        With ``raw`` the caller's request keys (``routing``, ...) are kept and
        only the body is reduced to its ``query``.

        Raises:
            ValidationError: If ``doc_type`` is not a string.
            CountError: If the count fails for a reason other than a missing index.
        """
        self._check_type(doc_type, "count", "ES.COUNT")
        query, _, _ = extract_flags(query)
        payload = build_find(self.name, doc_type, query, raw)
        request = {**payload, "body": build_count_body(payload)}
        self._trace("read", "Count %s.%s %s", self.name, doc_type, request["body"])
        try:
            response = await self._client.count(**self._request(request))
        except Exception as e:
            if is_index_not_found(e):
                return 0
            self._fail(e, "could not count type %s", doc_type)
            raise CountError("Could not count store entries", cause=e) from e
        return response.get("count", 0) or 0

    # ── Update / delete ──────────────────────────────────────────────────

    async def update(
        self,
        doc_type: str | Mapping[str, Any],
        doc_id: Any = None,
        data: Any = None,
        opts: Mapping[str, Any] | None = None,
    ) -> Any:
        """Partially update one document.

        Called either as ``update(type, id, data, opts)`` or as
        ``update(document, data, opts)`` where ``document`` carries
        ``_type`` and ``_id``/``id``. Without ``data`` the document's own
        non-underscore fields are written. ``data`` holding ``script`` or
        ``upsert`` is sent as the request body; anything else as ``doc``.

        Raises:
            ValidationError: On a non-string type or a non-string/number id.
            UpdateError: If the engine rejects the update.
        """
        if isinstance(doc_type, Mapping) and doc_type.get("_type"):
            document = doc_type
            data, opts = doc_id, data
            doc_type, doc_id = document["_type"], _document_id(document)
            if data is None:
                data = {k: v for k, v in document.items() if not str(k).startswith("_")}
        elif isinstance(doc_id, Mapping):
            doc_id = _document_id(doc_id)
        self._check_type(doc_type, "update", "ES.UPDATE")
        self._check_id(doc_id, "update", "ES.UPDATE")

        if not isinstance(data, Mapping):
            data = {}
        if "script" in data or "upsert" in data:
            body = dict(data)
        else:
            body = {"doc": dict(data)}
        payload: dict[str, Any] = {"index": self.name, "type": doc_type, "id": doc_id, "body": body}
        if isinstance(opts, Mapping):
            payload.update(opts)
        self._trace("update", "Update %s.%s %s %s", self.name, doc_type, doc_id, body)
        try:
            return await self._client.update(**self._request(payload))
        except Exception as e:
            self._fail(e, "could not update type %s id %s", doc_type, doc_id)
            raise UpdateError("Could not persist updates", cause=e) from e

    async def destroy(
        self,
        doc_type: str | Mapping[str, Any],
        doc_id: Any = None,
        opts: Mapping[str, Any] | None = None,
    ) -> Any:
        """Delete one document. Deleting a missing document succeeds.

        Accepts ``destroy(type, id, opts)`` or ``destroy(document, opts)``.

        Raises:
            ValidationError: On a non-string type or a non-string/number id.
            DestroyError: If the engine fails with anything but a 404.
        """
        if isinstance(doc_type, Mapping) and doc_type.get("_type"):
            document = doc_type
            if opts is None:
                opts = doc_id
            doc_type, doc_id = document["_type"], _document_id(document)
        elif isinstance(doc_id, Mapping):
            doc_id = _document_id(doc_id)
        self._check_type(doc_type, "destroy", "ES.DESTROY")
        self._check_id(doc_id, "destroy", "ES.DESTROY")

        payload: dict[str, Any] = {"index": self.name, "type": doc_type, "id": doc_id}
        if isinstance(opts, Mapping):
            payload.update(opts)
        self._trace("delete", "Destroy %s.%s %s", self.name, doc_type, doc_id)
        try:
            return await self._client.delete(**self._request(payload))
        except Exception as e:
            if is_not_found(e):
                self._trace("delete", "Destroy %s.%s %s: already absent", self.name, doc_type, doc_id)
                return None
            self._fail(e, "could not destroy type %s", doc_type)
            raise DestroyError("Could not delete entries", cause=e) from e

    # ── Helpers ──────────────────────────────────────────────────────────

    def _request(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Client keyword arguments for a payload."""
        kwargs = dict(payload)
        doc_type = kwargs.pop("type", None)
        if self._doc_types and doc_type is not None:
            kwargs["doc_type"] = doc_type
        return kwargs

    def _check_type(self, doc_type: Any, operation: str, code: str) -> None:
        if not isinstance(doc_type, str):
            self._logger.error("Index %s.%s(): type must be string", self.name, operation)
            raise ValidationError("Invalid document type", code=code)

    def _check_id(self, doc_id: Any, operation: str, code: str) -> None:
        if isinstance(doc_id, bool) or not isinstance(doc_id, (str, int, float)):
            self._logger.error("Index %s.%s(): id must be string or number", self.name, operation)
            raise ValidationError("Invalid document id", code=code)

    def _fail(self, error: Exception, message: str, *args: Any) -> None:
        self._logger.warning("Index %s " + message, self.name, *args)
        self._logger.debug("Engine error for index %s", self.name, exc_info=error)

    def _trace(self, family: str, message: str, *args: Any) -> None:
        if getattr(self._debug, family, False):
            self._logger.debug(message, *args)


def _document_id(document: Mapping[str, Any]) -> Any:
    doc_id = document.get("_id")
    return doc_id if doc_id is not None else document.get("id")
