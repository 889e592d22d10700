"""Elastic store — Wires the connection, the index registry and index admin.

Usage::

    store = ElasticStore()
    store.init({"clients": ["https://search.internal:9200"], "username": "app", "password": "..."})
    await store.run()

    users = store.get_index("Users")
    await users.create("user", {"id": "u1", "name": "Ada"})
    page = await users.find_all("user", {"where": {"match": {"name": "ada"}}, "limit": 10})

    await store.shutdown()
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from elastore.config.settings import Settings, StoreSettings
from elastore.models.result import StoreHealth
from elastore.observability.logging import get_store_logger, setup_logging
from elastore.store.base.exceptions import (
    ConnectivityError,
    CreateIndexError,
    DeleteIndexError,
    ExistsIndexError,
    ListIndexesError,
    is_index_already_exists,
)
from elastore.store.base.store import Store
from elastore.store.elastic.connection import ConnectionManager
from elastore.store.elastic.index import IndexHandle
from elastore.store.elastic.registry import IndexRegistry

_NESTED_SECTIONS = ("options", "debug")


class ElasticStore(Store):
    """Store backed by an Elasticsearch-compatible engine (OpenSearch v1+).

    Args:
        settings: Initial settings; ``init()`` merges configuration over them.
        client: Pre-built engine client, used instead of constructing one.
    """

    def __init__(self, settings: StoreSettings | None = None, client: Any = None) -> None:
        self._settings = settings or StoreSettings()
        self._injected_client = client
        self._connection: ConnectionManager | None = None
        self._registry: IndexRegistry | None = None
        self._logger = get_store_logger(self._settings.logger)

    @classmethod
    def from_settings(cls, settings: Settings | None = None, client: Any = None) -> ElasticStore:
        """Build a store from root settings, configuring logging on the way."""
        settings = settings or Settings()
        setup_logging(settings.observability)
        return cls(settings.store, client=client)

    @property
    def name(self) -> str:
        return "elastic"

    @property
    def settings(self) -> StoreSettings:
        return self._settings

    @property
    def client(self) -> Any:
        """The raw ``AsyncOpenSearch`` client, or None before ``run()``."""
        if self._connection is None or not self._connection.ready:
            self._logger.error("ES Client is not ready yet.")
            return None
        return self._connection.get_connection()

    @property
    def registry(self) -> IndexRegistry | None:
        return self._registry

    # ── Lifecycle ────────────────────────────────────────────────────────

    def init(self, config: StoreSettings | Mapping[str, Any] | None = None) -> None:
        """Merge ``config`` over the current settings."""
        if isinstance(config, StoreSettings):
            self._settings = config
        elif config:
            merged = self._settings.model_dump()
            for key, value in config.items():
                if key in _NESTED_SECTIONS and isinstance(value, Mapping) and isinstance(merged.get(key), dict):
                    merged[key] = {**merged[key], **value}
                else:
                    merged[key] = value
            self._settings = StoreSettings.model_validate(merged)
        self._logger = get_store_logger(self._settings.logger)

    async def run(self) -> None:
        """Connect, probe readiness and start the index handle sweep.

        A store that is already running is shut down first, so a failed
        re-run leaves it stopped.

        Raises:
            ConnectivityError: If the cluster does not answer the ping.
        """
        await self.shutdown()

        connection = ConnectionManager(self._settings, client=self._injected_client)
        try:
            await connection.start()
        except ConnectivityError:
            self._logger.error("Failed to connect to Elastic Store", exc_info=True)
            raise
        self._connection = connection
        self._logger.debug("Connected to Elastic Store.")

        self._registry = IndexRegistry(self._make_handle, ttl=self._settings.index_cache_ttl)
        self._registry.start()

    async def shutdown(self) -> None:
        """Stop the sweep and close the connection."""
        if self._registry is not None:
            await self._registry.stop()
            self._registry = None
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    # ── Indexes ──────────────────────────────────────────────────────────

    def get_index(self, name: Any) -> IndexHandle | None:
        """Return the cached handle for ``name`` (None for an empty/non-string name).

        Raises:
            ConnectivityError: If the store is not running.
        """
        if self._registry is None:
            raise ConnectivityError("Elastic Store is not running")
        return self._registry.get(name)

    async def create_index(self, name: str, body: Mapping[str, Any] | None = None) -> IndexHandle | None:
        """Create an index. An already existing index is not an error.

        Returns:
            The handle of the index.
        """
        client = self._require_client()
        params: dict[str, Any] = {"index": name.lower()}
        if isinstance(body, Mapping) and body:
            params["body"] = dict(body)
        try:
            await client.indices.create(**params)
        except Exception as e:
            if not is_index_already_exists(e):
                self._fail(e, "Could not create index %s", name)
                raise CreateIndexError("Could not create index", cause=e) from e
        self._logger.debug("Created index %s", name)
        return self.get_index(name)

    async def delete_index(self, name: str | IndexHandle) -> Any:
        """Delete an index by name or handle."""
        client = self._require_client()
        index = name.name if isinstance(name, IndexHandle) else name.lower()
        try:
            return await client.indices.delete(index=index)
        except Exception as e:
            self._fail(e, "Could not delete index %s", index)
            raise DeleteIndexError("Could not delete index", cause=e) from e

    async def exists_index(self, name: str, **params: Any) -> bool:
        """Check whether an index exists."""
        client = self._require_client()
        try:
            return bool(await client.indices.exists(index=name.lower(), **params))
        except Exception as e:
            self._fail(e, "Could not check if index %s exists", name)
            raise ExistsIndexError("Could not check if index exists", cause=e) from e

    async def list_indexes(self, raw_names: bool = False, **params: Any) -> list[Any]:
        """List every index as handles, or as names with ``raw_names=True``."""
        client = self._require_client()
        params.setdefault("format", "json")
        try:
            rows = await client.cat.indices(**params)
        except Exception as e:
            self._fail(e, "Could not read store indexes")
            raise ListIndexesError("Could not read store indexes", cause=e) from e

        names = [name for name in _index_names(rows) if name]
        if raw_names:
            return names
        return [self.get_index(name) for name in names]

    # ── Health ───────────────────────────────────────────────────────────

    async def health_check(self) -> StoreHealth:
        """Check cluster health."""
        if self._connection is None:
            return StoreHealth(status="unhealthy", message="Client not initialized")
        return await self._connection.health()

    # ── Helpers ──────────────────────────────────────────────────────────

    def _make_handle(self, name: str) -> IndexHandle:
        return IndexHandle(
            name,
            self._connection.get_connection() if self._connection else None,
            logger=self._logger,
            debug=self._settings.debug,
            doc_types=self._settings.doc_types,
        )

    def _fail(self, error: Exception, message: str, *args: Any) -> None:
        self._logger.warning(message, *args)
        self._logger.debug("Engine error", exc_info=error)

    def _require_client(self) -> Any:
        client = self.client
        if client is None:
            raise ConnectivityError("Elastic Store is not running")
        return client


def _index_names(rows: Any) -> list[str]:
    """Index names from a ``cat.indices`` response in JSON or text format."""
    if not rows:
        return []
    if isinstance(rows, str):
        names = []
        for line in rows.splitlines():
            columns = line.split()
            if len(columns) > 2:
                names.append(columns[2])
        return names
    return [row.get("index") for row in rows if isinstance(row, Mapping)]
