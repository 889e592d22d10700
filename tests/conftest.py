"""Shared test fixtures and configuration."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from elastore.config.settings import StoreSettings
from elastore.store.elastic.index import IndexHandle


class EngineError(Exception):
    """Stand-in for a transport error raised by the engine client."""

    def __init__(self, status_code: Any, error: str, info: Any = None) -> None:
        super().__init__(status_code, error, info)
        self.status_code = status_code
        self.error = error
        self.info = info or {}


@pytest.fixture
def engine_error() -> Callable[..., EngineError]:
    """Factory for engine transport errors."""
    return EngineError


def build_mock_client() -> MagicMock:
    """An ``AsyncOpenSearch`` look-alike with every used coroutine mocked."""
    client = MagicMock()
    for method in ("ping", "search", "count", "index", "bulk", "update", "delete", "close"):
        setattr(client, method, AsyncMock())
    client.ping.return_value = True
    client.indices = MagicMock()
    for method in ("put_mapping", "create", "delete", "exists"):
        setattr(client.indices, method, AsyncMock())
    client.cat = MagicMock()
    client.cat.indices = AsyncMock()
    client.cluster = MagicMock()
    client.cluster.health = AsyncMock()
    return client


@pytest.fixture
def client_factory() -> Callable[[], MagicMock]:
    """Builds a fresh mock client per call, for code that constructs its own."""
    return build_mock_client


@pytest.fixture
def mock_client() -> MagicMock:
    return build_mock_client()


@pytest.fixture
def store_settings() -> StoreSettings:
    """Store settings pointing at a local node."""
    return StoreSettings(clients=["http://localhost:9200"], index_cache_ttl=60)


@pytest.fixture
def handle(mock_client: MagicMock) -> IndexHandle:
    return IndexHandle("Users", mock_client)


@pytest.fixture
def sample_hits() -> list[dict[str, Any]]:
    """Two raw hits, one with selected fields and one with sort values."""
    return [
        {
            "_index": "users",
            "_id": "u1",
            "_score": 1.0,
            "_source": {"name": "Ada", "age": 36},
            "fields": {"name.keyword": ["Ada"]},
        },
        {
            "_index": "users",
            "_id": "u2",
            "_score": 0.5,
            "_source": {"name": "Grace", "age": 45},
            "sort": [45],
        },
    ]


@pytest.fixture
def search_response(sample_hits: list[dict[str, Any]]) -> dict[str, Any]:
    return {"took": 3, "hits": {"total": {"value": 2, "relation": "eq"}, "hits": sample_hits}}
