"""Integration test fixtures — Docker-based OpenSearch with mock data.

Expects a single-node cluster with security disabled:
    docker run -p 9201:9200 -e discovery.type=single-node \
        -e DISABLE_SECURITY_PLUGIN=true opensearchproject/opensearch:2

The test index is recreated and seeded once per session.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any

import httpx
import pytest

OPENSEARCH_HOST = "http://localhost:9201"
TEST_INDEX = "elastore-test-users"

MOCK_DOCUMENTS: list[dict[str, Any]] = [
    {"id": "u1", "name": "Ada Lovelace", "age": 36, "tags": ["math", "computing"], "active": True},
    {"id": "u2", "name": "Grace Hopper", "age": 85, "tags": ["computing", "navy"], "active": True},
    {"id": "u3", "name": "Alan Turing", "age": 41, "tags": ["math", "cryptography"], "active": False},
    {"id": "u4", "name": "Edsger Dijkstra", "age": 72, "tags": ["computing"], "active": True},
    {"id": "u5", "name": "Barbara Liskov", "age": 84, "tags": ["computing", "languages"], "active": True},
]


def _wait_for_service(url: str, timeout: float = 60.0) -> bool:
    """Block until *url* returns HTTP 200, or timeout."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            r = httpx.get(url, timeout=5)
            if r.status_code == 200:
                return True
        except httpx.HTTPError:
            pass
        time.sleep(2)
    return False


async def _seed_opensearch(host: str = OPENSEARCH_HOST, index: str = TEST_INDEX) -> None:
    async with httpx.AsyncClient(base_url=host, timeout=30) as client:
        await client.delete(f"/{index}", params={"ignore_unavailable": "true"})

        mapping = {
            "mappings": {
                "properties": {
                    "name": {"type": "text", "fields": {"keyword": {"type": "keyword"}}},
                    "age": {"type": "integer"},
                    "tags": {"type": "keyword"},
                    "active": {"type": "boolean"},
                }
            }
        }
        resp = await client.put(f"/{index}", json=mapping)
        resp.raise_for_status()

        for doc in MOCK_DOCUMENTS:
            resp = await client.put(f"/{index}/_doc/{doc['id']}", json=doc)
            resp.raise_for_status()

        await client.post(f"/{index}/_refresh")


@pytest.fixture(scope="session")
def opensearch_ready() -> str:
    """Ensure OpenSearch is running and seeded."""
    if not _wait_for_service(OPENSEARCH_HOST, timeout=10):
        pytest.skip(f"OpenSearch not available at {OPENSEARCH_HOST}")
    asyncio.run(_seed_opensearch())
    return OPENSEARCH_HOST


@pytest.fixture
def test_index() -> str:
    return TEST_INDEX
