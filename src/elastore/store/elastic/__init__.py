"""Elastic store implementation."""

from elastore.store.elastic.connection import ConnectionManager
from elastore.store.elastic.index import IndexHandle
from elastore.store.elastic.registry import IndexRegistry
from elastore.store.elastic.store import ElasticStore

__all__ = ["ConnectionManager", "ElasticStore", "IndexHandle", "IndexRegistry"]
