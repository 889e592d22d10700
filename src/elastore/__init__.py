"""elastore — ORM-style query store over Elasticsearch-compatible search engines."""

from elastore.store.elastic import ElasticStore, IndexHandle, IndexRegistry

__version__ = "0.1.0"

__all__ = ["ElasticStore", "IndexHandle", "IndexRegistry", "__version__"]
