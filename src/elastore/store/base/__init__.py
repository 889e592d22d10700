"""Base store interface and exception hierarchy."""

from elastore.store.base.exceptions import (
    BulkCreateError,
    ConfigurationError,
    ConnectivityError,
    CountError,
    CreateError,
    CreateIndexError,
    DeleteIndexError,
    DestroyError,
    ExistsIndexError,
    FindAllError,
    FindError,
    ListIndexesError,
    MappingError,
    OperationError,
    StoreError,
    UpdateError,
    ValidationError,
)
from elastore.store.base.store import Store

__all__ = [
    "BulkCreateError",
    "ConfigurationError",
    "ConnectivityError",
    "CountError",
    "CreateError",
    "CreateIndexError",
    "DeleteIndexError",
    "DestroyError",
    "ExistsIndexError",
    "FindAllError",
    "FindError",
    "ListIndexesError",
    "MappingError",
    "OperationError",
    "Store",
    "StoreError",
    "UpdateError",
    "ValidationError",
]
