"""Base store — Abstract interface for document-search stores.

A store is instantiated inside a host application and driven through two
lifecycle hooks:
  1. ``init(config)``: merge configuration, no I/O
  2. ``run()``: connect and become usable

Once running, it exposes the raw client and index-level operations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from elastore.models.result import StoreHealth


class Store(ABC):
    """Abstract base class for stores.

    All stores must implement:
      - name: Store type identifier
      - init(): Accept configuration
      - run(): Connect and probe readiness
      - shutdown(): Release connections and background work
      - client: The raw engine connection
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Store type name (e.g., 'elastic')."""

    @abstractmethod
    def init(self, config: Mapping[str, Any] | None = None) -> None:
        """Merge ``config`` over the store defaults. Performs no I/O."""

    @abstractmethod
    async def run(self) -> None:
        """Connect to the backend.

        Raises:
            ConnectivityError: If the backend cannot be reached.
        """

    @abstractmethod
    async def shutdown(self) -> None:
        """Stop background work and close connections."""

    @property
    @abstractmethod
    def client(self) -> Any:
        """The raw connection, or None while the store is not running."""

    @abstractmethod
    async def health_check(self) -> StoreHealth:
        """Report backend health."""
