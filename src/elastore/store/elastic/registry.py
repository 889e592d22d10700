"""Index registry — Caches index handles by lowercased name.

The whole cache is dropped on a fixed interval. Handles are stateless, so a
sweep only costs the next ``get()`` a reconstruction, and two concurrent
``get()`` calls racing a sweep may briefly build duplicate handles.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from typing import Any

from elastore.store.elastic.index import IndexHandle

logger = logging.getLogger(__name__)

HandleFactory = Callable[[str], IndexHandle]


class IndexRegistry:
    """Lazily creates and caches ``IndexHandle`` instances.

    The periodic sweep has an explicit lifecycle: ``start()`` schedules it
    on the running event loop and ``stop()`` cancels it. ``sweep()`` can be
    called directly to clear the cache deterministically.

    Example:
        >>> registry = IndexRegistry(lambda name: IndexHandle(name, client), ttl=60)
        >>> registry.start()
        >>> registry.get("Users") is registry.get("users")
        True
        >>> await registry.stop()

    Args:
        factory: Builds a handle for a lowercased index name.
        ttl: Seconds between sweeps.
    """

    def __init__(self, factory: HandleFactory, ttl: float = 60.0) -> None:
        self._factory = factory
        self._ttl = ttl
        self._handles: dict[str, IndexHandle] = {}
        self._task: asyncio.Task[Any] | None = None

    def get(self, name: Any) -> IndexHandle | None:
        """Return the handle for ``name``, creating it on first access.

        Returns None for an empty or non-string name.
        """
        if not name or not isinstance(name, str):
            return None
        name = name.lower()
        handle = self._handles.get(name)
        if handle is None:
            handle = self._factory(name)
            self._handles[name] = handle
        return handle

    def sweep(self) -> None:
        """Drop every cached handle."""
        if self._handles:
            logger.debug("Sweeping %d cached index handles", len(self._handles))
        self._handles = {}

    def start(self) -> None:
        """Schedule the periodic sweep on the running event loop."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._sweep_loop())

    async def stop(self) -> None:
        """Cancel the periodic sweep and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def cached(self) -> list[str]:
        """Names of the currently cached handles."""
        return list(self._handles.keys())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._handles

    def __len__(self) -> int:
        return len(self._handles)

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._ttl)
            self.sweep()
