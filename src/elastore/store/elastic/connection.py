"""Connection manager — Builds the ``AsyncOpenSearch`` client and probes readiness.

Install the client with its async transport::

    pip install "opensearch-py[async]"
"""

from __future__ import annotations

import logging
import time
from datetime import UTC, datetime
from typing import Any

from elastore.config.settings import StoreSettings
from elastore.models.host import parse_hosts
from elastore.models.result import StoreHealth
from elastore.store.base.exceptions import ConfigurationError, ConnectivityError

logger = logging.getLogger(__name__)

CLUSTER_STATUS = {"green": "healthy", "yellow": "degraded", "red": "unhealthy"}


class ConnectionManager:
    """Owns the engine connection for one store.

    Hosts are normalized at construction; the client itself is created by
    ``start()`` unless one is injected. Only a client built here is closed
    by ``close()`` or a failed ping; an injected client belongs to the caller.

    Args:
        settings: Store settings (hosts, credentials, client options).
        client: Pre-built client exposing the ``AsyncOpenSearch`` coroutine API.
    """

    def __init__(self, settings: StoreSettings, client: Any = None) -> None:
        self._settings = settings
        self._client = client
        self._owns_client = False
        self._ready = False
        self.hosts = parse_hosts(
            settings.clients,
            username=settings.username,
            password=settings.password,
            headers=settings.headers,
        )

    @property
    def ready(self) -> bool:
        return self._ready

    def client_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for the ``AsyncOpenSearch`` constructor."""
        options = self._settings.options
        kwargs: dict[str, Any] = {
            "hosts": self.hosts,
            "timeout": options.request_timeout,
            "dead_timeout": options.dead_timeout,
            "sniff_on_start": options.sniff_on_start,
            "sniffer_timeout": options.sniffer_timeout,
            "maxsize": options.maxsize,
            "verify_certs": options.verify_certs,
            "ssl_show_warn": False,
        }
        kwargs.update(options.extra)
        return kwargs

    def _create_client(self) -> Any:
        try:
            from opensearchpy import AsyncOpenSearch
        except ImportError as e:
            raise ConfigurationError(
                'opensearch-py package is required.  Install with: pip install "opensearch-py[async]"'
            ) from e
        return AsyncOpenSearch(**self.client_kwargs())

    async def start(self) -> None:
        """Ping the cluster and mark the connection ready.

        Raises:
            ConnectivityError: If the ping fails or times out.
        """
        if self._client is None:
            self._client = self._create_client()
            self._owns_client = True

        try:
            alive = await self._client.ping(request_timeout=self._settings.options.request_timeout)
        except Exception as e:
            logger.warning("Could not connect to a client of %s", self.hosts)
            await self.close()
            raise ConnectivityError("Could not connect to client", cause=e) from e
        if not alive:
            logger.warning("Could not connect to a client of %s", self.hosts)
            await self.close()
            raise ConnectivityError("Could not connect to client")

        self._ready = True

    def get_connection(self) -> Any:
        """Return the raw client."""
        return self._client

    async def health(self) -> StoreHealth:
        """Ask the cluster for its health and map its colour to a store status."""
        if not self._ready:
            return StoreHealth(status="unhealthy", message="Client not initialized")

        started = time.monotonic()
        try:
            response = await self._client.cluster.health()
        except Exception as e:
            logger.warning("Cluster health request failed for %s", self.hosts)
            return StoreHealth(status="unhealthy", message=str(e), last_check=datetime.now(UTC).isoformat())

        colour = response.get("status") or "red"
        return StoreHealth(
            status=CLUSTER_STATUS.get(colour, "unhealthy"),
            latency_ms=int((time.monotonic() - started) * 1000),
            last_check=datetime.now(UTC).isoformat(),
            message=f"{response.get('cluster_name')} is {colour} with {response.get('number_of_nodes')} node(s)",
        )

    async def close(self) -> None:
        """Mark the connection unusable and close the client if it was built here."""
        self._ready = False
        client, self._client = self._client, None
        if client is not None and self._owns_client:
            self._owns_client = False
            await client.close()
