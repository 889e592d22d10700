"""Host descriptors — Normalized node addresses for the engine client."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any
from urllib.parse import unquote, urlsplit

from pydantic import BaseModel, Field

DEFAULT_PORTS = {"http": 80, "https": 443}
DESCRIPTOR_KEYS = frozenset({"protocol", "path", "auth"})


class HostDescriptor(BaseModel):
    """One engine node as the connection layer sees it."""

    protocol: str = Field(default="http", description="URL scheme without the trailing colon")
    host: str = Field(default="localhost", description="Hostname or address")
    port: int = Field(default=80, description="TCP port")
    path: str = Field(default="/", description="URL path prefix")
    auth: str | None = Field(default=None, description="Basic auth as 'user:password'")
    headers: dict[str, str] | None = Field(default=None, description="Extra headers for this node")

    def to_client_kwargs(self) -> dict[str, Any]:
        """Host mapping in the shape ``AsyncOpenSearch(hosts=[...])`` accepts."""
        kwargs: dict[str, Any] = {
            "host": self.host,
            "port": self.port,
            "use_ssl": self.protocol == "https",
        }
        if self.path and self.path != "/":
            kwargs["url_prefix"] = self.path
        if self.auth:
            kwargs["http_auth"] = self.auth
        if self.headers:
            kwargs["headers"] = dict(self.headers)
        return kwargs


def parse_host(
    url: str,
    username: str | None = None,
    password: str | None = None,
    headers: Mapping[str, str] | None = None,
) -> HostDescriptor:
    """Parse a node URL into a descriptor.

    A missing scheme defaults to http and a missing port to the scheme's
    default. Credentials embedded in the URL win over ``username``/``password``.
    """
    if "://" not in url:
        url = f"http://{url}"
    parts = urlsplit(url)
    protocol = parts.scheme or "http"

    auth = None
    if parts.username:
        auth = unquote(parts.username)
        if parts.password is not None:
            auth = f"{auth}:{unquote(parts.password)}"
    elif username and password:
        auth = f"{username}:{password}"

    return HostDescriptor(
        protocol=protocol,
        host=parts.hostname or "localhost",
        port=parts.port or DEFAULT_PORTS.get(protocol, 80),
        path=parts.path or "/",
        auth=auth,
        headers=dict(headers) if headers else None,
    )


def parse_hosts(
    clients: Sequence[str | Mapping[str, Any]],
    username: str | None = None,
    password: str | None = None,
    headers: Mapping[str, str] | None = None,
) -> list[dict[str, Any]]:
    """Normalize configured clients into client host mappings.

    A mapping carrying descriptor keys (``protocol``, ``path``, ``auth``) is
    read as a ``HostDescriptor`` and gets the configured credentials and
    headers where it has none. Any other mapping is taken as an already
    built client host and passed through unchanged.
    """
    hosts: list[dict[str, Any]] = []
    for item in clients:
        if isinstance(item, Mapping):
            if DESCRIPTOR_KEYS.isdisjoint(item):
                hosts.append(dict(item))
            else:
                hosts.append(_descriptor_from_mapping(item, username, password, headers).to_client_kwargs())
            continue
        hosts.append(parse_host(item, username, password, headers).to_client_kwargs())
    return hosts


def _descriptor_from_mapping(
    item: Mapping[str, Any],
    username: str | None,
    password: str | None,
    headers: Mapping[str, str] | None,
) -> HostDescriptor:
    fields = dict(item)
    protocol = str(fields.get("protocol") or "http").rstrip(":")
    fields["protocol"] = protocol
    fields.setdefault("port", DEFAULT_PORTS.get(protocol, 80))
    if not fields.get("auth") and username and password:
        fields["auth"] = f"{username}:{password}"
    if not fields.get("headers") and headers:
        fields["headers"] = dict(headers)
    return HostDescriptor.model_validate(fields)
