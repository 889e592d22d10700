"""Result models — Hydrated documents plus pagination metadata."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class PageMeta(BaseModel):
    """Pagination metadata for a list query.

    ``page_count`` and ``current_page`` are only set when the request
    carried a page size.
    """

    total_count: int = Field(default=0, description="Total number of matching documents")
    current_count: int = Field(default=0, description="Number of documents in this result")
    page_count: int | None = Field(default=None, description="Number of pages for the requested size")
    current_page: int | None = Field(default=None, description="1-based page of this result")


class ResultSet(BaseModel):
    """Normalized response of a list query."""

    result: list[dict[str, Any]] = Field(default_factory=list, description="Hydrated documents")
    meta: PageMeta = Field(default_factory=PageMeta)

    def to_dict(self) -> dict[str, Any]:
        """Plain ``{result, meta}`` mapping without unset pagination keys."""
        return self.model_dump(exclude_none=True)


class FindResult(BaseModel):
    """Normalized response of a single-document lookup."""

    result: dict[str, Any] | None = Field(default=None, description="Hydrated document, None when nothing matched")
    meta: dict[str, Any] = Field(default_factory=dict, description="Raw ``hits`` section of the response")


class StoreHealth(BaseModel):
    """Health status of a store backend."""

    status: str = Field(description="Health status: healthy, degraded, unhealthy")
    latency_ms: int = Field(default=0, description="Latency of last health check in ms")
    last_check: str | None = Field(default=None, description="ISO timestamp of last health check")
    message: str | None = Field(default=None, description="Additional health message")
