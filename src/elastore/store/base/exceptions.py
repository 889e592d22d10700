"""Store exceptions and engine-failure classification.

Every error raised by the store carries a stable ``code`` so callers can
branch on it instead of parsing engine messages.
"""

from __future__ import annotations

from typing import Any

NAMESPACE = "STORE.ES"

INDEX_NOT_FOUND = "index_not_found_exception"
INDEX_EXISTS = ("index_already_exists_exception", "resource_already_exists_exception")


class StoreError(Exception):
    """Base exception for store errors."""

    namespace = NAMESPACE
    default_code = "STORE.ES"
    default_status = 500

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status_code: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.status_code = status_code or self.default_status
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}, status_code={self.status_code})"


class ValidationError(StoreError):
    """Raised when caller input is malformed. Detected before any I/O."""

    default_status = 400


class ConnectivityError(StoreError):
    """Raised when the readiness probe fails or the store is not running."""

    default_code = "STORE.ES_CLIENT"
    default_status = 503


class ConfigurationError(StoreError):
    """Raised when store configuration is invalid or the client library is missing."""

    default_code = "STORE.ES_CONFIG"


class OperationError(StoreError):
    """Raised when the engine rejects a request."""


class MappingError(OperationError):
    default_code = "ES.MAPPING"
    default_status = 400


class CreateError(OperationError):
    default_code = "ES.CREATE"


class BulkCreateError(OperationError):
    default_code = "ES.CREATE_BULK"


class FindError(OperationError):
    default_code = "ES.FIND"


class FindAllError(OperationError):
    default_code = "ES.FIND_ALL"


class CountError(OperationError):
    default_code = "ES.COUNT"


class UpdateError(OperationError):
    default_code = "ES.UPDATE"


class DestroyError(OperationError):
    default_code = "ES.DESTROY"


class CreateIndexError(OperationError):
    default_code = "ES.CREATE_INDEX"


class DeleteIndexError(OperationError):
    default_code = "ES.DELETE_INDEX"


class ExistsIndexError(OperationError):
    default_code = "ES.EXIST_INDEX"


class ListIndexesError(OperationError):
    default_code = "ES.GET_INDEXES"


# ── Engine failure classification ────────────────────────────────────────────


def _error_text(exc: BaseException) -> str:
    parts = [str(exc)]
    for attr in ("error", "info"):
        value = getattr(exc, attr, None)
        if value is not None:
            parts.append(str(value))
    return " ".join(parts)


def is_index_not_found(exc: BaseException) -> bool:
    """True when the engine reports that the target index does not exist."""
    return INDEX_NOT_FOUND in _error_text(exc)


def is_index_already_exists(exc: BaseException) -> bool:
    """True when index creation failed only because the index exists."""
    text = _error_text(exc)
    return any(marker in text for marker in INDEX_EXISTS)


def is_not_found(exc: BaseException) -> bool:
    """True for an HTTP 404 from the engine."""
    return getattr(exc, "status_code", None) == 404


def is_store_error(exc: Any) -> bool:
    """Recognise store errors and raw engine errors.

    Store errors are matched on their code; engine errors on the shape of
    the transport exception (``status_code``, ``error`` and ``info``).
    """
    code = getattr(exc, "code", None)
    if isinstance(code, str) and (code.startswith("ES") or code.startswith(NAMESPACE)):
        return True
    return all(getattr(exc, attr, None) is not None for attr in ("status_code", "error", "info"))
