"""Store settings — Pydantic-based configuration with YAML and env var support.

Configuration is loaded from (in order of precedence):
  1. Environment variables (ELASTORE_ prefix)
  2. YAML config file (if specified)
  3. Default values
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class ClientOptions(BaseModel):
    """Transport options applied once, when the connection is constructed."""

    request_timeout: float = Field(default=10.0, gt=0, description="Per-request and readiness probe timeout in seconds")
    dead_timeout: float = Field(default=30.0, ge=0, description="Seconds a failed node stays out of rotation")
    sniff_on_start: bool = Field(default=False, description="Discover cluster nodes on first request")
    sniffer_timeout: float | None = Field(default=36.0, description="Seconds between node re-discovery")
    maxsize: int = Field(default=100, ge=1, description="Maximum pooled connections per node")
    verify_certs: bool = Field(default=True, description="Verify TLS certificates")
    extra: dict[str, Any] = Field(default_factory=dict, description="Additional client keyword arguments")


class DebugSettings(BaseModel):
    """Trace logging switches per operation family."""

    create: bool = Field(default=True, description="Trace create / bulk create / mapping payloads")
    read: bool = Field(default=True, description="Trace find / findAll / count payloads")
    update: bool = Field(default=True, description="Trace update payloads")
    delete: bool = Field(default=True, description="Trace destroy payloads")


class StoreSettings(BaseModel):
    """Configuration for one elastic store instance."""

    clients: list[str | dict[str, Any]] = Field(
        default_factory=lambda: ["http://localhost:9200"],
        description="Node URLs or pre-built host mappings",
    )
    username: str | None = Field(default=None, description="Basic-auth username for URL hosts without credentials")
    password: str | None = Field(default=None, description="Basic-auth password for URL hosts without credentials")
    headers: dict[str, str] = Field(default_factory=dict, description="Headers sent to every node")
    options: ClientOptions = Field(default_factory=ClientOptions)
    debug: DebugSettings = Field(default_factory=DebugSettings)
    index_cache_ttl: float = Field(default=60.0, gt=0, description="Seconds between index handle cache sweeps")
    doc_types: bool = Field(default=False, description="Forward document types to the engine (legacy clusters)")
    logger: str = Field(default="elastic", description="Logger namespace for this store")

    @field_validator("clients", mode="before")
    @classmethod
    def _parse_clients(cls, v: Any) -> list[Any]:
        """Parse clients from JSON string (env var) or list."""
        if isinstance(v, str):
            import json

            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return parsed
            except (json.JSONDecodeError, TypeError):
                pass
            # Single host as plain string
            return [v] if v else []
        if isinstance(v, dict):
            return [v]
        return list(v)

    @field_validator("debug", mode="before")
    @classmethod
    def _parse_debug(cls, v: Any) -> Any:
        """``debug: false`` switches every trace family off at once."""
        if isinstance(v, bool):
            return {"create": v, "read": v, "update": v, "delete": v}
        return v


class ObservabilitySettings(BaseModel):
    """Observability configuration."""

    log_level: str = Field(default="info", description="Log level: debug, info, warning, error")
    log_format: str = Field(default="json", description="Log format: json, console")


class Settings(BaseSettings):
    """Root settings.

    Configuration is loaded from environment variables with the ELASTORE_ prefix.
    Nested settings use double underscores: ELASTORE_STORE__INDEX_CACHE_TTL=30

    Example:
        ELASTORE_STORE__CLIENTS='["https://es-1:9200", "https://es-2:9200"]'
        ELASTORE_STORE__OPTIONS__REQUEST_TIMEOUT=5
        ELASTORE_OBSERVABILITY__LOG_FORMAT=console
    """

    model_config = {
        "env_prefix": "ELASTORE_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    store: StoreSettings = Field(default_factory=StoreSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from a YAML configuration file.

        Values from the YAML file override the defaults; sections missing
        from the file are still read from the environment.

        Args:
            path: Path to the YAML config file.

        Returns:
            Populated Settings instance.
        """
        import yaml  # type: ignore[import-untyped]

        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)
