"""Configuration management for SimpleDB."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Fallback used when no key is configured. Anyone who can read this source can
# decrypt a snapshot written with it.
INSECURE_DEFAULT_KEY = "default"


class StorageConfig(BaseModel):
    """Snapshot and WAL locations plus the at-rest encryption secret."""

    snapshot_path: Path = Field(
        default=Path("database.snapshot"), description="Encrypted snapshot file path"
    )
    wal_path: Path = Field(default=Path("wal.log"), description="Write-ahead log file path")
    encryption_key: str = Field(
        default=INSECURE_DEFAULT_KEY,
        description="Secret the snapshot encryption key is derived from",
    )
    recover_on_start: bool = Field(
        default=False, description="Replay the WAL on top of the snapshot at startup"
    )

    def uses_default_key(self) -> bool:
        """Check whether the insecure fallback key is in effect."""
        return self.encryption_key == INSECURE_DEFAULT_KEY


class WALConfig(BaseModel):
    """Write-Ahead Log configuration."""

    sync_mode: Literal["fsync", "fdatasync", "none"] = Field(
        default="fsync", description="WAL sync mode"
    )


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="console", description="Log format")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(default="simpledb", description="Service name for tracing")
    metrics_port: int | None = Field(
        default=None, ge=1, le=65535, description="Prometheus metrics port (disabled if unset)"
    )


class Config(BaseSettings):
    """Main configuration for SimpleDB."""

    model_config = SettingsConfigDict(
        env_prefix="SIMPLEDB_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    storage: StorageConfig = Field(default_factory=StorageConfig)
    wal: WALConfig = Field(default_factory=WALConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    def ensure_directories(self) -> None:
        """Ensure the parent directories of the snapshot and WAL exist."""
        self.storage.snapshot_path.parent.mkdir(parents=True, exist_ok=True)
        self.storage.wal_path.parent.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    config = Config()
    config.ensure_directories()
    return config
