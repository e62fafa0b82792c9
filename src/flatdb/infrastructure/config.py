"""Configuration management for flatdb."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageConfig(BaseModel):
    """Storage configuration."""

    databases_root: Path = Field(
        default=Path("./databases"), description="Directory holding one sub-directory per database"
    )
    metadata_prefix: str = Field(
        default=".", min_length=1, description="Prefix marking a table's metadata artifact"
    )
    temp_prefix: str = Field(
        default=".temp_", min_length=1, description="Prefix for artifacts being published"
    )
    dir_mode: int = Field(default=0o755, ge=0, le=0o777, description="Mode for database directories")
    file_mode: int = Field(default=0o644, ge=0, le=0o777, description="Mode for table artifacts")
    fsync: bool = Field(default=True, description="fsync artifacts before publishing them")


class LockConfig(BaseModel):
    """Advisory table lock configuration."""

    timeout_seconds: float = Field(
        default=30.0, ge=0, description="Max time to wait for a table lock"
    )


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="json", description="Log format")
    service_name: str = Field(default="flatdb", description="Service name for tracing")
    trace_console_export: bool = Field(
        default=False, description="Export finished spans to the console"
    )


class Config(BaseSettings):
    """Main configuration for flatdb."""

    model_config = SettingsConfigDict(
        env_prefix="FLATDB_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    storage: StorageConfig = Field(default_factory=StorageConfig)
    locks: LockConfig = Field(default_factory=LockConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    def ensure_directories(self) -> None:
        """Ensure the databases root exists with the configured mode."""
        root = self.storage.databases_root
        root.mkdir(parents=True, exist_ok=True)
        os.chmod(root, self.storage.dir_mode)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    config = Config()
    config.ensure_directories()
    return config
