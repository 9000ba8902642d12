"""
Pydantic models for ownersdb configuration.

Defines all configuration schemas using Pydantic v2 for validation
and defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class LoggingConfig(BaseModel):
    """Logging system configuration."""

    level: Literal["debug", "info", "human", "warn", "error"] = "human"
    file: Path | None = None
    verbose: int = 0

    model_config = {"extra": "forbid"}


class OutputConfig(BaseModel):
    """Where the two databases are written."""

    dir: Path = Field(
        default=Path("scripts/list_files"),
        description="Output directory, created if missing",
    )
    database_name: str = "VCPKGDatabase.txt"
    headers_name: str = "VCPKGHeadersDatabase.txt"

    model_config = {"extra": "forbid"}

    @field_validator("database_name", "headers_name")
    @classmethod
    def _plain_file_name(cls, v: str) -> str:
        if not v or "/" in v or "\\" in v:
            raise ValueError(f"must be a plain file name, got {v!r}")
        return v


class CacheConfig(BaseModel):
    """Remote cache indexer configuration."""

    target_branch: str = Field(
        default="master",
        description="Branch diffed against HEAD to find changed ports",
    )
    ports_dir: str = Field(
        default="ports",
        description="Top-level directory of the port recipes in the repository",
    )
    repo_root: Path | None = Field(
        default=None,
        description="Directory git runs in. None = current directory.",
    )
    timeout: float = Field(
        default=60.0,
        gt=0,
        description="Per-request HTTP timeout in seconds",
    )

    model_config = {"extra": "forbid"}

    @field_validator("ports_dir")
    @classmethod
    def _strip_slashes(cls, v: str) -> str:
        v = v.strip("/")
        if not v:
            raise ValueError("ports_dir cannot be empty")
        return v


class AppConfig(BaseModel):
    """Complete application configuration.

    Root of the configuration tree and the entry point for validation.
    """

    output: OutputConfig = Field(default_factory=OutputConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"extra": "forbid"}
