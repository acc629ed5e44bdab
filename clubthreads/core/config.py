"""Configuration management using Pydantic BaseSettings.

Settings are loaded from environment variables (or a ``.env`` file) with
type validation.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ThreadsConfig(BaseSettings):
    """Discussion threads configuration."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # === Storage ===
    data_dir: Path = Field(
        default=Path("./data"), description="Directory holding topics/<id>.json files"
    )

    # === Threading ===
    orphan_policy: str = Field(
        default="drop",
        pattern=r"^(drop|promote)$",
        description="Posts whose parent is missing: drop them or show them as roots",
    )

    # === Rendering ===
    max_render_depth: int = Field(
        default=8, ge=1, le=64, description="Depth beyond which replies stop nesting"
    )
    max_indent_level: int = Field(
        default=3, ge=0, le=16, description="Maximum visual indent levels"
    )

    # === Collapse State ===
    session_key_prefix: str = Field(
        default="discussion",
        min_length=1,
        description="Prefix of collapse-state keys: <prefix>-<topic>-<post>",
    )
    collapse_store: str = Field(
        default="memory",
        pattern=r"^(memory|redis)$",
        description="Backend for per-session collapse state: memory or redis",
    )
    collapse_state_namespace: str = Field(
        default="clubthreads", description="Redis key namespace for session state"
    )
    collapse_state_ttl_seconds: int = Field(
        default=86400,
        ge=0,
        description="Expiry for collapse keys in Redis; 0 keeps them forever",
    )

    # === Redis ===
    redis_url: str = Field(
        default="redis://localhost:6379",
        description="Redis connection URL (redis://host:port)",
    )
    redis_password: Optional[str] = Field(
        default=None, description="Redis password (if required)"
    )

    # === Logging ===
    log_level: str = Field(
        default="INFO",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level",
    )
    log_format: str = Field(
        default="json",
        pattern=r"^(json|text)$",
        description="Log output format: json or text",
    )
    loki_url: Optional[str] = Field(
        default=None, description="Loki URL for log shipping (e.g., http://loki:3100)"
    )
    service_name: str = Field(
        default="clubthreads", description="Service name attached to logs and metrics"
    )

    # === Observability ===
    enable_metrics: bool = Field(
        default=False, description="Enable Prometheus metrics collection"
    )
    metrics_port: Optional[int] = Field(
        default=None,
        ge=1024,
        le=65535,
        description="Port for the metrics HTTP server; unset keeps it off",
    )
