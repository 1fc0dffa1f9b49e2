"""Application settings using pydantic-settings.

Loads configuration from environment variables (``SCRIBE_`` prefix) with
.env file support. Only the proxy endpoint and the default model are
meaningful to the AI core; the rest tune timeouts, logging and where
templates are persisted.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SCRIBE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # AI proxy
    proxy_url: str = Field(
        default="https://ai-text-editor-proxy.covionstudio.workers.dev",
        description="Endpoint of the AI proxy that forwards requests to the model provider",
    )
    default_model: str = Field(
        default="gpt-4o-mini",
        description="Model identifier sent with every completion request",
    )
    # Off by default: the proxy's one-shot JSON path is the known-good
    # transport. Set SCRIBE_STREAM_ENABLED=true for live SSE fragments.
    stream_enabled: bool = Field(
        default=False,
        description="Ask the proxy for an SSE stream instead of a single JSON body",
    )
    request_timeout: float = Field(
        default=120.0,
        gt=0,
        description="Read timeout in seconds for a single completion",
    )
    connect_timeout: float = Field(default=10.0, gt=0)

    # Templates
    templates_path: Path = Field(
        default=Path("templates.json"),
        description="JSON file holding saved text templates",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are loaded once and reused.
    """
    return Settings()
