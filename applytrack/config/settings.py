"""Configuration settings for ApplyTrack."""

import json
from pathlib import Path
from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults and can be overridden via
    environment variables or a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        enable_decoding=False,
        extra="ignore",
    )

    # Server storage
    database_path: Path = Field(
        default=Path("./data/applytrack.db"),
        description="Path to the SQLite database backing the HTTP API",
    )

    # Client storage
    local_storage_path: Path = Field(
        default=Path("./data/local_storage.json"),
        description="JSON file holding guest applications and session state",
    )
    api_base_url: str = Field(
        default="http://127.0.0.1:3000/api/v1",
        description="Base URL the client uses to reach the HTTP API",
    )
    request_timeout_seconds: Annotated[float, Field(gt=0)] = Field(
        default=10.0,
        description="Timeout applied to every client request to the API",
    )

    # Authentication
    token_ttl_hours: Annotated[int, Field(gt=0)] = Field(
        default=24 * 7,
        description="Lifetime of an issued session token in hours",
    )
    password_hash_rounds: Annotated[int, Field(ge=4, le=31)] = Field(
        default=12,
        description="bcrypt cost factor used when hashing new passwords",
    )

    # HTTP surface
    host: str = Field(default="127.0.0.1", description="Bind address for `serve`")
    port: Annotated[int, Field(gt=0, lt=65536)] = Field(
        default=3000, description="Bind port for `serve`"
    )
    rate_limit_window_seconds: Annotated[int, Field(gt=0)] = Field(
        default=15 * 60,
        description="Length of the fixed rate-limit window",
    )
    rate_limit_max_requests: Annotated[int, Field(gt=0)] = Field(
        default=100,
        description="Requests allowed per client address per window",
    )
    auth_rate_limit_max_requests: Annotated[int, Field(gt=0)] = Field(
        default=5,
        description="Register/login attempts allowed per client address per window",
    )
    max_body_bytes: Annotated[int, Field(gt=0)] = Field(
        default=10 * 1024,
        description="Largest accepted request body",
    )
    cors_origins: list[str] = Field(
        default_factory=list,
        description="Origins allowed by CORS (JSON list or comma-separated)",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR",
    )
    log_format: Literal["text", "json"] = Field(
        default="text",
        description="Console log format: plain text or one JSON object per line",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: object) -> list[str]:
        """Parse CORS_ORIGINS from env-friendly formats.

        Supports:
        - JSON list: ["http://localhost:5173"]
        - Comma-separated: http://localhost:5173, https://app.example.com
        """
        if v is None:
            return []

        if isinstance(v, list):
            return [str(item).strip() for item in v if str(item).strip()]

        if not isinstance(v, str):
            return [str(v).strip()] if str(v).strip() else []

        raw = v.strip()
        if not raw:
            return []

        if raw.startswith("["):
            try:
                parsed = json.loads(raw)
            except json.JSONDecodeError:
                parsed = None
            else:
                if isinstance(parsed, list):
                    return [str(item).strip() for item in parsed if str(item).strip()]

        return [chunk.strip() for chunk in raw.replace("\n", ",").split(",") if chunk.strip()]

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a known level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()

    @field_validator("api_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the application settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the settings singleton (useful for testing)."""
    global _settings
    _settings = None
