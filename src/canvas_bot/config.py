"""
Configuration management for Canvas Notifier Bot.

Loads and validates all required environment variables with clear error messages.
Uses Pydantic Settings for type safety and validation.
"""

import logging
from functools import lru_cache
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All required variables must be set, or the application will fail fast
    with a clear error message indicating which variables are missing.
    A local .env file is read only if present.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Canvas LMS Configuration
    canvas_api_key: str = Field(
        ...,
        description="Canvas API bearer token"
    )
    canvas_base_url: str = Field(
        default="https://canvas.instructure.com",
        description="Base URL for the Canvas instance"
    )
    canvas_per_page: int = Field(
        default=100,
        ge=1,
        description="Page size requested from Canvas (only the first page is read)"
    )
    request_timeout: float = Field(
        default=30,
        gt=0,
        description="Timeout in seconds for outbound HTTP requests"
    )

    # Telegram Bot API Configuration
    bot_token: str = Field(
        ...,
        description="Telegram Bot API token (from @BotFather)"
    )
    telegram_chat_ids: str = Field(
        default="6995936214",
        description="Comma-separated Telegram chat IDs that receive notifications"
    )

    # Text generation (optional)
    groq_api_key: Optional[str] = Field(
        default=None,
        description="Groq API key; when unset, reminder prompts are sent verbatim"
    )
    groq_model: str = Field(
        default="llama-3.1-8b-instant",
        description="Groq chat model used to rephrase reminders"
    )

    # Reminder behaviour
    link_host_from: str = Field(
        default="canvas",
        description="Substring of assignment links to rewrite"
    )
    link_host_to: str = Field(
        default="csus",
        description="Replacement for link_host_from"
    )
    daily_run_hour: int = Field(
        default=8,
        ge=0,
        le=23,
        description="Local hour at which assignments are re-checked each day"
    )
    grade_check_interval: float = Field(
        default=3600,
        gt=0,
        description="Seconds between grade checks"
    )
    reminder_window_hours: float = Field(
        default=48,
        gt=0,
        description="Only assignments due within this many hours get reminders"
    )
    tracker_grace_hours: float = Field(
        default=24,
        ge=0,
        description="How long after the due time reminder state is kept"
    )

    # Optional Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    timezone: Optional[str] = Field(
        default=None,
        description="Timezone for the daily run hour. Defaults to the host's local zone."
    )

    @field_validator("canvas_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Ensure base URL doesn't have trailing slash."""
        return v.rstrip("/")

    @field_validator("canvas_api_key", "bot_token")
    @classmethod
    def validate_secret(cls, v: str) -> str:
        """Reject blank secrets."""
        if not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @field_validator("groq_api_key")
    @classmethod
    def validate_optional_secret(cls, v: Optional[str]) -> Optional[str]:
        """Treat a blank optional key as unset."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("telegram_chat_ids")
    @classmethod
    def validate_chat_ids(cls, v: str) -> str:
        """Require at least one recipient."""
        if not any(c.strip() for c in v.split(",")):
            raise ValueError("at least one Telegram chat ID is required")
        return v

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: Optional[str]) -> Optional[str]:
        """Ensure the timezone name is known; blank means local time."""
        if v is None or not v.strip():
            return None
        try:
            ZoneInfo(v.strip())
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v.strip()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return upper

    @property
    def chat_ids(self) -> List[str]:
        """Configured Telegram recipients as a list."""
        return [c.strip() for c in self.telegram_chat_ids.split(",") if c.strip()]

    @property
    def canvas_api_url(self) -> str:
        """Root of the Canvas REST API."""
        return f"{self.canvas_base_url}/api/v1"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Validated application settings

    Raises:
        ConfigurationError: If required environment variables are missing or invalid
    """
    try:
        return Settings()
    except ValidationError as e:
        missing = [".".join(str(p) for p in err["loc"]).upper() for err in e.errors()]
        raise ConfigurationError(
            f"Invalid or missing configuration: {', '.join(missing)}"
        ) from e


def setup_logging(settings: Optional[Settings] = None) -> logging.Logger:
    """
    Configure application logging.

    Args:
        settings: Optional settings instance; INFO is used when not provided

    Returns:
        logging.Logger: Configured logger instance
    """
    level = settings.log_level if settings is not None else "INFO"

    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Reduce noise from third-party libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    return logging.getLogger("canvas_bot")
