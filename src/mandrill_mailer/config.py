"""Configuration management for Mandrill Mailer."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Mandrill API Configuration
    mandrill_api_key: Optional[str] = Field(
        default=None,
        description="Mandrill API key",
    )
    mandrill_api_url: str = Field(
        default="https://mandrillapp.com/api/1.0",
        description="Mandrill API base URL",
    )
    mandrill_async: bool = Field(
        default=False,
        description="Ask Mandrill to process sends asynchronously",
    )
    mandrill_ip_pool: Optional[str] = Field(
        default=None,
        description="Dedicated IP pool used for sends",
    )

    # API Client Configuration
    api_timeout: float = Field(
        default=10.0,
        description="API request timeout in seconds",
    )

    # Message Defaults
    default_from_email: Optional[str] = Field(
        default=None,
        description="Sender address used when a message has none",
    )
    default_from_name: Optional[str] = Field(
        default=None,
        description="Sender name used when a message has none",
    )

    # Views Configuration
    views_path: Path = Field(
        default=Path("views"),
        description="Directory holding local fallback email views",
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log format (json or console)")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
