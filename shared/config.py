"""
Shared configuration management for the OAuth credential core.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OAuthSettings(BaseSettings):
    """Settings shared by the storage layer and the OAuth client."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="OAUTH_",
        case_sensitive=False,
        extra="ignore"
    )

    log_level: str = Field(default="info")

    # Issuer used when a client is built without an explicit one
    issuer: Optional[str] = Field(default=None)
    http_timeout: float = Field(default=10.0)
    refresh_margin_seconds: int = Field(default=30)

    # Storage
    storage_path: Optional[str] = Field(default=None)


def get_settings(**overrides) -> OAuthSettings:
    """Build settings from the environment, applying explicit overrides."""
    return OAuthSettings(**overrides)
