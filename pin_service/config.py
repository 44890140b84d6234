"""Pydantic based configuration for the PIN service."""

from __future__ import annotations

from typing import List, Optional

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


class PinSettings(BaseSettings):
    """Runtime settings, read from the environment or a local ``.env`` file."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = Field(
        default="sqlite:///pins.db",
        description="SQLAlchemy connection string of the PIN store",
    )
    database_credential: Optional[SecretStr] = Field(
        default=None,
        description="Password injected into the store URL when set",
    )
    admin_token: SecretStr = Field(description="Bearer secret for administrative calls")
    cors_origin: str = Field(
        default="*",
        description="Comma separated list of allowed origins, or '*'",
    )
    port: int = Field(default=4000, description="Port used by the serve command")
    service_name: str = Field(default="key-validator", description="Name reported by /health")
    default_ttl_minutes: int = Field(default=30, gt=0)
    max_ttl_minutes: int = Field(default=240, gt=0)
    pin_length: int = Field(default=12, ge=4, le=64)
    pin_alphabet: str = Field(default=DEFAULT_ALPHABET, min_length=2)
    max_generation_attempts: int = Field(default=10, gt=0)

    @field_validator("admin_token")
    @classmethod
    def _token_not_blank(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value().strip():
            raise ValueError("admin_token must not be empty")
        return value

    @model_validator(mode="after")
    def _default_within_max(self) -> "PinSettings":
        if self.default_ttl_minutes > self.max_ttl_minutes:
            raise ValueError("default_ttl_minutes cannot exceed max_ttl_minutes")
        return self

    @property
    def cors_origins(self) -> List[str] | str:
        origins = [origin.strip() for origin in self.cors_origin.split(",") if origin.strip()]
        if not origins or "*" in origins:
            return "*"
        return origins
