"""Runtime settings for taskhub-authz services.

Settings are read from the environment (``TASKHUB_`` prefix) and an optional
``.env`` file.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DefaultValues


class AuthzSettings(BaseSettings):
    """Application settings for the access engine and its adapters."""

    model_config = SettingsConfigDict(
        env_prefix="TASKHUB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Core
    app_name: str = Field(default="taskhub-authz")
    environment: str = Field(default="development")
    debug: bool = Field(default=False)

    # Entity store
    database_url: Optional[str] = Field(default=None)
    database_schema: str = Field(default=DefaultValues.DEFAULT_SCHEMA)
    db_pool_min_size: int = Field(default=1, ge=1)
    db_pool_max_size: int = Field(default=10, ge=1)
    db_command_timeout: float = Field(default=5.0, gt=0)

    # Redis read-through cache
    redis_url: Optional[str] = Field(default=None)
    cache_ttl_seconds: int = Field(default=60, ge=1)

    # Identity
    jwt_secret: SecretStr = Field(default=SecretStr("change-me-in-production"))
    jwt_algorithm: str = Field(default=DefaultValues.JWT_ALGORITHM)
    jwt_audience: Optional[str] = Field(default=None)

    # Mutations and audit
    max_mutation_retries: int = Field(default=DefaultValues.MAX_MUTATION_RETRIES, ge=1)
    audit_default_page_size: int = Field(default=DefaultValues.DEFAULT_AUDIT_PAGE_SIZE, ge=1)
    audit_max_page_size: int = Field(default=DefaultValues.MAX_AUDIT_PAGE_SIZE, ge=1)

    @field_validator("database_schema")
    @classmethod
    def validate_schema(cls, value: str) -> str:
        if not value.replace("_", "").isalnum():
            raise ValueError(f"Invalid schema name: {value}")
        return value

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache()
def get_settings() -> AuthzSettings:
    """Return the process-wide settings instance."""
    return AuthzSettings()
