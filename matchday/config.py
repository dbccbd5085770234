"""Configuration for the match-day tracker, read from the environment or a .env file."""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Application settings.

    Every field can be set through a ``MATCHDAY_``-prefixed environment
    variable, e.g. ``MATCHDAY_DATA_DIR`` or ``MATCHDAY_DURABLE_BACKEND``.
    """

    model_config = SettingsConfigDict(
        env_prefix='MATCHDAY_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore'
    )

    # ===================
    # Storage
    # ===================
    DATA_DIR: str = Field(
        default='./matchday-data',
        description='Root directory for the volatile store and the file-backed durable store'
    )
    TEAM_ID: str = Field(default='default-team', description='Team whose games are tracked')
    DURABLE_BACKEND: str = Field(default='file', description='Durable store backend: file or http')
    DURABLE_URL: str = Field(default='', description='Base URL of the REST durable store')
    DURABLE_API_KEY: Optional[str] = Field(default=None, description='API key sent to the REST durable store')
    HTTP_TIMEOUT_S: float = Field(default=10.0, description='HTTP request timeout in seconds')

    # ===================
    # Logging
    # ===================
    LOG_LEVEL: str = Field(default='INFO', description='Logging level')

    # ===================
    # Web API
    # ===================
    WEB_HOST: str = Field(default='127.0.0.1', description='Host the JSON API binds to')
    WEB_PORT: int = Field(default=7122, description='Port the JSON API listens on')

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of: {', '.join(valid_levels)}")
        return v_upper

    @field_validator('DURABLE_BACKEND')
    @classmethod
    def validate_backend(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower not in ('file', 'http'):
            raise ValueError(f"DURABLE_BACKEND must be file or http (got: {v})")
        return v_lower

    @model_validator(mode='after')
    def check_http_backend(self) -> 'AppSettings':
        if self.DURABLE_BACKEND == 'http' and not self.DURABLE_URL:
            raise ValueError("DURABLE_URL is required when DURABLE_BACKEND is http")
        return self


@lru_cache()
def get_settings() -> AppSettings:
    """Get cached application settings.

    Returns:
        AppSettings: Cached settings instance
    """
    return AppSettings()


def reset_settings_cache() -> None:
    """Forget the cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()
