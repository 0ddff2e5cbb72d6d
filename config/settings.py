"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # VARIANT GENERATION
    # ===================
    variant_combination_cap: int = Field(
        default=100,
        ge=1,
        le=10000,
        description="Maximum variants a full regeneration may produce"
    )
    variant_label_separator: str = Field(
        default=" / ",
        min_length=1,
        description="Separator between attribute values in derived labels"
    )

    # ===================
    # VARIANT IDENTIFIERS
    # ===================
    variant_id_slug_max_length: int = Field(
        default=20,
        ge=1,
        le=100,
        description="Maximum characters of the label slug in a variant ID"
    )
    variant_id_salt_length: int = Field(
        default=6,
        ge=4,
        le=32,
        description="Random characters appended to a variant ID"
    )

    # ===================
    # VALIDATION
    # ===================
    uniqueness_debounce_ms: int = Field(
        default=300,
        ge=0,
        le=5000,
        description="Quiet window before duplicate detection re-evaluates"
    )

    # ===================
    # EDITING SESSIONS
    # ===================
    draft_session_ttl_minutes: int = Field(
        default=30,
        ge=1,
        le=1440,
        description="Minutes an idle variant editing session is kept in memory"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def uniqueness_debounce_seconds(self) -> float:
        """Debounce window in seconds."""
        return self.uniqueness_debounce_ms / 1000


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
