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
    # PRICE BOOK SOURCE
    # ===================
    price_book_url: str = Field(
        default="https://documents.apps.lara.state.mi.us/mlcc/webprbk.txt",
        description="Michigan liquor price book (fixed-width text)"
    )
    fetch_timeout_seconds: float = Field(
        default=30,
        ge=1,
        le=300,
        description="Seconds to wait for the price book download"
    )
    max_upload_bytes: int = Field(
        default=50 * 1024 * 1024,
        ge=1024,
        description="Largest accepted upload (price book or custom names)"
    )

    # ===================
    # CATALOG
    # ===================
    preview_record_limit: int = Field(
        default=100,
        ge=0,
        le=10000,
        description="Records returned as preview after a price book load"
    )
    search_result_limit: int = Field(
        default=10,
        ge=1,
        le=200,
        description="Maximum results returned by catalog search"
    )
    search_min_query_length: int = Field(
        default=2,
        ge=1,
        le=20,
        description="Shorter search queries return no results"
    )

    # ===================
    # LABELS
    # ===================
    label_width_in: float = Field(
        default=2.4,
        gt=0,
        le=12,
        description="Shelf label width in inches"
    )
    label_height_in: float = Field(
        default=1.2,
        gt=0,
        le=12,
        description="Shelf label height in inches"
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
    cors_origins: list[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5000",
            "http://localhost:5173",
        ],
        description="Origins allowed by the CORS middleware"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"


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
