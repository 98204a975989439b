from pydantic_settings import BaseSettings
from pydantic import ConfigDict, Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = Field(
        default="postgresql://localhost:5432/storefront",
        description="PostgreSQL connection URL",
    )
    db_pool_min_size: int = Field(default=2, description="Minimum pooled connections")
    db_pool_max_size: int = Field(default=10, description="Maximum pooled connections")

    # Storefront
    storefront_base_url: str = Field(
        default="https://example.com",
        description="Public storefront URL used to build referral links",
    )

    # Stats watcher
    stats_refresh_seconds: int = Field(default=30, description="Affiliate stats polling interval")

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Allow extra fields in .env
    )


# Global settings instance
settings = Settings()
