"""Configuration management for the job portal matching core."""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Backend Configuration
    data_backend: str = Field("memory", description="Data backend (memory/supabase)")
    supabase_url: Optional[str] = Field(None, description="Supabase project URL")
    supabase_key: Optional[str] = Field(None, description="Supabase anon or service key")
    supabase_schema: str = Field("public", description="PostgREST schema")
    request_timeout: float = Field(30.0, description="Backend request timeout in seconds")

    # Matching Configuration
    scoring_batch_size: int = Field(10, description="Concurrent scoring requests per batch")
    recommendation_limit: int = Field(10, description="Default number of job recommendations")
    recommendation_catalog_limit: int = Field(
        50, description="Active postings fetched before scoring recommendations"
    )

    # Application Configuration
    debug: bool = Field(False, description="Enable debug mode")
    log_level: str = Field("INFO", description="Logging level")

    # Server Configuration
    host: str = Field("0.0.0.0", description="Server host")
    port: int = Field(8000, description="Server port")
    reload: bool = Field(False, description="Enable auto-reload")
    allowed_origins: list[str] = Field(["*"], description="CORS allowed origins")


# Global settings instance
settings = Settings()
