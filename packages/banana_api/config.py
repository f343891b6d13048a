"""Centralized configuration using Pydantic Settings

API settings live here; audio engine settings are
banana_loop.config.EngineSettings (BANANA_ prefix).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API Configuration
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    # Upload limits
    max_sample_size_mb: int = 50


# Global settings instance
settings = Settings()
