"""
Application Configuration

Pydantic Settings for environment variable management.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import List, Optional
import json


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # App
    app_name: str = "Personal Video Library API"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./database/media.db"
    seed_default_tags: bool = True

    # API
    cors_origins: str = '["http://localhost:3000"]'
    enable_dev_endpoints: bool = False

    # Storage
    upload_dir: str = "./uploads"
    thumbnail_dir: str = "./thumbnails"

    # Media tools (ffmpeg / ffprobe), looked up on PATH when not set
    ffmpeg_path: Optional[str] = None
    ffprobe_path: Optional[str] = None
    media_timeout_seconds: int = 120

    # Library defaults
    default_tag_color: str = "#007bff"
    selection_thumbnail_count: int = 6

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from JSON string"""
        try:
            return json.loads(self.cors_origins)
        except (json.JSONDecodeError, TypeError):
            return ["http://localhost:3000"]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Global settings instance for easy import
settings = get_settings()
