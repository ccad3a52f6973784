from functools import lru_cache
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ==============================================
    # APPLICATION CONFIGURATION
    # ==============================================
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    CORS_ORIGINS: List[str] = ["*"]

    # ==============================================
    # EXPORT CONFIGURATION
    # ==============================================
    DEFAULT_WIDTH: int = 800
    MAX_WIDTH: int = 4000
    JPEG_QUALITY: int = 92
    BACKGROUND_COLOR: str = "white"
    PDF_CREATOR: str = "Chart Export Service"

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"LOG_LEVEL must be a logging level name, got {v!r}")
        return level

    @field_validator("DEFAULT_WIDTH", "MAX_WIDTH")
    @classmethod
    def validate_width(cls, v):
        if v <= 0:
            raise ValueError("widths must be positive")
        return v

    @field_validator("JPEG_QUALITY")
    @classmethod
    def validate_jpeg_quality(cls, v):
        if not 1 <= v <= 95:
            raise ValueError("JPEG_QUALITY must be between 1 and 95")
        return v

    model_config = SettingsConfigDict(
        env_prefix="CHART_EXPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
