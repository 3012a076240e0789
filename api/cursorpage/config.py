"""Configuration management for the cursorpage service."""

from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application settings
    app_name: str = "Cursor Pagination API"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # Database settings (no URL selects the in-memory data source)
    database_url: Optional[str] = None
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
    db_command_timeout: int = 60

    # CORS settings
    cors_origins: List[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: List[str] = ["GET", "OPTIONS"]
    cors_allow_headers: List[str] = ["*"]

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_requests: bool = False

    # Pagination settings
    max_cursor_size: int = Field(default=8192, ge=1, description="Maximum length of a next token")
    pagination_lookahead: bool = True

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
        "env_parse_none_str": "None",
    }


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings
