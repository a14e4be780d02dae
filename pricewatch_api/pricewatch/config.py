"""
Configuration management for the Pricewatch Console API.
"""

from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    catalog_api_url: str = Field(default="http://localhost:8000")
    catalog_api_token: Optional[str] = Field(default=None)
    catalog_timeout: float = Field(default=30.0)
    catalog_max_retries: int = Field(default=3, ge=0)
    redis_url: str = Field(default="redis://localhost:6379/0")
    session_ttl: int = Field(default=86400, gt=0)
    category_path_separator: str = Field(default="/", min_length=1)
    default_open_depth: int = Field(default=1, ge=0)
    listing_limit: int = Field(default=5000, gt=0)
    log_level: str = Field(default="INFO")
    cors_origins: str = Field(default="*")

    def cors_origin_list(self) -> List[str]:
        """Split CORS_ORIGINS into a list, dropping blanks."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get application settings."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
