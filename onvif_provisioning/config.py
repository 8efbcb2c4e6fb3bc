"""Application configuration using pydantic-settings."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from ONVIF_* environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_prefix="ONVIF_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Device
    uri: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    # SOAP transport
    wsdl_dir: Optional[Path] = None  # Defaults to the bundled and onvif WSDL files
    request_timeout: float = 10.0
    discovery_timeout: float = 30.0

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
