"""Application configuration using pydantic settings with structured sections."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class FirebaseSettings(BaseModel):
    credentials_path: Optional[Path] = None
    project_id: Optional[str] = None
    collection: str = "sessions"


class ServerSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8000
    reload: bool = False


class Settings(BaseSettings):
    """Top-level application settings with nested sections."""

    model_config = SettingsConfigDict(
        env_prefix="SETTLER_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    project_name: str = "Shared Expense Settler"
    base_currency: str = "KRW"
    currency_symbol: str = "₩"

    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    firebase: FirebaseSettings = FirebaseSettings()
    server: ServerSettings = ServerSettings()


@lru_cache()
def get_settings() -> Settings:
    return Settings()


def configure_logging(settings: Optional[Settings] = None) -> None:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format=settings.log_format)
