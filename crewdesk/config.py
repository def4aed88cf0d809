"""Application configuration loaded from config.yaml + environment variables."""

from __future__ import annotations

import yaml
from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings

_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"


def _load_yaml() -> dict:
    if _CONFIG_PATH.exists():
        with open(_CONFIG_PATH) as f:
            return yaml.safe_load(f) or {}
    return {}


_yaml = _load_yaml()


class SecurityConfig(BaseSettings):
    # Secrets come from the environment: JWT_SECRET, PASSWORD_ENC_KEY, ACTIVITY_API_KEY
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 12
    refresh_token_expire_days: int = 30
    reset_token_expire_minutes: int = 15
    password_enc_key: str = ""
    activity_api_key: str = ""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


class ActivityConfig(BaseSettings):
    default_limit: int = 100
    max_limit: int = 500


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///data/crewdesk.db"
    log_level: str = "INFO"
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    activity: ActivityConfig = Field(default_factory=ActivityConfig)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


def get_settings() -> Settings:
    """Build Settings by merging YAML defaults with env overrides."""
    y = _yaml
    sec = SecurityConfig(**y.get("security", {}))
    act = ActivityConfig(**y.get("activity", {}))
    db_url = y.get("database", {}).get("url", "sqlite+aiosqlite:///data/crewdesk.db")
    return Settings(
        database_url=db_url,
        log_level=y.get("log_level", "INFO"),
        security=sec,
        activity=act,
    )
