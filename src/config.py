from __future__ import annotations

from functools import cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    db_file: str = "cost_basis.db"
    log_level: str = "INFO"
    default_precision: int = 8

    model_config = SettingsConfigDict(
        env_prefix="COST_BASIS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@cache
def config() -> AppSettings:
    return AppSettings()
