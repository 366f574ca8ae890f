# salonbook/config.py

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field(default="sqlite:///./salonbook.db", alias="DATABASE_URL")
    secret_key: str = Field(default="change-me-later", alias="SECRET_KEY")
    algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(default=30, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # grid used when listing free start times
    slot_interval_minutes: int = Field(default=30, alias="SLOT_INTERVAL_MINUTES")

    # how salon-level and staff-level auto_confirm flags combine on creation:
    # any = either flag, all = both flags, staff / salon = that flag alone
    auto_confirm_policy: Literal["any", "all", "staff", "salon"] = Field(
        default="any", alias="AUTO_CONFIRM_POLICY"
    )

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(env_file=".env", env_prefix="", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
