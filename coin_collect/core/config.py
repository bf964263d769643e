from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_env: str = Field(default="dev", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    redis_url: str = Field(default="redis://localhost:6379/0", alias="REDIS_URL")
    local_cache_url: str = Field(
        default="sqlite+aiosqlite:///./coin_collect_cache.db",
        alias="LOCAL_CACHE_URL",
    )
    local_cache_secret: str = Field(
        default="dev_local_cache_secret_change_me",
        alias="LOCAL_CACHE_SECRET",
    )
    device_id: str | None = Field(default=None, alias="DEVICE_ID")

    photo_jpeg_quality: int = Field(default=50, ge=1, le=95, alias="PHOTO_JPEG_QUALITY")
    promo_submit_delay_seconds: float = Field(
        default=1.5,
        ge=0.0,
        alias="PROMO_SUBMIT_DELAY_SECONDS",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
