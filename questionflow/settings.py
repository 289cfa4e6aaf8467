"""Runtime configuration for questionflow, read from the environment and `.env`."""

from functools import lru_cache
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    # Storage backend: "memory" (default) or "redis"
    storage_backend: Literal["memory", "redis"] = Field(default="memory", alias="STORAGE_BACKEND")
    redis_url: str | None = Field(default=None, alias="REDIS_URL")
    # Used only when REDIS_URL is unset
    redis_host: str | None = Field(default=None, alias="REDIS_HOST")
    redis_port: int | None = Field(default=None, alias="REDIS_PORT")
    redis_db: int | None = Field(default=None, alias="REDIS_DB")
    redis_password: str | None = Field(default=None, alias="REDIS_PASSWORD")
    redis_namespace: str = Field(default="questionflow", alias="REDIS_NAMESPACE")
    # Sessions and responses expire after this many days; 0 keeps them forever
    session_ttl_days: int = Field(default=30, alias="SESSION_TTL_DAYS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def redis_conn_url(self) -> str | None:
        """Connection URL for ``RedisStorage``.

        ``REDIS_URL`` wins; otherwise the URL is assembled from ``REDIS_HOST``
        and friends. ``None`` means Redis is not configured.
        """
        if self.redis_url:
            return self.redis_url
        if not self.redis_host:
            return None
        secret = (self.redis_password or "").strip()
        credentials = f":{secret}@" if secret else ""
        return f"redis://{credentials}{self.redis_host}:{self.redis_port or 6379}/{self.redis_db or 0}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
