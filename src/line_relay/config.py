from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Relay settings; CLI flags take precedence over the environment."""

    model_config = SettingsConfigDict(
        env_prefix="LINE_RELAY_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    connect_timeout: float = Field(5.0, gt=0, description="Connection timeout in seconds")
    reconnect_delay: float = Field(5.0, ge=0, description="Seconds to wait before reconnecting")
    queue_size: int = Field(1024, ge=1, description="Lines buffered before dropping the oldest")
    log_level: str = "INFO"
    metrics_port: Optional[int] = Field(None, ge=1, le=65535)


@lru_cache()
def get_settings() -> Settings:
    return Settings()
