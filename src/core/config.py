"""Application settings, read from environment variables (prefix CHESS_) or a .env file."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CHESS_", env_file=".env", extra="ignore"
    )

    database_url: str = "sqlite:///games.db"
    database_echo: bool = False

    pacing_enabled: bool = True
    pacing_base_delay_seconds: int = 900
    pacing_increment_seconds: int = 900

    log_level: str = "INFO"
    log_json: bool = False

    recent_moves_shown: int = 5
    move_buttons_per_row: int = 3


@lru_cache
def get_settings() -> Settings:
    return Settings()
