from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_BASE = "https://api.telegram.org"


class BotClientSettings(BaseSettings):
    """
    Client settings read from the environment (``TELEGRAM_*``) or ``.env``.

    TELEGRAM_BOT_TOKEN  - bot token issued by @BotFather
    TELEGRAM_API_BASE   - Bot API server, e.g. http://localhost:8081 for a self-hosted one
    TELEGRAM_TIMEOUT    - per-call network timeout, seconds
    """

    model_config = SettingsConfigDict(
        env_prefix="TELEGRAM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    bot_token: str = ""
    api_base: str = DEFAULT_API_BASE
    timeout: float = 30.0


@lru_cache
def get_settings() -> BotClientSettings:
    # Cached settings for process lifetime.
    return BotClientSettings()
