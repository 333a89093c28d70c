"""Application configuration"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    app_name: str = "Tezos Previews Bot"
    app_version: str = "1.0.0"
    environment: str = "development"
    log_level: str = "info"

    # Telegram
    telegram_api_id: Optional[int] = None
    telegram_api_hash: str = Field(default="")
    telegram_bot_token: str = Field(default="")
    telegram_session_path: str = "sessions/tezos_previews_bot"

    # External APIs
    tzkt_base_url: str = "https://api.tzkt.io"
    objkt_base_url: str = "https://data.objkt.com"
    api_rate_limit: int = 60  # calls per minute, per endpoint key
    api_timeout_seconds: float = 10.0
    user_agent: str = "Tezos-Previews-Bot/1.0.0"

    # Rendering
    referral_address: str = ""
    max_cards_per_message: int = 10
    community_link: str = "https://discord.gg/beq5pMzvDY"

    class Config:
        env_file = ".env"
        case_sensitive = False


def validate_settings(config: Settings) -> None:
    """Fail fast when the bot cannot log in"""
    if not config.telegram_bot_token:
        raise ValueError("TELEGRAM_BOT_TOKEN is required")

    if not config.telegram_api_id or not config.telegram_api_hash:
        raise ValueError("TELEGRAM_API_ID and TELEGRAM_API_HASH are required")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
