from dataclasses import dataclass
import os
from dotenv import load_dotenv

from shared.constants import (
    ANAGRAM_API_TIMEOUT_SECONDS,
    REVEAL_DEFAULT_UNIT_DELAY_MS,
    TELEGRAM_EDIT_INTERVAL_SECONDS,
)

load_dotenv()


@dataclass
class TelegramConfig:
    """Telegram bot configuration"""
    token: str

    @classmethod
    def from_env(cls) -> "TelegramConfig":
        token = os.getenv("TELEGRAM_TOKEN")
        if not token:
            raise ValueError("TELEGRAM_TOKEN is required")
        return cls(token=token)


@dataclass
class AnagramApiConfig:
    """Roachagram API configuration"""
    base_url: str
    timeout: float = ANAGRAM_API_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls) -> "AnagramApiConfig":
        base_url = os.getenv("API_BASE_URL")
        if not base_url:
            raise ValueError("API_BASE_URL is required")
        return cls(
            base_url=base_url,
            timeout=float(os.getenv("API_TIMEOUT", str(ANAGRAM_API_TIMEOUT_SECONDS))),
        )


@dataclass
class RevealConfig:
    """Typing animation configuration"""
    unit_delay_ms: float = REVEAL_DEFAULT_UNIT_DELAY_MS
    edit_interval: float = TELEGRAM_EDIT_INTERVAL_SECONDS

    def __post_init__(self):
        if self.unit_delay_ms < 0:
            raise ValueError("REVEAL_UNIT_DELAY_MS must not be negative")
        if self.edit_interval < 0:
            raise ValueError("REVEAL_EDIT_INTERVAL must not be negative")

    @classmethod
    def from_env(cls) -> "RevealConfig":
        return cls(
            unit_delay_ms=float(os.getenv("REVEAL_UNIT_DELAY_MS", str(REVEAL_DEFAULT_UNIT_DELAY_MS))),
            edit_interval=float(os.getenv("REVEAL_EDIT_INTERVAL", str(TELEGRAM_EDIT_INTERVAL_SECONDS))),
        )


@dataclass
class Settings:
    """Application settings"""
    telegram: TelegramConfig
    anagram_api: AnagramApiConfig
    reveal: RevealConfig
    debug: bool = False
    log_level: str = "INFO"
    log_dir: str = "logs"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            telegram=TelegramConfig.from_env(),
            anagram_api=AnagramApiConfig.from_env(),
            reveal=RevealConfig.from_env(),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_dir=os.getenv("LOG_DIR", "logs"),
        )


# Global settings instance
settings = Settings.from_env()
