"""Telegram Bot API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from .env import require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

TELEGRAM_API_BASE_URL = "https://api.telegram.org"
TELEGRAM_TIMEOUT_SECONDS = 20.0

# Retry only failures where the request never reached the bot API.
TELEGRAM_RETRY = RetryPolicy(
    retries=3,
    initial_wait=1.0,
    retry_exceptions=(httpx.ConnectError, httpx.ConnectTimeout),
)


@dataclass(frozen=True)
class TelegramConfig:
    """Holds Telegram bot configuration values."""

    bot_token: str
    chat_id: str
    resilience: ResilienceConfig
    api_base_url: str = TELEGRAM_API_BASE_URL

    def method_url(self, method: str) -> str:
        return f"{self.api_base_url}/bot{self.bot_token}/{method}"


def get_telegram_config(*, resilience: ResilienceConfig | None = None) -> TelegramConfig:
    values = require_env_vars(("TELEGRAM_BOT_TOKEN", "TELEGRAM_CHAT_ID"))
    return TelegramConfig(
        bot_token=values["TELEGRAM_BOT_TOKEN"],
        chat_id=values["TELEGRAM_CHAT_ID"],
        resilience=resilience
        or ResilienceConfig(
            name="telegram",
            timeout_seconds=TELEGRAM_TIMEOUT_SECONDS,
            retry=TELEGRAM_RETRY,
            ratelimit=RateLimit(max_calls=20, per_seconds=60.0),
        ),
    )
