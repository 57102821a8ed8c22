"""Telegram messaging adapter."""

from __future__ import annotations

from .client import TelegramAPIError, TelegramMessenger, truncate

__all__ = ["TelegramAPIError", "TelegramMessenger", "truncate"]
