"""Pydantic models describing the Telegram Bot API payloads we rely on."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, TypeAdapter


class TelegramBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ResponseParameters(TelegramBaseModel):
    retry_after: int | None = None
    migrate_to_chat_id: int | None = None


class BotResponse(TelegramBaseModel):
    """Envelope of every Bot API reply."""

    ok: bool
    result: Any = None
    description: str | None = None
    error_code: int | None = None
    parameters: ResponseParameters | None = None


class MessagePayload(TelegramBaseModel):
    message_id: int
    message_thread_id: int | None = None
    text: str | None = None
    caption: str | None = None


MESSAGE_LIST = TypeAdapter(list[MessagePayload])
