"""Telegram Bot API messenger."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final

import httpx
from pydantic import ValidationError

from noticewatch.adapters.http_resilience import ResilientClient
from noticewatch.config.telegram import TelegramConfig, get_telegram_config

from .schema import MESSAGE_LIST, BotResponse, MessagePayload

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from noticewatch.config.http_resilience import ResilienceConfig
    from noticewatch.domain.ports.messaging import Messenger
    from noticewatch.domain.types import MessageHandle

log = getLogger(__name__)

MAX_TEXT_LENGTH: Final[int] = 4096
MAX_CAPTION_LENGTH: Final[int] = 1024
MAX_MEDIA_GROUP_SIZE: Final[int] = 10
PARSE_MODE: Final[str] = "HTML"

NOT_MODIFIED_MARKER: Final[str] = "message is not modified"
NO_TEXT_MARKER: Final[str] = "there is no text in the message to edit"

_ELLIPSIS: Final[str] = "…"


class TelegramAPIError(RuntimeError):
    """Raised when the Bot API rejects a call or answers with an unexpected payload."""

    def __init__(self, message: str, *, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - len(_ELLIPSIS)] + _ELLIPSIS


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class TelegramMessenger:
    """Deliver HTML-formatted messages to one chat.

    Every public call returns ``None`` (or ``False`` for edits) instead of
    raising, so a failed delivery leaves the caller free to retry later.
    """

    config: TelegramConfig = field(default_factory=get_telegram_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    def send_text(self, text: str, thread_id: int | None = None) -> MessageHandle | None:
        payload = self._payload(thread_id)
        payload.update(
            text=truncate(text, MAX_TEXT_LENGTH),
            parse_mode=PARSE_MODE,
            disable_web_page_preview=True,
        )
        return self._deliver("sendMessage", payload)

    def send_photo(
        self,
        url: str,
        caption: str,
        thread_id: int | None = None,
    ) -> MessageHandle | None:
        payload = self._payload(thread_id)
        payload.update(
            photo=url,
            caption=truncate(caption, MAX_CAPTION_LENGTH),
            parse_mode=PARSE_MODE,
        )
        return self._deliver("sendPhoto", payload)

    def send_media_group(
        self,
        urls: Sequence[str],
        caption: str,
        thread_id: int | None = None,
    ) -> MessageHandle | None:
        """Send up to ten photos as one album; the caption goes on the first."""

        selected = list(urls)[:MAX_MEDIA_GROUP_SIZE]
        if not selected:
            return self.send_text(caption, thread_id)
        if len(selected) == 1:
            return self.send_photo(selected[0], caption, thread_id)

        media: list[dict[str, Any]] = [{"type": "photo", "media": url} for url in selected]
        media[0].update(caption=truncate(caption, MAX_CAPTION_LENGTH), parse_mode=PARSE_MODE)
        payload = self._payload(thread_id)
        payload["media"] = media
        return self._deliver("sendMediaGroup", payload)

    def edit_text(self, handle: MessageHandle, text: str) -> bool:
        """Replace the text of a delivered message.

        Photo messages have a caption instead of a text, so a rejected text edit
        is retried as a caption edit. An unchanged message counts as edited.
        """

        message_id = _edit_target(handle)
        if message_id is None:
            return False
        payload: dict[str, Any] = {
            "chat_id": self.config.chat_id,
            "message_id": message_id,
            "text": truncate(text, MAX_TEXT_LENGTH),
            "parse_mode": PARSE_MODE,
            "disable_web_page_preview": True,
        }
        try:
            self._call("editMessageText", payload)
        except TelegramAPIError as exc:
            if NOT_MODIFIED_MARKER in str(exc).lower():
                return True
            if NO_TEXT_MARKER in str(exc).lower():
                return self._edit_caption(handle, message_id, text)
            log.warning(f"editMessageText failed for message {handle}: {exc}")
            return False
        except httpx.HTTPError as exc:
            log.warning(f"editMessageText failed for message {handle}: {type(exc).__name__}")
            return False
        return True

    def _edit_caption(self, handle: MessageHandle, message_id: int, text: str) -> bool:
        payload: dict[str, Any] = {
            "chat_id": self.config.chat_id,
            "message_id": message_id,
            "caption": truncate(text, MAX_CAPTION_LENGTH),
            "parse_mode": PARSE_MODE,
        }
        try:
            self._call("editMessageCaption", payload)
        except TelegramAPIError as exc:
            if NOT_MODIFIED_MARKER in str(exc).lower():
                return True
            log.warning(f"editMessageCaption failed for message {handle}: {exc}")
            return False
        except httpx.HTTPError as exc:
            log.warning(f"editMessageCaption failed for message {handle}: {type(exc).__name__}")
            return False
        return True

    def _payload(self, thread_id: int | None) -> dict[str, Any]:
        payload: dict[str, Any] = {"chat_id": self.config.chat_id}
        if thread_id is not None:
            payload["message_thread_id"] = thread_id
        return payload

    def _deliver(self, method: str, payload: dict[str, Any]) -> MessageHandle | None:
        try:
            result = self._call(method, payload)
            return _message_id(result)
        except TelegramAPIError as exc:
            log.warning(f"{method} failed: {exc}")
        except httpx.HTTPError as exc:
            # The exception text carries the request URL, and with it the bot token.
            log.warning(f"{method} failed: {type(exc).__name__}")
        return None

    def _call(self, method: str, payload: dict[str, Any]) -> object:
        return asyncio.run(self._call_async(method, payload))

    async def _call_async(self, method: str, payload: dict[str, Any]) -> object:
        async with self.client_factory(self.config.resilience) as client:
            response = await client.post(self.config.method_url(method), json=payload)

        try:
            body = BotResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise TelegramAPIError(
                f"Unexpected {method} response (HTTP {response.status_code})",
                code=response.status_code,
            ) from exc

        if not body.ok:
            raise TelegramAPIError(
                body.description or f"{method} failed with HTTP {response.status_code}",
                code=body.error_code,
            )
        return body.result


def _edit_target(handle: MessageHandle) -> int | None:
    try:
        return int(handle)
    except (TypeError, ValueError):
        log.warning(f"Cannot edit message {handle!r}: not a Bot API message id")
        return None

def _message_id(result: object) -> MessageHandle:
    try:
        if isinstance(result, list):
            messages = MESSAGE_LIST.validate_python(result)
            if not messages:
                raise TelegramAPIError("Empty media group result")
            return messages[0].message_id
        return MessagePayload.model_validate(result).message_id
    except ValidationError as exc:
        raise TelegramAPIError("Result carries no message_id") from exc


if TYPE_CHECKING:
    _messenger_check: Messenger = TelegramMessenger()
