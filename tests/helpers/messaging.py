"""Recording fake for the messenger port."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from noticewatch.domain.types import MessageHandle


@dataclass(frozen=True)
class SentMessage:
    method: str
    text: str
    thread_id: int | None = None
    media: tuple[str, ...] = ()
    handle: MessageHandle | None = None


@dataclass
class FakeMessenger:
    """Hands out increasing message ids; ``fail_sends`` / ``fail_edits`` simulate outages."""

    next_id: int = 1
    fail_sends: bool = False
    fail_edits: bool = False
    sent: list[SentMessage] = field(default_factory=list[SentMessage])
    edits: list[tuple[MessageHandle, str]] = field(default_factory=list)

    def send_text(self, text: str, thread_id: int | None = None) -> MessageHandle | None:
        return self._send("send_text", text, thread_id, ())

    def send_photo(
        self,
        url: str,
        caption: str,
        thread_id: int | None = None,
    ) -> MessageHandle | None:
        return self._send("send_photo", caption, thread_id, (url,))

    def send_media_group(
        self,
        urls: Sequence[str],
        caption: str,
        thread_id: int | None = None,
    ) -> MessageHandle | None:
        return self._send("send_media_group", caption, thread_id, tuple(urls))

    def edit_text(self, handle: MessageHandle, text: str) -> bool:
        if self.fail_edits:
            return False
        self.edits.append((handle, text))
        return True

    def _send(
        self,
        method: str,
        text: str,
        thread_id: int | None,
        media: tuple[str, ...],
    ) -> MessageHandle | None:
        if self.fail_sends:
            return None
        handle = self.next_id
        self.next_id += 1
        self.sent.append(SentMessage(method, text, thread_id, media, handle))
        return handle
