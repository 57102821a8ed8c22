"""Port for delivering messages to the chat channel."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from noticewatch.domain.types import MessageHandle


@runtime_checkable
class Messenger(Protocol):
    """Send and edit chat messages.

    Send calls return the handle of the delivered message, or ``None`` when the
    platform refused or could not be reached. ``edit_text`` reports success.
    """

    def send_text(self, text: str, thread_id: int | None = None) -> MessageHandle | None: ...

    def send_photo(
        self,
        url: str,
        caption: str,
        thread_id: int | None = None,
    ) -> MessageHandle | None: ...

    def send_media_group(
        self,
        urls: Sequence[str],
        caption: str,
        thread_id: int | None = None,
    ) -> MessageHandle | None: ...

    def edit_text(self, handle: MessageHandle, text: str) -> bool: ...


__all__ = ["Messenger"]
