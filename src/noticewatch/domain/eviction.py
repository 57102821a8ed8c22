"""Keep service tables bounded to their most recent entries."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Final

from .entries import parse_timestamp

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .entries import ServiceTable, StoreEntry

DEFAULT_TABLE_CAPACITY: Final[int] = 100

_OLDEST: Final[datetime] = datetime.min.replace(tzinfo=UTC)


def effective_timestamp(entry: StoreEntry) -> datetime:
    """Sort key for eviction; unparsable timestamps sort as the oldest."""

    return parse_timestamp(entry.seen_at) or _OLDEST


def evict(
    entries: Mapping[str, StoreEntry],
    capacity: int = DEFAULT_TABLE_CAPACITY,
) -> ServiceTable:
    """Return at most ``capacity`` entries, newest first when trimming is needed.

    The sort is stable, so entries with equal timestamps keep their original order.
    """

    if capacity < 0:
        raise ValueError("Table capacity must be non-negative")
    if len(entries) <= capacity:
        return dict(entries)
    ranked = sorted(entries.items(), key=lambda item: effective_timestamp(item[1]), reverse=True)
    return dict(ranked[:capacity])
