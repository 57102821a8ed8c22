"""Event-prefix correlation for multi-state records.

Sources that track an event through several statuses emit ids shaped like
``<eventPrefix><separator><statusTag>``. A first sighting may also arrive as the
bare prefix, so matching accepts either the prefix itself or the prefix followed
by the separator -- never an id that merely shares leading characters.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .types import Record


def event_prefix(record_id: str, separator: str | None) -> str:
    """Return the part of ``record_id`` before the first ``separator``."""

    if not separator:
        return record_id
    head, _, _ = record_id.partition(separator)
    return head


def matches_prefix(record_id: str, prefix: str, separator: str | None) -> bool:
    if record_id == prefix:
        return True
    if not separator:
        return False
    return record_id.startswith(prefix + separator)


def correlates(first: str, second: str, separator: str | None) -> bool:
    """Whether two ids describe the same logical event."""

    if first == second:
        return True
    if not separator:
        return False
    prefix = event_prefix(first, separator)
    if prefix != event_prefix(second, separator):
        return False
    longer = first if len(first) >= len(second) else second
    return longer.startswith(prefix + separator)


def collapse_events(records: Iterable[Record], separator: str | None) -> list[Record]:
    """Keep only the last record of each event, in a stable left-to-right scan.

    ``records`` must be ordered oldest to newest; the survivor takes the position
    of its event's last occurrence.
    """

    ordered = list(records)
    if not separator:
        return ordered
    last_index: dict[str, int] = {}
    for index, record in enumerate(ordered):
        last_index[event_prefix(record.id, separator)] = index
    return [
        record
        for index, record in enumerate(ordered)
        if last_index[event_prefix(record.id, separator)] == index
    ]
