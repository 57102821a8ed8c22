"""Persisted per-record state and the JSON codec for a service table.

A service table maps record ids to one of two entry shapes:

* ``LegacyEntry`` -- written by early versions, the bare timestamp only.
* ``TrackedEntry`` -- ``{"seenAt": ..., "messageHandle": ...}``, where the
  handle identifies the delivered chat message and may be ``null``.

Both shapes are accepted on read and written back in the shape they were read.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final, TypeAlias, cast

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .types import MessageHandle, Timestamp

log = getLogger(__name__)

SEEN_AT_KEY: Final[str] = "seenAt"
HANDLE_KEY: Final[str] = "messageHandle"

_EPOCH_MILLIS_THRESHOLD: Final[float] = 1e11
_DATE_FORMATS: Final[tuple[str, ...]] = (
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d",
)


@dataclass(frozen=True, slots=True)
class LegacyEntry:
    """Bare timestamp entry without a message handle."""

    seen_at: Timestamp


@dataclass(frozen=True, slots=True)
class TrackedEntry:
    """Structured entry that may point at the delivered message."""

    seen_at: Timestamp
    message_handle: MessageHandle | None = None


StoreEntry: TypeAlias = LegacyEntry | TrackedEntry
ServiceTable: TypeAlias = dict[str, StoreEntry]


class MalformedTableError(ValueError):
    """Raised when a persisted service table blob cannot be decoded."""


def handle_of(entry: StoreEntry) -> MessageHandle | None:
    if isinstance(entry, TrackedEntry):
        return entry.message_handle
    return None


def parse_timestamp(value: object) -> datetime | None:
    """Interpret a scraped or persisted timestamp; ``None`` when unparsable.

    Epoch numbers above 1e11 are read as milliseconds. Naive values are UTC.
    """

    parsed: datetime | None = None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, bool):
        return None
    elif isinstance(value, int | float):
        seconds = value / 1000 if abs(value) >= _EPOCH_MILLIS_THRESHOLD else value
        try:
            return datetime.fromtimestamp(seconds, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        parsed = _parse_text_timestamp(value.strip())

    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _parse_text_timestamp(text: str) -> datetime | None:
    if not text:
        return None
    normalized = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        return datetime.fromisoformat(normalized)
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)  # noqa: DTZ007
        except ValueError:
            continue
    return None


def decode_table(blob: str) -> ServiceTable:
    """Decode a persisted blob into a service table.

    Raises ``MalformedTableError`` when the blob is not a JSON object. Entries of
    unknown shape inside an otherwise valid object are dropped and logged.
    """

    if not blob.strip():
        return {}
    try:
        raw = json.loads(blob)
    except json.JSONDecodeError as exc:
        raise MalformedTableError(f"Service table is not valid JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise MalformedTableError(f"Service table must be a JSON object, got {type(raw).__name__}")

    table: ServiceTable = {}
    for record_id, value in cast(dict[str, Any], raw).items():
        entry = _decode_entry(value)
        if entry is None:
            log.warning(f"Dropping entry {record_id!r} with unsupported shape: {value!r}")
            continue
        table[record_id] = entry
    return table


def _decode_entry(value: object) -> StoreEntry | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str | int | float):
        return LegacyEntry(seen_at=value)
    if isinstance(value, dict):
        mapping = cast(dict[str, Any], value)
        seen_at = mapping.get(SEEN_AT_KEY)
        if isinstance(seen_at, bool) or not isinstance(seen_at, str | int | float):
            return None
        handle = mapping.get(HANDLE_KEY)
        if handle is not None and (isinstance(handle, bool) or not isinstance(handle, int | str)):
            return None
        return TrackedEntry(seen_at=seen_at, message_handle=handle)
    return None


def encode_table(table: Mapping[str, StoreEntry]) -> str:
    payload: dict[str, object] = {}
    for record_id, entry in table.items():
        if isinstance(entry, LegacyEntry):
            payload[record_id] = entry.seen_at
        else:
            payload[record_id] = {SEEN_AT_KEY: entry.seen_at, HANDLE_KEY: entry.message_handle}
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
