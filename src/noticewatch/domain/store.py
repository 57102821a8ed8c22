"""Per-source record store over the service-table repository port.

Every operation reads the whole table of one source, and every mutation writes
the whole table back after eviction. The read-modify-write cycle is not atomic:
one polling cycle is assumed to be the only writer of a given source.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from .correlation import event_prefix, matches_prefix
from .entries import MalformedTableError, TrackedEntry, decode_table, encode_table, handle_of
from .eviction import DEFAULT_TABLE_CAPACITY, evict

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from .entries import ServiceTable, StoreEntry
    from .ports.unit_of_work import TableUnitOfWork
    from .types import MessageHandle, Timestamp

log = getLogger(__name__)


class RecordStore:
    """Bounded mapping from record id to delivery state, partitioned by source."""

    def __init__(
        self,
        unit_of_work_factory: Callable[[], TableUnitOfWork],
        *,
        capacity: int = DEFAULT_TABLE_CAPACITY,
    ) -> None:
        self._unit_of_work_factory = unit_of_work_factory
        self.capacity = capacity

    def read(self, source: str) -> ServiceTable | None:
        """Return the table of ``source``; ``None`` if it was never written.

        A blob that cannot be decoded yields an empty table: the history of that
        source is lost, and already delivered items may be relayed again.
        """

        with self._unit_of_work_factory() as uow:
            blob = uow.repositories.tables.get(source)
        if blob is None:
            return None
        try:
            return decode_table(blob)
        except MalformedTableError as exc:
            log.warning(f"Discarding unreadable table for {source}: {exc}")
            return {}

    def write(self, source: str, entries: Mapping[str, StoreEntry]) -> ServiceTable:
        """Replace the table of ``source`` with ``entries`` after eviction."""

        retained = evict(entries, self.capacity)
        dropped = len(entries) - len(retained)
        if dropped:
            log.debug(f"Evicted {dropped} entries from {source}")
        with self._unit_of_work_factory() as uow:
            uow.repositories.tables.save(source, encode_table(retained))
            uow.commit()
        return retained

    def contains(self, source: str, record_id: str) -> bool:
        table = self.read(source)
        return table is not None and record_id in table

    def find_handle_by_prefix(
        self,
        source: str,
        prefix: str,
        separator: str | None,
    ) -> MessageHandle | None:
        """Return the message handle recorded for the event ``prefix``, if any."""

        for record_id, entry in (self.read(source) or {}).items():
            if not matches_prefix(record_id, prefix, separator):
                continue
            handle = handle_of(entry)
            if handle is not None:
                return handle
        return None

    def has_prefix(self, source: str, prefix: str, separator: str | None) -> bool:
        table = self.read(source) or {}
        return any(matches_prefix(record_id, prefix, separator) for record_id in table)

    def record_delivery(
        self,
        source: str,
        record_id: str,
        *,
        seen_at: Timestamp,
        handle: MessageHandle | None,
        separator: str | None = None,
    ) -> ServiceTable:
        """Store ``record_id`` as delivered under ``handle``.

        With a ``separator`` every other row of the same event is pruned first, so
        an event is represented by exactly one row keyed by its latest id.
        """

        table = self.read(source) or {}
        if separator:
            prefix = event_prefix(record_id, separator)
            table = {
                key: entry
                for key, entry in table.items()
                if not matches_prefix(key, prefix, separator)
            }
        table.pop(record_id, None)
        table[record_id] = TrackedEntry(seen_at=seen_at, message_handle=handle)
        return self.write(source, table)

    def release_handles(self, source: str, prefix: str, separator: str | None) -> int:
        """Forget the message handles of every row of the event ``prefix``.

        The rows stay, so the event is still known but no longer editable.
        Returns how many handles were dropped.
        """

        table = self.read(source)
        if not table:
            return 0
        released = 0
        for record_id, entry in table.items():
            if matches_prefix(record_id, prefix, separator) and handle_of(entry) is not None:
                table[record_id] = TrackedEntry(seen_at=entry.seen_at)
                released += 1
        if released:
            self.write(source, table)
        return released

    def mark_seen(
        self,
        source: str,
        record_ids: Iterable[str],
        *,
        seen_at: Timestamp,
    ) -> ServiceTable:
        """Record ``record_ids`` as seen without a message; existing rows are kept."""

        table = self.read(source) or {}
        for record_id in record_ids:
            table.setdefault(record_id, TrackedEntry(seen_at=seen_at))
        return self.write(source, table)

    def sources(self) -> list[str]:
        with self._unit_of_work_factory() as uow:
            return uow.repositories.tables.names()
