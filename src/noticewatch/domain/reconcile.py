"""Decide, per scraped record, whether to send, edit or skip."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from .correlation import event_prefix

if TYPE_CHECKING:
    from .store import RecordStore
    from .types import MessageHandle, Record, SourceSpec


class RecordState(StrEnum):
    UNSEEN = "unseen"
    KNOWN_EXACT = "known_exact"
    KNOWN_BY_PREFIX_EDIT = "known_by_prefix_edit"
    KNOWN_BY_PREFIX_NO_HANDLE = "known_by_prefix_no_handle"


@dataclass(frozen=True, slots=True)
class Decision:
    """Classification of one record against the stored state of its source."""

    state: RecordState
    prefix: str
    handle: MessageHandle | None = None

    @property
    def needs_dispatch(self) -> bool:
        return self.state is not RecordState.KNOWN_EXACT

    @property
    def is_edit(self) -> bool:
        return self.state is RecordState.KNOWN_BY_PREFIX_EDIT


def classify(record: Record, spec: SourceSpec, store: RecordStore) -> Decision:
    """Classify ``record`` for the source described by ``spec``.

    Plain sources deduplicate on the full id. Correlated sources first skip an
    id that was already delivered as-is, then look for an earlier status of the
    same event that still has a message to edit.
    """

    if not spec.correlated:
        if store.contains(spec.name, record.id):
            return Decision(RecordState.KNOWN_EXACT, prefix=record.id)
        return Decision(RecordState.UNSEEN, prefix=record.id)

    separator = spec.event_prefix_separator
    prefix = event_prefix(record.id, separator)
    if store.contains(spec.name, record.id):
        return Decision(RecordState.KNOWN_EXACT, prefix=prefix)

    handle = store.find_handle_by_prefix(spec.name, prefix, separator)
    if handle is not None:
        return Decision(RecordState.KNOWN_BY_PREFIX_EDIT, prefix=prefix, handle=handle)
    if store.has_prefix(spec.name, prefix, separator):
        return Decision(RecordState.KNOWN_BY_PREFIX_NO_HANDLE, prefix=prefix)
    return Decision(RecordState.UNSEEN, prefix=prefix)
