"""Run one polling cycle: fetch, reconcile, dispatch and persist per source."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from .correlation import collapse_events
from .entries import parse_timestamp
from .pacing import PacingPolicy
from .ports.sources import DetailSource
from .reconcile import RecordState, classify
from .types import ScrapeOrder, utc_now_iso

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from .ports.messaging import Messenger
    from .ports.sources import Source
    from .reconcile import Decision
    from .store import RecordStore
    from .types import MessageHandle, Record, SourceSpec, Timestamp

    SourceFactory = Callable[[SourceSpec], Source]

log = getLogger(__name__)

DEFAULT_SEND_INTERVAL_SECONDS = 1.0
DEFAULT_DETAIL_INTERVAL_SECONDS = 0.5


@dataclass(slots=True)
class SourceReport:
    """Outcome of processing one source during a cycle."""

    name: str
    fetched: int = 0
    sent: int = 0
    edited: int = 0
    skipped: int = 0
    failed: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True)
class CycleReport:
    sources: list[SourceReport] = field(default_factory=list[SourceReport])

    @property
    def delivered(self) -> int:
        return sum(report.sent + report.edited for report in self.sources)

    @property
    def failed_sources(self) -> list[str]:
        return [report.name for report in self.sources if not report.ok]


def order_records(records: Iterable[Record], order: ScrapeOrder) -> list[Record]:
    """Return ``records`` oldest first according to the source's declared order."""

    ordered = list(records)
    if order is ScrapeOrder.NEWEST_FIRST:
        ordered.reverse()
    return ordered


def seen_at_for(record: Record, *, now: Callable[[], str] = utc_now_iso) -> Timestamp:
    """Timestamp stored for ``record``: its own when parsable, else the current time."""

    if record.timestamp is not None and parse_timestamp(record.timestamp) is not None:
        return record.timestamp
    return now()


class RelayRunner:
    """Drive polling cycles across sources, one source and one record at a time."""

    def __init__(
        self,
        *,
        source_factory: SourceFactory,
        messenger: Messenger,
        store: RecordStore,
        dispatch_pacing: PacingPolicy | None = None,
        detail_pacing: PacingPolicy | None = None,
        now: Callable[[], str] = utc_now_iso,
    ) -> None:
        self.source_factory = source_factory
        self.messenger = messenger
        self.store = store
        self.dispatch_pacing = dispatch_pacing or PacingPolicy(DEFAULT_SEND_INTERVAL_SECONDS)
        self.detail_pacing = detail_pacing or PacingPolicy(DEFAULT_DETAIL_INTERVAL_SECONDS)
        self.now = now

    def run_cycle(self, specs: Iterable[SourceSpec]) -> CycleReport:
        """Process every enabled source; failures never escape a single source."""

        report = CycleReport()
        for spec in specs:
            if not spec.enabled:
                continue
            source_report = SourceReport(name=spec.name)
            report.sources.append(source_report)
            try:
                self.process_source(spec, self.source_factory(spec), source_report)
            except Exception as exc:  # noqa: BLE001
                source_report.error = f"{type(exc).__name__}: {exc}"
                log.exception("Error processing source %s", spec.name)
        log.info(
            "Cycle finished: sources=%s, delivered=%s, failed_sources=%s",
            len(report.sources),
            report.delivered,
            report.failed_sources,
        )
        return report

    def process_source(
        self,
        spec: SourceSpec,
        source: Source,
        report: SourceReport | None = None,
    ) -> SourceReport:
        report = report or SourceReport(name=spec.name)
        log.info("Processing source: %s", spec.name)

        records = self.prepare_records(source.fetch(), spec)
        report.fetched = len(records)

        for record in records:
            decision = classify(record, spec, self.store)
            if not decision.needs_dispatch:
                report.skipped += 1
                continue
            if self._deliver(source, spec, record, decision):
                if decision.is_edit:
                    report.edited += 1
                else:
                    report.sent += 1
            else:
                report.failed += 1

        log.info(
            "Source %s done: fetched=%s, sent=%s, edited=%s, skipped=%s, failed=%s",
            spec.name,
            report.fetched,
            report.sent,
            report.edited,
            report.skipped,
            report.failed,
        )
        return report

    def prepare_records(self, records: Sequence[Record], spec: SourceSpec) -> list[Record]:
        ordered = order_records(records, spec.scrape_order)
        if spec.correlated:
            return collapse_events(ordered, spec.event_prefix_separator)
        return ordered

    def _deliver(
        self,
        source: Source,
        spec: SourceSpec,
        record: Record,
        decision: Decision,
    ) -> bool:
        if not decision.is_edit:
            record = self._enrich(source, record)
        text = source.build_message(record, spec)

        self.dispatch_pacing.wait()
        handle = self._dispatch(record, decision, spec, text)
        self.dispatch_pacing.mark()

        if handle is None:
            log.warning(
                "Dispatch failed for %s/%s (%s); it will be retried next cycle",
                spec.name,
                record.id,
                decision.state,
            )
            if decision.is_edit:
                # The message may be gone; the next cycle sends the status anew.
                self.store.release_handles(
                    spec.name, decision.prefix, spec.event_prefix_separator
                )
            return False

        separator = spec.event_prefix_separator if spec.correlated else None
        self.store.record_delivery(
            spec.name,
            record.id,
            seen_at=seen_at_for(record, now=self.now),
            handle=handle,
            separator=separator,
        )
        return True

    def _enrich(self, source: Source, record: Record) -> Record:
        if record.detail_key is None or not isinstance(source, DetailSource):
            return record
        self.detail_pacing.wait()
        try:
            detail = source.fetch_detail(record.detail_key)
        except Exception:  # noqa: BLE001
            log.warning(
                "Detail fetch failed for %s/%s; sending the listing data only",
                source.name,
                record.id,
                exc_info=True,
            )
            return record
        finally:
            self.detail_pacing.mark()
        return record.with_detail(detail)

    def _dispatch(
        self,
        record: Record,
        decision: Decision,
        spec: SourceSpec,
        text: str,
    ) -> MessageHandle | None:
        if decision.state is RecordState.KNOWN_BY_PREFIX_EDIT and decision.handle is not None:
            return decision.handle if self.messenger.edit_text(decision.handle, text) else None

        media = record.media()
        if len(media) > 1:
            return self.messenger.send_media_group(media, text, spec.message_thread_id)
        if media:
            return self.messenger.send_photo(media[0], text, spec.message_thread_id)
        return self.messenger.send_text(text, spec.message_thread_id)


def mark_current_as_seen(
    spec: SourceSpec,
    source: Source,
    store: RecordStore,
    *,
    now: Callable[[], str] = utc_now_iso,
) -> list[str]:
    """Record every item the source currently lists as seen, without sending."""

    ids = [record.id for record in source.fetch()]
    store.mark_seen(spec.name, ids, seen_at=now())
    log.info("Marked %s current items of %s as seen", len(ids), spec.name)
    return ids
