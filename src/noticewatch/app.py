"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from noticewatch.adapters.sources import build_source
from noticewatch.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from noticewatch.adapters.telegram import TelegramMessenger
from noticewatch.config.relay import RelayConfig, get_relay_config
from noticewatch.config.sources import get_source_spec, get_source_specs
from noticewatch.domain.pacing import PacingPolicy
from noticewatch.domain.ports.unit_of_work import TableUnitOfWork
from noticewatch.domain.relay import RelayRunner, mark_current_as_seen
from noticewatch.domain.store import RecordStore

if TYPE_CHECKING:
    from collections.abc import Iterable

    from noticewatch.domain.ports.messaging import Messenger
    from noticewatch.domain.ports.sources import Source
    from noticewatch.domain.relay import CycleReport
    from noticewatch.domain.types import SourceSpec

UnitOfWorkFactory = Callable[[], TableUnitOfWork]
SourceFactory = Callable[["SourceSpec"], "Source"]


log = getLogger(__name__)


def _default_unit_of_work_factory() -> UnitOfWorkFactory:
    if not is_started():
        startup()
    return SqlAlchemyUnitOfWork


def run_relay_cycle(
    *,
    only: Iterable[str] | None = None,
    specs: Iterable[SourceSpec] | None = None,
    messenger: Messenger | None = None,
    source_factory: SourceFactory | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: RelayConfig | None = None,
) -> CycleReport:
    """Run one polling cycle over the configured sources."""

    relay_config = config or get_relay_config()
    effective_specs = list(specs) if specs is not None else get_source_specs(only=only)
    effective_messenger = messenger or TelegramMessenger()
    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()

    log.info(
        "Starting relay cycle: sources=%s, send_interval=%ss",
        [spec.name for spec in effective_specs if spec.enabled],
        relay_config.send_interval_seconds,
    )
    runner = RelayRunner(
        source_factory=source_factory or build_source,
        messenger=effective_messenger,
        store=RecordStore(effective_uow, capacity=relay_config.table_capacity),
        dispatch_pacing=PacingPolicy(relay_config.send_interval_seconds),
        detail_pacing=PacingPolicy(relay_config.detail_interval_seconds),
    )
    report = runner.run_cycle(effective_specs)

    for source_report in report.sources:
        if source_report.error:
            log.warning(f"Source {source_report.name} failed: {source_report.error}")
    return report


def skip_source(
    name: str,
    *,
    source_factory: SourceFactory | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[str]:
    """Mark everything a source currently lists as already delivered."""

    spec = get_source_spec(name)
    source = (source_factory or build_source)(spec)
    store = RecordStore(unit_of_work_factory or _default_unit_of_work_factory())
    ids = mark_current_as_seen(spec, source, store)
    log.info(f"Skipped {len(ids)} items of {name}")
    return ids


def list_sources(*, only: Iterable[str] | None = None) -> list[SourceSpec]:
    return get_source_specs(only=only)
