from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from noticewatch.app import list_sources, run_relay_cycle, skip_source
from noticewatch.config import ConfigurationError, RelayConfig
from noticewatch.domain.store import RecordStore
from tests.helpers.messaging import FakeMessenger
from tests.helpers.sources import FakeSource, make_record, make_spec
from tests.helpers.storage import InMemoryTables, InMemoryUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Callable

    from noticewatch.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork
    from noticewatch.domain.types import SourceSpec

NO_PACING = RelayConfig(send_interval_seconds=0.0, detail_interval_seconds=0.0)


def _factory(*sources: FakeSource) -> Callable[[SourceSpec], FakeSource]:
    by_name = {source.name: source for source in sources}
    return lambda spec: by_name[spec.name]


def test_run_relay_cycle_delivers_and_persists(tables: InMemoryTables) -> None:
    messenger = FakeMessenger()
    source = FakeSource(name="alpha", batches=[[make_record("1"), make_record("2")]])

    report = run_relay_cycle(
        specs=[make_spec("alpha")],
        messenger=messenger,
        source_factory=_factory(source),
        unit_of_work_factory=lambda: InMemoryUnitOfWork(tables),
        config=NO_PACING,
    )

    assert report.delivered == 2
    assert report.failed_sources == []
    assert [message.text for message in messenger.sent] == [
        "Alpha: Title 1 [1]",
        "Alpha: Title 2 [2]",
    ]
    store = RecordStore(lambda: InMemoryUnitOfWork(tables))
    assert store.contains("alpha", "1")
    assert store.contains("alpha", "2")


def test_run_relay_cycle_reports_failed_sources(tables: InMemoryTables) -> None:
    messenger = FakeMessenger()
    broken = FakeSource(name="broken", error=RuntimeError("listing moved"))
    healthy = FakeSource(name="healthy", batches=[[make_record("1")]])

    report = run_relay_cycle(
        specs=[make_spec("broken"), make_spec("healthy")],
        messenger=messenger,
        source_factory=_factory(broken, healthy),
        unit_of_work_factory=lambda: InMemoryUnitOfWork(tables),
        config=NO_PACING,
    )

    assert report.failed_sources == ["broken"]
    assert report.delivered == 1
    assert report.sources[0].error == "RuntimeError: listing moved"


def test_run_relay_cycle_over_sqlalchemy(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    messenger = FakeMessenger()
    spec = make_spec("fire", correlated=True)
    source = FakeSource(
        name="fire",
        batches=[[make_record("100_dispatched")], [make_record("100_closed")]],
    )

    def cycle() -> None:
        run_relay_cycle(
            specs=[spec],
            messenger=messenger,
            source_factory=_factory(source),
            unit_of_work_factory=sqlite_unit_of_work,
            config=NO_PACING,
        )

    cycle()
    cycle()

    assert len(messenger.sent) == 1
    assert messenger.edits == [(1, "Fire: Title 100_closed [100_closed]")]


def test_skip_source_marks_items_without_sending(tables: InMemoryTables) -> None:
    source = FakeSource(name="hinet", batches=[[make_record("a"), make_record("b")]])

    ids = skip_source(
        "hinet",
        source_factory=_factory(source),
        unit_of_work_factory=lambda: InMemoryUnitOfWork(tables),
    )

    assert ids == ["a", "b"]
    store = RecordStore(lambda: InMemoryUnitOfWork(tables))
    assert store.contains("hinet", "a")
    assert store.contains("hinet", "b")


def test_skip_source_rejects_unknown_name(tables: InMemoryTables) -> None:
    with pytest.raises(ConfigurationError):
        skip_source("nowhere", unit_of_work_factory=lambda: InMemoryUnitOfWork(tables))


def test_list_sources_applies_only() -> None:
    enabled = [spec.name for spec in list_sources(only=["smc"]) if spec.enabled]

    assert enabled == ["smc"]
