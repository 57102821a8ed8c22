from __future__ import annotations

from noticewatch.domain.entries import LegacyEntry, TrackedEntry
from noticewatch.domain.reconcile import RecordState, classify
from noticewatch.domain.store import RecordStore  # noqa: TC001
from tests.helpers.sources import make_record, make_spec

SEEN = "2026-01-01T00:00:00+00:00"


def test_plain_source_classifies_by_exact_id(store: RecordStore) -> None:
    spec = make_spec("hinet")
    store.write("hinet", {"a": TrackedEntry(SEEN, 1)})

    known = classify(make_record("a"), spec, store)
    unseen = classify(make_record("a_more"), spec, store)

    assert known.state is RecordState.KNOWN_EXACT
    assert not known.needs_dispatch
    assert unseen.state is RecordState.UNSEEN
    assert unseen.needs_dispatch


def test_plain_source_ignores_separator_like_ids(store: RecordStore) -> None:
    spec = make_spec("hinet")
    store.write("hinet", {"abc_dispatched": TrackedEntry(SEEN, 1)})

    assert classify(make_record("abc_arrived"), spec, store).state is RecordState.UNSEEN


def test_correlated_source_edits_known_event(store: RecordStore) -> None:
    spec = make_spec("fire", correlated=True)
    store.write("fire", {"abc_dispatched": TrackedEntry(SEEN, 7)})

    decision = classify(make_record("abc_arrived"), spec, store)

    assert decision.state is RecordState.KNOWN_BY_PREFIX_EDIT
    assert decision.is_edit
    assert decision.handle == 7
    assert decision.prefix == "abc"


def test_correlated_exact_hit_wins_over_prefix(store: RecordStore) -> None:
    spec = make_spec("fire", correlated=True)
    store.write("fire", {"abc_arrived": TrackedEntry(SEEN, 7)})

    assert classify(make_record("abc_arrived"), spec, store).state is RecordState.KNOWN_EXACT


def test_correlated_event_without_handle_is_resent(store: RecordStore) -> None:
    spec = make_spec("fire", correlated=True)
    store.write("fire", {"abc": LegacyEntry(SEEN)})

    decision = classify(make_record("abc_done"), spec, store)

    assert decision.state is RecordState.KNOWN_BY_PREFIX_NO_HANDLE
    assert decision.needs_dispatch
    assert not decision.is_edit


def test_correlated_prefix_needs_separator_boundary(store: RecordStore) -> None:
    spec = make_spec("fire", correlated=True)
    store.write("fire", {"abc_done": TrackedEntry(SEEN, 7)})

    assert classify(make_record("abcx"), spec, store).state is RecordState.UNSEEN


def test_edit_capability_is_required_for_correlation(store: RecordStore) -> None:
    spec = make_spec("fire")
    store.write("fire", {"abc_dispatched": TrackedEntry(SEEN, 7)})

    assert classify(make_record("abc_arrived"), spec, store).state is RecordState.UNSEEN
