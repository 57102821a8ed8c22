from __future__ import annotations

import pytest

from noticewatch.domain.pacing import PacingPolicy


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def test_first_call_does_not_wait() -> None:
    clock = FakeClock()
    pacing = PacingPolicy(1.0, clock=clock, sleep=clock.sleep)

    assert pacing.wait() == 0.0
    assert clock.sleeps == []


def test_wait_sleeps_only_the_remaining_interval() -> None:
    clock = FakeClock()
    pacing = PacingPolicy(1.0, clock=clock, sleep=clock.sleep)

    pacing.mark()
    clock.now += 0.25

    assert pacing.wait() == pytest.approx(0.75)
    assert clock.sleeps == [pytest.approx(0.75)]


def test_slow_calls_are_not_delayed() -> None:
    clock = FakeClock()
    pacing = PacingPolicy(1.0, clock=clock, sleep=clock.sleep)

    pacing.mark()
    clock.now += 3.0

    assert pacing.wait() == 0.0
    assert clock.sleeps == []


def test_reset_forgets_the_last_mark() -> None:
    clock = FakeClock()
    pacing = PacingPolicy(1.0, clock=clock, sleep=clock.sleep)
    pacing.mark()

    pacing.reset()

    assert pacing.wait() == 0.0


def test_negative_interval_is_rejected() -> None:
    with pytest.raises(ValueError, match="non-negative"):
        PacingPolicy(-1.0)
