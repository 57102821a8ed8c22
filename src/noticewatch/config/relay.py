"""Polling-cycle defaults."""

from __future__ import annotations

from dataclasses import dataclass

from noticewatch.domain.eviction import DEFAULT_TABLE_CAPACITY
from noticewatch.domain.relay import (
    DEFAULT_DETAIL_INTERVAL_SECONDS,
    DEFAULT_SEND_INTERVAL_SECONDS,
)

from .env import env_float


@dataclass(frozen=True, slots=True)
class RelayConfig:
    send_interval_seconds: float = DEFAULT_SEND_INTERVAL_SECONDS
    detail_interval_seconds: float = DEFAULT_DETAIL_INTERVAL_SECONDS
    table_capacity: int = DEFAULT_TABLE_CAPACITY


def get_relay_config() -> RelayConfig:
    return RelayConfig(
        send_interval_seconds=env_float(
            "NOTICEWATCH_SEND_INTERVAL_SECONDS", DEFAULT_SEND_INTERVAL_SECONDS
        ),
        detail_interval_seconds=env_float(
            "NOTICEWATCH_DETAIL_INTERVAL_SECONDS", DEFAULT_DETAIL_INTERVAL_SECONDS
        ),
    )
