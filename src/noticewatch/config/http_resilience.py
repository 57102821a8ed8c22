"""Configuration types for resilient HTTP clients."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

import httpx

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_USER_AGENT: Final[str] = "noticewatch (+https://github.com/noticewatch/noticewatch)"

TRANSIENT_STATUSES: Final[frozenset[int]] = frozenset({429, 500, 502, 503, 504})
# The Bot API is POST-only; its policy limits retry_exceptions to connect failures.
REPLAYABLE_METHODS: Final[frozenset[str]] = frozenset({"GET", "HEAD", "OPTIONS", "POST"})


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """How often and how patiently a request is repeated.

    ``retries`` counts repeats after the first attempt. The wait starts at
    ``initial_wait`` seconds, doubles per retry up to ``max_wait`` and gains up
    to ``jitter`` random seconds. A ``Retry-After`` header replaces the
    computed wait when ``honor_retry_after`` is set.
    """

    retries: int = 3
    initial_wait: float = 0.5
    max_wait: float = 30.0
    jitter: float = 1.0
    honor_retry_after: bool = True
    retry_methods: frozenset[str] = REPLAYABLE_METHODS
    retry_statuses: frozenset[int] = TRANSIENT_STATUSES
    retry_exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
        httpx.RemoteProtocolError,
    )

    @property
    def attempts(self) -> int:
        return self.retries + 1

    def allows(self, method: str) -> bool:
        return self.retries > 0 and method.upper() in self.retry_methods


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    default_headers: Mapping[str, str] | None = None
    follow_redirects: bool = True
