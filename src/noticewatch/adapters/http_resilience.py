"""Async HTTP client with retries and rate limiting."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, TypedDict, Unpack

import httpx
from aiolimiter import AsyncLimiter
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from noticewatch.config.http_resilience import (
    DEFAULT_USER_AGENT,
    RateLimit,
    ResilienceConfig,
    RetryPolicy,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from types import TracebackType

    from httpx._client import UseClientDefault
    from httpx._types import (
        AuthTypes,
        HeaderTypes,
        QueryParamTypes,
        RequestContent,
        RequestData,
        TimeoutTypes,
        URLTypes,
    )

__all__ = [
    "RateLimit",
    "ResilienceConfig",
    "ResilientClient",
    "RetryPolicy",
    "build_retrying",
]

log = getLogger(__name__)


class RequestOptions(TypedDict, total=False):
    content: RequestContent | None
    data: RequestData | None
    json: object
    params: QueryParamTypes | None
    headers: HeaderTypes | None
    auth: AuthTypes | UseClientDefault | None
    timeout: TimeoutTypes | UseClientDefault


class AsyncClientOptions(TypedDict, total=False):
    base_url: str
    timeout: TimeoutTypes
    headers: HeaderTypes
    follow_redirects: bool


def _retry_after(response: httpx.Response) -> float | None:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        return None


def _build_wait(policy: RetryPolicy) -> Callable[[RetryCallState], float]:
    backoff = wait_exponential(
        multiplier=policy.initial_wait,
        max=policy.max_wait,
    ) + wait_random(0, policy.jitter)

    def wait(state: RetryCallState) -> float:
        outcome = state.outcome
        if policy.honor_retry_after and outcome is not None and not outcome.failed:
            delay = _retry_after(outcome.result())
            if delay is not None:
                return min(delay, policy.max_wait)
        return backoff(state)

    return wait


def _last_outcome(state: RetryCallState) -> httpx.Response:
    """Hand back the final response, or raise the final exception, once retries run out."""

    if state.outcome is None:  # pragma: no cover
        raise RuntimeError("Retry state has no outcome")
    return state.outcome.result()


def build_retrying(policy: RetryPolicy, name: str) -> AsyncRetrying:
    def log_retry(state: RetryCallState) -> None:
        outcome = state.outcome
        if outcome is None:
            return
        # Exception text can carry the request URL; only the type is logged.
        reason = (
            type(outcome.exception()).__name__
            if outcome.failed
            else f"HTTP {outcome.result().status_code}"
        )
        log.warning("%s: retrying after %s (attempt %s)", name, reason, state.attempt_number)

    return AsyncRetrying(
        stop=stop_after_attempt(policy.attempts),
        wait=_build_wait(policy),
        retry=(
            retry_if_exception_type(policy.retry_exceptions)
            | retry_if_result(lambda response: response.status_code in policy.retry_statuses)
        ),
        before_sleep=log_retry,
        retry_error_callback=_last_outcome,
    )


class ResilientClient:
    def __init__(self, config: ResilienceConfig) -> None:
        self.config = config
        self._limiter: AsyncLimiter | None = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit
            else None
        )

        headers = {"User-Agent": DEFAULT_USER_AGENT}
        if config.default_headers:
            headers.update(config.default_headers)

        client_kwargs: AsyncClientOptions = {
            "timeout": config.timeout_seconds,
            "headers": headers,
            "follow_redirects": config.follow_redirects,
        }
        if config.base_url is not None:
            client_kwargs["base_url"] = config.base_url

        self._client = httpx.AsyncClient(**client_kwargs)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        async def do_request() -> httpx.Response:
            return await self._client.request(method, url, **kwargs)

        if not self.config.retry.allows(method):
            return await self._send(do_request)
        retrying = build_retrying(self.config.retry, self.config.name)
        return await retrying(self._send, do_request)

    async def get(
        self,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(
        self,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def _send(self, func: Callable[[], Awaitable[httpx.Response]]) -> httpx.Response:
        if self._limiter is None:
            return await func()
        async with self._limiter:
            return await func()
