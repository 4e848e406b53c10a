"""Retry-with-backoff and model fallback for text-generation calls.

The policy is kept apart from prompt construction: callers hand over
zero-argument coroutine factories and get back the first successful result.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

import httpx
import openai
import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")

_TRANSIENT_MARKERS = (
    "overloaded",
    "rate_limit",
    "rate limit",
    "temporarily unavailable",
    "service unavailable",
    "try again later",
    "503",
    "529",
)

_TRANSIENT_TYPES = (
    openai.RateLimitError,
    openai.APITimeoutError,
    openai.APIConnectionError,
    openai.InternalServerError,
    httpx.TimeoutException,
    httpx.TransportError,
    TimeoutError,
)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff."""

    max_attempts: int = 3
    initial_wait: float = 1.0
    max_wait: float = 8.0


def is_transient_error(exc: BaseException) -> bool:
    """True for failures worth retrying: overload, rate limit, 5xx, timeouts."""
    if isinstance(exc, _TRANSIENT_TYPES):
        return True
    message = str(exc).lower()
    return any(marker in message for marker in _TRANSIENT_MARKERS)


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "llm_retrying",
        attempt=retry_state.attempt_number,
        error=str(exc) if exc else None,
        wait_seconds=round(retry_state.next_action.sleep, 2) if retry_state.next_action else None
    )


async def call_with_retry(
    call: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    is_retryable: Callable[[BaseException], bool] = is_transient_error,
) -> T:
    """Run *call*, retrying retryable failures with exponential backoff.

    The last exception is re-raised once attempts are exhausted; errors that
    are not retryable propagate on the first attempt.
    """
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(max(1, policy.max_attempts)),
        wait=wait_exponential(multiplier=policy.initial_wait, max=policy.max_wait),
        retry=retry_if_exception(is_retryable),
        before_sleep=_log_retry,
        reraise=True,
    ):
        with attempt:
            return await call()

    raise RuntimeError("retry loop exited without a result")  # pragma: no cover


async def with_retry_and_fallback(
    primary: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    fallback: Optional[Callable[[], Awaitable[T]]] = None,
    is_retryable: Callable[[BaseException], bool] = is_transient_error,
) -> T:
    """Retry *primary*; if it is still failing transiently, try *fallback*.

    The fallback gets the same retry policy. A non-transient primary failure
    is raised as-is and the fallback is never called.
    """
    try:
        return await call_with_retry(primary, policy, is_retryable)
    except Exception as exc:
        if fallback is None or not is_retryable(exc):
            raise
        logger.warning(
            "llm_primary_exhausted_using_fallback",
            attempts=policy.max_attempts,
            error=str(exc)
        )
        return await call_with_retry(fallback, policy, is_retryable)
