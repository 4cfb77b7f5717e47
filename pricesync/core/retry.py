"""Bounded retry for extractions that can come back empty while a page settles."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional, TypeVar

from tenacity import AsyncRetrying, RetryCallState, retry_if_result, stop_after_attempt, wait_fixed

from pricesync.utils.logger import get_logger

log = get_logger(__name__)

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _before_sleep(label: str) -> Callable[[RetryCallState], None]:
    def _log(retry_state: RetryCallState) -> None:
        wait = retry_state.next_action.sleep if retry_state.next_action else 0
        log.warning(f"Empty result for {label} (attempt {retry_state.attempt_number}), retrying in {wait:.1f}s")

    return _log


async def retry_while_empty(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    attempts: int = 3,
    delay: float = 3.0,
    sleep: Optional[SleepFn] = None,
    label: str = "extraction",
) -> T:
    """
    Await ``func(*args)`` until it returns a non-empty value, at most ``attempts`` times.

    ``func`` may be a coroutine function or any callable returning an
    awaitable (a lambda or ``functools.partial``). Waits ``delay`` seconds
    between attempts using ``sleep`` (``asyncio.sleep`` unless a fake clock
    is injected). Exceptions raised by ``func`` are not
    retried and propagate unchanged. When every attempt comes back empty the
    last (empty) value is returned.
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_fixed(delay),
        retry=retry_if_result(is_empty),
        sleep=sleep or asyncio.sleep,
        before_sleep=_before_sleep(label),
        retry_error_callback=lambda state: state.outcome.result(),
        reraise=True,
    )

    # tenacity hands back the awaitable of a plain callable unawaited
    async def attempt() -> T:
        return await func(*args)

    return await retrying(attempt)


__all__ = ["retry_while_empty", "is_empty"]
