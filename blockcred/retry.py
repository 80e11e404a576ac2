"""
Bounded Retry
==============

A small polling primitive: call ``check`` up to ``attempts`` times,
sleeping ``interval`` seconds before each call, and return the first
non-None result. Exhaustion is not an error; the caller gets a
RetryOutcome with ``value=None`` and decides what that means.

Used for receipt polling on PoA networks, where the interval is the
block period. A blocking version (threads) and an asyncio version
(tasks) share the same contract, including cancellation.

Usage:
    outcome = poll_until(lambda: client.receipt(tx), interval=5.0, attempts=12)
    if outcome.value is None:
        ...  # still pending
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

logger = logging.getLogger("blockcred.retry")

T = TypeVar("T")


@dataclass
class RetryOutcome(Generic[T]):
    """Result of a bounded poll."""
    value: Optional[T]
    attempts: int
    cancelled: bool = False

    @property
    def succeeded(self) -> bool:
        return self.value is not None


def poll_until(
    check: Callable[[], Optional[T]],
    interval: float,
    attempts: int,
    sleep: Callable[[float], Any] = time.sleep,
    cancel: Optional[threading.Event] = None,
    label: str = "poll",
) -> RetryOutcome[T]:
    """
    Blocking bounded poll.

    Exceptions raised by ``check`` count as a miss for that attempt.
    If ``cancel`` is set, polling stops before the next attempt.

    Args:
        check: Returns a value when done, None while pending.
        interval: Seconds to wait before each attempt.
        attempts: Maximum number of check calls (>= 1).
        sleep: Sleep function; injectable for tests.
        cancel: Optional event that aborts the poll.
        label: Name used in log lines.
    """
    if attempts < 1:
        raise ValueError("attempts must be >= 1")

    for attempt in range(1, attempts + 1):
        if cancel is not None and cancel.is_set():
            return RetryOutcome(value=None, attempts=attempt - 1, cancelled=True)
        sleep(interval)
        try:
            value = check()
        except Exception as e:
            logger.debug(f"{label}: attempt {attempt}/{attempts} failed: {e}")
            value = None
        if value is not None:
            return RetryOutcome(value=value, attempts=attempt)
        if attempt < attempts:
            logger.info(f"{label}: waiting (attempt {attempt}/{attempts})")

    return RetryOutcome(value=None, attempts=attempts)


async def poll_until_async(
    check: Callable[[], Awaitable[Optional[T]]],
    interval: float,
    attempts: int,
    cancel: Optional[asyncio.Event] = None,
    label: str = "poll",
) -> RetryOutcome[T]:
    """
    Task-based twin of :func:`poll_until`.

    Task cancellation (``asyncio.CancelledError``) propagates as usual;
    ``cancel`` offers a cooperative stop without raising.
    """
    if attempts < 1:
        raise ValueError("attempts must be >= 1")

    for attempt in range(1, attempts + 1):
        if cancel is not None and cancel.is_set():
            return RetryOutcome(value=None, attempts=attempt - 1, cancelled=True)
        await asyncio.sleep(interval)
        try:
            value = await check()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.debug(f"{label}: attempt {attempt}/{attempts} failed: {e}")
            value = None
        if value is not None:
            return RetryOutcome(value=value, attempts=attempt)

    return RetryOutcome(value=None, attempts=attempts)
