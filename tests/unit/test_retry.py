"""
Bounded Retry Tests
====================

Attempt counting, exhaustion, cancellation and the asyncio twin.
"""

from __future__ import annotations

import asyncio
import threading

import pytest

from blockcred.retry import poll_until, poll_until_async


class Check:
    """Returns None for the first ``misses`` calls, then ``value``."""

    def __init__(self, misses: int, value="done", error_on=()):
        self.misses = misses
        self.value = value
        self.error_on = set(error_on)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls in self.error_on:
            raise ConnectionError("node hiccup")
        return self.value if self.calls > self.misses else None


class TestPollUntil:

    def test_succeeds_on_third_attempt(self):
        sleeps = []
        outcome = poll_until(Check(2), interval=5.0, attempts=12, sleep=sleeps.append)
        assert outcome.succeeded
        assert outcome.value == "done"
        assert outcome.attempts == 3
        assert sleeps == [5.0, 5.0, 5.0]

    def test_exhaustion_returns_none(self):
        sleeps = []
        check = Check(100)
        outcome = poll_until(check, interval=1.0, attempts=4, sleep=sleeps.append)
        assert outcome.value is None
        assert not outcome.succeeded
        assert outcome.attempts == 4
        assert check.calls == 4
        assert len(sleeps) == 4

    def test_check_errors_count_as_misses(self):
        outcome = poll_until(Check(0, error_on={1, 2}), interval=0, attempts=5, sleep=lambda s: None)
        assert outcome.value == "done"
        assert outcome.attempts == 3

    def test_cancel_before_first_attempt(self):
        cancel = threading.Event()
        cancel.set()
        check = Check(0)
        outcome = poll_until(check, interval=0, attempts=5, sleep=lambda s: None, cancel=cancel)
        assert outcome.cancelled
        assert outcome.attempts == 0
        assert check.calls == 0

    def test_cancel_midway(self):
        cancel = threading.Event()
        check = Check(100)

        def sleep(_):
            if check.calls == 2:
                cancel.set()

        outcome = poll_until(check, interval=0, attempts=10, sleep=sleep, cancel=cancel)
        assert outcome.cancelled
        assert check.calls == 3

    def test_attempts_must_be_positive(self):
        with pytest.raises(ValueError):
            poll_until(Check(0), interval=0, attempts=0)


class TestPollUntilAsync:

    def test_succeeds(self):
        check = Check(1)

        async def acheck():
            return check()

        outcome = asyncio.run(poll_until_async(acheck, interval=0, attempts=3))
        assert outcome.value == "done"
        assert outcome.attempts == 2

    def test_exhaustion(self):
        async def never():
            return None

        outcome = asyncio.run(poll_until_async(never, interval=0, attempts=2))
        assert outcome.value is None
        assert outcome.attempts == 2

    def test_cancel_event(self):
        async def run():
            cancel = asyncio.Event()
            cancel.set()

            async def never():
                return None

            return await poll_until_async(never, interval=0, attempts=5, cancel=cancel)

        outcome = asyncio.run(run())
        assert outcome.cancelled
