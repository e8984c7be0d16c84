# tests/test_waitfor.py
"""Tests for the polling wait-for primitive."""

import asyncio
import time

import pytest

from llminbox.errors import ExtractionFailure, ExtractionTimeout
from llminbox.waitfor import wait_for


class CountingRoot:
    """Matches `selector` once it has been queried `after` times."""

    def __init__(self, selector="#ready", after=0):
        self.selector = selector
        self.after = after
        self.calls = 0

    def query(self, selector):
        self.calls += 1
        if selector == self.selector and self.calls > self.after:
            return f"<element {selector}>"
        return None


class TestWaitFor:
    def test_resolves_immediately(self):
        root = CountingRoot()
        result = asyncio.run(wait_for("#ready", root, timeout=1.0, poll_interval=0.5))
        assert result == "<element #ready>"
        assert root.calls == 1

    def test_resolves_after_polling(self):
        root = CountingRoot(after=3)
        result = asyncio.run(wait_for("#ready", root, timeout=2.0, poll_interval=0.01))
        assert result == "<element #ready>"
        assert root.calls == 4

    def test_timeout_not_earlier_than_configured(self):
        root = CountingRoot(selector="#never")
        started = time.monotonic()
        with pytest.raises(ExtractionTimeout) as exc_info:
            asyncio.run(wait_for("#missing", root, timeout=0.3, poll_interval=0.05))
        elapsed = time.monotonic() - started
        assert elapsed >= 0.3
        assert elapsed < 2.0
        assert exc_info.value.query == "#missing"
        assert exc_info.value.elapsed >= 0.3
        assert root.calls > 1

    def test_timeout_is_extraction_failure(self):
        with pytest.raises(ExtractionFailure):
            asyncio.run(wait_for("#missing", CountingRoot(), timeout=0.05, poll_interval=0.01))

    def test_cancel_stops_polling(self):
        root = CountingRoot(selector="#never")

        async def run():
            task = asyncio.create_task(wait_for("#missing", root, timeout=10.0, poll_interval=0.01))
            await asyncio.sleep(0.05)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
            calls = root.calls
            await asyncio.sleep(0.05)
            return calls

        calls_at_cancel = asyncio.run(run())
        assert root.calls == calls_at_cancel
