# tests/test_subscription.py
"""Tests for TriggerSubscription."""

import asyncio

from llminbox.subscription import TriggerSubscription


def _queue_source(queue):
    async def events():
        while True:
            yield await queue.get()

    return events


class TestTriggerSubscription:
    def test_delivers_events_until_stopped(self):
        async def run():
            queue = asyncio.Queue()
            seen = []

            async def handler(event):
                seen.append(event)

            sub = TriggerSubscription(_queue_source(queue), handler, name="tabs")
            sub.start()
            assert sub.running
            await queue.put("tab-1")
            await queue.put("tab-2")
            await asyncio.sleep(0.01)
            await sub.stop()
            assert not sub.running
            await queue.put("tab-3")
            await asyncio.sleep(0.01)
            return seen

        assert asyncio.run(run()) == ["tab-1", "tab-2"]

    def test_handler_error_does_not_stop(self):
        async def run():
            queue = asyncio.Queue()
            seen = []

            async def handler(event):
                if event == "bad":
                    raise RuntimeError("boom")
                seen.append(event)

            sub = TriggerSubscription(_queue_source(queue), handler)
            sub.start()
            for event in ("bad", "good"):
                await queue.put(event)
            await asyncio.sleep(0.01)
            await sub.stop()
            return seen

        assert asyncio.run(run()) == ["good"]

    def test_start_twice_is_noop_and_stop_idempotent(self):
        async def run():
            queue = asyncio.Queue()

            async def handler(event):
                pass

            sub = TriggerSubscription(_queue_source(queue), handler)
            sub.start()
            first = sub._task
            sub.start()
            assert sub._task is first
            await sub.stop()
            await sub.stop()
            return sub.running

        assert asyncio.run(run()) is False
