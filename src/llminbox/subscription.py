"""Start/stop lifecycle for trigger sources such as tab activation."""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)


class TriggerSubscription:
    """Feeds events from an async source to a handler until stopped.

    A failing handler is logged and the subscription keeps running.
    """

    def __init__(
        self,
        events: Callable[[], AsyncIterator[Any]],
        handler: Callable[[Any], Awaitable[Any]],
        name: str = "trigger",
    ) -> None:
        self._events = events
        self._handler = handler
        self._name = name
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Begin consuming events. Calling start() on a running subscription is a no-op."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name=f"subscription:{self._name}")
        logger.info("Subscription started: %s", self._name)

    async def stop(self) -> None:
        """Stop consuming events and wait for the consumer task to finish."""
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Subscription stopped: %s", self._name)

    async def _run(self) -> None:
        async for event in self._events():
            try:
                await self._handler(event)
            except Exception:
                logger.exception("Subscription %s handler failed for %r", self._name, event)
