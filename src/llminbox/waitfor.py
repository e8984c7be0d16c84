"""Polling wait-for primitive."""

import asyncio
import logging
import time
from typing import Any, Protocol

from llminbox.config import settings
from llminbox.errors import ExtractionTimeout

logger = logging.getLogger(__name__)


class Queryable(Protocol):
    """Anything that can answer a read-only selector query (a DOM root, a page)."""

    def query(self, selector: str) -> Any | None:
        """Return the first match for selector, or None."""


async def wait_for(
    query: str,
    root: Queryable,
    timeout: float | None = None,
    poll_interval: float | None = None,
) -> Any:
    """Wait until root.query(query) returns a match.

    Resolves immediately if the query already matches. Cancelling the task
    that awaits this coroutine stops polling at the next sleep.

    Args:
        query: Selector handed to root.query().
        root: Object to query.
        timeout: Seconds before giving up. Defaults to settings.wait_timeout.
        poll_interval: Seconds between queries. Defaults to settings.poll_interval.

    Returns:
        The first non-None query result.

    Raises:
        ExtractionTimeout: If nothing matched within timeout.
    """
    timeout = settings.wait_timeout if timeout is None else timeout
    poll_interval = settings.poll_interval if poll_interval is None else poll_interval

    started = time.monotonic()
    while True:
        element = root.query(query)
        if element is not None:
            return element

        elapsed = time.monotonic() - started
        if elapsed >= timeout:
            logger.warning("wait_for gave up on %r after %.2fs", query, elapsed)
            raise ExtractionTimeout(query, elapsed)

        await asyncio.sleep(min(poll_interval, timeout - elapsed))
