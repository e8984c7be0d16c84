"""Pluggable extractors: how a capture obtains its raw payload.

Page-specific scraping (selectors, profile heuristics) lives behind the
Page protocol; the capture pipeline only sees CapturePayload or an error.
"""

import logging
from abc import ABC, abstractmethod
from typing import Protocol
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from llminbox.config import settings
from llminbox.errors import ExtractionFailure
from llminbox.models import CapturePayload, SourceType
from llminbox.waitfor import Queryable, wait_for

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "\n…[truncated]"


def is_capturable(url: str) -> bool:
    """Only http(s) pages outside the browser's own web store can be captured."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return False
    return parsed.hostname != "chrome.google.com"


def with_timestamp(url: str, seconds: int) -> str:
    """Return url with its t= query parameter set to "<seconds>s"."""
    parsed = urlparse(url)
    query = [(k, v) for k, v in parse_qsl(parsed.query, keep_blank_values=True) if k != "t"]
    query.append(("t", f"{seconds}s"))
    return urlunparse(parsed._replace(query=urlencode(query)))


class Extractor(ABC):
    """A capture source.

    extract() performs the read and returns a payload or raises
    ExtractionFailure (or a subclass). prepare() is the fallback
    initialization run once when the receiving end is not ready.
    """

    @abstractmethod
    async def extract(self) -> CapturePayload:
        """Read the target and return its payload."""

    async def prepare(self) -> None:
        """Re-initialize the extraction capability. No-op by default."""

    def failure_payload(self, reason: str) -> CapturePayload:
        """Payload stored in place of a failed capture."""
        return CapturePayload(text=f"(Capture failed: {reason})")


class StaticExtractor(Extractor):
    """Wraps a payload that is already known, e.g. a text selection sent by a message."""

    def __init__(self, payload: CapturePayload) -> None:
        self._payload = payload

    async def extract(self) -> CapturePayload:
        if not self._payload.text.strip():
            raise ExtractionFailure("Nothing selected")
        return self._payload

    def failure_payload(self, reason: str) -> CapturePayload:
        return self._payload.model_copy(update={"text": f"(Capture failed: {reason})"})


class Page(Queryable, Protocol):
    """Read-only view of a loaded page."""

    url: str
    title: str
    lang: str

    def meta(self, name: str) -> str:
        """Content of <meta name=...>, or "" if absent."""

    def body_text(self) -> str:
        """Rendered text of the page body."""


class PageExtractor(Extractor):
    """Full-page text extract, waiting for a ready selector first."""

    def __init__(
        self,
        page: Page,
        ready_selector: str = "body",
        text_limit: int | None = None,
    ) -> None:
        self._page = page
        self._ready_selector = ready_selector
        self._text_limit = settings.page_text_limit if text_limit is None else text_limit

    async def extract(self) -> CapturePayload:
        if not is_capturable(self._page.url):
            raise ExtractionFailure(f"Page cannot be captured: {self._page.url}")

        await wait_for(self._ready_selector, self._page)

        text = self._page.body_text() or ""
        if len(text) > self._text_limit:
            text = text[: self._text_limit] + TRUNCATION_MARKER

        return CapturePayload(
            title=self._page.title,
            url=self._page.url,
            text=text,
            source_type=SourceType.PAGE_EXTRACT,
            meta={
                "description": self._page.meta("description"),
                "lang": self._page.lang or "",
            },
        )

    def failure_payload(self, reason: str) -> CapturePayload:
        return CapturePayload(
            title=self._page.title,
            url=self._page.url,
            text=f"(Page capture failed: {reason})",
            source_type=SourceType.PAGE_EXTRACT,
        )


class BookmarkExtractor(Extractor):
    """Bookmark of a video position; the stored URL carries t=<seconds>s."""

    def __init__(self, title: str, url: str, seconds: float) -> None:
        self._title = title
        self._url = url
        self._seconds = int(seconds)

    async def extract(self) -> CapturePayload:
        return CapturePayload(
            title=self._title,
            url=with_timestamp(self._url, self._seconds),
            source_type=SourceType.YOUTUBE_BOOKMARK,
            meta={"seconds": self._seconds},
        )
