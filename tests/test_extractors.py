# tests/test_extractors.py
"""Tests for the page, selection and bookmark extractors."""

import asyncio

import pytest

from llminbox.errors import ExtractionFailure, ExtractionTimeout
from llminbox.ingestion.extractors import (
    TRUNCATION_MARKER,
    BookmarkExtractor,
    PageExtractor,
    StaticExtractor,
    is_capturable,
    with_timestamp,
)
from llminbox.models import CapturePayload, SourceType

from conftest import FakePage


class TestHelpers:
    @pytest.mark.parametrize(
        "url, expected",
        [
            ("https://example.com/a", True),
            ("http://example.com", True),
            ("chrome://extensions", False),
            ("file:///tmp/x.html", False),
            ("https://chrome.google.com/webstore", False),
            ("not a url", False),
            ("", False),
        ],
    )
    def test_is_capturable(self, url, expected):
        assert is_capturable(url) is expected

    def test_with_timestamp_adds(self):
        url = with_timestamp("https://www.youtube.com/watch?v=dQw4w9WgXcQ", 83)
        assert url == "https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=83s"

    def test_with_timestamp_replaces(self):
        url = with_timestamp("https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=10s", 20)
        assert url == "https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=20s"


class TestPageExtractor:
    def test_extract(self, fake_page):
        payload = asyncio.run(PageExtractor(fake_page).extract())
        assert payload.title == "An Article"
        assert payload.url == "https://example.com/article"
        assert payload.text == "Body text of the article."
        assert payload.source_type == SourceType.PAGE_EXTRACT
        assert payload.meta == {"description": "A description", "lang": "en"}

    def test_truncates_long_text(self):
        page = FakePage(text="x" * 50)
        payload = asyncio.run(PageExtractor(page, text_limit=10).extract())
        assert payload.text == "x" * 10 + TRUNCATION_MARKER

    def test_uncapturable_url(self):
        page = FakePage(url="chrome://settings")
        with pytest.raises(ExtractionFailure):
            asyncio.run(PageExtractor(page).extract())

    def test_waits_for_ready_selector(self, monkeypatch):
        from llminbox.config import settings

        monkeypatch.setattr(settings, "wait_timeout", 0.1)
        monkeypatch.setattr(settings, "poll_interval", 0.01)
        page = FakePage(ready=())
        with pytest.raises(ExtractionTimeout):
            asyncio.run(PageExtractor(page, ready_selector="article").extract())
        assert page.queries > 1

    def test_failure_payload_keeps_page_identity(self, fake_page):
        payload = PageExtractor(fake_page).failure_payload("boom")
        assert payload.url == fake_page.url
        assert "boom" in payload.text


class TestStaticExtractor:
    def test_returns_payload(self, sample_payload):
        assert asyncio.run(StaticExtractor(sample_payload).extract()) == sample_payload

    def test_blank_selection_fails(self):
        with pytest.raises(ExtractionFailure):
            asyncio.run(StaticExtractor(CapturePayload(text="   ")).extract())


class TestBookmarkExtractor:
    def test_extract(self):
        extractor = BookmarkExtractor("Caching 101", "https://www.youtube.com/watch?v=dQw4w9WgXcQ", 83.7)
        payload = asyncio.run(extractor.extract())
        assert payload.url.endswith("t=83s")
        assert payload.source_type == SourceType.YOUTUBE_BOOKMARK
        assert payload.meta == {"seconds": 83}
