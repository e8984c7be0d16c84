# tests/conftest.py
"""Shared fixtures for llminbox tests."""

import pytest

from llminbox.models import CapturePayload, SourceType, Transcript, TranscriptSegment
from llminbox.service import InboxService
from llminbox.storage.snippets import SnippetStore
from llminbox.storage.sqlite import SQLiteKeyValueStore
from llminbox.storage.transcripts import TranscriptStore


SAMPLE_VTT = (
    "WEBVTT\n"
    "\n"
    "1\n"
    "00:00:00.000 --> 00:00:02.000\n"
    "Hello\n"
    "\n"
    "2\n"
    "00:00:02.500 --> 00:00:04.500\n"
    "World\n"
)


class FakePage:
    """In-memory Page: selectors listed in `ready` match, others do not."""

    def __init__(
        self,
        url="https://example.com/article",
        title="An Article",
        text="Body text of the article.",
        ready=("body",),
        description="A description",
        lang="en",
    ):
        self.url = url
        self.title = title
        self.lang = lang
        self._text = text
        self._ready = set(ready)
        self._description = description
        self.queries = 0

    def query(self, selector):
        self.queries += 1
        return {"selector": selector} if selector in self._ready else None

    def meta(self, name):
        return self._description if name == "description" else ""

    def body_text(self):
        return self._text


@pytest.fixture
def sample_vtt():
    return SAMPLE_VTT


@pytest.fixture
def kv():
    """SQLiteKeyValueStore backed by in-memory database."""
    store = SQLiteKeyValueStore(":memory:")
    yield store
    store.close()


@pytest.fixture
def snippet_store(kv):
    return SnippetStore(kv)


@pytest.fixture
def transcript_store(kv):
    return TranscriptStore(kv)


@pytest.fixture
def sample_payload():
    return CapturePayload(
        title="Python docs",
        url="https://docs.python.org/3/library/asyncio.html",
        text="asyncio is a library to write concurrent code.",
        source_type=SourceType.WEB_SELECTION,
    )


@pytest.fixture
def sample_segments():
    return [
        TranscriptSegment(ts="0:00", seconds=0.0, text="Hello and welcome."),
        TranscriptSegment(ts="0:05", seconds=5.0, text="Today we talk about caching."),
        TranscriptSegment(ts="0:12", seconds=12.0, text="Thanks for watching."),
    ]


@pytest.fixture
def sample_transcript(sample_segments):
    return Transcript(
        video_id="dQw4w9WgXcQ",
        title="Caching 101",
        url="https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        captured_at="2025-06-15T12:00:00Z",
        segments=sample_segments,
    )


@pytest.fixture
def fake_page():
    return FakePage()


@pytest.fixture
def service(kv):
    """InboxService over in-memory storage with a mocked caption source."""
    from unittest.mock import MagicMock

    from llminbox.captions import parse_vtt
    from llminbox.ingestion.youtube import YouTubeCaptions

    captions = MagicMock(spec=YouTubeCaptions)
    captions.fetch_info.return_value = {"id": "dQw4w9WgXcQ", "title": "Caching 101"}
    captions.cues.return_value = parse_vtt(SAMPLE_VTT)
    return InboxService(kv, captions=captions)
