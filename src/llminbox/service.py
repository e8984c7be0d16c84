"""Core business logic for llminbox."""

import asyncio
import logging

from llminbox.captions import extract_window
from llminbox.config import settings
from llminbox.coordinator import CaptureCoordinator
from llminbox.ingestion.extractors import (
    BookmarkExtractor,
    Page,
    PageExtractor,
    StaticExtractor,
)
from llminbox.ingestion.youtube import CaptionWindowExtractor, YouTubeCaptions
from llminbox.models import CaptureOutcome, CapturePayload, Snippet, Transcript
from llminbox.storage.keyvalue import KeyValueStore
from llminbox.storage.snippets import SnippetStore
from llminbox.storage.transcripts import TranscriptStore

logger = logging.getLogger(__name__)


class SnippetNotFoundError(Exception):
    """Raised when a requested snippet is not in the inbox."""


class TranscriptNotFoundError(Exception):
    """Raised when a requested transcript is not in the inbox."""


class InboxService:
    """Core service layer: single orchestration point for all llminbox operations.

    The CLI, the MCP server and the message router are thin wrappers over
    this class. Dependencies are injected via constructor for testability.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        captions: YouTubeCaptions | None = None,
    ) -> None:
        self.snippets = SnippetStore(kv)
        self.transcripts = TranscriptStore(kv)
        self.coordinator = CaptureCoordinator(self.snippets, self.transcripts)
        self._captions = captions or YouTubeCaptions()

    # -- captures ---------------------------------------------------------

    async def capture_selection(self, payload: CapturePayload) -> CaptureOutcome:
        """Store a text selection (or any payload delivered by a message)."""
        return await self.coordinator.capture(StaticExtractor(payload))

    async def capture_page(self, page: Page) -> CaptureOutcome:
        """Store a full-page text extract."""
        return await self.coordinator.capture(PageExtractor(page))

    async def capture_caption(
        self,
        url: str,
        seconds: float,
        window_seconds: float | None = None,
        title: str = "",
    ) -> CaptureOutcome:
        """Store the captions around a playback position of a YouTube video."""
        extractor = CaptionWindowExtractor(
            url, seconds, window_seconds, title=title, captions=self._captions
        )
        return await self.coordinator.capture(extractor)

    async def bookmark(self, title: str, url: str, seconds: float) -> CaptureOutcome:
        """Store a bookmark of a video position."""
        return await self.coordinator.capture(BookmarkExtractor(title, url, seconds))

    async def caption_window(
        self, url: str, seconds: float, window_seconds: float | None = None
    ) -> str:
        """Caption text around a playback position, without storing anything.

        Raises:
            ExtractionFailure: If the video has no caption track.
            NetworkFailure: If the track cannot be downloaded.
        """
        window = settings.caption_window if window_seconds is None else window_seconds
        cues = await asyncio.to_thread(self._captions.cues, url)
        return extract_window(cues, seconds, window)

    # -- snippets ---------------------------------------------------------

    async def list_snippets(self) -> list[Snippet]:
        """All snippets, newest first."""
        return await self.snippets.get_all()

    async def get_snippet(self, snippet_id: str) -> Snippet:
        """Raises SnippetNotFoundError if the id is unknown."""
        snippet = await self.snippets.get(snippet_id)
        if snippet is None:
            raise SnippetNotFoundError(f"Snippet not found: {snippet_id}")
        return snippet

    async def remove_snippet(self, snippet_id: str) -> None:
        """Raises SnippetNotFoundError if the id is unknown."""
        if not await self.snippets.remove_by_id(snippet_id):
            raise SnippetNotFoundError(f"Snippet not found: {snippet_id}")
        logger.info("Snippet removed: %s", snippet_id)

    async def annotate_snippet(
        self,
        snippet_id: str,
        tags: list[str] | None = None,
        note: str | None = None,
    ) -> Snippet:
        """Set tags and/or note on a snippet.

        Raises:
            SnippetNotFoundError: If the id is unknown.
        """
        snippet = await self.snippets.update_by_id(snippet_id, tags=tags, note=note)
        if snippet is None:
            raise SnippetNotFoundError(f"Snippet not found: {snippet_id}")
        return snippet

    async def clear_snippets(self) -> None:
        await self.snippets.clear()
        logger.info("All snippets cleared")

    # -- transcripts ------------------------------------------------------

    async def save_transcript(self, capture: Transcript) -> Transcript:
        """Store a transcript capture event, merging with earlier events."""
        return await self.coordinator.capture_transcript(capture)

    async def import_transcript(self, url: str) -> Transcript:
        """Fetch a video's full caption track and store it as a transcript.

        Raises:
            ExtractionFailure: If the video has no caption track.
            NetworkFailure: If the track cannot be downloaded.
        """
        capture = await asyncio.to_thread(self._captions.transcript, url)
        return await self.save_transcript(capture)

    async def list_transcripts(self) -> list[Transcript]:
        """All transcripts, most recently captured first."""
        return await self.transcripts.list_all()

    async def get_transcript(self, video_id: str) -> Transcript | None:
        return await self.transcripts.get(video_id)

    async def remove_transcript(self, video_id: str) -> None:
        """Raises TranscriptNotFoundError if video_id is unknown."""
        if not await self.transcripts.remove(video_id):
            raise TranscriptNotFoundError(f"Transcript not found: {video_id}")
        logger.info("Transcript removed: %s", video_id)
