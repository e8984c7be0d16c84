"""Capture orchestration: extract, fingerprint, dedupe, persist."""

import logging

from llminbox.errors import ExtractionFailure, ListenerNotReady
from llminbox.ingestion.extractors import Extractor
from llminbox.models import CaptureOutcome, Transcript
from llminbox.storage.snippets import SnippetStore
from llminbox.storage.transcripts import TranscriptStore

logger = logging.getLogger(__name__)


class CaptureCoordinator:
    """Runs single capture attempts against the snippet and transcript stores.

    Extraction errors never escape capture(): they become failure records
    stored through the same dedup path, so a failed attempt leaves a trace.
    Storage errors do escape; surfacing them is the caller's job.
    """

    def __init__(self, snippets: SnippetStore, transcripts: TranscriptStore) -> None:
        self._snippets = snippets
        self._transcripts = transcripts

    async def capture(self, extractor: Extractor) -> CaptureOutcome:
        """Run one capture attempt.

        Returns:
            CaptureOutcome with status "stored", "duplicate" or "failed".
        """
        try:
            payload = await self._extract(extractor)
        except ExtractionFailure as e:
            reason = str(e) or type(e).__name__
            logger.warning("Capture failed (%s): %s", type(extractor).__name__, reason)
            return await self._record_failure(extractor, reason)
        except Exception as e:
            reason = str(e) or type(e).__name__
            logger.exception("Unexpected error during capture (%s)", type(extractor).__name__)
            return await self._record_failure(extractor, reason)

        record = await self._snippets.add_if_new(payload)
        if record is None:
            return CaptureOutcome(status="duplicate")
        return CaptureOutcome(status="stored", record=record)

    async def capture_transcript(self, capture: Transcript) -> Transcript:
        """Store a transcript capture event, merging with earlier events for the video."""
        return await self._transcripts.upsert(capture)

    async def _record_failure(self, extractor: Extractor, reason: str) -> CaptureOutcome:
        record = await self._snippets.add_if_new(extractor.failure_payload(reason))
        return CaptureOutcome(status="failed", record=record, error=reason)

    @staticmethod
    async def _extract(extractor: Extractor):
        """Extract, retrying exactly once after prepare() if the listener was not ready."""
        try:
            return await extractor.extract()
        except ListenerNotReady:
            logger.info("Receiver not ready, re-initializing %s", type(extractor).__name__)

        await extractor.prepare()
        try:
            return await extractor.extract()
        except ListenerNotReady as e:
            raise ExtractionFailure(f"Receiver not ready: {e}") from e
