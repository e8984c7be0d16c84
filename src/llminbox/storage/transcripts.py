"""Transcript collection keyed by video_id, with merge-on-upsert."""

import logging
from datetime import datetime, timezone

from llminbox.models import Transcript
from llminbox.storage.keyvalue import KeyValueStore

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_captured_at(value: str | None) -> datetime:
    """Parse an ISO-8601 capture time; missing or unparseable values are the epoch."""
    if not value:
        return _EPOCH
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def merge_transcripts(existing: Transcript, incoming: Transcript) -> Transcript:
    """Merge a new capture event into an existing transcript.

    Fields of the incoming capture win, except:
      - captured_at keeps the later of the two timestamps;
      - segments are only replaced by a non-empty incoming list.
    """
    merged = existing.model_dump()
    merged.update(incoming.model_dump(exclude_unset=True, exclude={"line_count"}))
    merged.pop("line_count", None)

    if parse_captured_at(existing.captured_at) > parse_captured_at(incoming.captured_at):
        merged["captured_at"] = existing.captured_at
    else:
        merged["captured_at"] = incoming.captured_at

    merged["segments"] = incoming.segments if incoming.segments else existing.segments
    merged["source"] = "youtube"
    return Transcript.model_validate(merged)


class TranscriptStore:
    """Map of video_id to Transcript, persisted as one collection."""

    KEY = "transcripts"

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv

    async def _load(self) -> dict[str, Transcript]:
        raw = await self._kv.get(self.KEY, {})
        return {vid: Transcript.model_validate(data) for vid, data in raw.items()}

    async def _save(self, items: dict[str, Transcript]) -> None:
        await self._kv.set(
            self.KEY,
            {vid: t.model_dump(mode="json", exclude={"line_count"}) for vid, t in items.items()},
        )

    async def upsert(self, capture: Transcript) -> Transcript:
        """Insert a transcript, or merge it into the one stored for the same video_id."""
        items = await self._load()
        existing = items.get(capture.video_id)
        if existing is None:
            stored = capture.model_copy(update={"source": "youtube"})
            logger.info("Transcript stored: %s (%d lines)", stored.video_id, stored.line_count)
        else:
            stored = merge_transcripts(existing, capture)
            logger.info("Transcript merged: %s (%d lines)", stored.video_id, stored.line_count)
        items[stored.video_id] = stored
        await self._save(items)
        return stored

    async def get(self, video_id: str) -> Transcript | None:
        """Retrieve a transcript by video_id. Returns None if not found."""
        return (await self._load()).get(video_id)

    async def list_all(self) -> list[Transcript]:
        """All transcripts, most recently captured first."""
        items = await self._load()
        return sorted(
            items.values(),
            key=lambda t: parse_captured_at(t.captured_at),
            reverse=True,
        )

    async def remove(self, video_id: str) -> bool:
        """Remove a transcript. No write happens if video_id is absent."""
        items = await self._load()
        if items.pop(video_id, None) is None:
            return False
        await self._save(items)
        return True
