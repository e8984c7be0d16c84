"""Snippet collection with dedup-on-insert."""

import logging
import uuid
from datetime import datetime, timezone

from llminbox.fingerprint import fingerprint, identity_text
from llminbox.models import CapturePayload, Snippet
from llminbox.storage.keyvalue import KeyValueStore

logger = logging.getLogger(__name__)


class SnippetStore:
    """Ordered (newest-first) snippet collection, deduplicated by content hash.

    The whole collection is the unit of persistence: every mutation reads
    the full list, changes it in memory and writes it back. Two coroutines
    interleaving between the read and the write can therefore lose one
    insert. Single-writer-at-a-time is assumed, not enforced.
    """

    KEY = "snippets"

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv

    async def get_all(self) -> list[Snippet]:
        """Return every snippet, newest first."""
        raw = await self._kv.get(self.KEY, [])
        return [Snippet.model_validate(item) for item in raw]

    async def set_all(self, items: list[Snippet]) -> None:
        """Replace the whole collection."""
        await self._kv.set(self.KEY, [s.model_dump(mode="json") for s in items])

    async def get(self, snippet_id: str) -> Snippet | None:
        """Retrieve a snippet by id. Returns None if not found."""
        for snippet in await self.get_all():
            if snippet.id == snippet_id:
                return snippet
        return None

    async def add_if_new(self, payload: CapturePayload) -> Snippet | None:
        """Insert payload unless a snippet with the same fingerprint exists.

        Returns:
            The stored Snippet, or None if it was a duplicate (nothing written).
        """
        content_hash = fingerprint(identity_text(payload))
        items = await self.get_all()
        if any(s.content_hash == content_hash for s in items):
            logger.debug("Duplicate capture skipped: %s", content_hash[:12])
            return None

        snippet = Snippet(
            **payload.model_dump(),
            id=uuid.uuid4().hex,
            content_hash=content_hash,
            captured_at=datetime.now(timezone.utc),
        )
        items.insert(0, snippet)
        await self.set_all(items)
        logger.info("Snippet stored: %s (%s)", snippet.id, snippet.source_type.value)
        return snippet

    async def remove_by_id(self, snippet_id: str) -> bool:
        """Remove a snippet. No write happens if the id is absent.

        Returns:
            True if a snippet was removed.
        """
        items = await self.get_all()
        remaining = [s for s in items if s.id != snippet_id]
        if len(remaining) == len(items):
            return False
        await self.set_all(remaining)
        return True

    async def update_by_id(
        self,
        snippet_id: str,
        *,
        tags: list[str] | None = None,
        note: str | None = None,
    ) -> Snippet | None:
        """Update the annotation fields of a snippet.

        Captured content is immutable; only tags and note can change.

        Returns:
            The updated Snippet, or None if the id is absent.
        """
        items = await self.get_all()
        for index, snippet in enumerate(items):
            if snippet.id != snippet_id:
                continue
            updates = {}
            if tags is not None:
                updates["tags"] = tags
            if note is not None:
                updates["note"] = note
            items[index] = snippet.model_copy(update=updates)
            await self.set_all(items)
            return items[index]
        return None

    async def clear(self) -> None:
        """Delete every snippet."""
        await self.set_all([])
