"""Content fingerprints used as deduplication keys."""

import hashlib

from llminbox.models import CapturePayload, SourceType


def fingerprint(text: str) -> str:
    """SHA-256 of the UTF-8 encoded text as lowercase hex.

    Used purely for identity, not for security.
    """
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def identity_text(payload: CapturePayload) -> str:
    """Text whose fingerprint identifies a capture.

    Transcripts are identified by title and URL since their segment text
    may arrive incrementally; everything else by text and URL.
    """
    if payload.source_type == SourceType.YOUTUBE_TRANSCRIPT:
        return f"{payload.title}|{payload.url}"
    return f"{payload.text}|{payload.url}"
