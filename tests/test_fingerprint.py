# tests/test_fingerprint.py
"""Tests for content fingerprints."""

from llminbox.fingerprint import fingerprint, identity_text
from llminbox.models import CapturePayload, SourceType


class TestFingerprint:
    def test_known_digest(self):
        assert fingerprint("") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"

    def test_deterministic(self):
        assert fingerprint("hello|https://a.com") == fingerprint("hello|https://a.com")

    def test_distinct_inputs(self):
        assert fingerprint("hello|https://a.com") != fingerprint("hello|https://b.com")

    def test_lowercase_hex(self):
        digest = fingerprint("Grüße")
        assert len(digest) == 64
        assert digest == digest.lower()
        int(digest, 16)


class TestIdentityText:
    def test_snippet_uses_text_and_url(self):
        payload = CapturePayload(title="T", url="https://a.com", text="body")
        assert identity_text(payload) == "body|https://a.com"

    def test_transcript_uses_title_and_url(self):
        payload = CapturePayload(
            title="Video",
            url="https://youtube.com/watch?v=123",
            text="full transcript text",
            source_type=SourceType.YOUTUBE_TRANSCRIPT,
        )
        assert identity_text(payload) == "Video|https://youtube.com/watch?v=123"

    def test_empty_fields(self):
        assert identity_text(CapturePayload()) == "|"
