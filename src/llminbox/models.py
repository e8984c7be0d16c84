"""Domain models for llminbox."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field


class SourceType(str, Enum):
    """Where a captured snippet came from."""

    WEB = "web"
    WEB_SELECTION = "web_selection"
    PAGE_EXTRACT = "page_extract"
    YOUTUBE_TRANSCRIPT = "youtube_transcript"
    YOUTUBE_CAPTION = "youtube_caption"
    YOUTUBE_BOOKMARK = "youtube_bookmark"
    LINKEDIN = "linkedin"


class CapturePayload(BaseModel):
    """Raw result of an extraction, before it is fingerprinted and stored."""

    title: str = ""
    url: str = ""
    text: str = ""
    source_type: SourceType = SourceType.WEB
    meta: dict[str, Any] = Field(default_factory=dict)


class Snippet(CapturePayload):
    """A captured unit of text as held in the store."""

    id: str
    content_hash: str
    captured_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    tags: list[str] = Field(default_factory=list)
    note: str = ""


class TranscriptSegment(BaseModel):
    """One line of a video transcript."""

    ts: str  # display timestamp, e.g. "1:23"
    seconds: float
    text: str


class Transcript(BaseModel):
    """A video transcript, one per video_id."""

    video_id: str
    title: str = ""
    url: str = ""
    captured_at: str = ""  # ISO-8601 as delivered by the capture event
    segments: list[TranscriptSegment] = Field(default_factory=list)
    source: Literal["youtube"] = "youtube"

    @computed_field
    @property
    def line_count(self) -> int:
        """Number of transcript segments."""
        return len(self.segments)


class Cue(BaseModel):
    """A single timed caption entry. Never persisted."""

    model_config = ConfigDict(frozen=True)

    start: float  # seconds
    end: float  # seconds
    text: str


class CaptureOutcome(BaseModel):
    """Result of one capture attempt.

    A duplicate is a normal outcome: status is "duplicate" and record is None.
    A failed attempt still stores a record whose text carries the reason.
    """

    status: Literal["stored", "duplicate", "failed"]
    record: Snippet | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status != "failed"
