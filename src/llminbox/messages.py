"""Typed request/response contract for capture messages.

Every request carries a ``type`` tag and an optional ``correlation_id``
that is echoed back on its response, so callers can match replies to
requests without relying on call order.
"""

import logging
from collections.abc import Callable
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from llminbox.errors import ExtractionFailure
from llminbox.ingestion.extractors import Page
from llminbox.models import CapturePayload, Snippet, SourceType, Transcript, TranscriptSegment
from llminbox.service import InboxService

logger = logging.getLogger(__name__)


class Request(BaseModel):
    correlation_id: str | None = None


class CaptureSelection(Request):
    type: Literal["capture_selection"] = "capture_selection"
    text: str
    title: str = ""
    url: str = ""
    source_type: SourceType = SourceType.WEB_SELECTION


class CapturePage(Request):
    type: Literal["capture_page"] = "capture_page"


class TranscriptCaptured(Request):
    type: Literal["transcript_captured"] = "transcript_captured"
    video_id: str
    title: str = ""
    url: str = ""
    captured_at: str = ""
    segments: list[TranscriptSegment] = Field(default_factory=list)


class ListTranscripts(Request):
    type: Literal["list_transcripts"] = "list_transcripts"


class GetTranscript(Request):
    type: Literal["get_transcript"] = "get_transcript"
    video_id: str


class RemoveTranscript(Request):
    type: Literal["remove_transcript"] = "remove_transcript"
    video_id: str


class CaptionWindow(Request):
    type: Literal["caption_window"] = "caption_window"
    url: str  # video whose captions to read
    seconds: float
    window_seconds: float | None = None


AnyRequest = Annotated[
    CaptureSelection
    | CapturePage
    | TranscriptCaptured
    | ListTranscripts
    | GetTranscript
    | RemoveTranscript
    | CaptionWindow,
    Field(discriminator="type"),
]

_request_adapter = TypeAdapter(AnyRequest)


class Response(BaseModel):
    ok: bool
    correlation_id: str | None = None
    error: str | None = None


class CaptureResponse(Response):
    status: Literal["stored", "duplicate", "failed"] | None = None
    record: Snippet | None = None


class StoredTranscript(BaseModel):
    video_id: str
    line_count: int


class TranscriptCapturedResponse(Response):
    stored: StoredTranscript | None = None


class TranscriptSummary(BaseModel):
    video_id: str
    title: str
    url: str
    captured_at: str
    line_count: int


class ListTranscriptsResponse(Response):
    transcripts: list[TranscriptSummary] = Field(default_factory=list)


class GetTranscriptResponse(Response):
    transcript: Transcript | None = None


class CaptionWindowResponse(Response):
    text: str = ""


def parse_request(data: dict[str, Any]) -> AnyRequest:
    """Validate a raw message into its typed request.

    Raises:
        pydantic.ValidationError: On an unknown type or a bad payload.
    """
    return _request_adapter.validate_python(data)


class MessageRouter:
    """Routes typed requests to InboxService and builds one response per request.

    Args:
        service: The inbox service.
        page_provider: Returns the page a capture_page request should read
            (the active tab). Without it capture_page requests fail.
    """

    def __init__(
        self,
        service: InboxService,
        page_provider: Callable[[], Page] | None = None,
    ) -> None:
        self._service = service
        self._page_provider = page_provider
        self._handlers = {
            CaptureSelection: self._capture_selection,
            CapturePage: self._capture_page,
            TranscriptCaptured: self._transcript_captured,
            ListTranscripts: self._list_transcripts,
            GetTranscript: self._get_transcript,
            RemoveTranscript: self._remove_transcript,
            CaptionWindow: self._caption_window,
        }

    @property
    def service(self) -> InboxService:
        return self._service

    async def handle(self, data: dict[str, Any]) -> Response:
        """Validate and dispatch a raw message."""
        try:
            request = parse_request(data)
        except ValidationError as e:
            logger.warning("Rejected message %r: %s", data.get("type"), e.error_count())
            return Response(ok=False, correlation_id=data.get("correlation_id"), error=str(e))
        return await self.dispatch(request)

    async def dispatch(self, request: Request) -> Response:
        """Run a typed request and return its response."""
        handler = self._handlers[type(request)]
        response = await handler(request)
        response.correlation_id = request.correlation_id
        return response

    async def _capture_selection(self, request: CaptureSelection) -> CaptureResponse:
        payload = CapturePayload(
            title=request.title,
            url=request.url,
            text=request.text,
            source_type=request.source_type,
        )
        outcome = await self._service.capture_selection(payload)
        return CaptureResponse(
            ok=outcome.ok, status=outcome.status, record=outcome.record, error=outcome.error
        )

    async def _capture_page(self, request: CapturePage) -> CaptureResponse:
        if self._page_provider is None:
            return CaptureResponse(ok=False, error="No page available to capture")
        outcome = await self._service.capture_page(self._page_provider())
        return CaptureResponse(
            ok=outcome.ok, status=outcome.status, record=outcome.record, error=outcome.error
        )

    async def _transcript_captured(self, request: TranscriptCaptured) -> TranscriptCapturedResponse:
        capture = Transcript.model_validate(
            request.model_dump(exclude={"type", "correlation_id"}, exclude_unset=True)
        )
        stored = await self._service.save_transcript(capture)
        return TranscriptCapturedResponse(
            ok=True,
            stored=StoredTranscript(video_id=stored.video_id, line_count=stored.line_count),
        )

    async def _list_transcripts(self, request: ListTranscripts) -> ListTranscriptsResponse:
        transcripts = await self._service.list_transcripts()
        return ListTranscriptsResponse(
            ok=True,
            transcripts=[
                TranscriptSummary(
                    video_id=t.video_id,
                    title=t.title,
                    url=t.url,
                    captured_at=t.captured_at,
                    line_count=t.line_count,
                )
                for t in transcripts
            ],
        )

    async def _get_transcript(self, request: GetTranscript) -> GetTranscriptResponse:
        transcript = await self._service.get_transcript(request.video_id)
        return GetTranscriptResponse(ok=True, transcript=transcript)

    async def _remove_transcript(self, request: RemoveTranscript) -> Response:
        await self._service.transcripts.remove(request.video_id)
        return Response(ok=True)

    async def _caption_window(self, request: CaptionWindow) -> CaptionWindowResponse:
        try:
            text = await self._service.caption_window(
                request.url, request.seconds, request.window_seconds
            )
        except ExtractionFailure as e:
            return CaptionWindowResponse(ok=False, error=str(e))
        except Exception as e:
            logger.exception("Caption window failed for %s", request.url)
            return CaptionWindowResponse(ok=False, error=str(e) or type(e).__name__)
        return CaptionWindowResponse(ok=True, text=text)
