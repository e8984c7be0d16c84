"""FastMCP server: thin wrapper exposing the capture messages as MCP tools."""

from fastmcp import FastMCP

from llminbox.config import settings
from llminbox.messages import (
    CaptionWindow,
    CaptureSelection,
    GetTranscript,
    ListTranscripts,
    MessageRouter,
    RemoveTranscript,
    TranscriptCaptured,
)
from llminbox.models import SourceType, TranscriptSegment
from llminbox.service import InboxService, SnippetNotFoundError
from llminbox.storage.sqlite import SQLiteKeyValueStore


mcp = FastMCP(
    name="llminbox",
    instructions=(
        "llminbox holds text captured while browsing: selections, page extracts, "
        "caption windows and full video transcripts. Use list_snippets and "
        "list_transcripts to read the inbox, and capture_selection or "
        "transcript_captured to add to it."
    ),
)

_router: MessageRouter | None = None


def _get_router() -> MessageRouter:
    """Lazy-initialise the router singleton with default dependencies."""
    global _router
    if _router is None:
        settings.ensure_dirs()
        _router = MessageRouter(InboxService(SQLiteKeyValueStore()))
    return _router


def _service() -> InboxService:
    return _get_router().service


@mcp.tool(annotations={"readOnlyHint": False, "idempotentHint": True})
async def capture_selection(
    text: str, title: str = "", url: str = "", source_type: str = "web_selection"
) -> dict:
    """Save a piece of text to the inbox. Identical text from the same URL is stored once.

    Args:
        text: The captured text.
        title: Title of the page it came from.
        url: URL of the page it came from.
        source_type: One of web, web_selection, page_extract, linkedin, ...
    """
    request = CaptureSelection(
        text=text, title=title, url=url, source_type=SourceType(source_type)
    )
    response = await _get_router().dispatch(request)
    return response.model_dump(mode="json")


@mcp.tool(annotations={"readOnlyHint": False, "idempotentHint": True})
async def transcript_captured(
    video_id: str,
    title: str = "",
    url: str = "",
    captured_at: str = "",
    segments: list[TranscriptSegment] | None = None,
) -> dict:
    """Store a video transcript, merging with any earlier capture of the same video.

    Args:
        video_id: YouTube video ID.
        title: Video title.
        url: Watch URL.
        captured_at: ISO-8601 capture time.
        segments: Transcript lines as {ts, seconds, text}. Empty keeps stored lines.
    """
    # omitted metadata must not overwrite what an earlier capture stored
    given = {"title": title, "url": url, "captured_at": captured_at}
    request = TranscriptCaptured(
        video_id=video_id,
        segments=segments or [],
        **{k: v for k, v in given.items() if v},
    )
    response = await _get_router().dispatch(request)
    return response.model_dump(mode="json")


@mcp.tool(annotations={"readOnlyHint": True})
async def list_transcripts() -> dict:
    """List stored transcripts (metadata and line count), newest first."""
    response = await _get_router().dispatch(ListTranscripts())
    return response.model_dump(mode="json")


@mcp.tool(annotations={"readOnlyHint": True})
async def get_transcript(video_id: str) -> dict:
    """Get a stored transcript with all of its lines.

    Args:
        video_id: YouTube video ID.
    """
    response = await _get_router().dispatch(GetTranscript(video_id=video_id))
    return response.model_dump(mode="json")


@mcp.tool(annotations={"readOnlyHint": False, "destructiveHint": True})
async def remove_transcript(video_id: str) -> dict:
    """Delete a stored transcript.

    Args:
        video_id: YouTube video ID.
    """
    response = await _get_router().dispatch(RemoveTranscript(video_id=video_id))
    return response.model_dump(mode="json")


@mcp.tool(annotations={"readOnlyHint": True})
async def caption_window(url: str, seconds: float, window_seconds: float | None = None) -> dict:
    """Read the captions spoken around a moment of a YouTube video.

    Args:
        url: YouTube watch URL.
        seconds: Playback position in seconds.
        window_seconds: Seconds before and after the position (default 20).
    """
    request = CaptionWindow(url=url, seconds=seconds, window_seconds=window_seconds)
    response = await _get_router().dispatch(request)
    return response.model_dump(mode="json")


@mcp.tool(annotations={"readOnlyHint": True})
async def list_snippets(limit: int = 50) -> list[dict]:
    """List captured snippets, newest first.

    Args:
        limit: Maximum number of snippets (default 50).
    """
    snippets = await _service().list_snippets()
    return [s.model_dump(mode="json") for s in snippets[:limit]]


@mcp.tool(annotations={"readOnlyHint": False, "destructiveHint": True})
async def remove_snippet(snippet_id: str) -> dict:
    """Delete a captured snippet.

    Args:
        snippet_id: Snippet id as returned by list_snippets.
    """
    try:
        await _service().remove_snippet(snippet_id)
    except SnippetNotFoundError as e:
        return {"ok": False, "error": str(e)}
    return {"ok": True}
