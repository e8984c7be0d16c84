"""CLI interface: thin wrapper over InboxService and the FastMCP server."""

import asyncio

import typer

from llminbox.config import settings
from llminbox.errors import ExtractionFailure
from llminbox.models import CaptureOutcome, CapturePayload, SourceType
from llminbox.service import InboxService, SnippetNotFoundError, TranscriptNotFoundError
from llminbox.storage.sqlite import SQLiteKeyValueStore


app = typer.Typer(
    name="llminbox",
    help="Collect text from the web into a deduplicated inbox for LLM pipelines.",
    no_args_is_help=True,
)


def _get_service() -> InboxService:
    """Create a service instance with default dependencies."""
    settings.ensure_dirs()
    return InboxService(SQLiteKeyValueStore())


def _report(outcome: CaptureOutcome) -> None:
    """Print a capture outcome; failures exit non-zero."""
    if outcome.status == "duplicate":
        typer.echo("⚠️  Already in the inbox, nothing stored.")
        return
    record = outcome.record
    if outcome.status == "failed":
        typer.echo(f"❌ Capture failed: {outcome.error}", err=True)
        if record is not None:
            typer.echo(f"   Failure recorded as {record.id}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"✅ Saved: {record.title or '(untitled)'}")
    typer.echo(f"   ID:     {record.id}")
    typer.echo(f"   Source: {record.source_type.value}")


@app.command()
def add(
    text: str = typer.Argument(..., help="Text to capture."),
    title: str = typer.Option("", "--title", "-t", help="Title of the source page."),
    url: str = typer.Option("", "--url", "-u", help="URL of the source page."),
    source: SourceType = typer.Option(SourceType.WEB, "--source", "-s", help="Source type tag."),
) -> None:
    """Capture a piece of text into the inbox."""
    svc = _get_service()
    payload = CapturePayload(title=title, url=url, text=text, source_type=source)
    _report(asyncio.run(svc.capture_selection(payload)))


@app.command(name="list")
def list_snippets() -> None:
    """List all snippets, newest first."""
    svc = _get_service()
    snippets = asyncio.run(svc.list_snippets())
    if not snippets:
        typer.echo("Inbox is empty. Use 'llminbox add <text>' to capture something.")
        return
    for i, s in enumerate(snippets, 1):
        tags = f" [{', '.join(s.tags)}]" if s.tags else ""
        preview = s.text.replace("\n", " ")[:60]
        typer.echo(f"  {i}. {s.id[:8]}  {s.source_type.value:<18s}  {s.title or preview}{tags}")


@app.command()
def show(snippet_id: str = typer.Argument(..., help="Snippet ID.")) -> None:
    """Show a snippet in full."""
    svc = _get_service()
    try:
        s = asyncio.run(svc.get_snippet(snippet_id))
    except SnippetNotFoundError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Title:     {s.title or '(untitled)'}")
    typer.echo(f"URL:       {s.url}")
    typer.echo(f"Source:    {s.source_type.value}")
    typer.echo(f"Captured:  {s.captured_at}")
    typer.echo(f"Tags:      {', '.join(s.tags) or '(none)'}")
    if s.note:
        typer.echo(f"Note:      {s.note}")
    typer.echo("")
    typer.echo(s.text)


@app.command()
def remove(snippet_id: str = typer.Argument(..., help="Snippet ID.")) -> None:
    """Remove a snippet from the inbox."""
    svc = _get_service()
    try:
        asyncio.run(svc.remove_snippet(snippet_id))
    except SnippetNotFoundError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"🗑️  Removed: {snippet_id}")


@app.command()
def tag(
    snippet_id: str = typer.Argument(..., help="Snippet ID."),
    tags: list[str] | None = typer.Option(None, "--tag", "-t", help="Tag (repeatable). Replaces existing tags."),
    note: str | None = typer.Option(None, "--note", "-n", help="Free-form note."),
) -> None:
    """Set tags and/or a note on a snippet."""
    svc = _get_service()
    try:
        s = asyncio.run(svc.annotate_snippet(snippet_id, tags=tags, note=note))
    except SnippetNotFoundError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"🏷️  {s.id}: {', '.join(s.tags) or '(no tags)'}")


@app.command()
def clear(yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation.")) -> None:
    """Delete all snippets."""
    if not yes and not typer.confirm("Delete all saved snippets?"):
        raise typer.Abort()
    asyncio.run(_get_service().clear_snippets())
    typer.echo("🗑️  Inbox cleared.")


@app.command()
def bookmark(
    url: str = typer.Argument(..., help="YouTube watch URL."),
    seconds: float = typer.Argument(..., help="Playback position in seconds."),
    title: str = typer.Option("", "--title", "-t", help="Video title."),
) -> None:
    """Bookmark a moment of a video."""
    _report(asyncio.run(_get_service().bookmark(title, url, seconds)))


@app.command()
def caption(
    url: str = typer.Argument(..., help="YouTube watch URL."),
    seconds: float = typer.Argument(..., help="Playback position in seconds."),
    window: float = typer.Option(settings.caption_window, "--window", "-w", help="Seconds before and after."),
    title: str = typer.Option("", "--title", "-t", help="Video title."),
) -> None:
    """Capture the captions spoken around a moment of a video."""
    _report(asyncio.run(_get_service().capture_caption(url, seconds, window, title=title)))


@app.command()
def transcripts() -> None:
    """List stored transcripts."""
    items = asyncio.run(_get_service().list_transcripts())
    if not items:
        typer.echo("No transcripts stored.")
        return
    for i, t in enumerate(items, 1):
        typer.echo(f"  {i}. {t.video_id}  {t.line_count:>5d} lines  {t.title}")


@app.command()
def transcript(video_id: str = typer.Argument(..., help="YouTube video ID.")) -> None:
    """Print a stored transcript."""
    t = asyncio.run(_get_service().get_transcript(video_id))
    if t is None:
        typer.echo(f"❌ Transcript not found: {video_id}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Title:     {t.title}")
    typer.echo(f"URL:       {t.url}")
    typer.echo(f"Captured:  {t.captured_at}")
    typer.echo("")
    for seg in t.segments:
        typer.echo(f"  [{seg.ts:>7s}] {seg.text}")


@app.command()
def import_transcript(url: str = typer.Argument(..., help="YouTube watch URL.")) -> None:
    """Fetch a video's caption track and store it as a transcript."""
    try:
        t = asyncio.run(_get_service().import_transcript(url))
    except ExtractionFailure as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"✅ Transcript stored: {t.title}")
    typer.echo(f"   ID:    {t.video_id}")
    typer.echo(f"   Lines: {t.line_count}")


@app.command()
def remove_transcript(video_id: str = typer.Argument(..., help="YouTube video ID.")) -> None:
    """Remove a stored transcript."""
    try:
        asyncio.run(_get_service().remove_transcript(video_id))
    except TranscriptNotFoundError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"🗑️  Removed transcript: {video_id}")


@app.command()
def serve(
    stdio: bool = typer.Option(False, "--stdio", help="Use stdio transport instead of HTTP."),
    host: str = typer.Option(settings.host, "--host", help="Host to bind to."),
    port: int = typer.Option(settings.port, "--port", help="Port to bind to."),
) -> None:
    """Start the llminbox MCP server."""
    from llminbox.server import mcp

    if stdio:
        typer.echo("Starting llminbox MCP server (stdio)...", err=True)
        mcp.run(transport="stdio")
    else:
        typer.echo(f"Starting llminbox MCP server on http://{host}:{port}/mcp")
        mcp.run(transport="streamable-http", host=host, port=port)
