# tests/test_server_integration.py
"""MCP server integration tests through an in-memory FastMCP client."""

import asyncio
import json
from unittest.mock import patch

import pytest
from fastmcp import Client

from llminbox.messages import MessageRouter


@pytest.fixture
def server_router(service):
    """Patch the server's _get_router to use in-memory storage."""
    router = MessageRouter(service)
    import llminbox.server as server_mod

    with patch.object(server_mod, "_router", router):
        with patch.object(server_mod, "_get_router", return_value=router):
            yield router


def _call(tool, arguments=None):
    from llminbox.server import mcp

    async def run():
        async with Client(mcp) as client:
            result = await client.call_tool(tool, arguments or {})
        return json.loads(result.content[0].text)

    return asyncio.run(run())


class TestMCPTools:
    def test_capture_selection_tool(self, server_router):
        result = _call("capture_selection", {"text": "hello", "url": "https://example.com"})
        assert result["ok"] is True
        assert result["status"] == "stored"

        again = _call("capture_selection", {"text": "hello", "url": "https://example.com"})
        assert again["status"] == "duplicate"

    def test_transcript_tools(self, server_router):
        stored = _call("transcript_captured", {
            "video_id": "dQw4w9WgXcQ",
            "title": "Caching 101",
            "segments": [{"ts": "0:00", "seconds": 0, "text": "Hello"}],
        })
        assert stored["stored"] == {"video_id": "dQw4w9WgXcQ", "line_count": 1}

        listed = _call("list_transcripts")
        assert listed["transcripts"][0]["title"] == "Caching 101"

        got = _call("get_transcript", {"video_id": "dQw4w9WgXcQ"})
        assert got["transcript"]["segments"][0]["text"] == "Hello"

        removed = _call("remove_transcript", {"video_id": "dQw4w9WgXcQ"})
        assert removed["ok"] is True

    def test_caption_window_tool(self, server_router):
        result = _call("caption_window", {"url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ", "seconds": 1})
        assert result["text"] == "Hello World"

    def test_remove_snippet_not_found(self, server_router):
        result = _call("remove_snippet", {"snippet_id": "nope"})
        assert result["ok"] is False
