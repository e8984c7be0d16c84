"""Capture error kinds.

All of these are caught at the CaptureCoordinator boundary and turned into
failure records; callers of the coordinator never see them.
"""


class ExtractionFailure(Exception):
    """Raised when the extraction target is missing or the extractor threw."""


class ExtractionTimeout(ExtractionFailure):
    """Raised when WaitFor exceeds its time budget."""

    def __init__(self, query: str, elapsed: float) -> None:
        self.query = query
        self.elapsed = elapsed
        super().__init__(f"Timed out after {elapsed:.2f}s waiting for: {query}")


class NetworkFailure(ExtractionFailure):
    """Raised when a caption track fetch returns a non-success status."""

    def __init__(self, url: str, status: int | None = None, reason: str = "") -> None:
        self.url = url
        self.status = status
        detail = f"HTTP {status}" if status is not None else (reason or "request failed")
        super().__init__(f"Failed to fetch captions ({detail})")


class ListenerNotReady(Exception):
    """Raised when the receiving end of an extraction request does not exist yet."""
