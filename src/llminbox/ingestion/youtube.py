"""YouTube caption tracks via yt-dlp."""

import asyncio
import logging
import re
from datetime import datetime, timezone
from urllib.error import HTTPError, URLError
from urllib.parse import parse_qs, urlparse
from urllib.request import urlopen

import yt_dlp

from llminbox.captions import cues_to_segments, extract_window, parse_vtt
from llminbox.config import settings
from llminbox.errors import ExtractionFailure, NetworkFailure
from llminbox.ingestion.extractors import Extractor, with_timestamp
from llminbox.models import CapturePayload, Cue, SourceType, Transcript

logger = logging.getLogger(__name__)


class YouTubeCaptions:
    """Finds and downloads the caption track of a YouTube video.

    Single responsibility: given a watch URL, return parsed cues.
    All yt-dlp interaction is encapsulated here.
    """

    _URL_PATTERNS = [
        re.compile(r"(?:youtube\.com/watch\?.*v=)([\w-]{11})"),
        re.compile(r"(?:youtu\.be/)([\w-]{11})"),
        re.compile(r"(?:youtube\.com/embed/)([\w-]{11})"),
        re.compile(r"(?:youtube\.com/v/)([\w-]{11})"),
    ]

    @classmethod
    def parse_video_id(cls, url: str) -> str:
        """Extract the 11-character video ID from a YouTube URL.

        Raises:
            ExtractionFailure: If the URL cannot be parsed.
        """
        for pattern in cls._URL_PATTERNS:
            match = pattern.search(url)
            if match:
                return match.group(1)

        parsed = urlparse(url)
        video_id = parse_qs(parsed.query).get("v", [None])[0]
        if video_id and len(video_id) == 11:
            return video_id

        raise ExtractionFailure(f"Could not extract video ID from URL: {url}")

    def fetch_info(self, url: str) -> dict:
        """Fetch the video info dict from yt-dlp without downloading media."""
        ydl_opts = {
            "quiet": True,
            "no_warnings": True,
            "writesubtitles": True,
            "writeautomaticsub": True,
            "skip_download": True,
        }
        try:
            with yt_dlp.YoutubeDL(ydl_opts) as ydl:
                info = ydl.extract_info(url, download=False)
        except yt_dlp.utils.DownloadError as e:
            raise ExtractionFailure(f"Failed to extract video info: {e}") from e
        if info is None:
            raise ExtractionFailure(f"yt-dlp returned no info for: {url}")
        return info

    @staticmethod
    def find_track_url(info: dict) -> str | None:
        """Pick a VTT caption track: English first, then the first language offered.

        Uploaded subtitles are preferred over automatic captions.
        """
        for tracks in (info.get("subtitles") or {}, info.get("automatic_captions") or {}):
            if not tracks:
                continue
            lang = next((code for code in tracks if code.startswith("en")), next(iter(tracks)))
            for fmt in tracks[lang] or []:
                if fmt.get("ext") == "vtt":
                    return fmt["url"]
        return None

    def download(self, track_url: str) -> str:
        """Download a caption track.

        Raises:
            NetworkFailure: On a non-success status, a connection or read
                error, or a body that is not UTF-8.
        """
        try:
            with urlopen(track_url, timeout=settings.fetch_timeout) as resp:
                status = getattr(resp, "status", 200)
                if not 200 <= status < 300:
                    raise NetworkFailure(track_url, status=status)
                return resp.read().decode("utf-8")
        except HTTPError as e:
            raise NetworkFailure(track_url, status=e.code) from e
        except URLError as e:
            raise NetworkFailure(track_url, reason=str(e.reason)) from e
        except UnicodeDecodeError as e:
            raise NetworkFailure(track_url, reason="caption track is not valid UTF-8") from e
        except OSError as e:
            # TimeoutError and ConnectionResetError while reading the body
            raise NetworkFailure(track_url, reason=str(e) or type(e).__name__) from e

    def cues(self, url: str, info: dict | None = None) -> list[Cue]:
        """Parsed cues of the video's caption track.

        Raises:
            ExtractionFailure: If the video has no caption track.
            NetworkFailure: If the track cannot be downloaded.
        """
        info = info if info is not None else self.fetch_info(url)
        track_url = self.find_track_url(info)
        if not track_url:
            raise ExtractionFailure("No caption track found on this video.")
        cues = parse_vtt(self.download(track_url))
        logger.info("Parsed %d cues for %s", len(cues), info.get("id", url))
        return cues

    def transcript(self, url: str) -> Transcript:
        """Build a full Transcript capture for the video."""
        info = self.fetch_info(url)
        segments = cues_to_segments(self.cues(url, info=info))
        return Transcript(
            video_id=info.get("id") or self.parse_video_id(url),
            title=info.get("title", ""),
            url=url,
            captured_at=datetime.now(timezone.utc).isoformat(),
            segments=segments,
        )


class CaptionWindowExtractor(Extractor):
    """Captures the captions spoken within +/- window_seconds of a playback position."""

    def __init__(
        self,
        url: str,
        seconds: float,
        window_seconds: float | None = None,
        title: str = "",
        captions: YouTubeCaptions | None = None,
    ) -> None:
        self._url = url
        self._seconds = int(seconds)
        self._window = settings.caption_window if window_seconds is None else window_seconds
        self._title = title
        self._captions = captions or YouTubeCaptions()

    async def extract(self) -> CapturePayload:
        info = await asyncio.to_thread(self._captions.fetch_info, self._url)
        cues = await asyncio.to_thread(self._captions.cues, self._url, info)
        return CapturePayload(
            title=self._title or info.get("title", ""),
            url=with_timestamp(self._url, self._seconds),
            text=extract_window(cues, self._seconds, self._window),
            source_type=SourceType.YOUTUBE_CAPTION,
            meta={"seconds": self._seconds, "window_seconds": self._window},
        )

    def failure_payload(self, reason: str) -> CapturePayload:
        return CapturePayload(
            title=self._title,
            url=with_timestamp(self._url, self._seconds),
            text=f"(No transcript available for this video: {reason})",
            source_type=SourceType.YOUTUBE_CAPTION,
            meta={"seconds": self._seconds, "window_seconds": self._window},
        )
