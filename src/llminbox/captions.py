"""WebVTT caption parsing and caption-window extraction."""

import re

from llminbox.models import Cue, TranscriptSegment

NO_CAPTION_TEXT = "(no caption text in this window)"

_HEADER = re.compile(r"WEBVTT(?:[ \t]|\r?\n|$)")
_TIMESTAMP = re.compile(r"(?:(\d+):)?(\d+):(\d+(?:\.\d+)?)")
_WHITESPACE = re.compile(r"\s+")


def parse_timestamp(token: str) -> float | None:
    """Convert "[hh:]mm:ss[.fff]" to seconds. Returns None if unparseable."""
    match = _TIMESTAMP.fullmatch(token.strip())
    if not match:
        return None
    hours, minutes, seconds = match.groups()
    return int(hours or 0) * 3600 + int(minutes) * 60 + float(seconds)


def format_timestamp(seconds: float) -> str:
    """Render seconds as "m:ss" or "h:mm:ss" for transcript display."""
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def _parse_timing(line: str) -> tuple[float, float] | None:
    start_token, _, rest = line.partition("-->")
    # cue settings (align:start position:0%) may follow the end timestamp
    end_token = rest.strip().split(" ", 1)[0] if rest.strip() else ""
    start = parse_timestamp(start_token)
    end = parse_timestamp(end_token)
    if start is None or end is None:
        return None
    return start, end


def parse_vtt(payload: str) -> list[Cue]:
    """Parse a WebVTT payload into cues.

    Returns an empty list if the payload does not start with the WEBVTT
    header. Malformed blocks are skipped; this function never raises.
    """
    if not _HEADER.match(payload.lstrip("\ufeff \t\r\n")):
        return []

    lines = re.split(r"\r?\n", payload)
    cues: list[Cue] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        i += 1
        if "-->" not in line:
            continue  # header, index line, NOTE block or stray text

        timing = _parse_timing(line)
        text_lines = []
        while i < len(lines) and lines[i].strip():
            text_lines.append(lines[i].strip())
            i += 1
        if timing is None:
            continue
        cues.append(Cue(start=timing[0], end=timing[1], text="\n".join(text_lines)))

    return cues


def extract_window(cues: list[Cue], center: float, window: float) -> str:
    """Join the text of every cue overlapping [center - window, center + window].

    Never returns an empty string: an empty selection yields NO_CAPTION_TEXT.
    """
    lo, hi = center - window, center + window
    text = " ".join(c.text for c in cues if c.end >= lo and c.start <= hi)
    text = _WHITESPACE.sub(" ", text).strip()
    return text or NO_CAPTION_TEXT


def cues_to_segments(cues: list[Cue]) -> list[TranscriptSegment]:
    """Convert cues to transcript segments, dropping empty cues."""
    return [
        TranscriptSegment(
            ts=format_timestamp(c.start),
            seconds=c.start,
            text=_WHITESPACE.sub(" ", c.text).strip(),
        )
        for c in cues
        if c.text.strip()
    ]
