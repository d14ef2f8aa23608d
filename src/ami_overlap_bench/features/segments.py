"""Per-speaker word segments from AMI ``*.words.xml`` annotation files.

Each AMI speaker track is a flat list of ``<w starttime="S" endtime="E">text</w>``
elements (plus vocal sounds, gaps and punctuation marks).  Only elements that
carry both timestamps and some non-blank text become :class:`TimedSegment`
records; everything else is skipped without complaint because partial corpora
are the norm rather than the exception.
"""

from __future__ import annotations

import html
import logging
import pathlib
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

UNKNOWN_SPEAKER = "Unknown"

_WORD_RE = re.compile(r"<w\b(?P<attrs>[^>]*)>(?P<text>[^<]*)</w>", re.DOTALL)
# AMI files declare ISO-8859-1 in the XML prolog
_ENCODING_RE = re.compile(rb'<\?xml[^>]*\bencoding="([A-Za-z0-9._-]+)"')
_TIME_ATTR_RE = {
    "starttime": re.compile(r'\bstarttime="(?P<value>[0-9.]+)"'),
    "endtime": re.compile(r'\bendtime="(?P<value>[0-9.]+)"'),
}

Token = Tuple[Optional[str | float], Optional[str | float], Optional[str]]


@dataclass(frozen=True, slots=True)
class TimedSegment:
    """One timed word of a single speaker."""

    speaker_id: str
    start_time: float
    end_time: float
    text: str

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


def _to_seconds(value: str | float | None) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def extract_segments(speaker_id: str, tokens: Iterable[Token]) -> list[TimedSegment]:
    """Turn raw ``(start, end, text)`` tokens into segments ordered by start time.

    Tokens missing a timestamp, with an unparsable or inverted time span, or with
    blank text are dropped.
    """

    segments: list[TimedSegment] = []
    for start_raw, end_raw, text_raw in tokens:
        start = _to_seconds(start_raw)
        end = _to_seconds(end_raw)
        text = (text_raw or "").strip()
        if start is None or end is None or not text:
            continue
        if start < 0 or end <= start:
            continue
        segments.append(TimedSegment(speaker_id, start, end, text))

    segments.sort(key=lambda seg: seg.start_time)
    return segments


def speaker_id_from_path(path: str | pathlib.Path) -> str:
    """``ES2002a.B.words.xml`` → ``B``."""

    parts = pathlib.Path(path).name.split(".")
    if len(parts) >= 2 and parts[1]:
        return parts[1]
    return UNKNOWN_SPEAKER


def _iter_word_tokens(content: str) -> Iterable[Token]:
    for match in _WORD_RE.finditer(content):
        attrs = match.group("attrs")
        times = []
        for name in ("starttime", "endtime"):
            found = _TIME_ATTR_RE[name].search(attrs)
            times.append(found.group("value") if found else None)
        yield times[0], times[1], html.unescape(match.group("text"))


def parse_words_xml(path: str | pathlib.Path) -> list[TimedSegment]:
    """Parse one speaker's words file; an unreadable file yields no segments."""

    path = pathlib.Path(path)
    try:
        raw = path.read_bytes()
        declared = _ENCODING_RE.search(raw[:200])
        encoding = declared.group(1).decode("ascii") if declared else "utf-8"
        content = raw.decode(encoding)
    except (OSError, UnicodeDecodeError, LookupError) as exc:
        logger.warning("Skipping unreadable words file %s: %s", path, exc)
        return []

    segments = extract_segments(speaker_id_from_path(path), _iter_word_tokens(content))
    logger.debug("Parsed %d word segments from %s", len(segments), path.name)
    return segments


def load_meeting_segments(speaker_files: Sequence[str | pathlib.Path]) -> list[TimedSegment]:
    """Concatenate the segments of every speaker track of one meeting."""

    segments: list[TimedSegment] = []
    for file in speaker_files:
        segments.extend(parse_words_xml(file))
    return segments


__all__ = [
    "TimedSegment",
    "UNKNOWN_SPEAKER",
    "extract_segments",
    "load_meeting_segments",
    "parse_words_xml",
    "speaker_id_from_path",
]
