"""Discover AMI meetings from a directory of ``<meeting>.<speaker>.words.xml`` files."""

from __future__ import annotations

import logging
import pathlib
from collections import defaultdict
from dataclasses import dataclass

logger = logging.getLogger(__name__)

WORDS_SUFFIX = ".words.xml"


@dataclass(frozen=True)
class MeetingCorpus:
    meeting_id: str
    speaker_files: tuple[pathlib.Path, ...]


def find_meetings(words_dir: str | pathlib.Path, min_speakers: int = 2) -> list[MeetingCorpus]:
    """Group words files by meeting id, keeping meetings with ``min_speakers`` tracks.

    The directory is searched recursively.  Results are sorted by meeting id and
    each meeting's files by name, so repeated runs visit meetings in the same order.
    """

    root = pathlib.Path(words_dir)
    if not root.is_dir():
        logger.warning("Words directory not found: %s", root)
        return []

    grouped: dict[str, list[pathlib.Path]] = defaultdict(list)
    for path in root.rglob(f"*{WORDS_SUFFIX}"):
        if not path.is_file():
            continue
        meeting_id = path.name.split(".")[0]
        if meeting_id:
            grouped[meeting_id].append(path)

    meetings = [
        MeetingCorpus(meeting_id, tuple(sorted(files, key=lambda p: p.name)))
        for meeting_id, files in sorted(grouped.items())
        if len(files) >= min_speakers
    ]
    logger.info(
        "Found %d meeting(s) under %s, %d with >= %d speakers",
        len(grouped), root, len(meetings), min_speakers,
    )
    return meetings
