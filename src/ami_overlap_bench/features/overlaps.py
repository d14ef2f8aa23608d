"""Ground-truth overlapped-speech regions derived from per-speaker segments."""

from __future__ import annotations

import bisect
import itertools
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable, Sequence

from .segments import TimedSegment

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Interval:
    """Half-open time span in seconds."""

    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start


def merge_intervals(intervals: Iterable[Interval], merge_gap_s: float = 0.1) -> list[Interval]:
    """Sort by start and fuse intervals whose gap is at most ``merge_gap_s``."""

    ordered = sorted(intervals, key=lambda iv: iv.start)
    if not ordered:
        return []

    merged: list[Interval] = []
    cur_start, cur_end = ordered[0].start, ordered[0].end
    for iv in ordered[1:]:
        if iv.start <= cur_end + merge_gap_s:
            cur_end = max(cur_end, iv.end)
        else:
            merged.append(Interval(cur_start, cur_end))
            cur_start, cur_end = iv.start, iv.end
    merged.append(Interval(cur_start, cur_end))
    return merged


def _pairwise_overlaps(
    first: Sequence[TimedSegment],
    second: Sequence[TimedSegment],
    min_overlap_s: float,
) -> list[Interval]:
    # Segments of ``second`` that can intersect ``a`` start inside
    # (a.start - longest, a.end); anything outside that window ends too early
    # or starts too late.
    ordered = sorted(second, key=lambda seg: seg.start_time)
    if not ordered:
        return []
    starts = [seg.start_time for seg in ordered]
    longest = max(seg.duration for seg in ordered)

    found: list[Interval] = []
    for a in first:
        lo = bisect.bisect_left(starts, a.start_time - longest - 1e-9)
        hi = bisect.bisect_left(starts, a.end_time)
        for b in ordered[lo:hi]:
            ov_start = max(a.start_time, b.start_time)
            ov_end = min(a.end_time, b.end_time)
            if ov_start < ov_end and (ov_end - ov_start) >= min_overlap_s:
                found.append(Interval(ov_start, ov_end))
    return found


def derive_overlaps(
    segments: Iterable[TimedSegment],
    *,
    min_overlap_s: float = 0.1,
    merge_gap_s: float = 0.1,
) -> list[Interval]:
    """Return the merged spans where at least two distinct speakers talk at once.

    Every pair of segments from different speakers contributes its intersection
    when it lasts at least ``min_overlap_s``; the candidates are then merged with
    a tolerance of ``merge_gap_s``.  The result is sorted and every gap between
    neighbours exceeds ``merge_gap_s``.
    """

    by_speaker: dict[str, list[TimedSegment]] = defaultdict(list)
    for seg in segments:
        by_speaker[seg.speaker_id].append(seg)

    candidates: list[Interval] = []
    for spk_a, spk_b in itertools.combinations(by_speaker, 2):
        candidates.extend(_pairwise_overlaps(by_speaker[spk_a], by_speaker[spk_b], min_overlap_s))

    merged = merge_intervals(candidates, merge_gap_s)
    logger.debug(
        "Overlap derivation: speakers=%d candidates=%d merged=%d",
        len(by_speaker), len(candidates), len(merged),
    )
    return merged


def total_duration(intervals: Iterable[Interval]) -> float:
    return sum(iv.duration for iv in intervals)


__all__ = [
    "Interval",
    "derive_overlaps",
    "merge_intervals",
    "total_duration",
]
