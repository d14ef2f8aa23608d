"""Frame-level DER for overlapped-speech detection.

Only overlap regions are scored: a frame is *reference* when it lies inside a
ground-truth overlap interval and *predicted* when the detector flagged it.

    DER = (false alarm frames + missed frames) / reference frames

With no reference frames the DER is defined as 0.0; callers drop meetings
without overlaps before scoring so this never hides a real error.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import numpy as np

from .overlaps import Interval

DEFAULT_FRAME_RATE = 100.0  # 10 ms frames


@dataclass(frozen=True, slots=True)
class FrameErrors:
    false_alarm: int
    missed: int
    reference: int
    total: int

    @property
    def der(self) -> float:
        if self.reference == 0:
            return 0.0
        return (self.false_alarm + self.missed) / self.reference


def rasterize(intervals: Iterable[Interval], total_frames: int, frame_rate: float = DEFAULT_FRAME_RATE) -> np.ndarray:
    """Boolean frame mask with every ``[floor(start*fr), floor(end*fr))`` marked."""

    mask = np.zeros(total_frames, dtype=bool)
    for iv in intervals:
        first = max(0, int(iv.start * frame_rate))
        stop = min(total_frames, int(iv.end * frame_rate))
        if first < stop:
            mask[first:stop] = True
    return mask


def frame_errors(
    reference: Iterable[Interval],
    predicted: Iterable[Interval],
    duration: float,
    *,
    frame_rate: float = DEFAULT_FRAME_RATE,
) -> FrameErrors:
    total_frames = max(0, int(duration * frame_rate))
    ref = rasterize(reference, total_frames, frame_rate)
    pred = rasterize(predicted, total_frames, frame_rate)
    return FrameErrors(
        false_alarm=int(np.count_nonzero(pred & ~ref)),
        missed=int(np.count_nonzero(ref & ~pred)),
        reference=int(np.count_nonzero(ref)),
        total=total_frames,
    )


def compute_der(
    reference: Iterable[Interval],
    predicted: Iterable[Interval],
    duration: float,
    *,
    frame_rate: float = DEFAULT_FRAME_RATE,
) -> float:
    return frame_errors(reference, predicted, duration, frame_rate=frame_rate).der


__all__ = [
    "DEFAULT_FRAME_RATE",
    "FrameErrors",
    "compute_der",
    "frame_errors",
    "rasterize",
]
