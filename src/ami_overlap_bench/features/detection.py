"""Overlap detectors: the thresholded predictions the DER sweep scores.

Two interchangeable implementations of :class:`OverlapDetector`:

* :class:`SimulatedOverlapDetector` approximates a detector's behaviour from the
  reference itself (higher threshold → fewer hits and fewer false alarms).  It
  is used during development and in tests with a seeded generator.
* :class:`FrameScoreDetector` thresholds per-frame overlap probabilities that a
  real model produced ahead of time.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Optional, Protocol, Sequence

import numpy as np

from ..util.config import DetectorConfig
from .overlaps import Interval

logger = logging.getLogger(__name__)


class DetectorError(RuntimeError):
    """Raised when a detector cannot produce predictions for a meeting."""


class OverlapDetector(Protocol):
    def predict(
        self,
        reference: Sequence[Interval],
        threshold: float,
        duration: float,
        *,
        meeting_id: Optional[str] = None,
    ) -> list[Interval]:
        ...


class SimulatedOverlapDetector:
    """Stochastic stand-in that perturbs the reference overlaps."""

    def __init__(
        self,
        cfg: DetectorConfig | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.cfg = cfg or DetectorConfig()
        self.rng = rng if rng is not None else np.random.default_rng(self.cfg.seed)

    def detection_rate(self, threshold: float) -> float:
        return (1.0 - threshold) * self.cfg.detection_span + self.cfg.detection_floor

    def false_alarm_rate(self, threshold: float) -> float:
        return threshold * self.cfg.false_alarm_scale

    def false_alarm_count(self, threshold: float, duration: float) -> int:
        return int(math.floor(duration * self.false_alarm_rate(threshold) / self.cfg.false_alarm_spacing_s))

    def predict(
        self,
        reference: Sequence[Interval],
        threshold: float,
        duration: float,
        *,
        meeting_id: Optional[str] = None,
    ) -> list[Interval]:
        cfg = self.cfg
        detection_rate = self.detection_rate(threshold)
        jitter = cfg.boundary_jitter_s

        predictions: list[Interval] = []
        for iv in reference:
            if self.rng.uniform(0.0, 1.0) >= detection_rate:
                continue
            start_offset = self.rng.uniform(-jitter, jitter)
            end_offset = self.rng.uniform(-jitter, jitter)
            start = max(0.0, iv.start + start_offset)
            end = min(duration, iv.end + end_offset)
            if start < end:
                predictions.append(Interval(start, end))

        hits = len(predictions)
        latest_start = max(0.0, duration - cfg.false_alarm_tail_s)
        for _ in range(self.false_alarm_count(threshold, duration)):
            start = self.rng.uniform(0.0, latest_start)
            length = self.rng.uniform(cfg.false_alarm_min_len_s, cfg.false_alarm_max_len_s)
            predictions.append(Interval(start, min(start + length, duration)))

        logger.debug(
            "[simulate] %s thr=%.2f kept=%d/%d false_alarms=%d",
            meeting_id or "-", threshold, hits, len(reference), len(predictions) - hits,
        )
        return predictions


def frames_to_intervals(active: np.ndarray, frame_rate: float, duration: float | None = None) -> list[Interval]:
    """Collapse runs of active frames into intervals ``[first, last + 1) / frame_rate``."""

    active = np.asarray(active, dtype=bool)
    if active.size == 0:
        return []
    padded = np.concatenate(([False], active, [False]))
    edges = np.flatnonzero(np.diff(padded.astype(np.int8)))
    intervals: list[Interval] = []
    for first, stop in zip(edges[0::2], edges[1::2]):
        start = first / frame_rate
        end = stop / frame_rate
        if duration is not None:
            end = min(end, duration)
        if start < end:
            intervals.append(Interval(float(start), float(end)))
    return intervals


class FrameScoreDetector:
    """Threshold per-frame overlap probabilities from an external model.

    ``load_scores`` maps a meeting id to a 1-D array of probabilities sampled at
    ``frame_rate`` frames per second.  Frames at or above the threshold count as
    overlapped speech.  A meeting without scores is an error, never an empty
    prediction, since empty predictions would silently zero the false-alarm term.
    """

    def __init__(self, load_scores: Callable[[str], np.ndarray], frame_rate: float = 100.0) -> None:
        if frame_rate <= 0:
            raise ValueError("frame_rate must be positive")
        self.load_scores = load_scores
        self.frame_rate = frame_rate
        self._cache: dict[str, np.ndarray] = {}

    def _scores_for(self, meeting_id: str) -> np.ndarray:
        if meeting_id not in self._cache:
            try:
                scores = np.asarray(self.load_scores(meeting_id), dtype=float)
            except (OSError, ValueError, EOFError) as exc:
                raise DetectorError(f"no overlap scores for meeting {meeting_id}: {exc}") from exc
            if scores.ndim != 1:
                raise DetectorError(
                    f"overlap scores for meeting {meeting_id} must be 1-D, got shape {scores.shape}"
                )
            self._cache[meeting_id] = scores
        return self._cache[meeting_id]

    def predict(
        self,
        reference: Sequence[Interval],
        threshold: float,
        duration: float,
        *,
        meeting_id: Optional[str] = None,
    ) -> list[Interval]:
        if meeting_id is None:
            raise DetectorError("FrameScoreDetector needs a meeting_id to look up scores")
        scores = self._scores_for(meeting_id)
        return frames_to_intervals(scores >= threshold, self.frame_rate, duration)


__all__ = [
    "DetectorError",
    "FrameScoreDetector",
    "OverlapDetector",
    "SimulatedOverlapDetector",
    "frames_to_intervals",
]
