"""Evaluation-engine parameters: threshold grid, framing and eligibility."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class BenchmarkConfig:
    threshold_start: float = 0.3
    threshold_stop: float = 0.7
    threshold_step: float = 0.1
    reporting_threshold: float = 0.5   # per-meeting results are captured here

    frame_rate: float = 100.0          # 10 ms frames
    min_overlap_s: float = 0.1         # shorter speaker overlaps are noise
    merge_gap_s: float = 0.1           # fuse overlaps closer than this
    min_meeting_duration_s: float = 30.0
    max_meetings: Optional[int] = None # None → every eligible meeting

    def __post_init__(self) -> None:
        if self.threshold_step <= 0:
            raise ValueError("threshold_step must be positive")
        if self.threshold_stop < self.threshold_start:
            raise ValueError("threshold_stop must not be below threshold_start")
        if self.frame_rate <= 0:
            raise ValueError("frame_rate must be positive")
        if self.min_overlap_s < 0 or self.merge_gap_s < 0:
            raise ValueError("overlap and merge tolerances must be non-negative")
        if self.max_meetings is not None and self.max_meetings < 1:
            raise ValueError("max_meetings must be at least 1")
        if self.reporting_index() is None:
            raise ValueError(
                f"reporting_threshold {self.reporting_threshold} is not on the threshold grid "
                f"{list(self.thresholds())}"
            )

    def thresholds(self) -> tuple[float, ...]:
        """Inclusive threshold grid built from integer step indices."""

        span = (self.threshold_stop - self.threshold_start) / self.threshold_step
        count = int(math.floor(span + 1e-9)) + 1
        return tuple(round(self.threshold_start + i * self.threshold_step, 6) for i in range(count))

    def reporting_index(self) -> int | None:
        """Grid index of ``reporting_threshold``, or None when it is off-grid."""

        tolerance = self.threshold_step / 1000.0
        for index, threshold in enumerate(self.thresholds()):
            if abs(threshold - self.reporting_threshold) <= tolerance:
                return index
        return None


__all__ = ["BenchmarkConfig"]
