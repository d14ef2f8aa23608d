from __future__ import annotations

import numpy as np
import pytest

from ami_overlap_bench.features.detection import (
    DetectorError,
    FrameScoreDetector,
    SimulatedOverlapDetector,
    frames_to_intervals,
)
from ami_overlap_bench.features.overlaps import Interval
from ami_overlap_bench.util.config import DetectorConfig


REFERENCE = [Interval(5.0 + 10 * i, 6.0 + 10 * i) for i in range(20)]


def test_rates_follow_threshold():
    detector = SimulatedOverlapDetector(DetectorConfig(seed=0))

    assert detector.detection_rate(0.3) == pytest.approx(0.76)
    assert detector.detection_rate(0.7) == pytest.approx(0.44)
    assert detector.false_alarm_rate(0.5) == pytest.approx(0.025)
    assert detector.false_alarm_count(0.5, 1000.0) == 1
    assert detector.false_alarm_count(0.3, 100.0) == 0


def test_seeded_detector_is_reproducible():
    first = SimulatedOverlapDetector(DetectorConfig(seed=42)).predict(REFERENCE, 0.5, 210.0)
    second = SimulatedOverlapDetector(DetectorConfig(seed=42)).predict(REFERENCE, 0.5, 210.0)

    assert first == second


def test_predictions_stay_near_reference_and_inside_meeting():
    detector = SimulatedOverlapDetector(DetectorConfig(seed=3))
    duration = 210.0

    predicted = detector.predict(REFERENCE, 0.3, duration)

    for iv in predicted:
        assert 0.0 <= iv.start < iv.end <= duration
        assert any(abs(iv.start - ref.start) <= 0.1 + 1e-9 for ref in REFERENCE)


def test_false_alarms_are_added_for_long_meetings():
    cfg = DetectorConfig(seed=1, detection_span=0.0, detection_floor=0.0)
    detector = SimulatedOverlapDetector(cfg)

    predicted = detector.predict(REFERENCE, 0.7, 2000.0)

    # nothing detected, so every interval is a false alarm
    assert len(predicted) == detector.false_alarm_count(0.7, 2000.0) == 3
    for iv in predicted:
        assert 0.0 <= iv.start <= 1999.0
        assert 0.2 - 1e-9 <= iv.duration <= 1.0 + 1e-9


def test_injected_generator_is_used():
    rng = np.random.default_rng(9)
    expected = SimulatedOverlapDetector(rng=np.random.default_rng(9)).predict(REFERENCE, 0.4, 210.0)

    assert SimulatedOverlapDetector(rng=rng).predict(REFERENCE, 0.4, 210.0) == expected


def test_frames_to_intervals_groups_runs():
    active = np.array([0, 1, 1, 0, 0, 1, 0, 1, 1, 1], dtype=bool)

    intervals = frames_to_intervals(active, frame_rate=10.0, duration=0.95)

    assert intervals == [Interval(0.1, 0.3), Interval(0.5, 0.6), Interval(0.7, 0.95)]


def test_frame_score_detector_thresholds_probabilities():
    scores = {"ES2002a": np.array([0.1, 0.6, 0.8, 0.4, 0.5, 0.2])}
    detector = FrameScoreDetector(scores.__getitem__, frame_rate=2.0)

    assert detector.predict([], 0.5, 3.0, meeting_id="ES2002a") == [
        Interval(0.5, 1.5),
        Interval(2.0, 2.5),
    ]
    assert detector.predict([], 0.7, 3.0, meeting_id="ES2002a") == [Interval(1.0, 1.5)]


def test_frame_score_detector_fails_loudly_without_scores():
    def missing(meeting_id):
        raise FileNotFoundError(meeting_id)

    detector = FrameScoreDetector(missing)

    with pytest.raises(DetectorError, match="ES2003b"):
        detector.predict([Interval(1.0, 2.0)], 0.5, 40.0, meeting_id="ES2003b")


def test_frame_score_detector_rejects_2d_scores():
    detector = FrameScoreDetector(lambda _: np.zeros((2, 3)))

    with pytest.raises(DetectorError, match="1-D"):
        detector.predict([], 0.5, 10.0, meeting_id="m")
