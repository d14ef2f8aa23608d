import pytest

from ami_overlap_bench.util.config import BenchmarkConfig, DetectorConfig, WritingConfig


def test_benchmark_defaults_match_ami_protocol():
    cfg = BenchmarkConfig()

    assert cfg.thresholds() == (0.3, 0.4, 0.5, 0.6, 0.7)
    assert cfg.reporting_index() == 2
    assert cfg.frame_rate == 100.0
    assert cfg.min_overlap_s == 0.1
    assert cfg.merge_gap_s == 0.1
    assert cfg.min_meeting_duration_s == 30.0
    assert cfg.max_meetings is None


def test_grid_is_built_from_integer_steps():
    cfg = BenchmarkConfig(threshold_start=0.1, threshold_stop=0.9, threshold_step=0.2, reporting_threshold=0.7)

    assert cfg.thresholds() == (0.1, 0.3, 0.5, 0.7, 0.9)
    assert cfg.reporting_index() == 3


def test_grid_never_overshoots_stop():
    cfg = BenchmarkConfig(threshold_stop=0.75)

    assert cfg.thresholds() == (0.3, 0.4, 0.5, 0.6, 0.7)


@pytest.mark.parametrize(
    "overrides",
    [
        {"threshold_step": 0.0},
        {"threshold_start": 0.8},
        {"frame_rate": 0.0},
        {"merge_gap_s": -0.1},
        {"max_meetings": 0},
        {"reporting_threshold": 0.55},
    ],
)
def test_invalid_configs_are_rejected(overrides):
    with pytest.raises(ValueError):
        BenchmarkConfig(**overrides)


def test_detector_and_writing_defaults():
    det = DetectorConfig()
    wr = WritingConfig()

    assert det.seed is None
    assert det.detection_span == 0.8 and det.detection_floor == 0.2
    assert det.false_alarm_spacing_s == 20.0
    assert wr.output_path == "final_ami_der_results.json"
