from __future__ import annotations

import json
import math
from datetime import datetime, timezone
from pathlib import Path

import pytest

from ami_overlap_bench.features import report as report_mod
from ami_overlap_bench.features.report import (
    ReportWriteError,
    assess,
    format_summary,
    report_payload,
    results_frame,
    write_report,
)
from ami_overlap_bench.features.sweep import BenchmarkReport, MeetingResult, ThresholdResult
from ami_overlap_bench.util.config import WritingConfig


def make_report() -> BenchmarkReport:
    return BenchmarkReport(
        per_meeting=(
            MeetingResult("IS1000a", 0.40, 5.0),
            MeetingResult("ES2002a", 0.20, 7.0),
        ),
        best_threshold=0.4,
        best_der=0.25,
        reporting_threshold=0.5,
        threshold_results=(
            ThresholdResult.from_scores(0.3, {"ES2002a": 0.3, "IS1000a": 0.5}),
            ThresholdResult.from_scores(0.4, {"ES2002a": 0.2, "IS1000a": 0.3}),
            ThresholdResult.from_scores(0.5, {"ES2002a": 0.2, "IS1000a": 0.4}),
        ),
    )


@pytest.mark.parametrize(
    "der, label",
    [(0.1, "EXCELLENT"), (0.2, "GOOD"), (0.3, "FAIR"), (0.4, "NEEDS IMPROVEMENT"), (math.inf, "NEEDS IMPROVEMENT")],
)
def test_assessment_bands(der, label):
    assert assess(der).startswith(label)


def test_results_frame_sorted_by_der():
    df = results_frame(make_report())

    assert list(df["meeting"]) == ["ES2002a", "IS1000a"]
    assert list(df.columns) == ["meeting", "der", "overlap_percent"]


def test_summary_lists_totals_and_meetings():
    text = format_summary(make_report(), WritingConfig(dataset_label="AMI test split"))

    assert "Dataset: AMI test split" in text
    assert "Meetings processed: 2" in text
    assert "Average overlap: 6.0%" in text
    assert "Final DER: 0.300 (30.0%)" in text
    assert "Best achievable DER: 0.250" in text
    assert "Optimal threshold: 0.4" in text
    assert "0.4: 0.250 DER  <- best" in text
    assert text.index("ES2002a: 0.200 DER") < text.index("IS1000a: 0.400 DER")


def test_payload_structure():
    stamp = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    payload = report_payload(make_report(), WritingConfig(), stamp)

    assert payload["benchmark"] == WritingConfig().benchmark_name
    assert payload["timestamp"] == "2024-05-01T12:00:00+00:00"
    assert payload["dataset"] == "AMI Meeting Corpus"
    assert payload["meetings_processed"] == 2
    assert payload["final_results"]["average_der"] == pytest.approx(0.3)
    assert payload["final_results"]["best_der"] == 0.25
    assert payload["final_results"]["optimal_threshold"] == 0.4
    assert payload["per_meeting"][0] == {"meeting": "IS1000a", "der": 0.4, "overlap_percent": 5.0}
    assert [t["threshold"] for t in payload["thresholds"]] == [0.3, 0.4, 0.5]


def test_infinite_values_serialise_as_null(tmp_path: Path):
    empty = BenchmarkReport(per_meeting=(), best_threshold=0.5, best_der=math.inf)

    path = write_report(empty, tmp_path / "out.json")

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["final_results"]["average_der"] is None
    assert data["final_results"]["best_der"] is None


def test_write_report_round_trips(tmp_path: Path):
    target = tmp_path / "nested" / "final.json"

    written = write_report(make_report(), target)

    assert written == target
    assert json.loads(target.read_text(encoding="utf-8"))["meetings_processed"] == 2


def test_write_failure_keeps_report(monkeypatch, tmp_path: Path):
    def boom(path, data):
        raise PermissionError("read-only")

    monkeypatch.setattr(report_mod, "atomic_json", boom)
    report = make_report()

    with pytest.raises(ReportWriteError) as excinfo:
        write_report(report, tmp_path / "final.json")

    assert excinfo.value.report is report
    assert "read-only" in str(excinfo.value)
