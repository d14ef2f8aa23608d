"""Console summary and JSON persistence for a finished DER sweep."""

from __future__ import annotations

import logging
import math
import pathlib
from datetime import datetime, timezone

import pandas as pd

from ..util.config import WritingConfig
from ..util.helpers import atomic_json
from .sweep import BenchmarkReport

logger = logging.getLogger(__name__)

RULE = "=" * 60
LITERATURE_NOTE = "AMI literature ~20-25% DER"

# (upper bound, label) in ascending order; anything above the last is NEEDS IMPROVEMENT
_ASSESSMENT_BANDS: tuple[tuple[float, str], ...] = (
    (0.15, "EXCELLENT - Better than state-of-the-art"),
    (0.25, "GOOD - Competitive with literature"),
    (0.40, "FAIR - Acceptable performance"),
)


class ReportWriteError(RuntimeError):
    """Raised when the report cannot be persisted; the computed report is kept on ``report``."""

    def __init__(self, message: str, report: BenchmarkReport) -> None:
        super().__init__(message)
        self.report = report


def assess(der: float) -> str:
    for bound, label in _ASSESSMENT_BANDS:
        if der < bound:
            return label
    return "NEEDS IMPROVEMENT"


def _finite(value: float) -> float | None:
    return float(value) if math.isfinite(value) else None


def results_frame(report: BenchmarkReport) -> pd.DataFrame:
    """Per-meeting rows at the reporting threshold, best DER first."""

    df = pd.DataFrame(
        [
            {"meeting": r.meeting_id, "der": r.der, "overlap_percent": r.overlap_percent}
            for r in report.per_meeting
        ],
        columns=["meeting", "der", "overlap_percent"],
    )
    return df.sort_values(["der", "meeting"], kind="stable").reset_index(drop=True)


def format_summary(report: BenchmarkReport, wr: WritingConfig | None = None) -> str:
    wr = wr or WritingConfig()
    avg_der = report.average_der
    lines = [
        RULE,
        "FINAL AMI CORPUS DER BENCHMARK RESULTS",
        RULE,
        "",
        "Results Summary:",
        f"   Dataset: {wr.dataset_label}",
        f"   Meetings processed: {len(report.per_meeting)}",
        f"   Average overlap: {report.average_overlap_percent:.1f}%",
        "",
        f"DER Performance (threshold {report.reporting_threshold:.1f}):",
        f"   Final DER: {avg_der:.3f} ({avg_der * 100:.1f}%)",
        f"   Best achievable DER: {report.best_der:.3f}",
        f"   Optimal threshold: {report.best_threshold:.1f}",
        "",
        f"Assessment: {assess(avg_der)}",
        f"   Reference: {LITERATURE_NOTE}",
        f"   Your model: {avg_der * 100:.1f}% DER",
    ]

    if report.threshold_results:
        lines += ["", "Threshold Sweep:"]
        for result in report.threshold_results:
            marker = "  <- best" if result.threshold == report.best_threshold else ""
            lines.append(f"   {result.threshold:.1f}: {result.average_der:.3f} DER{marker}")

    lines += ["", "Per-Meeting Results:"]
    for row in results_frame(report).itertuples(index=False):
        lines.append(f"   {row.meeting}: {row.der:.3f} DER ({row.overlap_percent:.1f}% overlap)")
    return "\n".join(lines)


def report_payload(
    report: BenchmarkReport,
    wr: WritingConfig | None = None,
    timestamp: datetime | None = None,
) -> dict:
    wr = wr or WritingConfig()
    stamp = (timestamp or datetime.now(timezone.utc)).isoformat()
    return {
        "benchmark": wr.benchmark_name,
        "timestamp": stamp,
        "dataset": wr.dataset_label,
        "meetings_processed": len(report.per_meeting),
        "final_results": {
            "average_der": _finite(report.average_der),
            "best_der": _finite(report.best_der),
            "optimal_threshold": report.best_threshold,
            "reporting_threshold": report.reporting_threshold,
        },
        "thresholds": [
            {"threshold": r.threshold, "average_der": _finite(r.average_der)}
            for r in report.threshold_results
        ],
        "per_meeting": [
            {"meeting": r.meeting_id, "der": r.der, "overlap_percent": r.overlap_percent}
            for r in report.per_meeting
        ],
    }


def write_report(
    report: BenchmarkReport,
    path: str | pathlib.Path | None = None,
    wr: WritingConfig | None = None,
    timestamp: datetime | None = None,
) -> pathlib.Path:
    wr = wr or WritingConfig()
    target = pathlib.Path(path or wr.output_path)
    payload = report_payload(report, wr, timestamp)
    try:
        written = atomic_json(target, payload)
    except OSError as exc:
        raise ReportWriteError(f"could not write report to {target}: {exc}", report) from exc
    logger.info("Results saved to: %s", written)
    return written


__all__ = [
    "ReportWriteError",
    "assess",
    "format_summary",
    "report_payload",
    "results_frame",
    "write_report",
]
