# Core evaluation steps.
# Re-export so callers can do:
#   from ami_overlap_bench.features import derive_overlaps, compute_der, ...

from .segments import TimedSegment, extract_segments, parse_words_xml
from .overlaps import Interval, derive_overlaps, merge_intervals
from .detection import DetectorError, FrameScoreDetector, SimulatedOverlapDetector
from .scoring import compute_der, frame_errors
from .sweep import BenchmarkReport, NoEligibleMeetingsError, run_benchmark, run_sweep
from .report import ReportWriteError, format_summary, write_report

__all__ = [
    "BenchmarkReport",
    "DetectorError",
    "FrameScoreDetector",
    "Interval",
    "NoEligibleMeetingsError",
    "ReportWriteError",
    "SimulatedOverlapDetector",
    "TimedSegment",
    "compute_der",
    "derive_overlaps",
    "extract_segments",
    "format_summary",
    "frame_errors",
    "merge_intervals",
    "parse_words_xml",
    "run_benchmark",
    "run_sweep",
    "write_report",
]
