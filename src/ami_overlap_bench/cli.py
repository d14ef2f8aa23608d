#!/usr/bin/env python3
# cli.py
# Pipeline: discover AMI words files → per-speaker segments → reference overlaps
# → detector predictions per threshold → frame DER → summary + JSON report

from __future__ import annotations
import os, sys, pathlib
import logging

# --- configs ---
from .util.config import BenchmarkConfig, DetectorConfig, LoggingConfig, WritingConfig

# --- adapters (infra helpers) ---
from .adapters.frame_scores import frame_score_loader

# --- features (core steps) ---
from .features import (
    DetectorError,
    FrameScoreDetector,
    NoEligibleMeetingsError,
    ReportWriteError,
    SimulatedOverlapDetector,
    format_summary,
    run_benchmark,
    write_report,
)
from .features.sweep import BenchmarkReport


# ========================= CLI =========================
import argparse
from dataclasses import replace


logger = logging.getLogger(__name__)


LOG = LoggingConfig()

LOG_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def parse_args(argv: list[str] | None = None):
    ap = argparse.ArgumentParser(
        description="AMI words annotations → overlap reference → DER threshold sweep"
    )
    ap.add_argument("words_dir", help="Directory of <meeting>.<speaker>.words.xml files (searched recursively)")
    ap.add_argument("--output", default=None, help="JSON report path (default: %s)" % WritingConfig().output_path)
    ap.add_argument("--max-meetings", type=int, default=None,
                    help="Only benchmark the first N multi-speaker meetings (sorted by id)")
    ap.add_argument("--seed", type=int, default=None, help="Seed for the simulated detector")
    ap.add_argument("--threshold-start", type=float, default=None, help="First threshold of the sweep")
    ap.add_argument("--threshold-stop", type=float, default=None, help="Last threshold of the sweep (inclusive)")
    ap.add_argument("--threshold-step", type=float, default=None, help="Threshold increment")
    ap.add_argument("--reporting-threshold", type=float, default=None,
                    help="Threshold whose per-meeting results are reported (must be on the grid)")
    ap.add_argument("--frame-rate", type=float, default=None, help="Scoring frames per second")
    ap.add_argument("--min-overlap", type=float, default=None, help="Shortest speaker overlap kept (s)")
    ap.add_argument("--merge-gap", type=float, default=None, help="Merge overlaps separated by at most this (s)")
    ap.add_argument("--min-duration", type=float, default=None, help="Skip meetings shorter than this (s)")
    ap.add_argument("--scores-dir", default=None,
                    help="Directory of <meeting>.npy per-frame overlap probabilities from a real model; "
                         "without it the simulated detector is used")
    ap.add_argument("--scores-frame-rate", type=float, default=100.0,
                    help="Frames per second of the score arrays (default: %(default)s)")
    ap.add_argument("--dataset-label", default=None, help="Dataset name recorded in the report")
    ap.add_argument(
        "--log-level",
        choices=tuple(LOG_LEVELS.keys()),
        default=LOG.level,
        help="Logging verbosity (default: %(default)s)",
    )
    return ap.parse_args(argv)


# ====================== CONFIGS ========================
BENCH = BenchmarkConfig()
DET   = DetectorConfig()
WR    = WritingConfig()

_BENCH_OVERRIDES = {
    "threshold_start": "threshold_start",
    "threshold_stop": "threshold_stop",
    "threshold_step": "threshold_step",
    "reporting_threshold": "reporting_threshold",
    "frame_rate": "frame_rate",
    "min_overlap": "min_overlap_s",
    "merge_gap": "merge_gap_s",
    "min_duration": "min_meeting_duration_s",
    "max_meetings": "max_meetings",
}


def build_configs(args: argparse.Namespace) -> tuple[BenchmarkConfig, DetectorConfig, WritingConfig]:
    """Return per-run config copies with CLI overrides applied."""

    overrides = {
        field: getattr(args, arg)
        for arg, field in _BENCH_OVERRIDES.items()
        if getattr(args, arg, None) is not None
    }
    bench_cfg = replace(BENCH, **overrides)

    det_cfg = replace(DET)
    if getattr(args, "seed", None) is not None:
        det_cfg.seed = args.seed

    wr_cfg = replace(WR)
    if getattr(args, "dataset_label", None):
        wr_cfg.dataset_label = args.dataset_label
    if getattr(args, "output", None):
        wr_cfg.output_path = args.output
    return bench_cfg, det_cfg, wr_cfg


def build_detector(args: argparse.Namespace, det_cfg: DetectorConfig):
    if getattr(args, "scores_dir", None):
        scores_dir = pathlib.Path(args.scores_dir).expanduser().resolve()
        if not scores_dir.is_dir():
            raise SystemExit(f"Scores directory not found: {scores_dir}")
        logger.info("Using model frame scores from %s", scores_dir)
        return FrameScoreDetector(frame_score_loader(scores_dir), frame_rate=args.scores_frame_rate)
    logger.info("Using simulated detector (seed=%s)", det_cfg.seed)
    return SimulatedOverlapDetector(det_cfg)


# ======================= MAIN =======================
def run_benchmark_cli(args: argparse.Namespace, *, configure_logging: bool = True) -> BenchmarkReport:
    """Execute the benchmark using CLI-style arguments and return the report."""

    if configure_logging:
        logging.basicConfig(
            level=LOG_LEVELS.get(getattr(args, "log_level", LOG.level), logging.WARNING),
            format=LOG.format,
            force=True,
        )
    logger.debug("Logging initialized at %s", getattr(args, "log_level", LOG.level))

    try:
        bench_cfg, det_cfg, wr_cfg = build_configs(args)
    except ValueError as exc:
        raise SystemExit(f"Invalid configuration: {exc}")

    words_dir = pathlib.Path(args.words_dir).expanduser().resolve()
    logger.debug("Resolved words directory: %s", words_dir)
    if not words_dir.is_dir():
        raise SystemExit(f"Words directory not found: {words_dir}")

    detector = build_detector(args, det_cfg)

    try:
        report = run_benchmark(words_dir, detector, bench_cfg)
    except NoEligibleMeetingsError as e:
        raise SystemExit(f"[benchmark] {e}")
    except DetectorError as e:
        raise SystemExit(f"[detector] failed: {e}")

    print(format_summary(report, wr_cfg))

    try:
        out_path = write_report(report, wr_cfg.output_path, wr_cfg)
    except ReportWriteError as e:
        raise SystemExit(f"[write] {e}")
    print(f"\nResults saved to: {out_path}")
    return report


def main(argv: list[str] | None = None):
    args = parse_args(argv)
    run_benchmark_cli(args)

if __name__ == "__main__":
    os.environ.setdefault("PYTHONUNBUFFERED", "1")
    main(sys.argv[1:])
