"""Adapter layer for on-disk corpus and model-score inputs."""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "MeetingCorpus",
    "find_meetings",
    "frame_score_loader",
]

_ATTR_TO_MODULE = {
    "MeetingCorpus": ("ami_overlap_bench.adapters.corpus", "MeetingCorpus"),
    "find_meetings": ("ami_overlap_bench.adapters.corpus", "find_meetings"),
    "frame_score_loader": (
        "ami_overlap_bench.adapters.frame_scores",
        "frame_score_loader",
    ),
}


def __getattr__(name: str) -> Any:
    try:
        module_name, attr_name = _ATTR_TO_MODULE[name]
    except KeyError as exc:
        raise AttributeError(f"module {__name__} has no attribute {name}") from exc
    module = import_module(module_name)
    return getattr(module, attr_name)
