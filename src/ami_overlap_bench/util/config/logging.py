"""Logging defaults for the benchmark CLI."""

from dataclasses import dataclass


@dataclass(frozen=True)
class LoggingConfig:
    """Root logger level and line format; ``--log-level`` overrides the level."""

    level: str = "WARNING"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


__all__ = ["LoggingConfig"]
