# Config dataclass exports.
# Re-export config dataclasses so callers can do:
#   from ami_overlap_bench.util.config import BenchmarkConfig, ...

from .benchmark import BenchmarkConfig
from .detector import DetectorConfig
from .logging import LoggingConfig
from .writing import WritingConfig

__all__ = [
    "BenchmarkConfig",
    "DetectorConfig",
    "LoggingConfig",
    "WritingConfig",
]
