# Simulated overlap detector (stand-in for the real model's thresholded output)
from dataclasses import dataclass
from typing import Optional

@dataclass
class DetectorConfig:
    seed: Optional[int] = None           # None → fresh entropy every run

    # detection_rate = (1 - threshold) * detection_span + detection_floor
    detection_span: float = 0.8
    detection_floor: float = 0.2
    boundary_jitter_s: float = 0.1       # uniform ± offset on both edges

    # false_alarm_rate = threshold * false_alarm_scale; one per spacing seconds
    false_alarm_scale: float = 0.05
    false_alarm_spacing_s: float = 20.0
    false_alarm_min_len_s: float = 0.2
    false_alarm_max_len_s: float = 1.0
    false_alarm_tail_s: float = 1.0      # latest start is duration - tail
