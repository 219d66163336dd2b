"""Message dataclasses and topic constants."""

from __future__ import annotations

from dataclasses import dataclass, field
import enum
import time

import numpy as np

TOPIC_FRAME_STATS = "stats/frame"
TOPIC_DEGRADATION = "stats/degradation"


@dataclass
class RawFrame:
    """A single raw depth frame as delivered by the sensor."""
    depth: np.ndarray                   # HxW raw codes (uint16, 11-bit range)
    timestamp: float = field(default_factory=time.time)
    frame_id: int = 0

    @property
    def width(self) -> int:
        return self.depth.shape[-1]

    @property
    def height(self) -> int:
        return self.depth.shape[0] if self.depth.ndim > 1 else 1


@dataclass
class StatisticsRecord:
    """Per-frame depth statistics. Only built when the frame had valid samples."""
    min_code: int
    min_index: int
    max_code: int
    max_index: int
    invalid_count: int
    median: int
    mean: float
    over_threshold: bool
    valid_count: int
    total: int                          # sum of valid codes
    fine_histogram: np.ndarray          # domain_size counts, sentinel entry always 0
    coarse_histogram: np.ndarray        # coarse_buckets counts
    width: int
    height: int
    domain_size: int
    frame_id: int = 0
    timestamp: float = 0.0

    @property
    def total_pixels(self) -> int:
        return self.width * self.height

    @property
    def mean_code(self) -> int:
        """Mean rounded to the nearest code, halves rounding up."""
        return int(np.floor(self.mean + 0.5))

    @property
    def invalid_percent(self) -> int:
        return self.invalid_count * 100 // self.total_pixels

    @property
    def min_xy(self) -> tuple[int, int]:
        return self.min_index % self.width, self.min_index // self.width

    @property
    def max_xy(self) -> tuple[int, int]:
        return self.max_index % self.width, self.max_index // self.width

    @property
    def coarse_buckets(self) -> int:
        return len(self.coarse_histogram)

    @property
    def median_bucket(self) -> int:
        return self.median * self.coarse_buckets // self.domain_size


class DegradationEvent(enum.Enum):
    """Edge emitted when the over-threshold flag changes value."""
    ENTERED_DEGRADED = "entered_degraded"
    EXITED_DEGRADED = "exited_degraded"


class IndicatorState(enum.Enum):
    """What an external indicator should currently show."""
    OK = "ok"
    DEGRADED = "degraded"
    OFF = "off"
