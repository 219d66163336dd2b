"""Per-frame depth statistics: calibration table, engine and degradation tracking."""

from kinstats.stats.calibration import CalibrationTable
from kinstats.stats.degradation import DegradationTracker
from kinstats.stats.engine import FrameStatisticsEngine, compute_statistics

__all__ = ["CalibrationTable", "DegradationTracker", "FrameStatisticsEngine", "compute_statistics"]
