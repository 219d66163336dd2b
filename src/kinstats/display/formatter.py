"""Text rendering of per-frame statistics."""

from __future__ import annotations

import enum

from kinstats.bus.messages import StatisticsRecord
from kinstats.errors import NoValidSamples
from kinstats.stats.calibration import CalibrationTable

LABEL_WIDTH = 9


class DisplayMode(enum.Enum):
    """What to print for each frame."""
    VERBOSE = "verbose"
    MEDIAN = "median"
    MEDIAN_SCALED = "median-scaled"
    MEAN = "mean"
    MEAN_SCALED = "mean-scaled"

    @classmethod
    def parse(cls, name: str | DisplayMode) -> DisplayMode:
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower().replace("_", "-")
        for mode in cls:
            if mode.value == key:
                return mode
        choices = ", ".join(m.value for m in cls)
        raise ValueError(f"Unknown display mode: {name}. Available: {choices}")

    @property
    def is_numeric(self) -> bool:
        return self is not DisplayMode.VERBOSE


class OutputFormatter:
    """Formats a StatisticsRecord for the selected display mode.

    Verbose mode gives a multi-line report with a coarse-histogram bar chart;
    every other mode gives exactly one number per frame, for piping.
    """

    def __init__(
        self,
        calibration: CalibrationTable,
        mode: DisplayMode | str = DisplayMode.VERBOSE,
        bar_width: int = 96,
    ) -> None:
        self.calibration = calibration
        self.mode = DisplayMode.parse(mode)
        self.bar_width = bar_width

    def format(self, record: StatisticsRecord) -> str:
        if self.mode is DisplayMode.VERBOSE:
            return "\n".join(self.report_lines(record))
        if self.mode is DisplayMode.MEDIAN:
            return str(record.median)
        if self.mode is DisplayMode.MEDIAN_SCALED:
            return "%f" % self.calibration[record.median]
        if self.mode is DisplayMode.MEAN:
            return str(record.mean_code)
        return "%f" % self.calibration[record.mean_code]

    def format_empty(self, error: NoValidSamples) -> str:
        """Output for a frame with no valid samples; never a made-up statistic."""
        if self.mode.is_numeric:
            return "nan"
        return "\n".join([
            "No valid samples: %d%% out of range" % error.invalid_percent,
            self._out_line(error.invalid_count, error.total_pixels),
        ])

    def report_lines(self, record: StatisticsRecord) -> list[str]:
        cal = self.calibration
        min_x, min_y = record.min_xy
        max_x, max_y = record.max_xy
        lines = [
            "Frame %d, time: %.3f, min: %d (%d, %d), max: %d (%d, %d)" % (
                record.frame_id, record.timestamp,
                record.min_code, min_x, min_y,
                record.max_code, max_x, max_y),
            "Out of range: %d%% mean: %f (%f), median: %d (%f)" % (
                record.invalid_percent,
                record.mean, cal[record.mean_code],
                record.median, cal[record.median]),
        ]

        buckets = record.coarse_buckets
        median_bucket = record.median_bucket
        for i, count in enumerate(record.coarse_histogram):
            label = "%*.4f" % (LABEL_WIDTH, cal[i * record.domain_size // buckets])
            mark = "*" if i == median_bucket else "-"
            lines.append("%s: %s" % (label, mark * self.bar_length(int(count), record.total_pixels)))

        lines.append(self._out_line(record.invalid_count, record.total_pixels))
        return lines

    def bar_length(self, count: int, total_pixels: int) -> int:
        return count * self.bar_width // total_pixels

    def _out_line(self, invalid_count: int, total_pixels: int) -> str:
        return "%*s: %s" % (LABEL_WIDTH, "Out", "-" * self.bar_length(invalid_count, total_pixels))
