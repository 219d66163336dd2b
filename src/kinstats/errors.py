"""Exception types raised by the statistics engine and sensor drivers."""

from __future__ import annotations


class StatsError(Exception):
    """Base class for per-frame statistics failures.

    These never end a run: the caller skips that frame and keeps going.
    """


class InvalidFrame(StatsError):
    """Frame has the wrong size or holds a code outside the raw domain."""


class NoValidSamples(StatsError):
    """Every pixel of the frame is the sentinel code.

    Mean and median are undefined. The counts are kept so the caller can
    still render the out-of-range fraction and drive the degradation flag.
    """

    def __init__(self, invalid_count: int, total_pixels: int, over_threshold: bool) -> None:
        super().__init__(f"no valid samples in frame ({invalid_count}/{total_pixels} invalid)")
        self.invalid_count = invalid_count
        self.total_pixels = total_pixels
        self.over_threshold = over_threshold

    @property
    def invalid_percent(self) -> int:
        return self.invalid_count * 100 // self.total_pixels if self.total_pixels else 100


class DeviceError(Exception):
    """Depth sensor could not be initialized, opened or read. Fatal to the run."""


class SensorExhausted(DeviceError):
    """A finite frame source has no more frames."""
