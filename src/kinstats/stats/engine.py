"""Frame statistics engine — histograms, extremes, median and mean of raw depth codes."""

from __future__ import annotations

import logging

import numpy as np
from omegaconf import DictConfig

from kinstats.bus.messages import RawFrame, StatisticsRecord
from kinstats.errors import InvalidFrame, NoValidSamples

logger = logging.getLogger(__name__)

DEFAULT_DOMAIN_SIZE = 2048
DEFAULT_SENTINEL = 2047
DEFAULT_THRESHOLD_PERCENT = 35
DEFAULT_COARSE_BUCKETS = 32


def is_over_threshold(invalid_count: int, total_pixels: int, threshold_percent: int) -> bool:
    """Integer-floor percentage test, strictly greater than the threshold."""
    return invalid_count * 100 // total_pixels > threshold_percent


class FrameStatisticsEngine:
    """Computes a StatisticsRecord for each raw frame of a fixed size.

    Stateless between frames: the same frame always gives the same record and
    the frame itself is never modified.
    """

    def __init__(
        self,
        width: int,
        height: int,
        domain_size: int = DEFAULT_DOMAIN_SIZE,
        sentinel_code: int = DEFAULT_SENTINEL,
        degradation_threshold_percent: int = DEFAULT_THRESHOLD_PERCENT,
        coarse_buckets: int = DEFAULT_COARSE_BUCKETS,
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"frame size must be positive, got {width}x{height}")
        if not 0 <= sentinel_code < domain_size:
            raise ValueError(f"sentinel code {sentinel_code} outside domain [0, {domain_size})")
        if coarse_buckets <= 0:
            raise ValueError(f"coarse_buckets must be positive, got {coarse_buckets}")
        self.width = width
        self.height = height
        self.domain_size = domain_size
        self.sentinel_code = sentinel_code
        self.threshold_percent = degradation_threshold_percent
        self.coarse_buckets = coarse_buckets

    @classmethod
    def from_config(cls, cfg: DictConfig, width: int, height: int) -> "FrameStatisticsEngine":
        stats_cfg = cfg.get("stats", {})
        engine = cls(
            width=width,
            height=height,
            domain_size=stats_cfg.get("domain_size", DEFAULT_DOMAIN_SIZE),
            sentinel_code=stats_cfg.get("sentinel_code", DEFAULT_SENTINEL),
            degradation_threshold_percent=stats_cfg.get(
                "degradation_threshold_percent", DEFAULT_THRESHOLD_PERCENT),
            coarse_buckets=stats_cfg.get("coarse_buckets", DEFAULT_COARSE_BUCKETS),
        )
        logger.info("Statistics engine: %dx%d, domain=%d, sentinel=%d, threshold=%d%%",
                    width, height, engine.domain_size, engine.sentinel_code,
                    engine.threshold_percent)
        return engine

    @property
    def total_pixels(self) -> int:
        return self.width * self.height

    def compute(self, frame: RawFrame | np.ndarray) -> StatisticsRecord:
        """Compute statistics for one frame.

        Raises:
            InvalidFrame: wrong pixel count, non-integer samples, or a code
                outside ``[0, domain_size - 1]``.
            NoValidSamples: every pixel is the sentinel code.
        """
        if isinstance(frame, RawFrame):
            depth, frame_id, timestamp = frame.depth, frame.frame_id, frame.timestamp
        else:
            depth, frame_id, timestamp = frame, 0, 0.0

        codes = self._validate(depth)
        total_pixels = codes.size

        invalid = codes == self.sentinel_code
        invalid_count = int(np.count_nonzero(invalid))
        valid_count = total_pixels - invalid_count
        over_threshold = is_over_threshold(invalid_count, total_pixels, self.threshold_percent)

        if valid_count == 0:
            raise NoValidSamples(invalid_count, total_pixels, over_threshold)

        valid = codes[~invalid]
        fine = np.bincount(valid, minlength=self.domain_size)
        coarse = np.bincount(valid * self.coarse_buckets // self.domain_size,
                             minlength=self.coarse_buckets)
        total = int(valid.sum(dtype=np.int64))

        # argmin/argmax return the first occurrence, i.e. the lowest pixel index.
        # Sentinel pixels are pushed out of range so they can never win.
        min_index = int(np.argmin(np.where(invalid, self.domain_size, codes)))
        max_index = int(np.argmax(np.where(invalid, -1, codes)))

        fine.flags.writeable = False
        coarse.flags.writeable = False

        return StatisticsRecord(
            min_code=int(codes[min_index]),
            min_index=min_index,
            max_code=int(codes[max_index]),
            max_index=max_index,
            invalid_count=invalid_count,
            median=median_code(fine, valid_count),
            mean=total / valid_count,
            over_threshold=over_threshold,
            valid_count=valid_count,
            total=total,
            fine_histogram=fine,
            coarse_histogram=coarse,
            width=self.width,
            height=self.height,
            domain_size=self.domain_size,
            frame_id=frame_id,
            timestamp=timestamp,
        )

    def _validate(self, depth) -> np.ndarray:
        depth = np.asarray(depth)
        if depth.ndim not in (1, 2):
            raise InvalidFrame(f"frame must be 1-D or 2-D, got shape {depth.shape}")
        if depth.size != self.total_pixels:
            raise InvalidFrame(
                f"frame has {depth.size} samples, expected {self.width}x{self.height}={self.total_pixels}")
        if depth.ndim == 2 and depth.shape != (self.height, self.width):
            raise InvalidFrame(f"frame shape {depth.shape} != ({self.height}, {self.width})")
        if depth.dtype == np.bool_ or not np.issubdtype(depth.dtype, np.integer):
            raise InvalidFrame(f"frame samples must be integer codes, got dtype {depth.dtype}")

        # Flattened int64 copy: the caller's buffer is never touched and the
        # coarse bucket products cannot overflow a narrow dtype.
        codes = depth.astype(np.int64).ravel()
        lo, hi = int(codes.min()), int(codes.max())
        if lo < 0 or hi >= self.domain_size:
            raise InvalidFrame(f"frame codes span [{lo}, {hi}], outside domain [0, {self.domain_size - 1}]")
        return codes


def median_code(fine_histogram: np.ndarray, valid_count: int) -> int:
    """First code whose cumulative count reaches ceil(valid_count / 2)."""
    half = (valid_count + 1) // 2
    cumulative = np.cumsum(fine_histogram)
    return int(np.searchsorted(cumulative, half, side="left"))


def compute_statistics(
    frame: RawFrame | np.ndarray,
    domain_size: int = DEFAULT_DOMAIN_SIZE,
    sentinel_code: int = DEFAULT_SENTINEL,
    degradation_threshold_percent: int = DEFAULT_THRESHOLD_PERCENT,
    coarse_buckets: int = DEFAULT_COARSE_BUCKETS,
    width: int | None = None,
    height: int | None = None,
) -> StatisticsRecord:
    """One-shot form of FrameStatisticsEngine.compute.

    Frame dimensions default to the frame's own shape (a 1-D frame is one row).
    """
    depth = frame.depth if isinstance(frame, RawFrame) else np.asarray(frame)
    if depth.size == 0:
        raise InvalidFrame("frame has no samples")
    if width is None or height is None:
        if depth.ndim == 2:
            height, width = depth.shape
        elif depth.ndim == 1:
            height, width = 1, depth.size
        else:
            raise InvalidFrame(f"frame must be 1-D or 2-D, got shape {depth.shape}")
    engine = FrameStatisticsEngine(
        width=width,
        height=height,
        domain_size=domain_size,
        sentinel_code=sentinel_code,
        degradation_threshold_percent=degradation_threshold_percent,
        coarse_buckets=coarse_buckets,
    )
    return engine.compute(frame)
