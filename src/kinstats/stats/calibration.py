"""Raw depth code to distance lookup table."""

from __future__ import annotations

import logging
import math

import numpy as np
from omegaconf import DictConfig

logger = logging.getLogger(__name__)

DEFAULT_K = 0.1236
DEFAULT_C = 2842.5
DEFAULT_D = 1.1863


class CalibrationTable:
    """Precomputed ``k * tan(code / c + d)`` for every raw code.

    Built once at startup and read-only afterwards, so it can be shared by the
    engine and the formatter. Codes whose tangent argument falls past the pole at
    ``pi / 2`` have no physical distance and map to ``inf``; this keeps the table
    non-decreasing over the whole domain.
    """

    def __init__(self, values: np.ndarray, k: float, c: float, d: float) -> None:
        values = np.array(values, dtype=np.float64)
        values.flags.writeable = False
        self._values = values
        self.k = k
        self.c = c
        self.d = d

    @classmethod
    def build(
        cls,
        domain_size: int = 2048,
        k: float = DEFAULT_K,
        c: float = DEFAULT_C,
        d: float = DEFAULT_D,
    ) -> "CalibrationTable":
        """Evaluate the calibration curve for codes ``0 .. domain_size - 1``."""
        if domain_size <= 0:
            raise ValueError(f"domain_size must be positive, got {domain_size}")
        if k <= 0 or c <= 0:
            raise ValueError(f"calibration constants k and c must be positive (k={k}, c={c})")

        angle = np.arange(domain_size, dtype=np.float64) / c + d
        with np.errstate(over="ignore", invalid="ignore"):
            values = k * np.tan(angle)
        values[angle >= math.pi / 2] = np.inf
        values[angle <= -math.pi / 2] = -np.inf

        finite = np.isfinite(values)
        if not finite.all():
            logger.debug("Calibration: %d of %d codes beyond the curve's range",
                         int((~finite).sum()), domain_size)
        return cls(values, k, c, d)

    @classmethod
    def from_config(cls, cfg: DictConfig) -> "CalibrationTable":
        cal_cfg = cfg.get("calibration", {})
        stats_cfg = cfg.get("stats", {})
        return cls.build(
            domain_size=stats_cfg.get("domain_size", 2048),
            k=cal_cfg.get("k", DEFAULT_K),
            c=cal_cfg.get("c", DEFAULT_C),
            d=cal_cfg.get("d", DEFAULT_D),
        )

    @property
    def values(self) -> np.ndarray:
        return self._values

    def distance(self, code: int) -> float:
        return float(self._values[code])

    def __getitem__(self, code: int) -> float:
        return self.distance(code)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"CalibrationTable(size={len(self)}, k={self.k}, c={self.c}, d={self.d})"
