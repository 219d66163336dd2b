"""Mock depth sensor and indicator for desktop development and testing."""

import logging
import time

import numpy as np
from omegaconf import DictConfig

from kinstats.bus.messages import IndicatorState, RawFrame
from kinstats.hardware.base import DepthSensor, Indicator

logger = logging.getLogger(__name__)

SENTINEL = 2047


class MockDepthSensor(DepthSensor):
    """Generates synthetic 11-bit frames without real hardware.

    Each frame is a floor plane seen by a tilted camera (codes grow toward the
    bottom rows) with a little noise, plus a band of invalid pixels sweeping in
    from the left edge. The band grows to ``max_shadow`` of the frame and back
    over ``shadow_period`` frames, so the degradation flag toggles regularly.
    """

    def __init__(self, cfg: DictConfig) -> None:
        self._cfg = cfg
        self.width = cfg.get("width", 640)
        self.height = cfg.get("height", 480)
        self._near_code = cfg.get("near_code", 600)
        self._far_code = cfg.get("far_code", 900)
        self._noise = cfg.get("noise", 4)
        self._shadow_period = max(2, cfg.get("shadow_period", 120))
        self._max_shadow = cfg.get("max_shadow", 0.6)
        self._fps = cfg.get("fps", 0)
        self._rng = np.random.default_rng(cfg.get("seed", 0))
        self._frame_id = 0
        self._last_read = 0.0

    def start(self) -> None:
        logger.info("MockDepthSensor started (%dx%d, shadow period=%d frames)",
                    self.width, self.height, self._shadow_period)

    def shadow_fraction(self, frame_id: int) -> float:
        """Fraction of columns blanked out for a given frame (triangle wave)."""
        phase = (frame_id % self._shadow_period) / self._shadow_period
        return self._max_shadow * (1.0 - abs(2.0 * phase - 1.0))

    def read(self) -> RawFrame:
        self._pace()
        self._frame_id += 1

        rows = np.linspace(self._near_code, self._far_code, self.height)
        depth = np.repeat(rows[:, np.newaxis], self.width, axis=1)
        if self._noise:
            depth += self._rng.normal(0.0, self._noise, size=depth.shape)
        depth = np.clip(np.rint(depth), 0, SENTINEL - 1).astype(np.uint16)

        shadow_cols = int(self.width * self.shadow_fraction(self._frame_id))
        depth[:, :shadow_cols] = SENTINEL

        return RawFrame(depth=depth, timestamp=time.time(), frame_id=self._frame_id)

    def _pace(self) -> None:
        if not self._fps:
            return
        wait = 1.0 / self._fps - (time.monotonic() - self._last_read)
        if wait > 0:
            time.sleep(wait)
        self._last_read = time.monotonic()

    def stop(self) -> None:
        logger.info("MockDepthSensor stopped after %d frames", self._frame_id)


class MockIndicator(Indicator):
    """Logs indicator changes instead of driving hardware. Stores history for tests."""

    def __init__(self) -> None:
        self.history: list[IndicatorState] = []

    def start(self) -> None:
        logger.info("MockIndicator started")

    def show(self, state: IndicatorState) -> None:
        self.history.append(state)
        logger.debug("MockIndicator: %s", state.value)
