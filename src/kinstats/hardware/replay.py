"""Replays recorded raw depth frames from a .npy file."""

import logging
import time
from pathlib import Path

import numpy as np
from omegaconf import DictConfig

from kinstats.bus.messages import RawFrame
from kinstats.errors import DeviceError, SensorExhausted
from kinstats.hardware.base import DepthSensor

logger = logging.getLogger(__name__)


class ReplayDepthSensor(DepthSensor):
    """Serves frames from an (N, H, W) or (H, W) array saved with numpy.save."""

    def __init__(self, cfg: DictConfig) -> None:
        self._path = Path(cfg.get("path", "frames.npy"))
        self._loop = cfg.get("loop", False)
        self._fps = cfg.get("fps", 0)
        self._frames: np.ndarray | None = None
        self._index = 0
        self._frame_id = 0
        self.width = 0
        self.height = 0

    def start(self) -> None:
        if not self._path.exists():
            raise DeviceError(f"Recording not found: {self._path}")
        frames = np.load(self._path, mmap_mode="r")
        if frames.ndim == 2:
            frames = frames[np.newaxis]
        if frames.ndim != 3 or frames.shape[0] == 0:
            raise DeviceError(f"Recording {self._path} must hold (N, H, W) frames, got shape {frames.shape}")
        self._frames = frames
        self._index = 0
        self.height, self.width = frames.shape[1:]
        logger.info("ReplayDepthSensor started: %d frames of %dx%d from %s (loop=%s)",
                    frames.shape[0], self.width, self.height, self._path, self._loop)

    def read(self) -> RawFrame:
        if self._frames is None:
            raise DeviceError("ReplayDepthSensor.read() called before start()")
        if self._index >= len(self._frames):
            if not self._loop:
                raise SensorExhausted(f"End of recording {self._path}")
            self._index = 0

        if self._fps:
            time.sleep(1.0 / self._fps)

        depth = np.array(self._frames[self._index])
        self._index += 1
        self._frame_id += 1
        return RawFrame(depth=depth, timestamp=time.time(), frame_id=self._frame_id)

    def stop(self) -> None:
        self._frames = None
        logger.info("ReplayDepthSensor stopped")
