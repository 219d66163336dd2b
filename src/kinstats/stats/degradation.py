"""Turns the per-frame over-threshold flag into degradation edges."""

from __future__ import annotations

import logging

from kinstats.bus.messages import DegradationEvent

logger = logging.getLogger(__name__)


class DegradationTracker:
    """Remembers whether the sensor is currently degraded.

    No hysteresis: the state simply follows the latest flag, and an event is
    returned only on the frame where the value changes. Must be updated once
    per frame, in frame-arrival order.
    """

    def __init__(self) -> None:
        self._degraded = False

    @property
    def degraded(self) -> bool:
        return self._degraded

    def update(self, over_threshold: bool) -> DegradationEvent | None:
        over_threshold = bool(over_threshold)
        if over_threshold == self._degraded:
            return None

        self._degraded = over_threshold
        if over_threshold:
            logger.warning("Depth sensor DEGRADED: invalid pixels above threshold")
            return DegradationEvent.ENTERED_DEGRADED
        logger.info("Depth sensor recovered, invalid pixels back under threshold")
        return DegradationEvent.EXITED_DEGRADED

    def reset(self) -> None:
        self._degraded = False
