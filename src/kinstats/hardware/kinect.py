"""Kinect v1 depth sensor and LED driver (libfreenect Python bindings)."""

from __future__ import annotations

import logging

import numpy as np
from omegaconf import DictConfig

from kinstats.bus.messages import IndicatorState, RawFrame
from kinstats.errors import DeviceError
from kinstats.hardware.base import DepthSensor, Indicator

logger = logging.getLogger(__name__)


class KinectDepthSensor(DepthSensor):
    """Streams 11-bit depth from a Kinect.

    libfreenect delivers frames through a callback while its event loop runs;
    read() pumps the event loop until the callback has handed over the next
    frame, which turns that into a blocking one-frame-at-a-time call.
    """

    def __init__(self, cfg: DictConfig) -> None:
        self._cfg = cfg
        self.width = cfg.get("width", 640)
        self.height = cfg.get("height", 480)
        self._index = cfg.get("device_index", 0)
        self._tilt = cfg.get("tilt_degrees", -5)
        self._max_loops = cfg.get("max_event_loops", 1000)
        self._ctx = None
        self._dev = None
        self._pending: RawFrame | None = None
        self._frame_id = 0

    @property
    def device(self):
        """Open libfreenect device handle (None when stopped)."""
        return self._dev

    def start(self) -> None:
        import freenect

        self._ctx = freenect.init()
        if self._ctx is None:
            raise DeviceError("libfreenect init failed")

        count = freenect.num_devices(self._ctx)
        logger.info("Found %d Kinect device(s)", count)
        if count <= self._index:
            self._shutdown()
            raise DeviceError(f"Kinect #{self._index} not present ({count} device(s) found)")

        self._dev = freenect.open_device(self._ctx, self._index)
        if self._dev is None:
            self._shutdown()
            raise DeviceError(f"Error opening Kinect #{self._index}")

        if self._tilt is not None:
            freenect.set_tilt_degs(self._dev, self._tilt)
        freenect.set_depth_mode(self._dev, freenect.RESOLUTION_MEDIUM, freenect.DEPTH_11BIT)
        freenect.set_depth_callback(self._dev, self._on_depth)
        freenect.start_depth(self._dev)

        logger.info("KinectDepthSensor started (#%d, %dx%d, tilt=%s)",
                    self._index, self.width, self.height, self._tilt)

    def _on_depth(self, dev, data, timestamp) -> None:
        # libfreenect reuses its buffer after the callback returns
        self._frame_id += 1
        self._pending = RawFrame(depth=np.array(data, dtype=np.uint16, copy=True),
                                 timestamp=float(timestamp), frame_id=self._frame_id)

    def read(self) -> RawFrame:
        import freenect

        if self._dev is None:
            raise DeviceError("KinectDepthSensor.read() called before start()")

        for _ in range(self._max_loops):
            if self._pending is not None:
                frame, self._pending = self._pending, None
                return frame
            if freenect.process_events(self._ctx) < 0:
                raise DeviceError("libfreenect event processing failed")
        raise DeviceError(f"No depth frame after {self._max_loops} event loops")

    def stop(self) -> None:
        if self._dev is not None:
            import freenect

            freenect.stop_depth(self._dev)
            freenect.close_device(self._dev)
            self._dev = None
        self._shutdown()
        logger.info("KinectDepthSensor stopped")

    def _shutdown(self) -> None:
        if self._ctx is not None:
            import freenect

            freenect.shutdown(self._ctx)
            self._ctx = None


class KinectLed(Indicator):
    """Kinect front LED: green when healthy, blinking red/yellow when degraded."""

    def __init__(self, sensor: KinectDepthSensor) -> None:
        self._sensor = sensor

    def start(self) -> None:
        if self._sensor.device is None:
            raise DeviceError("Kinect LED needs the sensor to be started first")
        logger.info("KinectLed started")

    def show(self, state: IndicatorState) -> None:
        import freenect

        dev = self._sensor.device
        if dev is None:
            return
        led = {
            IndicatorState.OK: freenect.LED_GREEN,
            IndicatorState.DEGRADED: freenect.LED_BLINK_RED_YELLOW,
            IndicatorState.OFF: freenect.LED_OFF,
        }[state]
        freenect.set_led(dev, led)
