"""Run loop: read a frame, compute its statistics, update the indicator and output."""

from __future__ import annotations

import logging
import threading
from typing import NamedTuple

from kinstats.bus.base import MessageBus
from kinstats.bus.messages import (
    DegradationEvent, IndicatorState, RawFrame, StatisticsRecord,
    TOPIC_DEGRADATION, TOPIC_FRAME_STATS,
)
from kinstats.display.formatter import OutputFormatter
from kinstats.display.terminal import TerminalWriter
from kinstats.errors import InvalidFrame, NoValidSamples, SensorExhausted
from kinstats.hardware.base import DepthSensor, Indicator
from kinstats.stats.degradation import DegradationTracker
from kinstats.stats.engine import FrameStatisticsEngine

logger = logging.getLogger(__name__)


class RunSummary(NamedTuple):
    """Counters for a finished run."""

    frames: int
    invalid_frames: int
    empty_frames: int
    degraded: bool


class IndicatorController:
    """Maps degradation events on the bus to indicator changes.

    Only transitions reach the indicator, so the device sees one command per
    change instead of one per frame.
    """

    def __init__(self, bus: MessageBus, indicator: Indicator) -> None:
        self._bus = bus
        self._indicator = indicator

    def start(self) -> None:
        self._indicator.show(IndicatorState.OK)
        self._bus.subscribe(TOPIC_DEGRADATION, self.on_event)

    def stop(self) -> None:
        self._bus.unsubscribe(TOPIC_DEGRADATION, self.on_event)

    def on_event(self, event: DegradationEvent) -> None:
        if event is DegradationEvent.ENTERED_DEGRADED:
            self._indicator.show(IndicatorState.DEGRADED)
        else:
            self._indicator.show(IndicatorState.OK)


class StatsRunner:
    """Owns the per-run state: engine, degradation tracker and output.

    Frames are processed strictly one at a time in arrival order. Stopping is
    cooperative: request_stop() only sets a flag that is checked between frames,
    so it is safe to call from a signal handler or another thread.
    """

    def __init__(
        self,
        sensor: DepthSensor,
        engine: FrameStatisticsEngine,
        tracker: DegradationTracker,
        formatter: OutputFormatter,
        writer: TerminalWriter,
        bus: MessageBus,
    ) -> None:
        self.sensor = sensor
        self.engine = engine
        self.tracker = tracker
        self.formatter = formatter
        self.writer = writer
        self.bus = bus
        self._stop_requested = threading.Event()
        self._frames = 0
        self._invalid_frames = 0
        self._empty_frames = 0

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested.is_set()

    def request_stop(self) -> None:
        self._stop_requested.set()

    def step(self) -> StatisticsRecord | None:
        """Read and process one frame. Returns its record, or None if it had none."""
        frame = self.sensor.read()
        return self.process(frame)

    def process(self, frame: RawFrame) -> StatisticsRecord | None:
        self._frames += 1
        try:
            record = self.engine.compute(frame)
        except InvalidFrame as e:
            self._invalid_frames += 1
            logger.warning("Skipping frame %d: %s", frame.frame_id, e)
            return None
        except NoValidSamples as e:
            self._empty_frames += 1
            logger.debug("Frame %d: %s", frame.frame_id, e)
            self._track(e.over_threshold)
            self.writer.write(self.formatter.format_empty(e))
            return None

        self.bus.publish(TOPIC_FRAME_STATS, record)
        self._track(record.over_threshold)
        self.writer.write(self.formatter.format(record))
        return record

    def _track(self, over_threshold: bool) -> None:
        event = self.tracker.update(over_threshold)
        if event is not None:
            self.bus.publish(TOPIC_DEGRADATION, event)

    def run(self, max_frames: int | None = None) -> RunSummary:
        """Process frames until stopped, the frame limit is hit, or the source runs dry."""
        processed = 0
        while not self._stop_requested.is_set():
            if max_frames is not None and processed >= max_frames:
                break
            try:
                self.step()
            except SensorExhausted as e:
                logger.info("%s", e)
                break
            processed += 1

        summary = self.summary()
        logger.info("Processed %d frames (%d invalid, %d without valid samples)",
                    summary.frames, summary.invalid_frames, summary.empty_frames)
        return summary

    def summary(self) -> RunSummary:
        return RunSummary(
            frames=self._frames,
            invalid_frames=self._invalid_frames,
            empty_frames=self._empty_frames,
            degraded=self.tracker.degraded,
        )
