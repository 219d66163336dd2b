"""kinstats CLI entry point."""

import argparse
import logging
import signal
import sys

from kinstats.bus import LocalBus
from kinstats.config import load_config
from kinstats.display.formatter import DisplayMode, OutputFormatter
from kinstats.display.terminal import TerminalWriter
from kinstats.errors import DeviceError
from kinstats.hardware import create_indicator, create_sensor
from kinstats.runner import IndicatorController, StatsRunner
from kinstats.stats.calibration import CalibrationTable
from kinstats.stats.degradation import DegradationTracker
from kinstats.stats.engine import FrameStatisticsEngine
from kinstats.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="kinstats — live depth statistics for a depth sensor")
    display = parser.add_mutually_exclusive_group()
    display.add_argument("--display", default=None, choices=[m.value for m in DisplayMode],
                         help="What to print per frame (default: from config, normally verbose)")
    display.add_argument("-v", dest="display", action="store_const", const=DisplayMode.VERBOSE.value,
                         help="verbose report")
    display.add_argument("-m", dest="display", action="store_const", const=DisplayMode.MEDIAN.value,
                         help="median")
    display.add_argument("-M", dest="display", action="store_const", const=DisplayMode.MEDIAN_SCALED.value,
                         help="scaled median")
    display.add_argument("-a", dest="display", action="store_const", const=DisplayMode.MEAN.value,
                         help="mean")
    display.add_argument("-A", dest="display", action="store_const", const=DisplayMode.MEAN_SCALED.value,
                         help="scaled mean")
    parser.add_argument("--hardware", default=None,
                        help="Hardware config override (e.g., 'mock' for desktop dev, 'replay')")
    parser.add_argument("--config", default=None,
                        help="Path to additional config file to merge")
    parser.add_argument("--frames", type=int, default=None,
                        help="Stop after this many frames (default: run until interrupted)")
    parser.add_argument("overrides", nargs="*",
                        help="OmegaConf dot-notation overrides (e.g., stats.degradation_threshold_percent=20)")
    return parser.parse_intermixed_args(argv)


def install_signal_handlers(runner: StatsRunner) -> None:
    """First SIGINT/SIGTERM asks the runner to stop; a second one kills the process."""
    def on_signal(signum, frame):
        logger.info("Exiting due to signal %d (%s)", signum, signal.Signals(signum).name)
        runner.request_stop()
        signal.signal(signum, signal.SIG_DFL)

    signal.signal(signal.SIGINT, on_signal)
    signal.signal(signal.SIGTERM, on_signal)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    cfg = load_config(
        config_path=args.config,
        hardware_override=args.hardware,
        cli_overrides=args.overrides if args.overrides else None,
    )

    setup_logging(cfg.get("log_level", "INFO"))

    mode = DisplayMode.parse(args.display or cfg.get("display_mode", "verbose"))
    logger.info("kinstats starting, display=%s", mode.value)

    calibration = CalibrationTable.from_config(cfg)
    display_cfg = cfg.get("display", {})
    formatter = OutputFormatter(calibration, mode, bar_width=display_cfg.get("bar_width", 96))
    writer = TerminalWriter(sys.stdout, refresh=not mode.is_numeric and display_cfg.get("ansi", True))

    bus = LocalBus()
    sensor = create_sensor(cfg.hardware)

    try:
        with sensor:
            indicator = create_indicator(cfg.hardware, sensor)
            engine = FrameStatisticsEngine.from_config(cfg, sensor.width, sensor.height)
            with indicator:
                controller = IndicatorController(bus, indicator)
                controller.start()
                runner = StatsRunner(sensor, engine, DegradationTracker(), formatter, writer, bus)
                install_signal_handlers(runner)
                try:
                    runner.run(max_frames=args.frames)
                finally:
                    controller.stop()
    except DeviceError as e:
        logger.error("Depth sensor failure: %s", e)
        sys.exit(1)

    logger.info("kinstats stopped")


if __name__ == "__main__":
    main()
