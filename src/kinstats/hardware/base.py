"""Abstract base classes for the depth sensor and the status indicator."""

from abc import ABC, abstractmethod

from kinstats.bus.messages import IndicatorState, RawFrame


class DepthSensor(ABC):
    """Abstract source of raw depth frames, delivered one at a time."""

    width: int
    height: int

    @abstractmethod
    def start(self) -> None:
        """Open the device and begin streaming."""

    @abstractmethod
    def read(self) -> RawFrame:
        """Return the next frame, blocking until one is available."""

    @abstractmethod
    def stop(self) -> None:
        """Stop streaming and release the device."""

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *exc):
        self.stop()


class Indicator(ABC):
    """Abstract status indicator (e.g. a device LED)."""

    @abstractmethod
    def start(self) -> None:
        """Prepare the indicator."""

    @abstractmethod
    def show(self, state: IndicatorState) -> None:
        """Display a state. Called on transitions only, not every frame."""

    def stop(self) -> None:
        """Turn the indicator off."""
        self.show(IndicatorState.OFF)

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *exc):
        self.stop()


class NullIndicator(Indicator):
    """Indicator that shows nothing, for sensors without one."""

    def start(self) -> None:
        pass

    def show(self, state: IndicatorState) -> None:
        pass
