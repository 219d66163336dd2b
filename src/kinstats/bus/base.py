"""Publish/subscribe interface used to fan per-frame results out to collaborators."""

from abc import ABC, abstractmethod
from typing import Any, Callable

Subscriber = Callable[[Any], None]


class MessageBus(ABC):
    """Abstract message bus.

    Statistics records and degradation events are published here so that
    consumers (indicator control, loggers, tests) never reach into the run loop.
    """

    @abstractmethod
    def publish(self, topic: str, message: Any) -> None:
        """Deliver a message to every subscriber of a topic."""

    @abstractmethod
    def subscribe(self, topic: str, callback: Subscriber) -> None:
        """Register a callback for a topic."""

    @abstractmethod
    def unsubscribe(self, topic: str, callback: Subscriber) -> None:
        """Remove a callback from a topic."""
