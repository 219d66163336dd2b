"""Synchronous in-process message bus."""

import logging
from collections import defaultdict
from typing import Any

from kinstats.bus.base import MessageBus, Subscriber

logger = logging.getLogger(__name__)


class LocalBus(MessageBus):
    """Delivers messages in the publishing thread, in subscription order.

    The run loop publishes from the frame-delivery thread only, so subscribers
    see frames and degradation events in arrival order.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[Subscriber]] = defaultdict(list)

    def publish(self, topic: str, message: Any) -> None:
        for callback in list(self._subscribers.get(topic, ())):
            try:
                callback(message)
            except Exception:
                logger.exception("Subscriber failed on topic %s", topic)

    def subscribe(self, topic: str, callback: Subscriber) -> None:
        if callback not in self._subscribers[topic]:
            self._subscribers[topic].append(callback)

    def unsubscribe(self, topic: str, callback: Subscriber) -> None:
        subscribers = self._subscribers.get(topic)
        if subscribers and callback in subscribers:
            subscribers.remove(callback)

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscribers.get(topic, ()))
