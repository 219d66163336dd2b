"""In-process messaging between the run loop and its collaborators."""

from kinstats.bus.base import MessageBus
from kinstats.bus.local import LocalBus

__all__ = ["MessageBus", "LocalBus"]
