"""kinstats: live depth-frame statistics for checking a depth sensor's health."""

__version__ = "0.1.0"
