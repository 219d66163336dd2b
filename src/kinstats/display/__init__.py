"""Rendering of statistics records for humans and pipes."""

from kinstats.display.formatter import DisplayMode, OutputFormatter
from kinstats.display.terminal import TerminalWriter

__all__ = ["DisplayMode", "OutputFormatter", "TerminalWriter"]
