"""Writes formatted statistics to a terminal or pipe."""

from __future__ import annotations

from typing import TextIO

HOME = "\x1b[H"
CLEAR_SCREEN = "\x1b[2J"
ERASE_LINE = "\x1b[K"
ERASE_BELOW = "\x1b[J"


class TerminalWriter:
    """Emits one block of text per frame.

    In refresh mode the block is redrawn in place at the top of the screen;
    otherwise blocks are appended line by line, which suits piping.
    """

    def __init__(self, stream: TextIO, refresh: bool = False) -> None:
        self._stream = stream
        self._refresh = refresh
        self._cleared = False

    def write(self, text: str) -> None:
        if not self._refresh:
            self._stream.write(text + "\n")
            self._stream.flush()
            return

        if not self._cleared:
            self._stream.write(HOME + CLEAR_SCREEN)
            self._cleared = True
        self._stream.write(HOME)
        for line in text.split("\n"):
            self._stream.write(line + ERASE_LINE + "\n")
        # Leftovers from a taller previous frame
        self._stream.write(ERASE_BELOW)
        self._stream.flush()
