"""
In-place terminal status lines.

Each caller-chosen virtual line number maps to one row of output. Writing to
a line that was printed earlier moves the cursor back up to it, redraws it,
and returns to the bottom, so progress for many concurrent jobs can be shown
without scrolling. Between writes the cursor rests on the empty row just
below the lowest line printed so far.

State lives on the writer instance, so several independent sessions can
coexist (for example one per stream in tests).
"""

from __future__ import annotations

import shutil
import sys
from typing import Optional, TextIO

CSI = "\x1b["
ERASE_LINE = CSI + "2K"


def cursor_up(n: int) -> str:
    return f"{CSI}{n}A"


def cursor_down(n: int) -> str:
    return f"{CSI}{n}B"


class StatusLineWriter:
    """
    Redraws numbered lines in place using ANSI cursor movement.

    Example:
        >>> writer = StatusLineWriter()
        >>> writer.set_line(0, "job 0: 0%")
        >>> writer.set_line(1, "job 1: 0%")
        >>> writer.set_line(0, "job 0: 50%")   # redraws the first row
    """

    def __init__(self, stream: Optional[TextIO] = None, height: Optional[int] = None) -> None:
        """
        Args:
            stream: Output stream (defaults to sys.stdout at write time)
            height: Visible rows; queried from the terminal when not given
        """
        self._stream = stream
        self._height = height
        # Greatest virtual line number written since the last reset
        self._lowest_printed_line: Optional[int] = None

    @property
    def lowest_printed_line(self) -> Optional[int]:
        return self._lowest_printed_line

    def set_line(self, line: int, text: str) -> None:
        """
        Write ``text`` on virtual line ``line``, replacing what was there.

        Does nothing if the line has already scrolled above the visible
        window.
        """
        if line < 0:
            raise ValueError(f"line must be non-negative, got {line}")

        anchor = 0 if self._lowest_printed_line is None else self._lowest_printed_line + 1
        dy = line - anchor

        # The cursor is at most on the bottom row, so anything a full
        # window height above it is gone
        if -dy >= self._window_height():
            return

        out = []
        if dy > 0:
            # Rows below the cursor have never been printed; create them
            out.append("\n" * dy)
        elif dy < 0:
            out.append(cursor_up(-dy))
        out.append("\r" + ERASE_LINE + text + "\n")

        if self._lowest_printed_line is None or line > self._lowest_printed_line:
            self._lowest_printed_line = line
        elif line < self._lowest_printed_line:
            out.append(cursor_down(self._lowest_printed_line - line))

        stream = self._stream or sys.stdout
        stream.write("".join(out))
        stream.flush()

    def reset(self) -> None:
        """Restart virtual line numbering at zero, below everything printed."""
        self._lowest_printed_line = None

    def _window_height(self) -> int:
        if self._height is not None:
            return self._height
        return shutil.get_terminal_size().lines
