"""Terminal I/O surface.

``TerminalSurface`` is the only thing the editing core writes to.
``ProcessTerminal`` implements it on top of the process's own tty, in raw
mode, for the interactive CLI.
"""

import asyncio
import logging
import os
import sys
import termios
import tty
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

_CLEAR_SCREEN = "\x1b[2J\x1b[H"


class TerminalSurface(Protocol):
    """Interface for terminal output."""

    def write(self, text: str) -> None: ...

    def clear(self) -> None: ...

    def focus(self) -> None: ...


class ProcessTerminal:
    """TerminalSurface backed by ``sys.stdin``/``sys.stdout`` in raw mode."""

    def __init__(self) -> None:
        self._original_termios: list | None = None
        self._input_handler: Callable[[str], None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    # -- TerminalSurface ----------------------------------------------------

    def write(self, text: str) -> None:
        sys.stdout.write(text)
        sys.stdout.flush()

    def clear(self) -> None:
        self.write(_CLEAR_SCREEN)

    def focus(self) -> None:
        """A process terminal always has focus."""

    # -- start / stop -------------------------------------------------------

    def start(self, on_input: Callable[[str], None]) -> None:
        """Enter raw mode and deliver each stdin chunk to ``on_input``."""
        self._input_handler = on_input

        fd = sys.stdin.fileno()
        self._original_termios = termios.tcgetattr(fd)
        tty.setraw(fd)

        self._loop = asyncio.get_running_loop()
        self._loop.add_reader(fd, self._on_readable)

    def stop(self) -> None:
        """Restore the terminal and stop reading."""
        fd = sys.stdin.fileno()

        if self._loop is not None:
            self._loop.remove_reader(fd)
            self._loop = None

        if self._original_termios is not None:
            termios.tcsetattr(fd, termios.TCSADRAIN, self._original_termios)
            self._original_termios = None

        self._input_handler = None

    def _on_readable(self) -> None:
        try:
            data = os.read(sys.stdin.fileno(), 4096)
        except OSError:
            logger.exception("Failed to read from stdin")
            return

        if data and self._input_handler is not None:
            self._input_handler(data.decode("utf-8", errors="replace"))
