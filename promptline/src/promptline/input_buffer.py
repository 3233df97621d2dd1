"""Split raw terminal reads into complete key sequences.

One read from a raw-mode tty can hold several keys ("ls" plus an arrow,
two arrows in a row) or only part of an escape sequence. ``InputBuffer``
emits each complete sequence and each plain character separately, and
holds an unfinished escape sequence until the next read or a short timeout.
"""

import asyncio
import logging
import re
from typing import Callable

from .keys import ESC

logger = logging.getLogger(__name__)

_SGR_MOUSE = re.compile(r"^<\d+;\d+;\d+[Mm]$")


def sequence_status(data: str) -> str:
    """Classify ``data`` as 'complete', 'incomplete' or 'not-escape'."""
    if not data.startswith(ESC):
        return "not-escape"

    if len(data) == 1:
        return "incomplete"

    after_esc = data[1:]

    # CSI: ESC [ params final-byte
    if after_esc.startswith("["):
        if after_esc.startswith("[M"):
            # Legacy mouse report: fixed three bytes after ESC [ M
            return "complete" if len(data) >= 6 else "incomplete"
        return _csi_status(data)

    # OSC / DCS / APC: terminated by ST (ESC \) or BEL for OSC
    if after_esc.startswith("]"):
        return "complete" if data.endswith(f"{ESC}\\") or data.endswith("\x07") else "incomplete"
    if after_esc.startswith(("P", "_")):
        return "complete" if data.endswith(f"{ESC}\\") else "incomplete"

    # SS3: ESC O + one byte
    if after_esc.startswith("O"):
        return "complete" if len(after_esc) >= 2 else "incomplete"

    # Meta: ESC + one character
    return "complete"


def _csi_status(data: str) -> str:
    if len(data) < 3:
        return "incomplete"

    payload = data[2:]
    if not 0x40 <= ord(payload[-1]) <= 0x7E:
        return "incomplete"

    if payload.startswith("<"):
        return "complete" if _SGR_MOUSE.match(payload) else "incomplete"

    return "complete"


def split_sequences(data: str) -> tuple[list[str], str]:
    """Split ``data`` into complete sequences.

    Returns ``(sequences, remainder)`` where ``remainder`` is a trailing,
    still unfinished escape sequence (or "").
    """
    sequences: list[str] = []
    pos = 0

    while pos < len(data):
        if data[pos] != ESC:
            sequences.append(data[pos])
            pos += 1
            continue

        end = pos + 1
        while end <= len(data):
            if sequence_status(data[pos:end]) == "complete":
                break
            end += 1
        else:
            return sequences, data[pos:]

        sequences.append(data[pos:end])
        pos = end

    return sequences, ""


class InputBuffer:
    """Accumulates raw input and hands complete sequences to ``on_sequence``.

    A lone or partial escape sequence is held for ``timeout`` seconds so the
    rest of it can arrive in the next read; after that it is emitted as is,
    which is how a bare Escape key press gets through.
    """

    def __init__(self, on_sequence: Callable[[str], None], *, timeout: float = 0.01) -> None:
        self.on_sequence = on_sequence
        self.timeout = timeout
        self._buffer = ""
        self._timeout_handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> str:
        return self._buffer

    def process(self, data: str) -> None:
        """Feed one raw read."""
        self._cancel_timeout()

        sequences, self._buffer = split_sequences(self._buffer + data)
        for sequence in sequences:
            self.on_sequence(sequence)

        if not self._buffer:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Nothing can arrive later without a loop
            self.flush()
            return
        self._timeout_handle = loop.call_later(self.timeout, self.flush)

    def flush(self) -> None:
        """Emit whatever is held, complete or not."""
        self._cancel_timeout()
        if not self._buffer:
            return
        held, self._buffer = self._buffer, ""
        logger.debug(f"Flushing held input: {held!r}")
        self.on_sequence(held)

    def clear(self) -> None:
        self._cancel_timeout()
        self._buffer = ""

    def _cancel_timeout(self) -> None:
        if self._timeout_handle is not None:
            self._timeout_handle.cancel()
            self._timeout_handle = None
