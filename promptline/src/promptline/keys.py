"""Classify raw terminal input into key events."""

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

ESC = "\x1b"

# Raw sequence -> key type
TERMINAL_KEYS: dict[str, str] = {
    "\r": "enter",
    "\n": "enter",
    "\x7f": "backspace",
    "\x08": "backspace",
    f"{ESC}[3~": "delete",
    "\t": "tab",
    ESC: "escape",
    "\x01": "ctrl-a",
    "\x02": "ctrl-b",
    "\x03": "ctrl-c",
    "\x04": "ctrl-d",
    "\x05": "ctrl-e",
    "\x06": "ctrl-f",
    "\x0b": "ctrl-k",
    "\x0c": "ctrl-l",
    "\x0e": "ctrl-n",
    "\x10": "ctrl-p",
    "\x12": "ctrl-r",
    "\x13": "ctrl-s",
    "\x15": "ctrl-u",
    "\x17": "ctrl-w",
    "\x19": "ctrl-y",
    "\x1a": "ctrl-z",
    f"{ESC}[A": "arrow-up",
    f"{ESC}[B": "arrow-down",
    f"{ESC}[C": "arrow-right",
    f"{ESC}[D": "arrow-left",
    f"{ESC}OA": "arrow-up",
    f"{ESC}OB": "arrow-down",
    f"{ESC}OC": "arrow-right",
    f"{ESC}OD": "arrow-left",
    f"{ESC}[H": "home",
    f"{ESC}[F": "end",
    f"{ESC}OH": "home",
    f"{ESC}OF": "end",
    f"{ESC}[1~": "home",
    f"{ESC}[4~": "end",
    f"{ESC}[5~": "page-up",
    f"{ESC}[6~": "page-down",
    f"{ESC}OP": "f1",
    f"{ESC}OQ": "f2",
    f"{ESC}OR": "f3",
}


@dataclass(frozen=True)
class KeyEvent:
    """A classified key press."""

    type: str
    data: str = ""
    char: str | None = None
    should_handle: bool = True


def is_printable(char: str) -> bool:
    """Single printable character (control characters excluded)."""
    return len(char) == 1 and char.isprintable()


def parse_terminal_key(data: str) -> KeyEvent:
    """Turn one chunk of terminal input into a KeyEvent.

    Unknown sequences come back as ``type="unknown"`` with
    ``should_handle=False``.
    """
    key_type = TERMINAL_KEYS.get(data)
    if key_type is not None:
        return KeyEvent(type=key_type, data=data)

    if is_printable(data):
        return KeyEvent(type="printable", data=data, char=data)

    if data:
        logger.debug(f"Unknown terminal key sequence: {data!r} (codes: {[ord(c) for c in data]})")

    return KeyEvent(type="unknown", data=data, should_handle=False)
