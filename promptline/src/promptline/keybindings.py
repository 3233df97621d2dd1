"""Configurable keybinding system."""

import re
from dataclasses import dataclass, field
from enum import Enum, auto

MODIFIERS = ("ctrl", "alt", "shift", "meta")


class EditorAction(Enum):
    """Actions that can be triggered by key events."""

    # Submission
    SUBMIT = auto()
    CANCEL = auto()

    # History
    HISTORY_PREV = auto()
    HISTORY_NEXT = auto()

    # Cursor movement
    CURSOR_LEFT = auto()
    CURSOR_RIGHT = auto()
    CURSOR_LINE_START = auto()
    CURSOR_LINE_END = auto()

    # Deletion
    DELETE_CHAR_BEFORE = auto()  # Backspace
    DELETE_CHAR_AFTER = auto()  # Delete
    DELETE_WORD_LEFT = auto()
    KILL_LINE = auto()  # Cursor to end
    CLEAR_LINE = auto()

    # Screen
    CLEAR_SCREEN = auto()
    SHOW_SHORTCUTS = auto()

    # Autocomplete (reserved: handled by the session, not the dispatcher)
    AUTOCOMPLETE = auto()


ACTION_DESCRIPTIONS = {
    EditorAction.SUBMIT: "Execute the command",
    EditorAction.CANCEL: "Cancel the current line",
    EditorAction.HISTORY_PREV: "Previous command in history",
    EditorAction.HISTORY_NEXT: "Next command in history",
    EditorAction.CURSOR_LEFT: "Move cursor left",
    EditorAction.CURSOR_RIGHT: "Move cursor right",
    EditorAction.CURSOR_LINE_START: "Move to start of line",
    EditorAction.CURSOR_LINE_END: "Move to end of line",
    EditorAction.DELETE_CHAR_BEFORE: "Delete character before cursor",
    EditorAction.DELETE_CHAR_AFTER: "Delete character at cursor",
    EditorAction.DELETE_WORD_LEFT: "Delete word before cursor",
    EditorAction.KILL_LINE: "Delete to end of line",
    EditorAction.CLEAR_LINE: "Clear the line",
    EditorAction.CLEAR_SCREEN: "Clear the screen",
    EditorAction.SHOW_SHORTCUTS: "Show this help",
    EditorAction.AUTOCOMPLETE: "Complete command or path",
}


@dataclass
class KeybindingConfig:
    """Configuration for editor keybindings."""

    bindings: dict[EditorAction, list[str]] = field(default_factory=dict)

    def get_keys(self, action: EditorAction) -> list[str]:
        """Get key bindings for an action."""
        return self.bindings.get(action, [])

    def set_keys(self, action: EditorAction, keys: list[str]) -> None:
        """Set key bindings for an action."""
        self.bindings[action] = keys

    def add_key(self, action: EditorAction, key: str) -> None:
        """Add a key binding for an action."""
        if action not in self.bindings:
            self.bindings[action] = []
        if key not in self.bindings[action]:
            self.bindings[action].append(key)


def get_default_keybindings() -> KeybindingConfig:
    """Readline-style defaults."""
    return KeybindingConfig(
        bindings={
            EditorAction.SUBMIT: ["enter"],
            EditorAction.CANCEL: ["ctrl-c"],
            EditorAction.HISTORY_PREV: ["arrow-up", "ctrl-p"],
            EditorAction.HISTORY_NEXT: ["arrow-down", "ctrl-n"],
            EditorAction.CURSOR_LEFT: ["arrow-left", "ctrl-b"],
            EditorAction.CURSOR_RIGHT: ["arrow-right", "ctrl-f"],
            EditorAction.CURSOR_LINE_START: ["home", "ctrl-a"],
            EditorAction.CURSOR_LINE_END: ["end", "ctrl-e"],
            EditorAction.DELETE_CHAR_BEFORE: ["backspace"],
            EditorAction.DELETE_CHAR_AFTER: ["delete"],
            EditorAction.DELETE_WORD_LEFT: ["ctrl-w"],
            EditorAction.KILL_LINE: ["ctrl-k"],
            EditorAction.CLEAR_LINE: ["ctrl-u"],
            EditorAction.CLEAR_SCREEN: ["ctrl-l"],
            EditorAction.SHOW_SHORTCUTS: ["f1"],
            EditorAction.AUTOCOMPLETE: ["tab"],
        }
    )


class KeybindingManager:
    """Manages keybinding lookups and matching."""

    def __init__(self, config: KeybindingConfig | None = None) -> None:
        self.config = config or get_default_keybindings()
        self._key_to_action: dict[str, EditorAction] = {}
        self._build_lookup()

    def _build_lookup(self) -> None:
        """Build reverse lookup from key to action."""
        self._key_to_action.clear()
        for action, keys in self.config.bindings.items():
            for key in keys:
                self._key_to_action[self._normalize_key(key)] = action

    def _normalize_key(self, key: str) -> str:
        """Normalize key string for consistent matching.

        Accepts ``+`` or ``-`` separators and any modifier order, so
        "Ctrl+A", "ctrl-a" and "CTRL-a" all become "ctrl-a".
        """
        parts = [p for p in re.split(r"[+-]", key.lower()) if p]
        modifiers = sorted(p for p in parts if p in MODIFIERS)
        rest = [p for p in parts if p not in MODIFIERS]
        return "-".join(modifiers + rest)

    def match(self, key: str) -> EditorAction | None:
        """Match a key type (e.g. "ctrl-a", "arrow-up") to an action."""
        return self._key_to_action.get(self._normalize_key(key))

    def get_action_keys(self, action: EditorAction) -> list[str]:
        """Get all keys bound to an action."""
        return self.config.get_keys(action)

    def describe_bindings(self) -> list[tuple[str, str]]:
        """(keys, description) for every bound action, in declaration order."""
        rows = []
        for action in EditorAction:
            keys = self.get_action_keys(action)
            if keys:
                rows.append((", ".join(keys), ACTION_DESCRIPTIONS[action]))
        return rows
