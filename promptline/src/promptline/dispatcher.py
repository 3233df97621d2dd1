"""Editing dispatcher: key events in, buffer mutations and line redraws out."""

import logging

from .buffer import CommandBuffer
from .keybindings import EditorAction, KeybindingConfig, KeybindingManager
from .keys import KeyEvent
from .terminal import TerminalSurface

logger = logging.getLogger(__name__)

CLEAR_LINE = "\r\x1b[K"
NEWLINE = "\r\n"


def cursor_left(columns: int) -> str:
    return f"\x1b[{columns}D" if columns > 0 else ""


def format_shortcuts_help(keybindings: KeybindingManager) -> str:
    """The keyboard shortcut table, ready to write below the prompt line."""
    lines = ["", "Keyboard Shortcuts", "=" * 50]
    for keys, description in keybindings.describe_bindings():
        lines.append(f"  {keys:<20} - {description}")
    return NEWLINE.join(lines) + NEWLINE


class LineRenderer:
    """Redraws the prompt line, skipping redraws when nothing visible changed."""

    def __init__(self, terminal: TerminalSurface) -> None:
        self.terminal = terminal
        self._last: tuple[str, int, str] | None = None

    def invalidate(self) -> None:
        """Force the next render, e.g. after the terminal moved to a new line."""
        self._last = None

    def render(self, buffer: CommandBuffer) -> bool:
        """Redraw if (text, cursor, prompt) changed. Returns True if anything was written."""
        current = (buffer.text, buffer.cursor_position, buffer.prompt)
        if current == self._last:
            return False

        text, cursor, prompt = current
        line = prompt + text
        # After writing the line the terminal cursor sits at its end
        back = len(line) - (len(prompt) + cursor)

        try:
            self.terminal.write(CLEAR_LINE + line + cursor_left(back))
        except Exception:
            logger.warning("Failed to render command line", exc_info=True)
            return False

        self._last = current
        return True


class EditingDispatcher:
    """Maps one KeyEvent to one buffer operation, then redraws.

    Tab is reserved for completion and is not handled here; see
    ``ShellSession`` for the completion wiring.
    """

    def __init__(
        self,
        buffer: CommandBuffer,
        terminal: TerminalSurface,
        keybindings: KeybindingConfig | None = None,
    ) -> None:
        self.buffer = buffer
        self.terminal = terminal
        self.keybindings = KeybindingManager(keybindings)
        self.renderer = LineRenderer(terminal)

    def handle(self, event: KeyEvent) -> bool:
        """Apply a key event. Returns False if the event was ignored."""
        if not event.should_handle:
            logger.debug(f"Ignoring unhandled key event: {event.type}")
            return False

        if event.type == "printable":
            if not event.char:
                return False
            self.buffer.insert_character_at_cursor(event.char)
        else:
            action = self.keybindings.match(event.type)
            if action is None or action is EditorAction.AUTOCOMPLETE:
                logger.debug(f"Unhandled key type: {event.type}")
                return False
            self._handle_action(action)

        self.render()
        return True

    def _handle_action(self, action: EditorAction) -> None:
        """Dispatch editor action."""
        buffer = self.buffer

        match action:
            case EditorAction.SUBMIT:
                self._echo(NEWLINE)
                buffer.execute_command()
            case EditorAction.CANCEL:
                self._echo("^C" + NEWLINE)
                buffer.clear_command()
            case EditorAction.HISTORY_PREV:
                buffer.navigate_history_up()
            case EditorAction.HISTORY_NEXT:
                buffer.navigate_history_down()
            case EditorAction.CURSOR_LEFT:
                buffer.move_cursor_left()
            case EditorAction.CURSOR_RIGHT:
                buffer.move_cursor_right()
            case EditorAction.CURSOR_LINE_START:
                buffer.move_cursor_to_start()
            case EditorAction.CURSOR_LINE_END:
                buffer.move_cursor_to_end()
            case EditorAction.DELETE_CHAR_BEFORE:
                buffer.delete_character_before_cursor()
            case EditorAction.DELETE_CHAR_AFTER:
                buffer.delete_character_at_cursor()
            case EditorAction.DELETE_WORD_LEFT:
                buffer.delete_word_before_cursor()
            case EditorAction.KILL_LINE:
                buffer.kill_to_end()
            case EditorAction.CLEAR_LINE:
                buffer.clear_command()
            case EditorAction.CLEAR_SCREEN:
                self._clear_screen()
            case EditorAction.SHOW_SHORTCUTS:
                self._echo(format_shortcuts_help(self.keybindings))

    def _echo(self, text: str) -> None:
        try:
            self.terminal.write(text)
        except Exception:
            logger.warning("Failed to write to terminal", exc_info=True)
        # The prompt now needs drawing on a fresh line
        self.renderer.invalidate()

    def _clear_screen(self) -> None:
        try:
            self.terminal.clear()
        except Exception:
            logger.warning("Failed to clear terminal", exc_info=True)
        self.renderer.invalidate()

    def render(self) -> bool:
        return self.renderer.render(self.buffer)
