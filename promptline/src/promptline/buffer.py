"""Command buffer with cursor, prompt and bounded history."""

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class CommandInputConfig(BaseModel):
    """Options for the command input buffer."""

    model_config = ConfigDict(frozen=True)

    max_history_size: int = Field(default=100, ge=1)
    prompt: str = "$ "
    debounce_delay: int = Field(default=100, ge=0)  # milliseconds
    allow_duplicates: bool = False


@dataclass
class HistoryEntry:
    """A command that was executed."""

    command: str
    timestamp: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=lambda: f"cmd-{uuid.uuid4().hex[:12]}")


class CommandHistory:
    """Ordered command history, oldest first, bounded by ``max_size``."""

    def __init__(self, max_size: int = 100, allow_duplicates: bool = False) -> None:
        self.max_size = max_size
        self.allow_duplicates = allow_duplicates
        self._entries: list[HistoryEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> HistoryEntry:
        return self._entries[index]

    @property
    def entries(self) -> list[HistoryEntry]:
        return list(self._entries)

    @property
    def commands(self) -> list[str]:
        return [entry.command for entry in self._entries]

    def push(self, command: str) -> HistoryEntry | None:
        """Append a command, dropping an older identical one unless duplicates are allowed."""
        command = command.strip()
        if not command:
            return None

        entry = HistoryEntry(command=command)

        if not self.allow_duplicates:
            self._entries = [e for e in self._entries if e.command != command]

        self._entries.append(entry)

        # Evict oldest first
        if len(self._entries) > self.max_size:
            self._entries = self._entries[-self.max_size :]

        logger.debug(f'Added command to history: "{command}" (history size: {len(self._entries)})')
        return entry

    def clear(self) -> None:
        self._entries.clear()


class DebouncedValue:
    """Pull-based debounce: ``value`` lags ``set()`` until it has been stable for ``delay_ms``."""

    def __init__(
        self,
        initial: str = "",
        delay_ms: int = 100,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.delay_ms = delay_ms
        self._clock = clock
        self._settled = initial
        self._pending = initial
        self._changed_at = clock()

    def set(self, value: str) -> None:
        if value == self._pending:
            return
        # Promote the previous pending value if it had already settled
        if self._is_stable():
            self._settled = self._pending
        self._pending = value
        self._changed_at = self._clock()

    def _is_stable(self) -> bool:
        return (self._clock() - self._changed_at) * 1000 >= self.delay_ms

    @property
    def value(self) -> str:
        if self._is_stable():
            self._settled = self._pending
        return self._settled


class CommandBuffer:
    """Editable command line with history browsing.

    Every mutation keeps ``0 <= cursor_position <= len(text)``. Any direct
    edit leaves history browsing mode. Nothing here raises to the caller:
    the execute callback is fire-and-forget and its failures are logged.

    Example:
        buffer = CommandBuffer(on_execute=lambda cmd: print(cmd))
        for ch in "ls -la":
            buffer.insert_character_at_cursor(ch)
        buffer.execute_command()
    """

    def __init__(
        self,
        config: CommandInputConfig | None = None,
        on_execute: Callable[[str], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or CommandInputConfig()
        self.on_execute = on_execute

        self._text = ""
        self._cursor_position = 0
        self._prompt = self.config.prompt

        self.history = CommandHistory(
            max_size=self.config.max_history_size,
            allow_duplicates=self.config.allow_duplicates,
        )
        self._history_index = -1
        self._is_browsing_history = False

        # Bumped on every text change; lets callers detect stale async work
        self._revision = 0
        self._debounced = DebouncedValue("", self.config.debounce_delay, clock)

    # === State ===

    @property
    def text(self) -> str:
        return self._text

    @property
    def cursor_position(self) -> int:
        return self._cursor_position

    @property
    def prompt(self) -> str:
        return self._prompt

    @property
    def history_index(self) -> int:
        return self._history_index

    @property
    def is_browsing_history(self) -> bool:
        return self._is_browsing_history

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def debounced_command(self) -> str:
        """Current text once it has been stable for ``debounce_delay`` ms."""
        return self._debounced.value

    def _replace(self, text: str, cursor: int) -> None:
        if text != self._text:
            self._revision += 1
            self._debounced.set(text)
        self._text = text
        self._cursor_position = max(0, min(cursor, len(text)))

    def _exit_browsing(self) -> None:
        self._history_index = -1
        self._is_browsing_history = False

    # === Editing ===

    def set_command(self, text: str) -> None:
        """Replace the text, put the cursor at the end, stop browsing history."""
        self._replace(text, len(text))
        self._exit_browsing()

    def clear_command(self) -> None:
        self._replace("", 0)
        self._exit_browsing()

    def insert_character_at_cursor(self, char: str) -> None:
        pos = self._cursor_position
        self._replace(self._text[:pos] + char + self._text[pos:], pos + len(char))
        self._exit_browsing()

    def delete_character_before_cursor(self) -> None:
        """Backspace."""
        pos = self._cursor_position
        if pos > 0:
            self._replace(self._text[: pos - 1] + self._text[pos:], pos - 1)
            self._exit_browsing()

    def delete_character_at_cursor(self) -> None:
        pos = self._cursor_position
        if pos < len(self._text):
            self._replace(self._text[:pos] + self._text[pos + 1 :], pos)
            self._exit_browsing()

    def kill_to_end(self) -> None:
        """Drop everything from the cursor to the end of the line."""
        self.set_command(self._text[: self._cursor_position])

    def delete_word_before_cursor(self) -> None:
        """Delete the word before the cursor, skipping trailing spaces first."""
        before = self._text[: self._cursor_position]
        after = self._text[self._cursor_position :]

        last_space = before.rstrip().rfind(" ")
        new_before = "" if last_space == -1 else before[: last_space + 1]

        self.set_command(new_before + after)

    # === Cursor movement ===

    def move_cursor_left(self) -> None:
        self._cursor_position = max(0, self._cursor_position - 1)

    def move_cursor_right(self) -> None:
        self._cursor_position = min(len(self._text), self._cursor_position + 1)

    def move_cursor_to_start(self) -> None:
        self._cursor_position = 0

    def move_cursor_to_end(self) -> None:
        self._cursor_position = len(self._text)

    def move_cursor_to(self, position: int) -> None:
        self._cursor_position = max(0, min(position, len(self._text)))

    # === Execution ===

    def execute_command(self) -> None:
        """Push the command to history, reset the line and run the callback."""
        command = self._text.strip()
        if not command:
            return

        logger.debug(f'Executing command: "{command}"')
        self.history.push(command)

        self._replace("", 0)
        self._exit_browsing()

        if self.on_execute is not None:
            try:
                self.on_execute(command)
            except Exception:
                logger.exception("Error executing command callback")

    # === History ===

    def navigate_history_up(self) -> None:
        if not len(self.history):
            return

        if self._is_browsing_history:
            new_index = max(0, self._history_index - 1)
        else:
            new_index = len(self.history) - 1

        command = self.history[new_index].command
        self._replace(command, len(command))
        self._history_index = new_index
        self._is_browsing_history = True

        logger.debug(f'History up: index {new_index}, command: "{command}"')

    def navigate_history_down(self) -> None:
        if not self._is_browsing_history:
            return

        if self._history_index >= len(self.history) - 1:
            # Past the newest entry: back to an empty line
            self._replace("", 0)
            self._exit_browsing()
            logger.debug("History down: cleared command")
            return

        new_index = self._history_index + 1
        command = self.history[new_index].command
        self._replace(command, len(command))
        self._history_index = new_index

        logger.debug(f'History down: index {new_index}, command: "{command}"')

    def clear_history(self) -> None:
        self.history.clear()
        self._exit_browsing()
        logger.debug("Command history cleared")

    # === Prompt ===

    def set_prompt(self, prompt: str) -> None:
        self._prompt = prompt
        logger.debug(f'Prompt updated: "{prompt}"')

