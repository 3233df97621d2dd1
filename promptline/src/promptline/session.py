"""Interactive shell session: terminal input -> key events -> buffer, plus Tab completion."""

import asyncio
import logging
import os
from typing import Callable

from .buffer import CommandBuffer, CommandInputConfig
from .completion.engine import CompletionEngine
from .completion.types import (
    CompletionConfig,
    CompletionProvider,
    CompletionResult,
    CompletionSuggestion,
)
from .dispatcher import NEWLINE, EditingDispatcher
from .display import render_suggestions
from .keybindings import KeybindingConfig
from .input_buffer import InputBuffer
from .keys import KeyEvent, parse_terminal_key
from .terminal import TerminalSurface

logger = logging.getLogger(__name__)

BELL = "\x07"


class ShellSession:
    """One prompt session: a buffer, its dispatcher and a completion engine.

    Example:
        session = ShellSession(terminal, on_execute=run_command)
        for provider in create_completion_providers(BUILTINS):
            session.engine.register_provider(provider)
        session.start()
        terminal.start(session.feed)
    """

    def __init__(
        self,
        terminal: TerminalSurface,
        *,
        input_config: CommandInputConfig | None = None,
        completion_config: CompletionConfig | None = None,
        providers: list[CompletionProvider] | None = None,
        keybindings: KeybindingConfig | None = None,
        on_execute: Callable[[str], None] | None = None,
        working_directory: str | None = None,
        environment: dict[str, str] | None = None,
        width: int = 80,
    ) -> None:
        self.terminal = terminal
        self.buffer = CommandBuffer(input_config, on_execute=on_execute)
        self.dispatcher = EditingDispatcher(self.buffer, terminal, keybindings)
        self.engine = CompletionEngine(completion_config)
        for provider in providers or []:
            self.engine.register_provider(provider)

        self.working_directory = working_directory or os.getcwd()
        self.environment = dict(os.environ) if environment is None else environment
        self.width = width

        self.input = InputBuffer(self._on_sequence)
        self.closed = asyncio.Event()
        self._completion_task: asyncio.Task | None = None

    # === Lifecycle ===

    def start(self) -> None:
        """Draw the initial prompt."""
        self.dispatcher.render()

    def close(self) -> None:
        self.input.clear()
        self.closed.set()

    async def wait_closed(self) -> None:
        await self.closed.wait()

    # === Input ===

    def feed(self, data: str) -> None:
        """Handle one chunk of raw terminal input."""
        self.input.process(data)

    def _on_sequence(self, sequence: str) -> None:
        self.handle_key(parse_terminal_key(sequence))

    def handle_key(self, event: KeyEvent) -> None:
        if event.type == "tab":
            self._spawn_completion()
            return

        if event.type == "ctrl-d" and not self.buffer.text:
            self.terminal.write(NEWLINE)
            self.close()
            return

        self.dispatcher.handle(event)

    def _spawn_completion(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; Tab completion skipped")
            return
        self._completion_task = loop.create_task(self.complete())
        self._completion_task.add_done_callback(self._on_completion_done)

    @staticmethod
    def _on_completion_done(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Tab completion failed", exc_info=error)

    # === Completion ===

    async def complete(self) -> CompletionResult | None:
        """Complete at the cursor and apply what can be applied.

        The request is stamped with the buffer revision and cursor; if
        either moved while providers were running the result is dropped.
        Returns the result that was applied, or None.
        """
        revision = self.buffer.revision
        text = self.buffer.text
        cursor = self.buffer.cursor_position

        result = await self.engine.get_completions(
            text, cursor, self.working_directory, self.environment
        )

        if self.buffer.revision != revision or self.buffer.cursor_position != cursor:
            logger.debug("Discarding stale completion result")
            return None

        suggestions = result.suggestions
        if not suggestions:
            try:
                self.terminal.write(BELL)
            except Exception:
                logger.warning("Failed to ring terminal bell", exc_info=True)
            return result

        if len(suggestions) == 1:
            self._apply(text, suggestions[0], cursor)
            return result

        prefix = result.common_prefix or ""
        if len(prefix) > len(result.context.current_part):
            self._apply(text, CompletionSuggestion(text=prefix), cursor)

        self._show(result)
        return result

    def _apply(self, text: str, suggestion: CompletionSuggestion, cursor: int) -> None:
        new_input, new_cursor = self.engine.apply_suggestion(text, suggestion, cursor)
        self.buffer.set_command(new_input)
        self.buffer.move_cursor_to(new_cursor)
        self.dispatcher.render()

    def _show(self, result: CompletionResult) -> None:
        listing = render_suggestions(
            result,
            show_descriptions=self.engine.config.show_descriptions,
            width=self.width,
        )
        try:
            self.terminal.write(NEWLINE + listing)
        except Exception:
            logger.warning("Failed to show completion list", exc_info=True)
        self.dispatcher.renderer.invalidate()
        self.dispatcher.render()
