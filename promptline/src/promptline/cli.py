"""CLI for promptline.

An interactive demo shell: readline-style editing, history and Tab
completion over a handful of built-in commands.
"""

import argparse
import asyncio
import logging
import os
import shutil
import sys
from pathlib import Path

from .buffer import CommandInputConfig
from .completion import CompletionConfig, create_completion_providers
from .dispatcher import NEWLINE
from .session import ShellSession
from .settings import SettingsManager
from .terminal import ProcessTerminal, TerminalSurface

logger = logging.getLogger(__name__)

BUILTIN_COMMANDS: dict[str, str] = {
    "help": "List built-in commands",
    "history": "Show command history",
    "clear": "Clear the screen",
    "echo": "Print arguments",
    "pwd": "Print working directory",
    "exit": "Leave the shell",
}


# =============================================================================
# Argument Parsing
# =============================================================================

def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="promptline",
        description="Interactive command line with history and Tab completion",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  promptline                           Start the shell
  promptline --prompt "> "             Use a custom prompt
  promptline --log-file debug.log --log-level DEBUG
""",
    )

    input_group = parser.add_argument_group("Input Options")
    input_group.add_argument(
        "--prompt",
        help="Prompt string (default: from settings, else '$ ')",
    )
    input_group.add_argument(
        "--max-history",
        type=int,
        metavar="N",
        help="Maximum number of history entries",
    )
    input_group.add_argument(
        "--allow-duplicates",
        action="store_true",
        help="Keep repeated commands in history",
    )
    input_group.add_argument(
        "--cwd",
        help="Working directory for completion (default: current)",
    )

    log_group = parser.add_argument_group("Logging Options")
    log_group.add_argument(
        "--log-file",
        help="Write logs to this file (logs never go to the terminal)",
    )
    log_group.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: from settings, else WARNING)",
    )

    parser.add_argument(
        "-v", "--version",
        action="store_true",
        help="Show version",
    )

    return parser


def configure_logging(log_file: str | None, level: str) -> None:
    """Log to a file only; the terminal belongs to the prompt line."""
    if log_file:
        logging.basicConfig(
            filename=log_file,
            level=level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    else:
        logging.getLogger().addHandler(logging.NullHandler())


# =============================================================================
# Built-in Commands
# =============================================================================

class BuiltinCommands:
    """Runs the demo shell's built-in commands against a session."""

    def __init__(self, terminal: TerminalSurface) -> None:
        self.terminal = terminal
        self.session: ShellSession | None = None

    def _print(self, text: str = "") -> None:
        self.terminal.write(text + NEWLINE)

    def __call__(self, command: str) -> None:
        name, _, rest = command.partition(" ")
        rest = rest.strip()

        match name:
            case "help":
                width = max(len(n) for n in BUILTIN_COMMANDS)
                for cmd, description in BUILTIN_COMMANDS.items():
                    self._print(f"  {cmd.ljust(width)}  {description}")
            case "history":
                if self.session is not None:
                    for i, entry in enumerate(self.session.buffer.history.entries, 1):
                        self._print(f"{i:5}  {entry.command}")
            case "clear":
                self.terminal.clear()
            case "echo":
                self._print(rest)
            case "pwd":
                cwd = self.session.working_directory if self.session else os.getcwd()
                self._print(cwd)
            case "exit":
                if self.session is not None:
                    self.session.close()
            case _:
                self._print(f"{name}: command not found")


# =============================================================================
# Interactive Mode
# =============================================================================

async def run_interactive_async(
    input_config: CommandInputConfig,
    completion_config: CompletionConfig,
    cwd: str,
) -> None:
    terminal = ProcessTerminal()
    commands = BuiltinCommands(terminal)
    width = shutil.get_terminal_size().columns

    session = ShellSession(
        terminal,
        input_config=input_config,
        completion_config=completion_config,
        providers=create_completion_providers(BUILTIN_COMMANDS),
        on_execute=commands,
        working_directory=cwd,
        width=width,
    )
    commands.session = session

    terminal.start(session.feed)
    try:
        session.start()
        await session.wait_closed()
    finally:
        terminal.stop()


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    if parsed.version:
        from . import __version__

        print(f"promptline v{__version__}")
        return 0

    cwd = str(Path(parsed.cwd).resolve()) if parsed.cwd else os.getcwd()
    if not Path(cwd).is_dir():
        print(f"Error: not a directory: {cwd}", file=sys.stderr)
        return 1

    settings_manager = SettingsManager(cwd=cwd)
    settings = settings_manager.settings
    configure_logging(parsed.log_file, parsed.log_level or settings.log_level)

    overrides = {}
    if parsed.prompt is not None:
        overrides["prompt"] = parsed.prompt
    if parsed.max_history is not None:
        overrides["max_history_size"] = parsed.max_history
    if parsed.allow_duplicates:
        overrides["allow_duplicates"] = True

    try:
        base = settings.to_command_input_config().model_dump()
        input_config = CommandInputConfig.model_validate({**base, **overrides})
        completion_config = settings.to_completion_config()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not sys.stdin.isatty():
        print("Error: promptline needs an interactive terminal", file=sys.stderr)
        return 1

    logger.info(f"Starting promptline in {cwd}")
    try:
        asyncio.run(run_interactive_async(input_config, completion_config, cwd))
    except KeyboardInterrupt:
        pass

    return 0


if __name__ == "__main__":
    sys.exit(main())
