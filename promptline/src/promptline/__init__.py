"""
promptline - Interactive command line input with history and Tab completion.

Example:
    from promptline import ShellSession, create_completion_providers

    session = ShellSession(terminal, on_execute=run_command)
    for provider in create_completion_providers({"help": "Show help"}):
        session.engine.register_provider(provider)
    session.start()
"""

__version__ = "0.1.0"

# Command buffer
from .buffer import (
    CommandBuffer,
    CommandHistory,
    CommandInputConfig,
    DebouncedValue,
    HistoryEntry,
)

# Completion
from .completion import (
    CompletionConfig,
    CompletionContext,
    CompletionEngine,
    CompletionEvent,
    CompletionProvider,
    CompletionRange,
    CompletionResult,
    CompletionSuggestion,
    create_completion_context,
    create_completion_engine,
    create_completion_providers,
    find_common_prefix,
)

# Key handling
from .keys import KeyEvent, parse_terminal_key
from .input_buffer import InputBuffer
from .keybindings import (
    EditorAction,
    KeybindingConfig,
    KeybindingManager,
    get_default_keybindings,
)
from .dispatcher import EditingDispatcher, LineRenderer

# Terminal and session
from .terminal import ProcessTerminal, TerminalSurface
from .session import ShellSession
from .display import render_suggestions

# Settings
from .settings import Settings, SettingsManager

__all__ = [
    # Version
    "__version__",
    # Buffer
    "CommandBuffer",
    "CommandHistory",
    "CommandInputConfig",
    "DebouncedValue",
    "HistoryEntry",
    # Completion
    "CompletionConfig",
    "CompletionContext",
    "CompletionEngine",
    "CompletionEvent",
    "CompletionProvider",
    "CompletionRange",
    "CompletionResult",
    "CompletionSuggestion",
    "create_completion_context",
    "create_completion_engine",
    "create_completion_providers",
    "find_common_prefix",
    # Keys
    "KeyEvent",
    "parse_terminal_key",
    "InputBuffer",
    "EditorAction",
    "KeybindingConfig",
    "KeybindingManager",
    "get_default_keybindings",
    "EditingDispatcher",
    "LineRenderer",
    # Terminal / session
    "ProcessTerminal",
    "TerminalSurface",
    "ShellSession",
    "render_suggestions",
    # Settings
    "Settings",
    "SettingsManager",
]
