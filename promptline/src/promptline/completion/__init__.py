"""Completion engine and providers."""

from .engine import (
    ApplyOutcome,
    CompletionEngine,
    ProviderOutcome,
    create_completion_context,
    create_completion_engine,
    find_common_prefix,
    sort_suggestions,
)
from .events import CompletionEventBus, CompletionEventListener
from .providers import (
    CommandCompletionProvider,
    DirEntry,
    EnvironmentCompletionProvider,
    FileCompletionProvider,
    FileSystem,
    LocalFileSystem,
    OptionCompletionProvider,
    create_completion_providers,
)
from .types import (
    CompletionConfig,
    CompletionContext,
    CompletionEvent,
    CompletionPriority,
    CompletionProvider,
    CompletionRange,
    CompletionResult,
    CompletionSuggestion,
    CompletionType,
    ErrorKind,
)

__all__ = [
    # Engine
    "CompletionEngine",
    "create_completion_engine",
    "create_completion_context",
    "find_common_prefix",
    "sort_suggestions",
    "ProviderOutcome",
    "ApplyOutcome",
    # Events
    "CompletionEventBus",
    "CompletionEventListener",
    # Providers
    "CommandCompletionProvider",
    "FileCompletionProvider",
    "EnvironmentCompletionProvider",
    "OptionCompletionProvider",
    "create_completion_providers",
    "FileSystem",
    "LocalFileSystem",
    "DirEntry",
    # Types
    "CompletionConfig",
    "CompletionContext",
    "CompletionEvent",
    "CompletionPriority",
    "CompletionProvider",
    "CompletionRange",
    "CompletionResult",
    "CompletionSuggestion",
    "CompletionType",
    "ErrorKind",
]
