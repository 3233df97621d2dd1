"""Completion data model."""

from enum import Enum
from typing import Literal, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

CompletionType = Literal[
    "command", "file", "directory", "argument", "option", "environment", "alias"
]
CompletionPriority = Literal["high", "medium", "low"]

PRIORITY_ORDER: dict[str, int] = {"high": 0, "medium": 1, "low": 2}


class CompletionRange(BaseModel):
    """Replacement span in the input, ``end`` exclusive."""

    model_config = ConfigDict(frozen=True)

    start: int
    end: int


class CompletionSuggestion(BaseModel):
    """A single completion candidate."""

    model_config = ConfigDict(frozen=True)

    text: str
    priority: CompletionPriority = "medium"
    type: CompletionType = "argument"
    description: str | None = None
    detail: str | None = None
    range: CompletionRange | None = None
    requires_space: bool = False


class CompletionContext(BaseModel):
    """What is being completed, derived from the input and cursor."""

    model_config = ConfigDict(frozen=True)

    input: str
    cursor_position: int
    command_parts: list[str] = Field(default_factory=list)
    current_part_index: int = 0
    current_part: str = ""
    working_directory: str = "/"
    environment_variables: dict[str, str] = Field(default_factory=dict)
    is_new_command: bool = True


class CompletionResult(BaseModel):
    """Ranked, truncated suggestions for one request."""

    model_config = ConfigDict(frozen=True)

    suggestions: list[CompletionSuggestion] = Field(default_factory=list)
    has_more: bool = False
    context: CompletionContext
    common_prefix: str | None = None


class CompletionConfig(BaseModel):
    """Completion behaviour options."""

    model_config = ConfigDict(frozen=True)

    max_suggestions: int = Field(default=20, ge=0)
    min_input_length: int = Field(default=0, ge=0)
    show_descriptions: bool = True
    auto_complete_prefix: bool = True
    case_sensitive: bool = False  # provider hint, core sorting is always case-sensitive
    include_hidden_files: bool = False  # provider hint
    provider_concurrency: int = Field(default=1, ge=1)


@runtime_checkable
class CompletionProvider(Protocol):
    """Pluggable source of suggestions."""

    id: str
    name: str

    def can_complete(self, context: CompletionContext) -> bool: ...

    async def get_completions(
        self, context: CompletionContext, config: CompletionConfig
    ) -> list[CompletionSuggestion]: ...


CompletionEventType = Literal["request", "result", "apply"]


class CompletionEvent(BaseModel):
    """Notification sent to completion listeners."""

    model_config = ConfigDict(frozen=True)

    type: CompletionEventType
    context: CompletionContext
    suggestions: list[CompletionSuggestion] | None = None
    applied_suggestion: CompletionSuggestion | None = None


class ErrorKind(Enum):
    """Failure categories at the engine's internal seams."""

    PROVIDER_FAILED = "provider_failed"
    INVALID_RANGE = "invalid_range"
    APPLY_FAILED = "apply_failed"
