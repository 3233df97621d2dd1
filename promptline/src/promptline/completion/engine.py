"""Completion engine: provider registry, ranking and suggestion application."""

import asyncio
import inspect
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Any

from .events import CompletionEventBus, CompletionEventListener
from .types import (
    PRIORITY_ORDER,
    CompletionConfig,
    CompletionContext,
    CompletionEvent,
    CompletionProvider,
    CompletionResult,
    CompletionSuggestion,
    ErrorKind,
)

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


@dataclass
class ProviderOutcome:
    """Suggestions from one provider, or the reason it produced none."""

    provider_id: str
    suggestions: list[CompletionSuggestion] = field(default_factory=list)
    error: ErrorKind | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ApplyOutcome:
    """New input and cursor after splicing a suggestion in."""

    new_input: str
    new_cursor_position: int
    error: ErrorKind | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def create_completion_context(
    input: str,
    cursor_position: int,
    working_directory: str = "/",
    environment_variables: dict[str, str] | None = None,
) -> CompletionContext:
    """Tokenize the input up to the cursor and find the part being completed."""
    safe_cursor = max(0, min(cursor_position, len(input)))
    input_to_cursor = input[:safe_cursor]

    # Plain whitespace split; quoting and escapes are not interpreted
    command_parts = input_to_cursor.split()

    current_part_index = 0
    current_part = ""

    if command_parts:
        if input_to_cursor[-1].isspace():
            # Cursor sits after whitespace: a new, empty part starts here
            current_part_index = len(command_parts)
        else:
            current_part_index = len(command_parts) - 1
            current_part = command_parts[current_part_index]

    return CompletionContext(
        input=input,
        cursor_position=safe_cursor,
        command_parts=command_parts,
        current_part_index=current_part_index,
        current_part=current_part,
        working_directory=working_directory,
        environment_variables=dict(environment_variables or {}),
        is_new_command=current_part_index == 0,
    )


def find_common_prefix(suggestions: list[CompletionSuggestion]) -> str:
    """Longest common prefix of the suggestion texts."""
    return os.path.commonprefix([s.text for s in suggestions])


def sort_suggestions(
    suggestions: list[CompletionSuggestion], context: CompletionContext
) -> list[CompletionSuggestion]:
    """Order by priority tier, then prefix match on the current part, then text."""
    return sorted(
        suggestions,
        key=lambda s: (
            PRIORITY_ORDER[s.priority],
            not s.text.startswith(context.current_part),
            s.text,
        ),
    )


class CompletionEngine:
    """Coordinates completion providers for a command line.

    Providers are queried in registration order. Failures in providers,
    listeners or suggestion application are logged and degrade to a safe
    default; no public method raises.

    Example:
        engine = CompletionEngine()
        engine.register_provider(OptionCompletionProvider())
        result = await engine.get_completions("ls -", 4, "/home/user", {})
        new_input, new_cursor = engine.apply_suggestion("ls -", result.suggestions[0], 4)
    """

    def __init__(self, config: CompletionConfig | None = None) -> None:
        self.config = config or CompletionConfig()
        self._providers: dict[str, CompletionProvider] = {}
        self._events = CompletionEventBus()

    # === Provider registry ===

    def register_provider(self, provider: CompletionProvider) -> None:
        if provider.id in self._providers:
            logger.warning(f"Completion provider with id '{provider.id}' is already registered")
            return

        self._providers[provider.id] = provider
        logger.debug(f"Registered completion provider: {provider.name} ({provider.id})")

    def unregister_provider(self, provider_id: str) -> None:
        if provider_id not in self._providers:
            logger.warning(f"Completion provider with id '{provider_id}' is not registered")
            return

        del self._providers[provider_id]
        logger.debug(f"Unregistered completion provider: {provider_id}")

    def get_providers(self) -> list[CompletionProvider]:
        return list(self._providers.values())

    # === Events ===

    def add_event_listener(self, listener: CompletionEventListener) -> None:
        self._events.add_listener(listener)

    def remove_event_listener(self, listener: CompletionEventListener) -> None:
        self._events.remove_listener(listener)

    def _emit(self, type: str, context: CompletionContext, **kwargs: Any) -> None:
        self._events.emit(CompletionEvent(type=type, context=context, **kwargs))

    # === Completion ===

    async def get_completions(
        self,
        input: str,
        cursor_position: int,
        working_directory: str = "/",
        environment_variables: dict[str, str] | None = None,
    ) -> CompletionResult:
        """Collect, rank and truncate suggestions for the input at the cursor."""
        context = create_completion_context(
            input, cursor_position, working_directory, environment_variables
        )

        self._emit("request", context)

        try:
            if len(context.current_part) < self.config.min_input_length:
                result = CompletionResult(context=context)
            else:
                result = await self._collect(context)
        except Exception:
            logger.exception("Completion generation failed")
            result = CompletionResult(context=context)

        self._emit("result", context, suggestions=result.suggestions)
        return result

    async def _collect(self, context: CompletionContext) -> CompletionResult:
        outcomes = await self._query_providers(context)

        all_suggestions: list[CompletionSuggestion] = []
        for outcome in outcomes:
            all_suggestions.extend(outcome.suggestions)

        ranked = sort_suggestions(all_suggestions, context)
        limited = ranked[: self.config.max_suggestions]
        has_more = len(ranked) > self.config.max_suggestions

        # Prefix is taken over the truncated list only
        common_prefix = find_common_prefix(limited) if self.config.auto_complete_prefix else None

        return CompletionResult(
            suggestions=limited,
            has_more=has_more,
            context=context,
            common_prefix=common_prefix,
        )

    async def _query_providers(self, context: CompletionContext) -> list[ProviderOutcome]:
        providers = self.get_providers()

        if self.config.provider_concurrency <= 1:
            return [await self._query_provider(p, context) for p in providers]

        semaphore = asyncio.Semaphore(self.config.provider_concurrency)

        async def bounded(provider: CompletionProvider) -> ProviderOutcome:
            async with semaphore:
                return await self._query_provider(provider, context)

        # gather keeps registration order in its results
        return list(await asyncio.gather(*(bounded(p) for p in providers)))

    async def _query_provider(
        self, provider: CompletionProvider, context: CompletionContext
    ) -> ProviderOutcome:
        try:
            if not provider.can_complete(context):
                return ProviderOutcome(provider.id)

            suggestions = provider.get_completions(context, self.config)
            if inspect.isawaitable(suggestions):
                suggestions = await suggestions
            return ProviderOutcome(provider.id, list(suggestions))
        except Exception:
            logger.exception(f"Completion provider {provider.id} failed")
            return ProviderOutcome(provider.id, error=ErrorKind.PROVIDER_FAILED)

    # === Applying suggestions ===

    def apply_suggestion(
        self,
        input: str,
        suggestion: CompletionSuggestion,
        cursor_position: int,
    ) -> tuple[str, int]:
        """Splice a suggestion into the input.

        Returns ``(new_input, new_cursor_position)``. On any failure the
        original input and cursor come back unchanged.
        """
        try:
            outcome = self._splice(input, suggestion, cursor_position)
            if not outcome.ok:
                logger.warning(
                    f"Could not apply completion '{suggestion.text}': {outcome.error.value}"
                )
                return input, cursor_position

            context = create_completion_context(input, cursor_position, "", {})
            self._emit("apply", context, applied_suggestion=suggestion)

            return outcome.new_input, outcome.new_cursor_position
        except Exception:
            logger.exception("Failed to apply completion suggestion")
            return input, cursor_position

    def _splice(
        self, input: str, suggestion: CompletionSuggestion, cursor_position: int
    ) -> ApplyOutcome:
        text = suggestion.text

        if suggestion.range is not None:
            start, end = suggestion.range.start, suggestion.range.end
            if not 0 <= start <= end <= len(input):
                return ApplyOutcome(input, cursor_position, ErrorKind.INVALID_RANGE)
            new_input = input[:start] + text + input[end:]
            new_cursor = start + len(text)
        else:
            cursor = max(0, min(cursor_position, len(input)))
            before_cursor = input[:cursor]
            after_cursor = input[cursor:]

            # Word start is found by text search, not by tokenizer offsets.
            # Providers that need an exact span pass ``range``.
            current_word = _WHITESPACE.split(before_cursor)[-1]
            word_start = before_cursor.rfind(current_word)

            if word_start == -1:
                new_input = before_cursor + text + after_cursor
                new_cursor = cursor + len(text)
            else:
                new_input = input[:word_start] + text + after_cursor
                new_cursor = word_start + len(text)

        if suggestion.requires_space:
            new_input = new_input[:new_cursor] + " " + new_input[new_cursor:]
            new_cursor += 1

        return ApplyOutcome(new_input, new_cursor)


def create_completion_engine(**overrides: Any) -> CompletionEngine:
    """Build an engine from the default config with ``overrides`` applied."""
    return CompletionEngine(CompletionConfig(**overrides))
