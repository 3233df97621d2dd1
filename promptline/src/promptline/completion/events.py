"""Completion event bus."""

import logging
from typing import Callable

from .types import CompletionEvent

logger = logging.getLogger(__name__)

CompletionEventListener = Callable[[CompletionEvent], None]


class CompletionEventBus:
    """Synchronous fan-out to listeners; one failing listener never blocks the rest."""

    def __init__(self) -> None:
        self._listeners: list[CompletionEventListener] = []

    def __len__(self) -> int:
        return len(self._listeners)

    def add_listener(self, fn: CompletionEventListener) -> Callable[[], None]:
        """Add a listener. Returns a function that removes it."""
        if fn not in self._listeners:
            self._listeners.append(fn)
        return lambda: self.remove_listener(fn)

    def remove_listener(self, fn: CompletionEventListener) -> None:
        if fn in self._listeners:
            self._listeners.remove(fn)

    def emit(self, event: CompletionEvent) -> None:
        # Copy so listeners may unsubscribe themselves while being called
        for fn in list(self._listeners):
            try:
                fn(event)
            except Exception:
                logger.exception(f"Completion event listener failed on '{event.type}'")
