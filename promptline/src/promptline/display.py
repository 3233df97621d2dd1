"""Render completion suggestions for the terminal with rich."""

import io

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .completion.types import CompletionResult, CompletionSuggestion

TYPE_STYLES: dict[str, str] = {
    "command": "bold green",
    "directory": "bold blue",
    "file": "default",
    "option": "yellow",
    "environment": "magenta",
    "argument": "default",
    "alias": "cyan",
}


def _label(suggestion: CompletionSuggestion) -> Text:
    return Text(suggestion.text, style=TYPE_STYLES.get(suggestion.type, "default"))


def build_suggestion_table(result: CompletionResult, show_descriptions: bool = True) -> Table:
    """One row per suggestion, with an optional dimmed description column."""
    table = Table.grid(padding=(0, 2))
    table.add_column(no_wrap=True)
    if show_descriptions:
        table.add_column(style="dim", overflow="ellipsis", no_wrap=True)

    for suggestion in result.suggestions:
        if show_descriptions:
            table.add_row(_label(suggestion), suggestion.description or "")
        else:
            table.add_row(_label(suggestion))

    if result.has_more:
        more = Text("…", style="dim")
        if show_descriptions:
            table.add_row(more, "")
        else:
            table.add_row(more)

    return table


def render_suggestions(
    result: CompletionResult,
    show_descriptions: bool = True,
    width: int = 80,
    color: bool = True,
) -> str:
    """Render the suggestion list to a string ready for a raw-mode terminal."""
    buffer = io.StringIO()
    console = Console(
        file=buffer,
        width=width,
        force_terminal=color,
        no_color=not color,
        highlight=False,
    )
    console.print(build_suggestion_table(result, show_descriptions))

    # Raw mode does not translate \n into \r\n
    return buffer.getvalue().replace("\n", "\r\n")
