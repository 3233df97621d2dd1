"""Standard completion providers: commands, file paths, environment variables, options."""

import asyncio
import logging
import os
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from .types import (
    CompletionConfig,
    CompletionContext,
    CompletionProvider,
    CompletionSuggestion,
)

logger = logging.getLogger(__name__)

DEFAULT_PATH = "/bin:/usr/bin"


@dataclass
class DirEntry:
    """A directory listing entry."""

    name: str
    is_directory: bool
    is_executable: bool = False


class FileSystem(Protocol):
    """The slice of a filesystem that completion needs."""

    def is_directory(self, path: str) -> bool: ...

    def list_dir(self, path: str) -> list[DirEntry]: ...


class LocalFileSystem:
    """FileSystem backed by the host filesystem."""

    def is_directory(self, path: str) -> bool:
        return Path(path).is_dir()

    def list_dir(self, path: str) -> list[DirEntry]:
        entries = []
        for entry in Path(path).iterdir():
            is_dir = entry.is_dir()
            entries.append(
                DirEntry(
                    name=entry.name,
                    is_directory=is_dir,
                    is_executable=not is_dir and os.access(entry, os.X_OK),
                )
            )
        return entries


def _matches(name: str, query: str, config: CompletionConfig, *, prefix: bool) -> bool:
    if not config.case_sensitive:
        name, query = name.lower(), query.lower()
    return name.startswith(query) if prefix else query in name


def _read_directory(file_system: FileSystem, path: str) -> list[DirEntry] | None:
    """List ``path``, or None when it is not a directory."""
    if not file_system.is_directory(path):
        return None
    return file_system.list_dir(path)


async def read_directory(file_system: FileSystem, path: str) -> list[DirEntry] | None:
    """List ``path`` on the default executor, off the event loop."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, _read_directory, file_system, path)


class CommandCompletionProvider:
    """Command names for the first word: built-ins first, then executables on $PATH."""

    id = "commands"
    name = "Shell Commands"

    def __init__(self, commands: dict[str, str], file_system: FileSystem | None = None) -> None:
        # name -> one-line summary
        self.commands = commands
        self.file_system = file_system or LocalFileSystem()

    def can_complete(self, context: CompletionContext) -> bool:
        return context.is_new_command

    async def get_completions(
        self, context: CompletionContext, config: CompletionConfig
    ) -> list[CompletionSuggestion]:
        suggestions = []

        for command, summary in self.commands.items():
            if _matches(command, context.current_part, config, prefix=False):
                suggestions.append(
                    CompletionSuggestion(
                        text=command,
                        type="command",
                        description=summary or f"Execute {command} command",
                        priority="high",
                        requires_space=True,
                    )
                )

        seen = set(self.commands)
        path_var = context.environment_variables.get("PATH", DEFAULT_PATH)
        for directory in (d for d in path_var.split(":") if d):
            try:
                entries = await read_directory(self.file_system, directory)
            except OSError as e:
                # Unreadable PATH entries are skipped
                logger.debug(f"Unable to read PATH directory '{directory}': {e}")
                continue
            if entries is None:
                continue

            for entry in entries:
                if entry.is_directory or not entry.is_executable:
                    continue
                if entry.name in seen:
                    continue
                if _matches(entry.name, context.current_part, config, prefix=False):
                    seen.add(entry.name)
                    suggestions.append(
                        CompletionSuggestion(
                            text=entry.name,
                            type="command",
                            description=f"Executable from {directory}",
                            priority="medium",
                            requires_space=True,
                        )
                    )

        return suggestions


class FileCompletionProvider:
    """File and directory paths for any argument position."""

    id = "files"
    name = "File System Paths"

    def __init__(self, file_system: FileSystem | None = None) -> None:
        self.file_system = file_system or LocalFileSystem()

    def can_complete(self, context: CompletionContext) -> bool:
        return not context.is_new_command

    async def get_completions(
        self, context: CompletionContext, config: CompletionConfig
    ) -> list[CompletionSuggestion]:
        current = context.current_part
        search_dir, name_prefix = self._split_path(current, context.working_directory)

        try:
            entries = await read_directory(self.file_system, search_dir)
        except OSError as e:
            logger.debug(f"File completion error in {search_dir}: {e}")
            return []
        if entries is None:
            return []

        # Keep whatever directory part the user already typed
        typed_dir = current[: len(current) - len(name_prefix)]

        suggestions = []
        for entry in entries:
            if entry.name.startswith(".") and not config.include_hidden_files:
                continue
            if not _matches(entry.name, name_prefix, config, prefix=True):
                continue

            path = typed_dir + entry.name
            if entry.is_directory:
                suggestions.append(
                    CompletionSuggestion(
                        text=f"{path}/",
                        type="directory",
                        description=f"Directory in {search_dir}",
                        priority="high",
                        requires_space=False,
                    )
                )
            else:
                suggestions.append(
                    CompletionSuggestion(
                        text=path,
                        type="file",
                        description=f"File in {search_dir}",
                        priority="medium",
                        requires_space=True,
                    )
                )

        return suggestions

    def _split_path(self, current: str, cwd: str) -> tuple[str, str]:
        """Split the typed path into (directory to list, name prefix)."""
        if "/" not in current:
            return cwd, current

        last_slash = current.rfind("/")
        dir_part = current[:last_slash]
        name_prefix = current[last_slash + 1 :]

        if current.startswith("/"):
            return dir_part or "/", name_prefix

        return posixpath.normpath(posixpath.join(cwd, dir_part)), name_prefix


class EnvironmentCompletionProvider:
    """Variable names after ``$`` or as arguments of export/unset."""

    id = "environment"
    name = "Environment Variables"

    def can_complete(self, context: CompletionContext) -> bool:
        if context.current_part.startswith("$"):
            return True

        if context.command_parts and context.command_parts[0].lower() in ("export", "unset"):
            return context.current_part_index > 0

        return False

    async def get_completions(
        self, context: CompletionContext, config: CompletionConfig
    ) -> list[CompletionSuggestion]:
        prefix = context.current_part
        dollar = prefix.startswith("$")
        if dollar:
            prefix = prefix[1:]

        suggestions = []
        for var_name, var_value in context.environment_variables.items():
            if not _matches(var_name, prefix, config, prefix=True):
                continue

            shown = var_value[:50] + ("..." if len(var_value) > 50 else "")
            suggestions.append(
                CompletionSuggestion(
                    text=f"${var_name}" if dollar else var_name,
                    type="environment",
                    description=f"Environment variable: {shown}",
                    priority="medium",
                    requires_space=False,
                )
            )

        return suggestions


COMMON_OPTIONS: list[tuple[str, str]] = [
    ("-h", "Show help information"),
    ("--help", "Show detailed help information"),
]

COMMAND_OPTIONS: dict[str, list[tuple[str, str]]] = {
    "ls": [
        ("-l", "Long format listing"),
        ("-a", "Show hidden files"),
        ("-la", "Long format with hidden files"),
    ],
    "cat": [("-n", "Number lines in output")],
    "echo": [("-n", "Do not output trailing newline")],
}


class OptionCompletionProvider:
    """Flags for the current command when the word starts with ``-``."""

    id = "options"
    name = "Command Options"

    def __init__(self, command_options: dict[str, list[tuple[str, str]]] | None = None) -> None:
        self.command_options = COMMAND_OPTIONS if command_options is None else command_options

    def can_complete(self, context: CompletionContext) -> bool:
        return not context.is_new_command and context.current_part.startswith("-")

    async def get_completions(
        self, context: CompletionContext, config: CompletionConfig
    ) -> list[CompletionSuggestion]:
        command = context.command_parts[0] if context.command_parts else ""
        options = COMMON_OPTIONS + self.command_options.get(command, [])

        return [
            CompletionSuggestion(
                text=flag,
                type="option",
                description=description,
                priority="medium",
                requires_space=True,
            )
            for flag, description in options
            if flag.startswith(context.current_part)
        ]


def create_completion_providers(
    commands: dict[str, str],
    file_system: FileSystem | None = None,
) -> list[CompletionProvider]:
    """All standard providers, in the order they should be registered."""
    fs = file_system or LocalFileSystem()
    return [
        CommandCompletionProvider(commands, fs),
        FileCompletionProvider(fs),
        EnvironmentCompletionProvider(),
        OptionCompletionProvider(),
    ]
