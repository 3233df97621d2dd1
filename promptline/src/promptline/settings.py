"""Settings with global/project hierarchy."""

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path

from .buffer import CommandInputConfig
from .completion.types import CompletionConfig

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".promptline"


def get_default_config_dir() -> Path:
    """Get the default global configuration directory."""
    return Path.home() / CONFIG_DIR_NAME


@dataclass
class InputSettings:
    """Settings for the command line buffer."""

    max_history_size: int = 100
    prompt: str = "$ "
    debounce_delay: int = 100  # ms
    allow_duplicates: bool = False


@dataclass
class CompletionSettings:
    """Settings for completion."""

    max_suggestions: int = 20
    min_input_length: int = 0
    show_descriptions: bool = True
    auto_complete_prefix: bool = True
    case_sensitive: bool = False
    include_hidden_files: bool = False
    provider_concurrency: int = 1


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    input: InputSettings = field(default_factory=InputSettings)
    completion: CompletionSettings = field(default_factory=CompletionSettings)
    log_level: str = "WARNING"

    def to_command_input_config(self) -> CommandInputConfig:
        return CommandInputConfig(**asdict(self.input))

    def to_completion_config(self) -> CompletionConfig:
        return CompletionConfig(**asdict(self.completion))


def deep_merge(base: dict, overrides: dict) -> dict:
    """Deep merge two dictionaries. Overrides take precedence."""
    result = base.copy()

    for key, value in overrides.items():
        if value is None:
            continue

        base_value = result.get(key)

        if isinstance(value, dict) and isinstance(base_value, dict):
            result[key] = deep_merge(base_value, value)
        else:
            result[key] = value

    return result


_KEY_MIGRATIONS = {
    "maxHistorySize": "max_history_size",
    "debounceDelay": "debounce_delay",
    "allowDuplicates": "allow_duplicates",
    "maxSuggestions": "max_suggestions",
    "minInputLength": "min_input_length",
    "showDescriptions": "show_descriptions",
    "autoCompletePrefix": "auto_complete_prefix",
    "caseSensitive": "case_sensitive",
    "includeHiddenFiles": "include_hidden_files",
    "providerConcurrency": "provider_concurrency",
    "logLevel": "log_level",
}


def migrate_settings(data: dict) -> dict:
    """Rename camelCase keys (at any depth) to snake_case."""
    migrated = {}
    for key, value in data.items():
        new_key = _KEY_MIGRATIONS.get(key, key)
        if new_key in data and new_key != key:
            # Explicit snake_case key wins
            continue
        migrated[new_key] = migrate_settings(value) if isinstance(value, dict) else value
    return migrated


def _filter_fields(cls: type, data: dict) -> dict:
    valid = {f.name for f in fields(cls)}
    unknown = set(data) - valid
    if unknown:
        logger.warning(f"Ignoring unknown {cls.__name__} keys: {', '.join(sorted(unknown))}")
    return {k: v for k, v in data.items() if k in valid}


def dict_to_settings(data: dict) -> Settings:
    """Convert a dictionary to Settings, handling nested dataclasses."""
    data = dict(data)
    if isinstance(data.get("input"), dict):
        data["input"] = InputSettings(**_filter_fields(InputSettings, data["input"]))
    if isinstance(data.get("completion"), dict):
        data["completion"] = CompletionSettings(
            **_filter_fields(CompletionSettings, data["completion"])
        )
    return Settings(**_filter_fields(Settings, data))


class SettingsManager:
    """
    Loads settings from:
    1. Global: ~/.promptline/settings.json
    2. Project: <cwd>/.promptline/settings.json

    Project settings override global settings.
    """

    def __init__(
        self,
        cwd: str | Path | None = None,
        config_dir: str | Path | None = None,
    ):
        self._cwd = Path(cwd) if cwd else Path.cwd()
        self._config_dir = Path(config_dir) if config_dir else get_default_config_dir()

        self._global_settings_path = self._config_dir / "settings.json"
        self._project_settings_path = self._cwd / CONFIG_DIR_NAME / "settings.json"

        self._settings = Settings()
        self._load()

    @classmethod
    def in_memory(cls, settings: Settings | None = None) -> "SettingsManager":
        """Create a manager that never touches the filesystem."""
        manager = cls.__new__(cls)
        manager._cwd = Path.cwd()
        manager._config_dir = get_default_config_dir()
        manager._global_settings_path = None
        manager._project_settings_path = None
        manager._settings = settings or Settings()
        return manager

    def _load(self) -> None:
        merged = deep_merge(
            self._load_from_file(self._global_settings_path),
            self._load_from_file(self._project_settings_path),
        )
        self._settings = dict_to_settings(merged) if merged else Settings()

    def _load_from_file(self, path: Path) -> dict:
        if not path.exists():
            return {}

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not load settings from {path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring settings in {path}: expected a JSON object")
            return {}

        return migrate_settings(data)

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def cwd(self) -> Path:
        return self._cwd

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    @property
    def global_settings_path(self) -> Path | None:
        return self._global_settings_path

    @property
    def project_settings_path(self) -> Path | None:
        return self._project_settings_path
