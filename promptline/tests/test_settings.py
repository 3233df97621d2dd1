"""Tests for settings manager."""

import json
import os
import tempfile

import pytest

from promptline.settings import (
    CompletionSettings,
    InputSettings,
    Settings,
    SettingsManager,
    deep_merge,
    dict_to_settings,
    migrate_settings,
)


@pytest.fixture
def temp_dir():
    """Create a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


def write_json(path, data):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w") as f:
        json.dump(data, f)


class TestDeepMerge:
    def test_simple_merge(self):
        """Test merging flat dictionaries."""
        result = deep_merge({"a": 1, "b": 2}, {"b": 3, "c": 4})
        assert result == {"a": 1, "b": 3, "c": 4}

    def test_nested_merge(self):
        """Test merging nested dictionaries."""
        result = deep_merge({"a": {"x": 1, "y": 2}}, {"a": {"y": 3, "z": 4}})
        assert result == {"a": {"x": 1, "y": 3, "z": 4}}

    def test_override_none_ignored(self):
        """Test that None values in overrides are ignored."""
        result = deep_merge({"a": 1, "b": 2}, {"a": None, "c": 3})
        assert result == {"a": 1, "b": 2, "c": 3}


class TestMigrateSettings:
    def test_camel_case_keys(self):
        data = {"input": {"maxHistorySize": 5}, "logLevel": "DEBUG"}
        assert migrate_settings(data) == {"input": {"max_history_size": 5}, "log_level": "DEBUG"}

    def test_snake_case_wins(self):
        data = {"completion": {"maxSuggestions": 5, "max_suggestions": 7}}
        assert migrate_settings(data) == {"completion": {"max_suggestions": 7}}


class TestDictToSettings:
    def test_nested(self):
        settings = dict_to_settings(
            {"input": {"prompt": "> "}, "completion": {"max_suggestions": 3}}
        )
        assert settings.input.prompt == "> "
        assert settings.input.max_history_size == 100
        assert settings.completion.max_suggestions == 3

    def test_unknown_keys_dropped(self, caplog):
        settings = dict_to_settings({"input": {"colour": "red"}, "theme": "dark"})
        assert settings.input == InputSettings()
        assert "colour" in caplog.text
        assert "theme" in caplog.text


class TestSettingsConversion:
    def test_to_command_input_config(self):
        settings = Settings(input=InputSettings(prompt="% ", allow_duplicates=True))
        config = settings.to_command_input_config()
        assert config.prompt == "% "
        assert config.allow_duplicates is True
        assert config.max_history_size == 100

    def test_to_completion_config(self):
        settings = Settings(completion=CompletionSettings(include_hidden_files=True))
        config = settings.to_completion_config()
        assert config.include_hidden_files is True
        assert config.max_suggestions == 20


class TestSettingsManager:
    def test_in_memory(self):
        """Test creating in-memory settings."""
        manager = SettingsManager.in_memory()
        assert manager.settings == Settings()
        assert manager.global_settings_path is None

    def test_in_memory_with_settings(self):
        settings = Settings(log_level="DEBUG")
        manager = SettingsManager.in_memory(settings)
        assert manager.settings.log_level == "DEBUG"

    def test_defaults_without_files(self, temp_dir):
        manager = SettingsManager(cwd=temp_dir, config_dir=os.path.join(temp_dir, "global"))
        assert manager.settings == Settings()

    def test_project_overrides_global(self, temp_dir):
        config_dir = os.path.join(temp_dir, "global")
        project = os.path.join(temp_dir, "project")
        os.makedirs(project)

        write_json(
            os.path.join(config_dir, "settings.json"),
            {"input": {"prompt": "g> ", "maxHistorySize": 10}},
        )
        write_json(
            os.path.join(project, ".promptline", "settings.json"),
            {"input": {"prompt": "p> "}, "completion": {"caseSensitive": True}},
        )

        manager = SettingsManager(cwd=project, config_dir=config_dir)
        settings = manager.settings
        assert settings.input.prompt == "p> "
        assert settings.input.max_history_size == 10
        assert settings.completion.case_sensitive is True

    def test_invalid_json_ignored(self, temp_dir, caplog):
        config_dir = os.path.join(temp_dir, "global")
        os.makedirs(config_dir)
        with open(os.path.join(config_dir, "settings.json"), "w") as f:
            f.write("{not json")

        manager = SettingsManager(cwd=temp_dir, config_dir=config_dir)
        assert manager.settings == Settings()
        assert "Could not load settings" in caplog.text

    def test_non_object_ignored(self, temp_dir, caplog):
        config_dir = os.path.join(temp_dir, "global")
        write_json(os.path.join(config_dir, "settings.json"), ["a", "b"])

        manager = SettingsManager(cwd=temp_dir, config_dir=config_dir)
        assert manager.settings == Settings()
        assert "expected a JSON object" in caplog.text
