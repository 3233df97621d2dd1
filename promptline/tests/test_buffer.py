"""Tests for the command buffer and history."""

import random

import pytest
from pydantic import ValidationError

from promptline import CommandBuffer, CommandHistory, CommandInputConfig, DebouncedValue


def type_text(buffer: CommandBuffer, text: str) -> None:
    for ch in text:
        buffer.insert_character_at_cursor(ch)


def run(buffer: CommandBuffer, *commands: str) -> None:
    for command in commands:
        buffer.set_command(command)
        buffer.execute_command()


class TestCommandInputConfig:
    def test_defaults(self):
        config = CommandInputConfig()
        assert config.max_history_size == 100
        assert config.prompt == "$ "
        assert config.debounce_delay == 100
        assert config.allow_duplicates is False

    def test_rejects_zero_history(self):
        with pytest.raises(ValidationError):
            CommandInputConfig(max_history_size=0)


class TestEditing:
    def test_insert_at_cursor(self):
        buffer = CommandBuffer()
        type_text(buffer, "lsa")
        buffer.move_cursor_left()
        buffer.insert_character_at_cursor(" ")
        buffer.insert_character_at_cursor("-")
        assert buffer.text == "ls -a"
        assert buffer.cursor_position == 4

    def test_backspace(self):
        buffer = CommandBuffer()
        type_text(buffer, "abc")
        buffer.move_cursor_left()
        buffer.delete_character_before_cursor()
        assert buffer.text == "ac"
        assert buffer.cursor_position == 1

    def test_backspace_at_start_is_noop(self):
        buffer = CommandBuffer()
        type_text(buffer, "abc")
        buffer.move_cursor_to_start()
        buffer.delete_character_before_cursor()
        assert buffer.text == "abc"
        assert buffer.cursor_position == 0

    def test_delete_at_cursor(self):
        buffer = CommandBuffer()
        type_text(buffer, "abc")
        buffer.move_cursor_to_start()
        buffer.delete_character_at_cursor()
        assert buffer.text == "bc"
        assert buffer.cursor_position == 0

    def test_delete_at_end_is_noop(self):
        buffer = CommandBuffer()
        type_text(buffer, "abc")
        buffer.delete_character_at_cursor()
        assert buffer.text == "abc"

    def test_set_command_moves_cursor_to_end(self):
        buffer = CommandBuffer()
        buffer.set_command("git status")
        assert buffer.cursor_position == len("git status")

    def test_kill_to_end(self):
        buffer = CommandBuffer()
        buffer.set_command("echo hello world")
        buffer.move_cursor_to(10)
        buffer.kill_to_end()
        assert buffer.text == "echo hello"
        assert buffer.cursor_position == 10

    def test_delete_word_before_cursor(self):
        buffer = CommandBuffer()
        buffer.set_command("git commit -m")
        buffer.delete_word_before_cursor()
        assert buffer.text == "git commit "

    def test_delete_word_skips_trailing_spaces(self):
        buffer = CommandBuffer()
        buffer.set_command("git commit   ")
        buffer.delete_word_before_cursor()
        assert buffer.text == "git "

    def test_delete_word_single_word(self):
        buffer = CommandBuffer()
        buffer.set_command("hello")
        buffer.delete_word_before_cursor()
        assert buffer.text == ""
        assert buffer.cursor_position == 0

    def test_delete_word_keeps_text_after_cursor(self):
        buffer = CommandBuffer()
        buffer.set_command("one two three")
        buffer.move_cursor_to(7)
        buffer.delete_word_before_cursor()
        assert buffer.text == "one  three"

    def test_revision_bumps_only_on_change(self):
        buffer = CommandBuffer()
        start = buffer.revision
        buffer.insert_character_at_cursor("a")
        assert buffer.revision == start + 1
        buffer.move_cursor_left()
        buffer.delete_character_before_cursor()
        assert buffer.revision == start + 1


class TestCursorMovement:
    def test_clamped_at_bounds(self):
        buffer = CommandBuffer()
        type_text(buffer, "ab")
        buffer.move_cursor_right()
        assert buffer.cursor_position == 2
        buffer.move_cursor_to_start()
        buffer.move_cursor_left()
        assert buffer.cursor_position == 0

    def test_move_to_clamps(self):
        buffer = CommandBuffer()
        buffer.set_command("abc")
        buffer.move_cursor_to(99)
        assert buffer.cursor_position == 3
        buffer.move_cursor_to(-5)
        assert buffer.cursor_position == 0

    def test_movement_keeps_history_browsing(self):
        buffer = CommandBuffer()
        run(buffer, "ls")
        buffer.navigate_history_up()
        buffer.move_cursor_left()
        buffer.move_cursor_to_start()
        assert buffer.is_browsing_history

    def test_cursor_invariant_under_random_edits(self):
        rng = random.Random(1234)
        buffer = CommandBuffer()
        run(buffer, "ls", "pwd", "echo hi")

        operations = [
            lambda: buffer.insert_character_at_cursor(rng.choice("ab ")),
            buffer.delete_character_before_cursor,
            buffer.delete_character_at_cursor,
            buffer.move_cursor_left,
            buffer.move_cursor_right,
            buffer.move_cursor_to_start,
            buffer.move_cursor_to_end,
            buffer.kill_to_end,
            buffer.delete_word_before_cursor,
            buffer.navigate_history_up,
            buffer.navigate_history_down,
            buffer.clear_command,
            buffer.execute_command,
        ]

        for _ in range(2000):
            rng.choice(operations)()
            assert 0 <= buffer.cursor_position <= len(buffer.text)


class TestExecute:
    def test_pushes_and_clears(self):
        executed = []
        buffer = CommandBuffer(on_execute=executed.append)
        type_text(buffer, "  ls -la  ")
        buffer.execute_command()

        assert executed == ["ls -la"]
        assert buffer.history.commands == ["ls -la"]
        assert buffer.text == ""
        assert buffer.cursor_position == 0

    def test_blank_is_noop(self):
        executed = []
        buffer = CommandBuffer(on_execute=executed.append)
        buffer.set_command("   ")
        buffer.execute_command()

        assert executed == []
        assert len(buffer.history) == 0
        assert buffer.text == "   "

    def test_callback_exception_is_contained(self, caplog):
        def boom(command):
            raise RuntimeError("nope")

        buffer = CommandBuffer(on_execute=boom)
        buffer.set_command("ls")
        buffer.execute_command()

        assert buffer.history.commands == ["ls"]
        assert buffer.text == ""
        assert "Error executing command callback" in caplog.text

    def test_exits_history_browsing(self):
        buffer = CommandBuffer()
        run(buffer, "ls")
        buffer.navigate_history_up()
        buffer.execute_command()
        assert not buffer.is_browsing_history
        assert buffer.history_index == -1


class TestHistory:
    def test_bounded_evicts_oldest(self):
        buffer = CommandBuffer(CommandInputConfig(max_history_size=3))
        run(buffer, "a", "b", "c", "d", "e")
        assert buffer.history.commands == ["c", "d", "e"]

    def test_size_never_exceeds_max(self):
        history = CommandHistory(max_size=5)
        for i in range(50):
            history.push(f"cmd {i}")
            assert len(history) <= 5

    def test_dedup_moves_to_tail(self):
        buffer = CommandBuffer()
        run(buffer, "ls", "pwd", "ls")
        assert buffer.history.commands == ["pwd", "ls"]

    def test_duplicates_allowed(self):
        buffer = CommandBuffer(CommandInputConfig(allow_duplicates=True))
        run(buffer, "ls", "pwd", "ls")
        assert buffer.history.commands == ["ls", "pwd", "ls"]

    def test_entries_have_ids(self):
        history = CommandHistory()
        first = history.push("ls")
        second = history.push("pwd")
        assert first.id.startswith("cmd-")
        assert first.id != second.id

    def test_navigation_scenario(self):
        buffer = CommandBuffer()
        run(buffer, "ls", "pwd")

        buffer.navigate_history_up()
        assert buffer.text == "pwd"
        buffer.navigate_history_up()
        assert buffer.text == "ls"
        buffer.navigate_history_up()
        assert buffer.text == "ls"
        assert buffer.history_index == 0

        buffer.navigate_history_down()
        assert buffer.text == "pwd"
        assert buffer.cursor_position == 3

        buffer.navigate_history_down()
        assert buffer.text == ""
        assert not buffer.is_browsing_history

    def test_up_with_empty_history(self):
        buffer = CommandBuffer()
        buffer.set_command("draft")
        buffer.navigate_history_up()
        assert buffer.text == "draft"
        assert not buffer.is_browsing_history

    def test_down_when_not_browsing(self):
        buffer = CommandBuffer()
        run(buffer, "ls")
        buffer.set_command("draft")
        buffer.navigate_history_down()
        assert buffer.text == "draft"

    def test_edit_exits_browsing(self):
        buffer = CommandBuffer()
        run(buffer, "ls", "pwd")
        buffer.navigate_history_up()
        buffer.insert_character_at_cursor("x")
        assert not buffer.is_browsing_history

        # Next Up starts again from the newest entry
        buffer.navigate_history_up()
        assert buffer.text == "pwd"

    def test_clear_history(self):
        buffer = CommandBuffer()
        run(buffer, "ls")
        buffer.navigate_history_up()
        buffer.clear_history()
        assert len(buffer.history) == 0
        assert not buffer.is_browsing_history


class TestPrompt:
    def test_default_from_config(self):
        buffer = CommandBuffer(CommandInputConfig(prompt="> "))
        assert buffer.prompt == "> "

    def test_set_prompt(self):
        buffer = CommandBuffer()
        buffer.set_prompt("# ")
        assert buffer.prompt == "# "


class TestDebounce:
    def test_value_lags_until_stable(self, clock):
        value = DebouncedValue("", delay_ms=100, clock=clock)
        value.set("l")
        assert value.value == ""
        clock.advance(50)
        value.set("ls")
        clock.advance(99)
        assert value.value == ""
        clock.advance(10)
        assert value.value == "ls"

    def test_buffer_debounced_command(self, clock):
        buffer = CommandBuffer(CommandInputConfig(debounce_delay=100), clock=clock)
        type_text(buffer, "pwd")
        assert buffer.debounced_command == ""
        clock.advance(150)
        assert buffer.debounced_command == "pwd"

    def test_zero_delay_is_immediate(self, clock):
        value = DebouncedValue("", delay_ms=0, clock=clock)
        value.set("x")
        assert value.value == "x"
