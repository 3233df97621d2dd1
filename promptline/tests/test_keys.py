"""Tests for terminal key classification."""

import pytest

from promptline.keys import KeyEvent, is_printable, parse_terminal_key


class TestParseTerminalKey:
    @pytest.mark.parametrize(
        "data,expected",
        [
            ("\r", "enter"),
            ("\n", "enter"),
            ("\x7f", "backspace"),
            ("\x08", "backspace"),
            ("\x1b[3~", "delete"),
            ("\t", "tab"),
            ("\x1b", "escape"),
            ("\x03", "ctrl-c"),
            ("\x04", "ctrl-d"),
            ("\x17", "ctrl-w"),
            ("\x1b[A", "arrow-up"),
            ("\x1bOB", "arrow-down"),
            ("\x1b[H", "home"),
            ("\x1bOF", "end"),
            ("\x1b[1~", "home"),
            ("\x1b[4~", "end"),
            ("\x1b[5~", "page-up"),
            ("\x1bOP", "f1"),
        ],
    )
    def test_known_sequences(self, data, expected):
        event = parse_terminal_key(data)
        assert event.type == expected
        assert event.data == data
        assert event.should_handle is True

    def test_printable(self):
        event = parse_terminal_key("a")
        assert event == KeyEvent(type="printable", data="a", char="a")

    def test_unicode_printable(self):
        assert parse_terminal_key("é").char == "é"

    def test_unknown_sequence(self):
        event = parse_terminal_key("\x1b[99~")
        assert event.type == "unknown"
        assert event.should_handle is False

    def test_empty(self):
        assert parse_terminal_key("").should_handle is False


class TestIsPrintable:
    def test_control_characters(self):
        assert not is_printable("\x00")
        assert not is_printable("\x1b")

    def test_multi_character(self):
        assert not is_printable("ab")

    def test_space(self):
        assert is_printable(" ")
