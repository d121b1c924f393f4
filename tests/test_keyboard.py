"""Test keyboard input handling."""

import pytest
from linkmark.keyboard import KeyboardHandler, KeyType


class MockTerminal:
    """Mock terminal interface for testing."""

    def __init__(self):
        self._key_queue = []

    def get_key(self, timeout=None):
        """Mock get_key that returns from queue."""
        if self._key_queue:
            return self._key_queue.pop(0)
        return None

    def add_key(self, key_str):
        self._key_queue.append(key_str)


@pytest.fixture
def handler():
    return KeyboardHandler(MockTerminal())


def test_get_key_event_reads_terminal():
    terminal = MockTerminal()
    handler = KeyboardHandler(terminal)

    terminal.add_key('<Ctrl-l>')
    event = handler.get_key_event()
    assert event.key_type == KeyType.CTRL
    assert event.value == 'l'
    assert event.is_ctrl

    assert handler.get_key_event(timeout=0) is None


@pytest.mark.parametrize("raw,key_type,value", [
    ('a', KeyType.REGULAR, 'a'),
    ('<SPACE>', KeyType.REGULAR, ' '),
    ('<TAB>', KeyType.REGULAR, '\t'),
    ('<LEFT>', KeyType.SPECIAL, 'left'),
    ('<ESC>', KeyType.SPECIAL, 'escape'),
    ('<BACKSPACE>', KeyType.SPECIAL, 'backspace'),
    ('<DELETE>', KeyType.SPECIAL, 'delete'),
    ('<PAGEUP>', KeyType.SPECIAL, 'page_up'),
    ('<Ctrl-j>', KeyType.SPECIAL, 'enter'),
    ('<Shift-LEFT>', KeyType.SHIFT_SPECIAL, 'left'),
    ('<Ctrl-z>', KeyType.CTRL, 'z'),
    ('<Ctrl-BACKSPACE>', KeyType.CTRL, 'backspace'),
    ('<Esc+l>', KeyType.ALT, 'l'),
    ('<Esc+BACKSPACE>', KeyType.ALT, 'backspace'),
    ('<Esc+DELETE>', KeyType.ALT, 'delete'),
    ('<Meta-z>', KeyType.META, 'z'),
    ('<Meta-Shift-z>', KeyType.META, 'Z'),
    ('<Meta-BACKSPACE>', KeyType.META, 'backspace'),
])
def test_parse_tokens(handler, raw, key_type, value):
    event = handler.parse_key(raw)
    assert event.key_type == key_type
    assert event.value == value


@pytest.mark.parametrize("raw,key_type,value", [
    ('\x01', KeyType.CTRL, 'a'),
    ('\x0c', KeyType.CTRL, 'l'),
    ('\x08', KeyType.SPECIAL, 'backspace'),
    ('\x7f', KeyType.SPECIAL, 'backspace'),
    ('\r', KeyType.SPECIAL, 'enter'),
    ('\n', KeyType.SPECIAL, 'enter'),
    ('\x1b', KeyType.SPECIAL, 'escape'),
    ('\x1bl', KeyType.ALT, 'l'),
    ('\x1b\x7f', KeyType.ALT, 'backspace'),
])
def test_parse_raw_bytes(handler, raw, key_type, value):
    event = handler.parse_key(raw)
    assert event.key_type == key_type
    assert event.value == value


def test_meta_is_not_alt(handler):
    event = handler.parse_key('<Meta-b>')
    assert event.is_meta
    assert not event.is_alt


def test_shifted_meta_letter_sets_shift(handler):
    event = handler.parse_key('<Meta-Shift-z>')
    assert event.is_shift
    assert event.raw == '<Meta-Shift-z>'
