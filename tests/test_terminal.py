"""Test composing styled display lines."""

from unittest.mock import Mock

from linkmark.terminal import TerminalInterface


def create_terminal():
    term = Mock(normal='<n>', underline='<u>', reverse='<r>', width=80, height=25)
    return TerminalInterface(terminal=term)


def test_plain_line_is_padded():
    terminal = create_terminal()
    assert terminal.compose_display_line("abc", 5) == "abc  "


def test_link_is_underlined():
    terminal = create_terminal()
    assert terminal.compose_display_line("a bc", 4, links=[(2, 4)]) == "a <n><u>bc<n>"


def test_link_and_selection():
    terminal = create_terminal()
    line = terminal.compose_display_line("abcd", 5, selection=(2, 3), links=[(0, 2)])
    assert line == "<n><u>ab<n><r>c<n>d "


def test_selection_inside_link_combines_styles():
    terminal = create_terminal()
    line = terminal.compose_display_line("abc", 3, selection=(1, 2), links=[(0, 3)])
    assert line == "<n><u>a<n><u><r>b<n><u>c<n>"


def test_long_line_is_clipped():
    terminal = create_terminal()
    assert terminal.compose_display_line("abcdef", 3) == "abc"


def test_height_reserves_status_line():
    terminal = create_terminal()
    assert terminal.height == 24
    assert terminal.width == 80
