"""Test the terminal view: layout, caret placement and movement."""

import pytest
from linkmark.model import MarkdownModel
from linkmark.selection import HostPoint
from linkmark.view import TerminalView, render_paragraph


def create_view(markdown, columns=65, rows=10):
    view = TerminalView(num_rows=rows, num_columns=columns)
    model = MarkdownModel.of_markdown(view, markdown)
    return view, model


def test_render_paragraph_wraps_words():
    assert render_paragraph("hello world", 8) == (["hello", "world"], [6, 11])


def test_render_paragraph_breaks_long_words():
    assert render_paragraph("abcdefghij", 4) == (["abcd", "efgh", "ij"], [4, 8, 10])


def test_render_empty_paragraph():
    assert render_paragraph("", 10) == ([""], [0])


def test_render_marks_links():
    view, _ = create_view("hello [world](x)")
    view.render()
    assert view.lines == ["hello world"]
    assert view.link_ranges == [[(6, 11)]]
    assert view.selection_ranges == [None]


def test_render_separates_paragraphs():
    view, _ = create_view("a\n\nb")
    view.render()
    assert view.lines == ["a", "", "b"]


def test_link_split_over_lines():
    view, _ = create_view("see [two words](x)", columns=8)
    view.render()
    assert view.lines == ["see two", "words"]
    assert view.link_ranges == [[(4, 7)], [(0, 5)]]


def test_cursor_inside_link():
    view, _ = create_view("hello [world](x)")
    view.move_cursor(HostPoint((0, 1, 0), 2))
    view.render()
    assert (view.visual_cursor_y, view.visual_cursor_x) == (0, 8)


def test_cursor_in_second_paragraph():
    view, _ = create_view("a\n\nbc")
    view.move_cursor(HostPoint((1, 0), 1))
    view.render()
    assert (view.visual_cursor_y, view.visual_cursor_x) == (2, 1)


def test_cursor_on_wrapped_line():
    view, _ = create_view("hello world", columns=8)
    view.move_cursor(HostPoint((0, 0), 8))
    view.render()
    assert (view.visual_cursor_y, view.visual_cursor_x) == (1, 2)


def test_selection_ranges():
    view, _ = create_view("hello world\n\nbye")
    view.move_cursor(HostPoint((0, 0), 6))
    view.start_selection()
    view.cursor = HostPoint((1, 0), 2)
    view.render()
    assert view.selection_ranges == [(6, 11), None, (0, 2)]


def test_scrolls_to_cursor():
    view, _ = create_view("a\n\nb\n\nc\n\nd\n\ne", rows=3)
    view.move_cursor(HostPoint((4, 0), 0))
    view.render()
    assert view.lines == ["d", "", "e"]
    assert view.visual_cursor_y == 2


def test_move_cursor_drops_anchor():
    view, _ = create_view("hello")
    view.start_selection()
    view.cursor = HostPoint((0, 0), 3)
    assert view.has_selection()

    view.move_cursor(HostPoint((0, 0), 1))

    assert not view.has_selection()


def test_get_selection_clamps_stale_points():
    view, model = create_view("hello world")
    view.move_cursor(HostPoint((0, 0), 11))
    model.write_value("hi")

    selection = view.get_selection(model.document)

    assert selection.start == HostPoint((0, 0), 2)

    view.move_cursor(HostPoint((3, 0), 1))
    assert view.get_selection(model.document).start == HostPoint((0, 0), 0)


class TestMovement:
    def test_left_and_right_within_run(self):
        view, _ = create_view("abc")
        view.move_cursor(HostPoint((0, 0), 1))
        view.right_char()
        assert view.cursor == HostPoint((0, 0), 2)
        view.left_char()
        view.left_char()
        assert view.cursor == HostPoint((0, 0), 0)
        view.left_char()
        assert view.cursor == HostPoint((0, 0), 0)

    def test_right_into_link(self):
        view, _ = create_view("ab[cd](x)")
        view.move_cursor(HostPoint((0, 0), 2))
        view.right_char()
        assert view.cursor == HostPoint((0, 1, 0), 1)

    def test_left_out_of_link(self):
        view, _ = create_view("ab[cd](x)")
        view.move_cursor(HostPoint((0, 1, 0), 0))
        view.left_char()
        assert view.cursor == HostPoint((0, 0), 1)

    def test_across_paragraphs(self):
        view, _ = create_view("ab\n\ncd")
        view.move_cursor(HostPoint((1, 0), 0))
        view.left_char()
        assert view.cursor == HostPoint((0, 0), 2)
        view.right_char()
        assert view.cursor == HostPoint((1, 0), 0)

    def test_right_at_document_end(self):
        view, _ = create_view("ab")
        view.move_cursor(HostPoint((0, 0), 2))
        view.right_char()
        assert view.cursor == HostPoint((0, 0), 2)

    def test_up_and_down_between_paragraphs(self):
        view, _ = create_view("abc\n\ndefgh")
        view.move_cursor(HostPoint((0, 0), 2))
        view.move_cursor_down()
        assert view.cursor == HostPoint((1, 0), 2)
        view.move_cursor_down()
        assert view.cursor == HostPoint((1, 0), 2)
        view.move_cursor_up()
        assert view.cursor == HostPoint((0, 0), 2)

    def test_down_clamps_column(self):
        view, _ = create_view("abcdef\n\nxy")
        view.move_cursor(HostPoint((0, 0), 5))
        view.move_cursor_down()
        assert view.cursor == HostPoint((1, 0), 2)

    def test_down_within_wrapped_paragraph(self):
        view, _ = create_view("hello world", columns=8)
        view.move_cursor(HostPoint((0, 0), 1))
        view.move_cursor_down()
        assert view.cursor == HostPoint((0, 0), 7)

    def test_beginning_and_end_of_paragraph(self):
        view, _ = create_view("ab [cd](x) ef")
        view.move_cursor(HostPoint((0, 1, 0), 1))
        view.move_end_of_paragraph()
        assert view.cursor == HostPoint((0, 2), 3)
        view.move_beginning_of_paragraph()
        assert view.cursor == HostPoint((0, 0), 0)

    @pytest.mark.parametrize("method", ["left_char", "right_char", "move_cursor_up", "move_cursor_down"])
    def test_movement_in_empty_document(self, method):
        view, _ = create_view("")
        getattr(view, method)()
        assert view.cursor == HostPoint((0, 0), 0)
