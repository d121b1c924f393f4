"""Test paragraph merge, split and run fusion."""

import pytest
from linkmark.document import Document, NodeKind, Point
from linkmark.errors import IllegalStateError

from builders import build


def paragraph_texts(document):
    return [document.plain_text(p) for p in document.paragraphs]


def test_combine_appends_and_fuses_runs():
    document = build(["abc"], ["def"])
    first, second = document.paragraphs
    abc = document.first_text(first)

    assert document.combine_with(first, second) == Point(abc, 3)
    assert paragraph_texts(document) == ["abcdef"]
    assert len(document.children(first)) == 1
    document.check_invariants()


def test_combine_replaces_blank_trailing_run():
    document = build([" "], ["def"])
    first, second = document.paragraphs
    blank = document.first_text(first)

    assert document.combine_with(first, second) == Point(blank, 0)
    assert paragraph_texts(document) == ["def"]


def test_combine_moves_links_across():
    document = build(["ab"], [("cd", "#"), "ef"])
    first, second = document.paragraphs

    document.combine_with(first, second)
    kinds = [document.kind(c) for c in document.children(first)]
    assert kinds == [NodeKind.TEXT, NodeKind.LINK, NodeKind.TEXT]
    assert document.to_markdown() == "ab[cd](#)ef"
    document.check_invariants()


def test_combine_after_trailing_link():
    document = build([("ab", "#")], ["cd"])
    first, second = document.paragraphs
    link_text = document.last_text(first)

    assert document.combine_with(first, second) == Point(link_text, 2)
    assert document.to_markdown() == "[ab](#)cd"


def test_combine_with_itself_is_noop():
    document = build(["abc"])
    paragraph = document.paragraphs[0]
    assert document.combine_with(paragraph, paragraph) is None
    assert paragraph_texts(document) == ["abc"]


def test_split_interior_of_run():
    document = build(["abcd"])
    paragraph = document.paragraphs[0]
    text = document.first_text(paragraph)
    prefix = document.new_paragraph()
    document.insert_paragraph_before(prefix, paragraph)

    point = document.split_to(paragraph, prefix, text, 2)

    assert paragraph_texts(document) == ["ab", "cd"]
    assert point == Point(text, 0)
    document.check_invariants()


def test_split_moves_links_before_the_cursor():
    document = build(["ab", ("cd", "#"), "ef"])
    paragraph = document.paragraphs[0]
    ef = document.last_text(paragraph)
    prefix = document.new_paragraph()
    document.insert_paragraph_before(prefix, paragraph)

    document.split_to(paragraph, prefix, ef, 1)

    assert document.to_markdown() == "ab[cd](#)e\n\nf"
    document.check_invariants()


def test_split_at_start_leaves_placeholder_prefix():
    document = build(["abcd"])
    paragraph = document.paragraphs[0]
    text = document.first_text(paragraph)
    prefix = document.new_paragraph()
    document.insert_paragraph_before(prefix, paragraph)

    document.split_to(paragraph, prefix, text, 0)

    assert paragraph_texts(document) == [" ", "abcd"]
    document.check_invariants()


def test_split_rejects_run_of_other_paragraph():
    document = build(["ab"], ["cd"])
    first, second = document.paragraphs
    prefix = document.new_paragraph()
    with pytest.raises(IllegalStateError):
        document.split_to(first, prefix, document.first_text(second), 1)


@pytest.mark.parametrize("offset", [1, 2, 3])
def test_split_then_combine_restores_paragraph(offset):
    document = build(["abcd"])
    paragraph = document.paragraphs[0]
    text = document.first_text(paragraph)
    prefix = document.new_paragraph()
    document.insert_paragraph_before(prefix, paragraph)

    document.split_to(paragraph, prefix, text, offset)
    document.combine_with(prefix, paragraph)

    assert paragraph_texts(document) == ["abcd"]


def test_merge_consecutive_texts_rewrites_cursor():
    document = Document()
    paragraph = document.new_paragraph()
    runs = []
    for value in ("ab", "cd"):
        runs.append(document.new_text(paragraph, value))
        document.add_content(paragraph, runs[-1])
    document.add_content(paragraph, document.new_link(paragraph, "ef", "#"))
    for value in ("gh", "ij"):
        runs.append(document.new_text(paragraph, value))
        document.add_content(paragraph, runs[-1])
    document.append_paragraph(paragraph)

    point = document.merge_consecutive_texts(paragraph, Point(runs[1], 1))

    assert point == Point(runs[0], 3)
    assert [document.content(c) for c in document.children(paragraph)] == ["abcd", "ef", "ghij"]
    assert runs[1] not in document
    document.check_invariants()


def test_append_plain_text_extends_trailing_run():
    document = build(["ab"])
    paragraph = document.paragraphs[0]
    document.append_plain_text(paragraph, "cd")
    assert len(document.children(paragraph)) == 1
    assert document.plain_text(paragraph) == "abcd"
