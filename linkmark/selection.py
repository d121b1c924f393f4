"""Selections over the document tree and their mapping to host positions.

A host (the editable surface) describes its selection as two
:class:`HostPoint` values: an address of child indices down to a text run
plus a character offset. :meth:`Selection.of_host` resolves those into
internal :class:`~linkmark.document.Point` values; everything derived from
a selection is recomputed from the document on demand.
"""

from dataclasses import dataclass
from typing import NamedTuple, Optional

from .document import Document, Point
from .errors import IllegalStateError


@dataclass(frozen=True)
class HostPoint:
    address: tuple[int, ...]
    offset: int


@dataclass(frozen=True)
class HostSelection:
    start: HostPoint
    end: HostPoint

    @classmethod
    def collapsed(cls, point: HostPoint) -> "HostSelection":
        return cls(point, point)

    def ordered(self) -> "HostSelection":
        """Return the selection with its start first in document order."""
        # Addresses compare lexicographically in document order
        if (self.end.address, self.end.offset) < (self.start.address, self.start.offset):
            return HostSelection(self.end, self.start)
        return self


class WordRange(NamedTuple):
    start: int
    end: int


def word_at_offset(text: str, offset: int) -> Optional[WordRange]:
    """Find the word touching a cursor offset.

    A word is a maximal run of non-whitespace characters. The cursor
    touches a word when the character before or after it belongs to one.

    Returns:
        The word's bounds, or None if the cursor sits in whitespace
    """
    touches_after = offset < len(text) and not text[offset].isspace()
    touches_before = 0 < offset <= len(text) and not text[offset - 1].isspace()
    if not (touches_after or touches_before):
        return None

    start = offset
    while start > 0 and not text[start - 1].isspace():
        start -= 1
    end = offset
    while end < len(text) and not text[end].isspace():
        end += 1
    return WordRange(start, end)


class LinkableSelection:
    """A single-run selection outside any link, ready to become one.

    Attributes:
        text: Handle of the run holding the candidate
        start: Candidate start offset
        end: Candidate end offset
        cursor: Offset to restore after linking
    """

    def __init__(self, document: Document, text: int, start: int, end: int, cursor: int):
        self.document = document
        self.text = text
        self.start = start
        self.end = end
        self.cursor = cursor

    @property
    def content(self) -> str:
        return self.document.content(self.text)[self.start:self.end]

    @property
    def paragraph(self) -> int:
        return self.document.containing_paragraph(self.text)


class LinkedSelection:
    """A single-run selection inside an existing link."""

    def __init__(self, document: Document, link: int, cursor: int):
        self.document = document
        self.link = link
        self.cursor = cursor

    @property
    def content(self) -> str:
        return self.document.content(self.link)

    @property
    def paragraph(self) -> int:
        return self.document.containing_paragraph(self.link)


class Selection:
    """A (start, end) pair of points plus the whole runs strictly between."""

    def __init__(self, document: Document, start: Point, end: Point):
        self.document = document
        self.start = start
        self.end = end
        self.between: list[int] = []

        if start.text != end.text:
            text = document.preceding_text(end.text)
            while text != start.text:
                if text is None:
                    raise IllegalStateError("Selection start does not precede its end")
                self.between.append(text)
                text = document.preceding_text(text)

    @classmethod
    def of_host(cls, document: Document, host_selection: HostSelection) -> "Selection":
        ordered = host_selection.ordered()

        def create_point(host_point: HostPoint) -> Point:
            return Point(document.resolve(host_point.address), host_point.offset)

        return cls(document, create_point(ordered.start), create_point(ordered.end))

    def is_range(self) -> bool:
        return self.start.text != self.end.text or self.start.offset != self.end.offset

    def _is_single_run(self) -> bool:
        return self.start.text == self.end.text

    @property
    def linkable(self) -> Optional[LinkableSelection]:
        if not self._is_single_run() or self.document.is_in_link(self.start.text):
            return None
        if self.is_range():
            return LinkableSelection(self.document, self.start.text, self.start.offset,
                                     self.end.offset, self.end.offset)
        word = word_at_offset(self.document.content(self.start.text), self.start.offset)
        if word is None:
            return None
        return LinkableSelection(self.document, self.start.text, word.start, word.end, self.end.offset)

    @property
    def link(self) -> Optional[LinkedSelection]:
        if not self._is_single_run() or not self.document.is_in_link(self.end.text):
            return None
        return LinkedSelection(self.document, self.document.containing_link(self.end.text), self.end.offset)

    def remove(self) -> Optional[Point]:
        """Delete the selected characters and return the new cursor.

        Runs strictly between the ends are removed, the ends are trimmed to
        the unselected characters and the two paragraphs are joined.
        """
        document = self.document
        start, end = self.start, self.end

        if start.text == end.text:
            if start.offset == end.offset:
                return start
            return document.remove_range(start.text, start.offset, end.offset)

        start_paragraph = document.containing_paragraph(start.text)
        end_paragraph = document.containing_paragraph(end.text)

        # First run left after the end, if the whole end run goes
        resume: Optional[int] = end.text
        if end.offset >= document.length(end.text):
            resume = document.following_text(end.text)
            if resume is not None and document.containing_paragraph(resume) != end_paragraph:
                resume = None

        for text in self.between:
            document.remove_text(text)

        if end.offset >= document.length(end.text):
            document.remove_text(end.text)
        else:
            document.truncate(end.text, end.offset, document.length(end.text))

        if start.offset > 0:
            document.truncate(start.text, 0, start.offset)
            cursor = Point(start.text, start.offset)
        else:
            # Nothing of the start run is kept, not even a placeholder
            cursor = document.remove_text(start.text)

        if start_paragraph in document and end_paragraph in document and start_paragraph != end_paragraph:
            joined = document.combine_with(start_paragraph, end_paragraph)
            if start.offset == 0:
                cursor = joined
        elif start.offset == 0 and resume is not None and resume in document:
            cursor = Point(resume, 0)

        return cursor

    def __str__(self) -> str:
        def describe(point: Point) -> str:
            address = ".".join(str(i) for i in self.document.address_of(point.text))
            return f"{address}({point.offset})"
        return f"From {describe(self.start)} to {describe(self.end)}"
