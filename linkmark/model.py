import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

from .document import Document, Point
from .errors import NoLinkableSelectionError, NoLinkedSelectionError
from .selection import HostPoint, HostSelection, LinkableSelection, LinkedSelection, Selection

logger = logging.getLogger(__name__)


class SelectionHost(ABC):
    """The editable surface the model is attached to.

    The host owns the user's selection. The model reads it at the start of
    every operation and tells the host where to put the caret afterwards.
    """
    _model: "Optional[MarkdownModel]" = None

    @property
    def model(self):
        assert self._model
        return self._model

    @abstractmethod
    def get_selection(self, document: Document) -> HostSelection:
        """Return the current selection in host coordinates."""

    @abstractmethod
    def move_cursor(self, point: HostPoint):
        """Collapse the selection to a point and show the caret there."""


class MemoryHost(SelectionHost):
    """A host that only remembers its selection."""

    def __init__(self, selection: Optional[HostSelection] = None):
        self.selection = selection or HostSelection.collapsed(HostPoint((0, 0), 0))

    def get_selection(self, document: Document) -> HostSelection:
        return self.selection

    def move_cursor(self, point: HostPoint):
        self.selection = HostSelection.collapsed(point)

    def select(self, start: HostPoint, end: Optional[HostPoint] = None):
        self.selection = HostSelection(start, end or start)


class MarkdownModel:
    """Selection-driven editing of a document of paragraphs and links."""
    document: Document
    host: SelectionHost

    def __init__(self, host: SelectionHost, document: Optional[Document] = None):
        self.host = host
        self.host._model = self
        self.document = document if document is not None else Document()
        self.linkable_selection: Optional[LinkableSelection] = None
        self.linked_selection: Optional[LinkedSelection] = None
        self._change_listeners: list[Callable[[str], None]] = []

    @classmethod
    def of_markdown(cls, host: SelectionHost, text: str) -> "MarkdownModel":
        return cls(host, Document.of_markdown(text))

    def write_value(self, value):
        """Replace the document with parsed markdown; None means empty."""
        value = value or ""
        if not isinstance(value, str):
            raise TypeError(f"Value must be a string, was: {type(value).__name__}")
        self.document = Document.of_markdown(value)
        self.remove_link_selections()

    def to_markdown(self) -> str:
        return self.document.to_markdown()

    def on_change(self, listener: Callable[[str], None]):
        self._change_listeners.append(listener)

    def report_change(self):
        """Hand the current markdown to every change listener."""
        markdown = self.to_markdown()
        for listener in self._change_listeners:
            listener(markdown)

    # --- Selection mapping ---

    def get_selection(self) -> Selection:
        if not self.document.paragraphs:
            self._move_cursor(self.document.seed())
        return Selection.of_host(self.document, self.host.get_selection(self.document))

    def _point_or_start(self, point: Optional[Point]) -> Point:
        if point is not None:
            return point
        # Nothing preceded the removed run, so the caret goes to the start
        if not self.document.paragraphs:
            return self.document.seed()
        return self.document.start_point()

    def _move_cursor(self, point: Optional[Point]):
        point = self._point_or_start(point)
        self.host.move_cursor(HostPoint(self.document.address_of(point.text), point.offset))

    def update_selection(self):
        selection = self.get_selection()
        self.linkable_selection = selection.linkable
        self.linked_selection = selection.link

    def remove_link_selections(self):
        self.linkable_selection = None
        self.linked_selection = None

    # --- Editing ---

    def insert_new_paragraph(self):
        selection = self.get_selection()
        start = selection.start

        if selection.is_range():
            start = self._point_or_start(selection.remove())

        paragraph = self.document.containing_paragraph(start.text)
        prefix = self.document.new_paragraph()
        self.document.insert_paragraph_before(prefix, paragraph)
        self._move_cursor(self.document.split_to(paragraph, prefix, start.text, start.offset))

    def insert_char(self, char: str):
        selection = self.get_selection()
        start = selection.start

        if selection.is_range():
            start = self._point_or_start(selection.remove())

        self._move_cursor(self.document.insert_char(start.text, char, start.offset))

    def remove_next_char(self):
        selection = self.get_selection()

        if selection.is_range():
            self._move_cursor(selection.remove())
        else:
            start = selection.start
            if self._at_document_end(start):
                return
            self._move_cursor(self.document.remove_next_char(start.text, start.offset))

    def remove_previous_char(self):
        selection = self.get_selection()

        if selection.is_range():
            self._move_cursor(selection.remove())
        else:
            start = selection.start
            if start.offset <= 0 and self.document.preceding_text(start.text) is None:
                return
            self._move_cursor(self.document.remove_previous_char(start.text, start.offset))

    def _at_document_end(self, point: Point) -> bool:
        return (point.offset >= self.document.length(point.text)
                and self.document.following_text(point.text) is None)

    def link(self, target: str):
        if self.linkable_selection is None or self.linkable_selection.text not in self.document:
            raise NoLinkableSelectionError("Illegal state: no linkable selection")

        linkable = self.linkable_selection
        document = self.document
        text = linkable.text
        paragraph = linkable.paragraph
        value = document.content(text)

        link = document.new_link(paragraph, value[linkable.start:linkable.end], target)

        if linkable.start > 0:
            document.add_content_before(paragraph, document.new_text(paragraph, value[:linkable.start]), text)
        document.add_content_before(paragraph, link, text)
        if linkable.end < len(value):
            document.add_content_before(paragraph, document.new_text(paragraph, value[linkable.end:]), text)
        document.remove_text(text)

        logger.debug(f"Linked '{value[linkable.start:linkable.end]}' to {target}")
        self._move_cursor(Point(document.text_of(link), linkable.cursor - linkable.start))
        self.update_selection()

    def unlink(self):
        if self.linked_selection is None or self.linked_selection.link not in self.document:
            raise NoLinkedSelectionError("Illegal state: no linked selection")

        linked = self.linked_selection
        document = self.document
        paragraph = linked.paragraph
        link_as_text = document.new_text(paragraph, document.content(linked.link))

        document.add_content_before(paragraph, link_as_text, linked.link)
        document.remove_content(paragraph, linked.link)

        logger.debug(f"Unlinked '{document.content(link_as_text)}'")
        self._move_cursor(document.merge_consecutive_texts(paragraph, Point(link_as_text, linked.cursor)))
        self.update_selection()

    def ignore_formatting(self, style: str):
        """Formatting shortcuts are accepted but have no effect on the document."""
        logger.info(f"{style} formatting is not supported, ignored")

    # --- Commands without model support yet ---

    def remove_start_of_line(self):
        logger.info("remove start of line, not implemented yet")

    def remove_end_of_line(self):
        logger.info("remove rest of line, not implemented yet")

    def remove_next_word(self):
        logger.info("remove next word, not implemented yet")

    def remove_previous_word(self):
        logger.info("remove previous word, not implemented yet")

    def undo(self):
        logger.info("undo, not implemented yet")

    def redo(self):
        logger.info("redo, not implemented yet")

    def paste(self):
        logger.info("paste, not implemented yet")

    def cut(self):
        logger.info("cut, not implemented yet")

    def copy(self):
        logger.info("copy, not implemented yet")
