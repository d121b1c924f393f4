from typing import Optional

from .constants import EditorConstants
from .document import Document
from .errors import InvalidAddressError
from .model import SelectionHost
from .selection import HostPoint, HostSelection


def render_paragraph(paragraph: str, num_columns: int) -> tuple[list[str], list[int]]:
    """Render into a list of lines, with word wrap.

    Returns (lines, cumulative_counts) where cumulative_counts are character
    counts in the original paragraph at the end of each visual line.
    """
    if not paragraph:
        return ([""], [0])

    lines: list[str] = []
    cumulative_counts: list[int] = []
    char_count = 0
    current_line: Optional[str] = None

    def break_long_word(word: str) -> str:
        nonlocal char_count
        while len(word) >= num_columns:
            lines.append(word[:num_columns])
            char_count += num_columns
            cumulative_counts.append(char_count)
            word = word[num_columns:]
        return word

    for word in paragraph.split(" "):
        if current_line is None:
            current_line = break_long_word(word)
        elif len(current_line) + 1 + len(word) < num_columns:
            current_line += " " + word
        else:
            lines.append(current_line)
            char_count += len(current_line) + 1  # +1 for the space swallowed by the break
            cumulative_counts.append(char_count)
            current_line = break_long_word(word)

    assert current_line is not None
    lines.append(current_line)
    char_count += len(current_line)
    cumulative_counts.append(char_count)

    return (lines, cumulative_counts)


def _line_index(counts: list[int], char_idx: int) -> int:
    # A cursor exactly on a wrap boundary belongs to the next line
    for i in range(len(counts) - 1):
        if char_idx == counts[i]:
            return i + 1
    line_index = 0
    while line_index < len(counts) - 1 and counts[line_index] < char_idx:
        line_index += 1
    return line_index


def _clip(span: tuple[int, int], line_start: int, line_length: int) -> Optional[tuple[int, int]]:
    start = max(span[0], line_start) - line_start
    end = min(span[1], line_start + line_length) - line_start
    return (start, end) if start < end else None


class TerminalView(SelectionHost):
    """Keeps the caret and selection anchor and lays the document out in rows.

    Positions are host points: an address down to a text run and an offset
    into it. Rows hold wrapped paragraph text with a blank row between
    paragraphs.
    """
    num_rows: int
    num_columns: int
    top_row: int = 0
    lines: list[str]
    link_ranges: list[list[tuple[int, int]]]
    selection_ranges: list[Optional[tuple[int, int]]]
    visual_cursor_y: int = 0
    visual_cursor_x: int = 0

    def __init__(self, num_rows: int = 24, num_columns: int = EditorConstants.DOCUMENT_WIDTH):
        self.num_rows = num_rows
        self.num_columns = num_columns
        self.cursor = HostPoint((0, 0), 0)
        self.anchor: Optional[HostPoint] = None
        self.lines = []
        self.link_ranges = []
        self.selection_ranges = []

    @property
    def document(self) -> Document:
        return self.model.document

    # --- SelectionHost ---

    def get_selection(self, document: Document) -> HostSelection:
        self.cursor = self._clamp(document, self.cursor)
        if self.anchor is None:
            return HostSelection.collapsed(self.cursor)
        self.anchor = self._clamp(document, self.anchor)
        return HostSelection(self.anchor, self.cursor)

    def move_cursor(self, point: HostPoint):
        self.cursor = point
        self.anchor = None

    def _clamp(self, document: Document, point: HostPoint) -> HostPoint:
        """Pull a point that no longer fits the document back inside it."""
        if not document.paragraphs:
            return point
        try:
            text = document.resolve(point.address)
        except InvalidAddressError:
            return HostPoint(document.address_of(document.start_point().text), 0)
        return HostPoint(point.address, max(0, min(point.offset, document.length(text))))

    # --- Selection ---

    def start_selection(self):
        if self.anchor is None:
            self.anchor = self.cursor

    def clear_selection(self):
        self.anchor = None

    def has_selection(self) -> bool:
        return self.anchor is not None and self.anchor != self.cursor

    # --- Movement ---

    def _current(self) -> tuple[int, int]:
        point = self._clamp(self.document, self.cursor)
        return self.document.resolve(point.address), point.offset

    def _set_cursor(self, text: int, offset: int):
        self.cursor = HostPoint(self.document.address_of(text), offset)

    def left_char(self):
        if not self.document.paragraphs:
            return
        document = self.document
        text, offset = self._current()
        if offset > 0:
            self._set_cursor(text, offset - 1)
            return
        previous = document.preceding_text(text)
        if previous is None:
            return
        if document.containing_paragraph(previous) == document.containing_paragraph(text):
            # End of the previous run is the same place as our start
            self._set_cursor(previous, document.length(previous) - 1)
        else:
            self._set_cursor(previous, document.length(previous))

    def right_char(self):
        if not self.document.paragraphs:
            return
        document = self.document
        text, offset = self._current()
        if offset < document.length(text):
            self._set_cursor(text, offset + 1)
            return
        following = document.following_text(text)
        if following is None:
            return
        if document.containing_paragraph(following) == document.containing_paragraph(text):
            self._set_cursor(following, 1)
        else:
            self._set_cursor(following, 0)

    def move_beginning_of_paragraph(self):
        if not self.document.paragraphs:
            return
        text, _ = self._current()
        self._set_cursor(self.document.first_text(self.document.containing_paragraph(text)), 0)

    def move_end_of_paragraph(self):
        if not self.document.paragraphs:
            return
        text, _ = self._current()
        last = self.document.last_text(self.document.containing_paragraph(text))
        self._set_cursor(last, self.document.length(last))

    def move_cursor_up(self):
        self._move_vertically(-1)

    def move_cursor_down(self):
        self._move_vertically(1)

    def _move_vertically(self, delta: int):
        if not self.document.paragraphs:
            return
        rows = self._content_rows()
        paragraph_index, char_idx = self._paragraph_position(self.cursor)
        row = self._row_of(rows, paragraph_index, char_idx)
        target = row + delta
        if not 0 <= target < len(rows):
            return
        column = char_idx - rows[row][1]
        target_paragraph, line_start, line_length = rows[target]
        index = line_start + min(column, line_length)
        self.cursor = self._point_at(self.document.paragraphs[target_paragraph], index)

    # --- Paragraph coordinates ---

    def _paragraph_texts(self, paragraph: int) -> list[int]:
        return [self.document.text_of(c) for c in self.document.children(paragraph)]

    def _paragraph_position(self, point: HostPoint) -> tuple[int, int]:
        """Map a host point to (paragraph index, character index in the paragraph)."""
        point = self._clamp(self.document, point)
        text = self.document.resolve(point.address)
        paragraph = self.document.containing_paragraph(text)
        char_idx = 0
        for run in self._paragraph_texts(paragraph):
            if run == text:
                break
            char_idx += self.document.length(run)
        return self.document.paragraphs.index(paragraph), char_idx + point.offset

    def _point_at(self, paragraph: int, char_idx: int) -> HostPoint:
        runs = self._paragraph_texts(paragraph)
        start = 0
        for run in runs:
            length = self.document.length(run)
            if char_idx < start + length:
                return HostPoint(self.document.address_of(run), char_idx - start)
            start += length
        last = runs[-1]
        return HostPoint(self.document.address_of(last), self.document.length(last))

    def _content_rows(self) -> list[tuple[int, int, int]]:
        """(paragraph index, line start, line length) for every wrapped line."""
        rows = []
        for paragraph_index, paragraph in enumerate(self.document.paragraphs):
            lines, counts = render_paragraph(self.document.plain_text(paragraph), self.num_columns)
            for i, line in enumerate(lines):
                rows.append((paragraph_index, counts[i - 1] if i > 0 else 0, len(line)))
        return rows

    def _row_of(self, rows: list[tuple[int, int, int]], paragraph_index: int, char_idx: int) -> int:
        paragraph = self.document.paragraphs[paragraph_index]
        _, counts = render_paragraph(self.document.plain_text(paragraph), self.num_columns)
        first = next(i for i, row in enumerate(rows) if row[0] == paragraph_index)
        return first + _line_index(counts, char_idx)

    # --- Rendering ---

    def render(self):
        """Lay out the document and scroll so the caret is visible."""
        document = self.document
        all_lines: list[str] = []
        all_links: list[list[tuple[int, int]]] = []
        all_selection: list[Optional[tuple[int, int]]] = []
        cursor_row, cursor_col = 0, 0

        cursor_position = self._paragraph_position(self.cursor) if document.paragraphs else (0, 0)
        selection = self._selection_bounds()

        for paragraph_index, paragraph in enumerate(document.paragraphs):
            if paragraph_index > 0:
                all_lines.append("")
                all_links.append([])
                all_selection.append(None)

            plain = document.plain_text(paragraph)
            lines, counts = render_paragraph(plain, self.num_columns)
            link_spans = self._link_spans(paragraph)
            selected = self._selected_span(paragraph_index, len(plain), selection)

            if cursor_position[0] == paragraph_index:
                line_index = _line_index(counts, cursor_position[1])
                line_start = counts[line_index - 1] if line_index > 0 else 0
                cursor_row = len(all_lines) + line_index
                cursor_col = min(cursor_position[1] - line_start, self.num_columns - 1)

            for i, line in enumerate(lines):
                line_start = counts[i - 1] if i > 0 else 0
                all_lines.append(line)
                all_links.append([clipped for clipped in
                                  (_clip(span, line_start, len(line)) for span in link_spans)
                                  if clipped])
                all_selection.append(_clip(selected, line_start, len(line)) if selected else None)

        if cursor_row < self.top_row:
            self.top_row = cursor_row
        elif cursor_row >= self.top_row + self.num_rows:
            self.top_row = cursor_row - self.num_rows + 1

        window = slice(self.top_row, self.top_row + self.num_rows)
        self.lines = all_lines[window]
        self.link_ranges = all_links[window]
        self.selection_ranges = all_selection[window]
        self.visual_cursor_y = cursor_row - self.top_row
        self.visual_cursor_x = cursor_col

    def _link_spans(self, paragraph: int) -> list[tuple[int, int]]:
        spans = []
        start = 0
        for content in self.document.children(paragraph):
            length = self.document.length(content)
            if content != self.document.text_of(content):
                spans.append((start, start + length))
            start += length
        return spans

    def _selection_bounds(self) -> Optional[tuple[tuple[int, int], tuple[int, int]]]:
        if not self.has_selection() or not self.document.paragraphs:
            return None
        ordered = HostSelection(self.anchor, self.cursor).ordered()
        return self._paragraph_position(ordered.start), self._paragraph_position(ordered.end)

    @staticmethod
    def _selected_span(paragraph_index: int, length: int, selection) -> Optional[tuple[int, int]]:
        if selection is None:
            return None
        (start_paragraph, start_idx), (end_paragraph, end_idx) = selection
        if not start_paragraph <= paragraph_index <= end_paragraph:
            return None
        start = start_idx if paragraph_index == start_paragraph else 0
        end = end_idx if paragraph_index == end_paragraph else length
        return (start, end)
