"""Terminal interface using Blessed for display and Curtsies for input."""

import select
import sys
from typing import Optional

import blessed
from curtsies import Input


class TerminalInterface:
    """Handles terminal I/O using Blessed."""

    def __init__(self, terminal: Optional[blessed.Terminal] = None):
        """Initialize with a terminal instance (or create one)."""
        self.term = terminal or blessed.Terminal()
        self.is_fullscreen = False
        self._curtsies_input: Optional[Input] = None

    def setup(self):
        """Enter fullscreen mode and prepare terminal."""
        print(self.term.enter_fullscreen)
        print(self.term.hide_cursor)
        print(self.term.clear)
        self.is_fullscreen = True
        if self._curtsies_input is None:
            # Enter raw mode immediately so reads work
            self._curtsies_input = Input(keynames='curtsies')
            self._curtsies_input.__enter__()

    def cleanup(self):
        """Exit fullscreen mode and restore terminal."""
        if self.is_fullscreen:
            print(self.term.exit_fullscreen)
            print(self.term.normal_cursor)
            self.is_fullscreen = False
        if self._curtsies_input is not None:
            try:
                self._curtsies_input.__exit__(None, None, None)
            finally:
                self._curtsies_input = None

    def compose_display_line(self, line: str, view_width: int,
                             selection: Optional[tuple[int, int]] = None,
                             links: Optional[list[tuple[int, int]]] = None) -> str:
        """Compose a display line with underlined links and reversed selection, padded to width."""
        text = line[:view_width].ljust(view_width)
        links = links or []

        out = []
        active = (False, False)
        for i, ch in enumerate(text):
            under = any(start <= i < end for start, end in links)
            rev = bool(selection and selection[0] <= i < selection[1])
            if (under, rev) != active:
                # Reset then enable desired to avoid sticky state issues
                out.append(self.term.normal)
                if under:
                    out.append(self.term.underline)
                if rev:
                    out.append(self.term.reverse)
                active = (under, rev)
            out.append(ch)
        if active != (False, False):
            out.append(self.term.normal)
        return ''.join(out)

    def draw_lines(self, lines: list[str], cursor_y: int, cursor_x: int,
                   left_margin: int = 0, view_width: int = 65, status_override: Optional[str] = None,
                   selection_ranges: Optional[list] = None, link_ranges: Optional[list] = None):
        """Draw text lines and position cursor with optional left margin.

        Args:
            lines: List of strings to display
            cursor_y: Cursor row position (0-based)
            cursor_x: Cursor column position (0-based)
            left_margin: Number of spaces to indent from left
            view_width: Width of the view area
            status_override: Custom status message to display instead of default
            selection_ranges: Per line (start_col, end_col) of the selection, or None
            link_ranges: Per line list of (start_col, end_col) link spans
        """
        print(self.term.home + self.term.clear, end='')

        for y, line in enumerate(lines):
            selection = selection_ranges[y] if selection_ranges and y < len(selection_ranges) else None
            links = link_ranges[y] if link_ranges and y < len(link_ranges) else None
            print(self.term.move(y, left_margin)
                  + self.compose_display_line(line, view_width, selection, links), end='')

        # Draw status line at bottom
        if status_override:
            status_text = status_override.ljust(self.term.width)
        else:
            help_text = "Ctrl-L link  Ctrl-S save  Ctrl-Q quit"
            status_text = (" " * (self.term.width - len(help_text) - 1)) + help_text
        print(self.term.move(self.term.height - 1, 0) + status_text, end='')

        if status_override and (": " in status_override):
            # Position cursor at end of current input
            cursor_pos = len(status_override)
            print(self.term.move(self.term.height - 1, cursor_pos) + self.term.normal_cursor, end='', flush=True)
        else:
            print(self.term.move(cursor_y, cursor_x + left_margin) + self.term.normal_cursor, end='', flush=True)

    def draw_error_message(self, message1: str, message2: str = ""):
        """Draw an error message in the center of the screen.

        Args:
            message1: Primary error message
            message2: Secondary information
        """
        print(self.term.home + self.term.clear, end='')

        center_y = self.term.height // 2
        box_width = max(len(message1), len(message2)) + 4
        left_margin = (self.term.width - box_width) // 2

        print(self.term.move(center_y - 2, left_margin) + "╔" + "═" * (box_width - 2) + "╗", end='')
        print(self.term.move(center_y - 1, left_margin) + "║ " + message1.center(box_width - 4) + " ║", end='')
        if message2:
            print(self.term.move(center_y, left_margin) + "║ " + message2.center(box_width - 4) + " ║", end='')
            print(self.term.move(center_y + 1, left_margin) + "╚" + "═" * (box_width - 2) + "╝", end='')
        else:
            print(self.term.move(center_y, left_margin) + "╚" + "═" * (box_width - 2) + "╝", end='')

        help_text = "Ctrl-Q to quit | Resize terminal to continue"
        help_pos = (self.term.width - len(help_text)) // 2
        print(self.term.move(self.term.height - 1, help_pos), end='')
        print(help_text, end='', flush=True)

    def get_key(self, timeout=None):
        """Get a single keypress from the user.

        Args:
            timeout: Timeout in seconds (None for blocking, 0 for non-blocking)

        Returns:
            The curtsies key name, or None if nothing arrived in time
        """
        if self._curtsies_input is None:
            return None
        if timeout is not None:
            r, _, _ = select.select([sys.stdin], [], [], float(timeout))
            if not r:
                return None
        return str(next(self._curtsies_input))

    @property
    def width(self):
        """Terminal width in columns."""
        return self.term.width

    @property
    def height(self):
        """Terminal height in rows (excluding status line)."""
        return self.term.height - 1  # Reserve one line for status
