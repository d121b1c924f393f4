"""Main editor controller for the markdown link editor."""

import errno
import logging
import os
import select
import signal
import sys
import tempfile
import termios
from typing import Optional

from .commands import CommandRegistry
from .constants import EditorConstants
from .errors import MalformedMarkdownError
from .keyboard import KeyboardHandler, KeyEvent, KeyType
from .model import MarkdownModel
from .selection import HostPoint
from .settings import SettingsStore, get_settings_store
from .terminal import TerminalInterface
from .view import TerminalView

logger = logging.getLogger(__name__)


class Editor:
    """Full-screen editor for a markdown document of paragraphs and links."""

    def __init__(self, settings: Optional[SettingsStore] = None,
                 terminal: Optional[TerminalInterface] = None):
        """Initialize the editor components."""
        self.settings = settings or get_settings_store()
        self.terminal = terminal or TerminalInterface()
        self.keyboard = KeyboardHandler(self.terminal)
        self.VIEW_WIDTH = self.settings.get('line_length')
        self.view = TerminalView(num_rows=self.terminal.height, num_columns=self.VIEW_WIDTH)
        self.model = MarkdownModel(self.view)
        self.command_registry = CommandRegistry()
        self.running = False
        self.error_mode = False  # True when terminal is too narrow
        self._resize_pipe_r: Optional[int] = None
        self._resize_pipe_w: Optional[int] = None
        self._ctrl_c_pressed = False
        # File handling
        self.filename: Optional[str] = None
        self.modified = False
        self.status_message: Optional[str] = None
        self.prompt_mode: Optional[str] = None  # None, 'link_target', 'save_filename', 'save_filename_quit' or 'quit_confirm'
        self.prompt_input = ""

    def _handle_resize(self, signum, frame):
        """Handle terminal resize signal."""
        del signum, frame  # Unused
        os.write(self._resize_pipe_w, b'R')

    def _handle_sigint(self, signum, frame):
        """Handle SIGINT (Ctrl-C) - treat as copy command."""
        del signum, frame  # Unused
        self._ctrl_c_pressed = True
        os.write(self._resize_pipe_w, b'C')

    def run(self):
        """Run the main editor loop."""
        self._resize_pipe_r, self._resize_pipe_w = os.pipe()
        self.terminal.setup()
        self.running = True

        original_winch_handler = signal.signal(signal.SIGWINCH, self._handle_resize)
        original_int_handler = signal.signal(signal.SIGINT, self._handle_sigint)

        try:
            with self.terminal.term.cbreak():
                old_settings = self._disable_flow_control()
                try:
                    self._loop()
                finally:
                    if old_settings:
                        termios.tcsetattr(sys.stdin, termios.TCSANOW, old_settings)
        finally:
            signal.signal(signal.SIGWINCH, original_winch_handler)
            signal.signal(signal.SIGINT, original_int_handler)
            os.close(self._resize_pipe_r)
            os.close(self._resize_pipe_w)
            self.terminal.cleanup()

    def _disable_flow_control(self):
        # Let Ctrl-S and Ctrl-Q through as keys
        try:
            old_settings = termios.tcgetattr(sys.stdin)
        except termios.error:
            return None
        new_settings = list(old_settings)
        new_settings[0] &= ~(termios.IXON | termios.IXOFF)
        new_settings[3] &= ~termios.IEXTEN  # Ctrl-V reaches us instead of the tty
        termios.tcsetattr(sys.stdin, termios.TCSANOW, new_settings)
        return old_settings

    def _loop(self):
        need_draw = True
        while self.running:
            if need_draw:
                self._refresh()
                need_draw = False

            ready, _, _ = select.select([0, self._resize_pipe_r], [], [])

            if self._resize_pipe_r in ready:
                os.read(self._resize_pipe_r, 1024)
                if self._ctrl_c_pressed:
                    self._ctrl_c_pressed = False
                    self._handle_key_event(KeyEvent(key_type=KeyType.CTRL, value='c', raw='\x03', is_ctrl=True))
                need_draw = True
            elif 0 in ready:
                key_event = self.keyboard.get_key_event(timeout=0)
                if key_event:
                    self._handle_key_event(key_event)
                    need_draw = True

    def _refresh(self):
        """Re-layout and draw, or show the narrow-terminal error."""
        self.view.num_rows = self.terminal.height
        if self.terminal.width < EditorConstants.MIN_TERMINAL_WIDTH:
            self.error_mode = True
            self._draw_error()
            return
        self.error_mode = False
        self.view.num_columns = min(self.VIEW_WIDTH, self.terminal.width)
        self.view.render()
        self._draw()

    def _status_line(self) -> Optional[str]:
        if self.prompt_mode == 'link_target':
            return f" Link target: {self.prompt_input}"
        if self.prompt_mode in ('save_filename', 'save_filename_quit'):
            return f" File to save in: {self.prompt_input}"
        if self.prompt_mode == 'quit_confirm':
            return " Save file? (y, n) "
        if self.status_message:
            return f" {self.status_message}"
        return None

    def _draw(self):
        """Draw the current editor state to terminal."""
        left_margin = max(0, (self.terminal.width - self.view.num_columns) // 2)
        self.terminal.draw_lines(
            self.view.lines,
            self.view.visual_cursor_y,
            self.view.visual_cursor_x,
            left_margin=left_margin,
            view_width=self.view.num_columns,
            status_override=self._status_line(),
            selection_ranges=self.view.selection_ranges,
            link_ranges=self.view.link_ranges,
        )

    def _draw_error(self):
        """Draw error message when terminal is too narrow."""
        self.terminal.draw_error_message(
            EditorConstants.TERMINAL_TOO_NARROW_MESSAGE.format(EditorConstants.MIN_TERMINAL_WIDTH),
            EditorConstants.CURRENT_WIDTH_MESSAGE.format(self.terminal.width)
        )

    def _handle_key_event(self, key_event: KeyEvent):
        """Handle a keyboard event.

        Args:
            key_event: KeyEvent object with parsed key information
        """
        # Clear status message on any keypress (except in prompt mode)
        if self.status_message and not self.prompt_mode:
            self.status_message = None

        if self._handle_prompt_mode(key_event):
            return

        if self.error_mode:
            if key_event.key_type == KeyType.CTRL and key_event.value == 'q':
                self.command_registry.execute(self, key_event)
            return

        if self.command_registry.execute(self, key_event):
            self.modified = True

    def _handle_prompt_mode(self, key_event: KeyEvent) -> bool:
        """Handle input in prompt mode.

        Returns:
            True if in prompt mode and event was handled
        """
        if self.prompt_mode == 'link_target':
            self._handle_link_prompt(key_event)
            return True
        if self.prompt_mode in ('save_filename', 'save_filename_quit'):
            self._handle_filename_prompt(key_event)
            return True
        if self.prompt_mode == 'quit_confirm':
            self._handle_quit_confirm(key_event)
            return True
        return False

    def _edit_prompt_input(self, key_event: KeyEvent) -> Optional[str]:
        """Apply a key to the prompt input.

        Returns:
            'cancel' or 'submit' when the prompt is finished, otherwise None
        """
        if (key_event.key_type == KeyType.SPECIAL and key_event.value == 'escape') or \
           (key_event.key_type == KeyType.CTRL and key_event.value == 'g'):  # ESC or Ctrl-G
            return 'cancel'
        if key_event.key_type == KeyType.SPECIAL and key_event.value == 'enter':
            return 'submit'
        if key_event.key_type == KeyType.SPECIAL and key_event.value == 'backspace':
            self.prompt_input = self.prompt_input[:-1]
        elif key_event.key_type == KeyType.REGULAR and ord(key_event.value[0]) >= 32:
            self.prompt_input += key_event.value
        return None

    def _handle_link_prompt(self, key_event: KeyEvent):
        outcome = self._edit_prompt_input(key_event)
        if outcome is None:
            return
        target = self.prompt_input.strip()
        self.prompt_mode = None
        self.prompt_input = ""
        self.status_message = None
        if outcome == 'cancel':
            return
        self.link_selection(target or self.settings.get('default_link_target'))

    def link_selection(self, target: str):
        """Link the cached linkable selection, if it is still there."""
        if self.model.linkable_selection is None:
            self.status_message = "No linkable selection"
            return
        self.model.link(target)
        self.model.report_change()
        self.modified = True

    def load_file(self, filename: str):
        """Load a markdown file into the editor.

        Args:
            filename: Path to file to load
        """
        self.filename = filename
        try:
            with open(filename, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            # New file - start with empty document
            self.modified = False
            return
        except OSError as e:
            print(f"Error loading file: {e}")
            sys.exit(1)

        try:
            self.model.write_value(content)
        except MalformedMarkdownError as e:
            print(f"Error loading file: {filename} is not supported markdown: {e}")
            sys.exit(1)
        self.view.move_cursor(HostPoint((0, 0), 0))
        self.modified = False
        logger.info(f"Loaded {filename}")

    def save_file(self, filename: str) -> bool:
        """Save the current document to a file atomically.

        Args:
            filename: Path to save file to

        Returns:
            True if save succeeded, False otherwise
        """
        content = self.model.to_markdown()
        if content:
            content += "\n"

        # Same directory keeps the rename on one filesystem
        dir_name = os.path.dirname(filename) or '.'
        suffix = os.path.splitext(filename)[1] or EditorConstants.ATOMIC_SAVE_SUFFIX
        temp_filename = None
        try:
            with tempfile.NamedTemporaryFile(mode='w', encoding='utf-8',
                                             dir=dir_name, suffix=suffix,
                                             delete=False) as temp_file:
                temp_filename = temp_file.name
                temp_file.write(content)
                temp_file.flush()
                os.fsync(temp_file.fileno())

            os.replace(temp_filename, filename)
        except PermissionError:
            self.status_message = f"Error: Permission denied saving {filename}"
            self._remove_temp_file(temp_filename)
            return False
        except OSError as e:
            if e.errno == errno.ENOSPC:
                self.status_message = "Error: No space left on device"
            else:
                self.status_message = f"Error: Cannot save to {filename}"
            logger.warning(f"Saving {filename} failed: {e}")
            self._remove_temp_file(temp_filename)
            return False

        self.filename = filename
        self.modified = False
        logger.info(f"Saved {filename}")
        return True

    @staticmethod
    def _remove_temp_file(temp_filename: Optional[str]):
        if temp_filename and os.path.exists(temp_filename):
            os.remove(temp_filename)

    def _handle_save(self):
        """Handle Ctrl-S save command."""
        if self.filename:
            if self.save_file(self.filename):
                self.status_message = f"Saved to {self.filename}"
        else:
            self.prompt_mode = 'save_filename'
            self.prompt_input = ""

    def _handle_filename_prompt(self, key_event: KeyEvent):
        """Handle keypress during filename prompt."""
        outcome = self._edit_prompt_input(key_event)
        if outcome == 'cancel':
            self.prompt_mode = None
            self.prompt_input = ""
        elif outcome == 'submit' and self.prompt_input:
            if self.save_file(self.prompt_input):
                self.status_message = f"Saved to {self.prompt_input}"
                # If we were saving before quit, quit now
                if self.prompt_mode == 'save_filename_quit':
                    self.running = False
            self.prompt_mode = None
            self.prompt_input = ""

    def _handle_quit_confirm(self, key_event: KeyEvent):
        """Handle keypress during quit confirmation."""
        if key_event.key_type != KeyType.REGULAR:
            return
        char = key_event.value.lower()
        if char == 'y':
            if self.filename:
                if self.save_file(self.filename):
                    self.running = False
                self.prompt_mode = None
            else:
                self.prompt_mode = 'save_filename_quit'
                self.prompt_input = ""
        elif char == 'n':
            self.running = False
        else:
            self.prompt_mode = None
