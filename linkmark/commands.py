"""Command pattern implementation for editor actions."""

from abc import ABC, abstractmethod
from typing import Dict, Tuple, Optional, TYPE_CHECKING
from .keyboard import KeyType

if TYPE_CHECKING:
    from .editor import Editor
    from .keyboard import KeyEvent


class EditorCommand(ABC):
    """Base class for editor commands."""

    @abstractmethod
    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        """Execute the command.

        Args:
            editor: Editor instance
            key_event: The key event that triggered this command

        Returns:
            True if the command modified the document
        """
        pass


class MovementCommand(EditorCommand):
    """Base class for cursor movement commands."""

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        """Movement commands don't modify the document."""
        # Plain movement drops the selection anchor
        editor.view.clear_selection()
        self._move(editor, key_event)
        editor.model.update_selection()
        return False

    @abstractmethod
    def _move(self, editor: 'Editor', key_event: 'KeyEvent'):
        """Perform the movement."""
        pass


class LeftCharCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.view.left_char()


class RightCharCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.view.right_char()


class UpLineCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.view.move_cursor_up()


class DownLineCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.view.move_cursor_down()


class BeginningOfParagraphCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.view.move_beginning_of_paragraph()


class EndOfParagraphCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.view.move_end_of_paragraph()


class SelectionMovementCommand(MovementCommand):
    """Base class for shift+arrow selection movements.

    The anchor stays where the selection started; only the cursor moves.
    """

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        editor.view.start_selection()
        self._move(editor, key_event)
        editor.model.update_selection()
        return False


class ShiftLeftCommand(SelectionMovementCommand):
    def _move(self, editor, key_event):
        editor.view.left_char()


class ShiftRightCommand(SelectionMovementCommand):
    def _move(self, editor, key_event):
        editor.view.right_char()


class ShiftUpCommand(SelectionMovementCommand):
    def _move(self, editor, key_event):
        editor.view.move_cursor_up()


class ShiftDownCommand(SelectionMovementCommand):
    def _move(self, editor, key_event):
        editor.view.move_cursor_down()


class EditCommand(EditorCommand):
    """Base class for editing commands."""

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        """Editing commands modify the document."""
        self._edit(editor, key_event)
        editor.model.report_change()
        editor.model.update_selection()
        return True

    @abstractmethod
    def _edit(self, editor: 'Editor', key_event: 'KeyEvent'):
        """Perform the edit."""
        pass


class RemovePreviousCharCommand(EditCommand):
    def _edit(self, editor, key_event):
        editor.model.remove_previous_char()


class RemoveNextCharCommand(EditCommand):
    def _edit(self, editor, key_event):
        editor.model.remove_next_char()


class InsertParagraphCommand(EditCommand):
    def _edit(self, editor, key_event):
        editor.model.insert_new_paragraph()


class InsertTextCommand(EditCommand):
    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        char = key_event.value
        # Filter out control characters
        if not char or (ord(char[0]) < 32 and char != '\t'):
            return False
        return super().execute(editor, key_event)

    def _edit(self, editor, key_event):
        for char in key_event.value:
            editor.model.insert_char(char)


class UnsupportedEditCommand(EditorCommand):
    """Editing commands the model accepts but does not carry out yet.

    Listeners still hear about the key, but the document is never marked
    modified.
    """

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        self._edit(editor, key_event)
        editor.model.report_change()
        return False

    @abstractmethod
    def _edit(self, editor: 'Editor', key_event: 'KeyEvent'):
        """Hand the command to the model."""
        pass


class SystemCommand(EditorCommand):
    """Base class for system commands like save and quit."""

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        """System commands don't modify document content directly."""
        self._execute_system(editor, key_event)
        return False

    @abstractmethod
    def _execute_system(self, editor: 'Editor', key_event: 'KeyEvent'):
        """Perform the system action."""
        pass


class LinkCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        editor.model.update_selection()
        linkable = editor.model.linkable_selection
        if linkable is None:
            editor.status_message = "No linkable selection"
            return
        editor.prompt_mode = 'link_target'
        editor.prompt_input = ""
        editor.status_message = f"Link '{linkable.content}'"


class UnlinkCommand(EditorCommand):
    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        editor.model.update_selection()
        if editor.model.linked_selection is None:
            editor.status_message = "Not inside a link"
            return False
        editor.model.unlink()
        editor.model.report_change()
        return True


class EscapeCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        editor.view.clear_selection()
        editor.model.remove_link_selections()


class IgnoreFormattingCommand(SystemCommand):
    """Bold, italic and underline shortcuts are swallowed."""

    STYLES = {'b': 'bold', 'i': 'italic', 'u': 'underline'}

    def _execute_system(self, editor, key_event):
        editor.model.ignore_formatting(self.STYLES.get(key_event.value.lower(), key_event.value))


class RemovePreviousWordCommand(UnsupportedEditCommand):
    def _edit(self, editor, key_event):
        editor.model.remove_previous_word()


class RemoveNextWordCommand(UnsupportedEditCommand):
    def _edit(self, editor, key_event):
        editor.model.remove_next_word()


class RemoveStartOfLineCommand(UnsupportedEditCommand):
    def _edit(self, editor, key_event):
        editor.model.remove_start_of_line()


class RemoveEndOfLineCommand(UnsupportedEditCommand):
    def _edit(self, editor, key_event):
        editor.model.remove_end_of_line()


class UndoCommand(UnsupportedEditCommand):
    def _edit(self, editor, key_event):
        editor.model.undo()


class RedoCommand(UnsupportedEditCommand):
    def _edit(self, editor, key_event):
        editor.model.redo()


class CutCommand(UnsupportedEditCommand):
    def _edit(self, editor, key_event):
        editor.model.cut()


class CopyCommand(UnsupportedEditCommand):
    def _edit(self, editor, key_event):
        editor.model.copy()


class PasteCommand(UnsupportedEditCommand):
    def _edit(self, editor, key_event):
        editor.model.paste()


class QuitCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        if editor.modified:
            editor.prompt_mode = 'quit_confirm'
        else:
            editor.running = False


class SaveCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        editor._handle_save()


class CommandRegistry:
    """Registry for mapping key combinations to commands."""

    def __init__(self):
        self._commands: Dict[Tuple[KeyType, str], EditorCommand] = {}
        self._setup_default_commands()

    def _setup_default_commands(self):
        """Set up the default command mappings."""
        # Movement commands
        self.register((KeyType.SPECIAL, 'left'), LeftCharCommand())
        self.register((KeyType.SPECIAL, 'right'), RightCharCommand())
        self.register((KeyType.SPECIAL, 'up'), UpLineCommand())
        self.register((KeyType.SPECIAL, 'down'), DownLineCommand())
        self.register((KeyType.SPECIAL, 'home'), BeginningOfParagraphCommand())
        self.register((KeyType.SPECIAL, 'end'), EndOfParagraphCommand())
        self.register((KeyType.CTRL, 'a'), BeginningOfParagraphCommand())
        self.register((KeyType.CTRL, 'e'), EndOfParagraphCommand())

        # Selection movement commands (Shift+arrow)
        self.register((KeyType.SHIFT_SPECIAL, 'left'), ShiftLeftCommand())
        self.register((KeyType.SHIFT_SPECIAL, 'right'), ShiftRightCommand())
        self.register((KeyType.SHIFT_SPECIAL, 'up'), ShiftUpCommand())
        self.register((KeyType.SHIFT_SPECIAL, 'down'), ShiftDownCommand())

        # Character editing
        self.register((KeyType.SPECIAL, 'backspace'), RemovePreviousCharCommand())
        self.register((KeyType.CTRL, 'h'), RemovePreviousCharCommand())
        self.register((KeyType.SPECIAL, 'delete'), RemoveNextCharCommand())
        self.register((KeyType.CTRL, 'd'), RemoveNextCharCommand())
        self.register((KeyType.SPECIAL, 'enter'), InsertParagraphCommand())

        # Word and line removal
        self.register((KeyType.CTRL, 'backspace'), RemovePreviousWordCommand())
        self.register((KeyType.ALT, 'backspace'), RemovePreviousWordCommand())
        self.register((KeyType.ALT, 'delete'), RemoveNextWordCommand())
        self.register((KeyType.META, 'backspace'), RemoveStartOfLineCommand())
        self.register((KeyType.CTRL, 'k'), RemoveEndOfLineCommand())

        # Links
        self.register((KeyType.CTRL, 'l'), LinkCommand())
        self.register((KeyType.ALT, 'l'), UnlinkCommand())
        self.register((KeyType.SPECIAL, 'escape'), EscapeCommand())

        # Formatting shortcuts are swallowed
        for key_type in (KeyType.CTRL, KeyType.META):
            for value in ('b', 'i', 'u'):
                self.register((key_type, value), IgnoreFormattingCommand())

        # Undo/redo
        self.register((KeyType.CTRL, 'z'), UndoCommand())
        self.register((KeyType.META, 'z'), UndoCommand())
        self.register((KeyType.CTRL, 'y'), RedoCommand())
        self.register((KeyType.META, 'Z'), RedoCommand())

        # Clipboard
        self.register((KeyType.CTRL, 'x'), CutCommand())
        self.register((KeyType.CTRL, 'c'), CopyCommand())
        self.register((KeyType.CTRL, 'v'), PasteCommand())

        # System commands
        self.register((KeyType.CTRL, 'q'), QuitCommand())
        self.register((KeyType.CTRL, 's'), SaveCommand())

    def register(self, key: Tuple[KeyType, str], command: EditorCommand):
        """Register a command for a key combination."""
        self._commands[key] = command

    def get_command(self, key_type: KeyType, value: str) -> Optional[EditorCommand]:
        """Get the command for a key combination."""
        return self._commands.get((key_type, value))

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        """Execute the command for the given key event.

        Returns:
            True if the document was modified
        """
        command = self.get_command(key_event.key_type, key_event.value)

        if command:
            return command.execute(editor, key_event)

        # Handle regular text input
        if key_event.key_type == KeyType.REGULAR:
            return InsertTextCommand().execute(editor, key_event)

        return False
