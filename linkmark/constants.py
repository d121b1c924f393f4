"""Constants and configuration for the linkmark editor."""

class EditorConstants:
    """Central configuration constants for the editor."""

    # Document model
    PLACEHOLDER = " "  # Stored in place of an empty text run
    PARAGRAPH_SEPARATOR = "\n\n"  # Written before every serialized paragraph

    # Terminal layout
    DOCUMENT_WIDTH = 65  # Default wrap width of the terminal view
    MIN_LINE_LENGTH = 40
    MAX_LINE_LENGTH = 120
    MIN_TERMINAL_WIDTH = 40  # Minimum terminal width required for display

    # Settings
    APP_NAME = "linkmark"
    DEFAULT_LINK_TARGET = "#"  # Used when the link prompt is left empty
    DEFAULT_LOG_LEVEL = "WARNING"
    LOG_FILE_NAME = "linkmark.log"

    # File operations
    ATOMIC_SAVE_SUFFIX = ".tmp"  # Suffix for temporary save files

    # Status messages
    TERMINAL_TOO_NARROW_MESSAGE = "Terminal too narrow! Need at least {} columns."
    CURRENT_WIDTH_MESSAGE = "Current width: {} columns."
