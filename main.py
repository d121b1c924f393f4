#!/usr/bin/env python3
"""Linkmark - edit paragraphs and links of a markdown file.

Usage:
    python main.py [filename]

Controls:
    Arrow keys: Move cursor (Shift extends the selection)
    Ctrl-L: Link the selection or the word under the cursor
    Alt-L: Remove the link under the cursor
    Ctrl-S: Save file
    Ctrl-Q: Quit (prompts to save if modified)
    Type to insert text
    Backspace: Delete character
    Enter: New paragraph
"""

from linkmark.__main__ import main


if __name__ == "__main__":
    main()
