"""Keyboard input handling using curtsies-style tokens."""

from typing import Optional
from dataclasses import dataclass
from enum import Enum


class KeyType(Enum):
    """Types of key events."""
    REGULAR = "regular"
    ALT = "alt"
    CTRL = "ctrl"
    META = "meta"  # Command/super key, distinct from Alt
    SPECIAL = "special"
    SHIFT_SPECIAL = "shift_special"  # Shift + arrow keys, etc.


@dataclass
class KeyEvent:
    """Represents a parsed keyboard event."""
    key_type: KeyType
    value: str  # The base key (e.g., 'a', 'left', 'backspace'); shifted letters are upper case
    raw: str  # The raw key string from the terminal
    is_alt: bool = False
    is_ctrl: bool = False
    is_meta: bool = False
    is_shift: bool = False


SPECIAL_KEYS = {
    'left', 'right', 'up', 'down', 'home', 'end', 'enter', 'backspace', 'delete',
    'page_up', 'page_down', 'insert', 'escape', 'f1',
}


class KeyboardHandler:
    """Turns terminal key tokens into KeyEvents."""

    def __init__(self, terminal_interface):
        self.terminal = terminal_interface

    def get_key_event(self, timeout: Optional[float] = None) -> Optional[KeyEvent]:
        key = self.terminal.get_key(timeout)
        if not key:
            return None
        return self.parse_key(key)

    def parse_key(self, key) -> KeyEvent:
        """Parse a key token into a KeyEvent.

        Accepts curtsies-style names such as '<Ctrl-x>', '<Esc+u>',
        '<Meta-Shift-z>' or '<LEFT>', single control bytes, and plain
        characters.
        """
        key_str = str(key)

        if key_str.startswith('<') and key_str.endswith('>') and len(key_str) > 2:
            return self._parse_token(key_str)

        # Single-byte ASCII control chars (Ctrl-<letter>)
        if len(key_str) == 1:
            o = ord(key_str)
            if o in (8, 127):
                return KeyEvent(key_type=KeyType.SPECIAL, value='backspace', raw=key_str)
            if 1 <= o <= 26:  # Ctrl-A .. Ctrl-Z (exclude ESC=27)
                ch = chr(ord('a') + o - 1)
                if ch in ('j', 'm'):
                    return KeyEvent(key_type=KeyType.SPECIAL, value='enter', raw=key_str)
                if ch == 'i':
                    return KeyEvent(key_type=KeyType.REGULAR, value='\t', raw=key_str)
                return KeyEvent(key_type=KeyType.CTRL, value=ch, raw=key_str, is_ctrl=True)

        # Escape prefix: bare ESC, or ESC followed by one key meaning Alt
        if key_str == '\x1b':
            return KeyEvent(key_type=KeyType.SPECIAL, value='escape', raw=key_str)
        if len(key_str) == 2 and key_str[0] == '\x1b':
            base = key_str[1]
            if base in ('\x7f', '\x08'):
                base = 'backspace'
            return KeyEvent(key_type=KeyType.ALT, value=base, raw=key_str, is_alt=True)

        return KeyEvent(key_type=KeyType.REGULAR, value=key_str, raw=key_str)

    def _parse_token(self, key_str: str) -> KeyEvent:
        name = key_str[1:-1].lower().replace('+', '-')
        parts = name.split('-')
        base = parts[-1] or '-'  # '<Ctrl-->' leaves an empty last part
        mods = set(p for p in parts[:-1] if p)
        if 'esc' in mods:
            mods.discard('esc')
            mods.add('alt')

        if base in ('pageup', 'page_up'):
            base = 'page_up'
        elif base in ('pagedown', 'page_down'):
            base = 'page_down'
        elif base in ('esc', 'escape'):
            base = 'escape'
        elif base in ('del', 'delete'):
            base = 'delete'
        elif base in ('return', 'enter'):
            base = 'enter'

        flags = dict(
            is_alt='alt' in mods,
            is_ctrl='ctrl' in mods,
            is_meta='meta' in mods,
            is_shift='shift' in mods,
        )

        if not mods:
            if base in ('space', 'spacebar', 'spc'):
                return KeyEvent(key_type=KeyType.REGULAR, value=' ', raw=' ')
            if base == 'tab':
                return KeyEvent(key_type=KeyType.REGULAR, value='\t', raw='\t')
            if base in SPECIAL_KEYS:
                return KeyEvent(key_type=KeyType.SPECIAL, value=base, raw=key_str)

        if len(base) == 1 and flags['is_shift']:
            base = base.upper()

        # Modifier precedence: Meta, then Ctrl, then Alt
        if flags['is_meta']:
            return KeyEvent(key_type=KeyType.META, value=base, raw=key_str, **flags)
        if flags['is_ctrl']:
            if base in ('j', 'm'):
                return KeyEvent(key_type=KeyType.SPECIAL, value='enter', raw=key_str)
            return KeyEvent(key_type=KeyType.CTRL, value=base, raw=key_str, **flags)
        if flags['is_alt']:
            return KeyEvent(key_type=KeyType.ALT, value=base, raw=key_str, **flags)
        if flags['is_shift'] and base in SPECIAL_KEYS:
            return KeyEvent(key_type=KeyType.SHIFT_SPECIAL, value=base, raw=key_str, **flags)

        # Fallback: treat unknown token as special
        return KeyEvent(key_type=KeyType.SPECIAL, value=base, raw=key_str, **flags)
