# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""
Terminal input form.

A single multi-line text field. In raw mode Enter arrives as CR and
inserts a newline; the submit chord is Meta+Enter (ESC CR) or Ctrl+J
(LF), which is how terminals encode modifier+Enter.
"""

import contextlib
import os
import select
import sys
from enum import Enum
from typing import Iterator, Optional

# Raw key values
KEY_CR = "\r"
KEY_LF = "\n"
KEY_ESC = "\x1b"
KEY_META_ENTER = "meta+enter"
KEY_CTRL_C = "\x03"
KEY_CTRL_D = "\x04"
KEY_CTRL_U = "\x15"
KEY_CTRL_Y = "\x19"
KEY_BACKSPACE = ("\x7f", "\x08")

SUBMIT_KEYS = (KEY_META_ENTER, KEY_LF)

FORM_HINT = "enter newline   alt+enter / ctrl+j submit   ctrl+y copy   ctrl+u clear   ctrl+d quit"


class FormAction(str, Enum):
    NONE = "none"
    SUBMIT = "submit"
    COPY = "copy"
    QUIT = "quit"


def is_submit_chord(key: str) -> bool:
    """True for the modifier+Enter encodings that submit the form."""
    return key in SUBMIT_KEYS


class PromptForm:
    """Editable text buffer with submit and copy actions."""

    def __init__(self, value: str = ""):
        self._chars = list(value)

    @property
    def value(self) -> str:
        return "".join(self._chars)

    def clear(self) -> None:
        self._chars = []

    def handle_key(self, key: str, submit_enabled: bool = True) -> FormAction:
        """
        Apply one key to the buffer.

        Args:
            key: A key as returned by read_key().
            submit_enabled: False while a request is pending; the submit
                chord is then ignored.

        Returns:
            The action the caller should perform.
        """
        if is_submit_chord(key):
            if submit_enabled and self.value.strip():
                return FormAction.SUBMIT
            return FormAction.NONE

        if key == KEY_CTRL_C:
            return FormAction.QUIT
        if key == KEY_CTRL_D:
            return FormAction.NONE if self._chars else FormAction.QUIT
        if key == KEY_CTRL_Y:
            return FormAction.COPY
        if key == KEY_CTRL_U:
            self.clear()
        elif key in KEY_BACKSPACE:
            if self._chars:
                self._chars.pop()
        elif key == KEY_CR:
            self._chars.append("\n")
        elif key == "\t" or (key and key.isprintable()):
            self._chars.extend(key)
        return FormAction.NONE


def read_key(fd: int) -> str:
    """
    Read one key from a raw-mode terminal.

    Returns KEY_META_ENTER for ESC followed by Enter, "" for other escape
    sequences, and KEY_CTRL_D on EOF.
    """
    b = os.read(fd, 1)
    if not b:
        return KEY_CTRL_D
    if b == b"\x1b":
        r, _, _ = select.select([fd], [], [], 0.05)
        if not r:
            return KEY_ESC
        nxt = os.read(fd, 1)
        if nxt in (b"\r", b"\n"):
            return KEY_META_ENTER
        if nxt in (b"[", b"O"):
            # Drain the rest of a CSI/SS3 sequence (arrows, function keys)
            while True:
                r, _, _ = select.select([fd], [], [], 0.01)
                if not r:
                    break
                c = os.read(fd, 1)
                if not c or c.isalpha() or c == b"~":
                    break
        return ""

    # Multi-byte UTF-8 characters
    first = b[0]
    extra = 0
    if first >= 0xF0:
        extra = 3
    elif first >= 0xE0:
        extra = 2
    elif first >= 0xC0:
        extra = 1
    if extra:
        b += os.read(fd, extra)
    try:
        return b.decode("utf-8")
    except UnicodeDecodeError:
        return ""


def iter_keys(fd: int) -> Iterator[str]:
    while True:
        yield read_key(fd)


@contextlib.contextmanager
def raw_terminal(fd: Optional[int] = None):
    """Put the terminal in raw mode for the duration of the block."""
    import termios
    import tty

    fd = sys.stdin.fileno() if fd is None else fd
    old_tty = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        # Keep output processing so "\n" still returns the carriage
        mode = termios.tcgetattr(fd)
        mode[1] |= termios.OPOST | termios.ONLCR
        termios.tcsetattr(fd, termios.TCSANOW, mode)
        yield fd
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_tty)
