# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""
Clipboard support for the corrected text.

copy_to_clipboard() shells out to the first available clipboard tool.
CopyButton mirrors the "Copy" / "Copied!" control: after a copy it stays
in the copied state for two seconds, independent of any request.
"""

import shutil
import subprocess
import threading
from enum import Enum
from typing import List, Optional

from .utils import CLIPBOARD_TIMEOUT, COPY_RESET_DELAY, log

# Tried in order; the first one on PATH wins
CLIPBOARD_COMMANDS: List[List[str]] = [
    ["pbcopy"],
    ["wl-copy"],
    ["xclip", "-selection", "clipboard"],
]


def find_clipboard_command() -> Optional[List[str]]:
    """Return the clipboard command to use, or None if none is installed."""
    for cmd in CLIPBOARD_COMMANDS:
        if shutil.which(cmd[0]):
            return cmd
    return None


def copy_to_clipboard(text: str) -> bool:
    """Copy text to the system clipboard. Returns True on success."""
    cmd = find_clipboard_command()
    if cmd is None:
        log("No clipboard tool found (pbcopy, wl-copy or xclip)", "WARN")
        return False

    try:
        result = subprocess.run(
            cmd,
            input=text,
            text=True,
            capture_output=True,
            timeout=CLIPBOARD_TIMEOUT,
        )
    except subprocess.TimeoutExpired:
        log("Timeout writing clipboard", "WARN")
        return False
    except (OSError, subprocess.SubprocessError) as e:
        log(f"Clipboard error: {type(e).__name__}: {e}", "WARN")
        return False

    if result.returncode != 0:
        log(f"{cmd[0]} returned non-zero: {result.returncode}", "WARN")
        return False
    return True


class CopyStatus(str, Enum):
    IDLE = "idle"
    COPIED = "copied"


class CopyButton:
    """Copy control with a cosmetic reset timer."""

    def __init__(self, reset_delay: float = COPY_RESET_DELAY):
        self._reset_delay = reset_delay
        self._status = CopyStatus.IDLE
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()

    @property
    def status(self) -> CopyStatus:
        return self._status

    @property
    def label(self) -> str:
        return "Copied!" if self._status is CopyStatus.COPIED else "Copy"

    @property
    def enabled(self) -> bool:
        return self._status is CopyStatus.IDLE

    def click(self, text: str) -> bool:
        """Copy text and switch to the copied state. Ignored while copied."""
        if not self.enabled or not text:
            return False
        if not copy_to_clipboard(text):
            return False

        with self._lock:
            self._status = CopyStatus.COPIED
            self._timer = threading.Timer(self._reset_delay, self._reset)
            self._timer.daemon = True
            self._timer.start()
        return True

    def cancel(self) -> None:
        """Stop a pending reset and return to idle immediately."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._status = CopyStatus.IDLE

    def _reset(self) -> None:
        with self._lock:
            self._status = CopyStatus.IDLE
            self._timer = None
