# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""
Terminal rendering of correction snapshots.

TerminalView is a Corrector observer. On a terminal it streams visible
text as it arrives; elsewhere it prints the text only once the request
succeeds. A failure wipes any streamed text and shows the error message
in red. The word diff is printed after a successful request.
"""

import math
import shutil
import sys
from typing import Optional, TextIO

from .diff import diff_stats, render_ansi, render_html
from .stream import CorrectionSnapshot, StreamStatus
from .utils import C_BOLD, C_DIM, C_GREEN, C_RED, paint

# Cursor to the start of the line n rows up / clear to end of screen
ANSI_UP_LINES = "\033[{}F"
ANSI_CLEAR_DOWN = "\033[J"


def _is_terminal(stream) -> bool:
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False


class TerminalView:
    """Draws snapshots to a text stream."""

    def __init__(
        self,
        out: Optional[TextIO] = None,
        color: bool = True,
        show_diff: bool = True,
        html: bool = False,
        progress: bool = True,
        err: Optional[TextIO] = None,
    ):
        self._out = out or sys.stdout
        self._err = err or self._out
        self._color = color
        self._show_diff = show_diff
        self._html = html
        self._progress = progress
        # Partial text is only streamed where it can be erased again
        self._live = _is_terminal(self._out)
        self._shown = ""
        self._streamed = ""
        self._started = False

    def __call__(self, snapshot: CorrectionSnapshot) -> None:
        if snapshot.status is StreamStatus.PENDING:
            self._render_progress(snapshot)
        elif snapshot.status is StreamStatus.SUCCESS:
            self._render_success(snapshot)
        elif snapshot.status is StreamStatus.ERROR:
            self._render_error(snapshot)

    # ─────────────────────────────────────────────────────────────────
    # Frames
    # ─────────────────────────────────────────────────────────────────

    def _render_progress(self, snapshot: CorrectionSnapshot) -> None:
        if not self._progress:
            return

        if not self._started:
            # First frame of a request
            self._started = True
            self._write("\n" + paint("Thinking...", C_DIM, enabled=self._color) + "\n")

        if not self._live:
            return

        response = snapshot.response
        if response.startswith(self._shown):
            self._stream(response[len(self._shown):])
        else:
            # Trimming moved text we already printed; start the line over
            self._stream("\n" + response)
        self._shown = response

    def _render_success(self, snapshot: CorrectionSnapshot) -> None:
        # Catch up with anything not printed yet (e.g. no progress frames)
        if snapshot.response.startswith(self._shown):
            self._write(snapshot.response[len(self._shown):])
        self._reset()
        self._write("\n")

        if not self._show_diff:
            return

        stats = diff_stats(snapshot.diff)
        header = paint("Changes", C_BOLD, enabled=self._color)
        counts = paint(f"+{stats.added} -{stats.removed} words", C_DIM, enabled=self._color)
        self._write(f"\n{header}  {counts}\n")

        if self._html:
            body = render_html(snapshot.diff)
        else:
            body = render_ansi(snapshot.diff, color=self._color)
        self._write(body + "\n")

    def _render_error(self, snapshot: CorrectionSnapshot) -> None:
        if self._streamed:
            self._erase_streamed()
        self._reset()
        message = snapshot.error or snapshot.response
        self._err.write(paint(message, C_RED, enabled=self._color) + "\n")
        self._err.flush()

    def notice(self, text: str, ok: bool = True) -> None:
        """One-line status message (e.g. after copying)."""
        self._write(paint(text, C_GREEN if ok else C_RED, enabled=self._color) + "\n")

    # ─────────────────────────────────────────────────────────────────
    # Output
    # ─────────────────────────────────────────────────────────────────

    def _erase_streamed(self) -> None:
        """Move back to the first row of streamed text and clear below it."""
        width = max(shutil.get_terminal_size().columns, 1)
        rows = sum(max(1, math.ceil(len(line) / width)) for line in self._streamed.split("\n"))
        if rows > 1:
            self._write(ANSI_UP_LINES.format(rows - 1) + ANSI_CLEAR_DOWN)
        else:
            self._write("\r" + ANSI_CLEAR_DOWN)

    def _reset(self) -> None:
        self._shown = ""
        self._streamed = ""
        self._started = False

    def _stream(self, text: str) -> None:
        self._streamed += text
        self._write(text)

    def _write(self, text: str) -> None:
        self._out.write(text)
        self._out.flush()
