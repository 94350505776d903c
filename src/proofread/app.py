# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""
Interactive proofreading session.

Type or paste text, submit with Alt+Enter (or Ctrl+J), watch the
correction stream in, then review the word diff. Ctrl+Y copies the
latest correction.
"""

import sys
from typing import Optional

from .clipboard import CopyButton
from .config import Config, get_config
from .form import FORM_HINT, FormAction, PromptForm, iter_keys, raw_terminal
from .stream import Corrector, StreamStatus
from .utils import C_BOLD, C_CYAN, C_DIM, C_RESET, log
from .view import TerminalView

PROMPT_MARK = f"{C_CYAN}›{C_RESET} "


class Session:
    """Binds the form, the corrector and the view to one terminal."""

    def __init__(self, corrector: Corrector, config: Optional[Config] = None, out=None):
        config = config or get_config()
        self._out = out or sys.stdout
        self._corrector = corrector
        self._form = PromptForm()
        self._copy = CopyButton()
        self._view = TerminalView(
            out=self._out,
            color=config.ui.color,
            show_diff=config.ui.show_diff,
        )
        self._auto_copy = config.ui.auto_copy
        corrector.subscribe(self._view)

    @property
    def form(self) -> PromptForm:
        return self._form

    @property
    def copy_button(self) -> CopyButton:
        return self._copy

    def handle_key(self, key: str) -> bool:
        """Process one key. Returns False when the session should end."""
        before = self._form.value
        action = self._form.handle_key(key, submit_enabled=self._corrector.can_submit)

        if action is FormAction.QUIT:
            return False

        if action is FormAction.SUBMIT:
            snapshot = self._corrector.submit(before)
            if snapshot.status is StreamStatus.IDLE:
                self._view.notice("No model configured - set PROOFREAD_MODEL", ok=False)
            elif snapshot.status is StreamStatus.SUCCESS and self._auto_copy:
                self.copy()
            self._form.clear()
            self._write_prompt()
            return True

        if action is FormAction.COPY:
            self.copy()
            self._write_prompt(self._form.value)
            return True

        self._echo(before, self._form.value)
        return True

    def copy(self) -> None:
        # Copies whatever is shown, an error message included
        response = self._corrector.response
        if not response:
            self._view.notice("Nothing to copy yet", ok=False)
            return
        if not self._copy.enabled:
            return
        if self._copy.click(response):
            self._view.notice(self._copy.label)
        else:
            self._view.notice("Copy failed", ok=False)

    def _echo(self, before: str, after: str) -> None:
        if after.startswith(before):
            self._write(after[len(before):])
        elif before.startswith(after) and len(before) - len(after) == 1:
            if before[-1] == "\n":
                self._write_prompt(after)
            else:
                self._write("\b \b")
        else:
            self._write_prompt(after)

    def _write_prompt(self, value: str = "") -> None:
        self._write("\n" + PROMPT_MARK + value)

    def _write(self, text: str) -> None:
        self._out.write(text)
        self._out.flush()

    def run(self, fd: Optional[int] = None) -> int:
        """Run until the user quits. Returns a process exit code."""
        self._write(f"\n  {C_BOLD}Local Proofread{C_RESET}  {C_DIM}{self._corrector.backend.name} · "
                    f"{self._corrector.model or 'no model'}{C_RESET}\n")
        self._write(f"  {C_DIM}{FORM_HINT}{C_RESET}\n")

        with raw_terminal(fd) as raw_fd:
            self._write_prompt()
            for key in iter_keys(raw_fd):
                if not self.handle_key(key):
                    break
        self._copy.cancel()
        self._write("\n")
        return 0


def main() -> int:
    """Start an interactive session with the configured backend."""
    if not sys.stdin.isatty():
        log("Interactive mode needs a terminal; use 'proofread fix' for pipes", "ERR")
        return 1

    config = get_config()
    try:
        corrector = Corrector.from_config(config)
    except ValueError as e:
        log(str(e), "ERR")
        return 1

    # Readiness is only reported; the form still opens if the server is down
    corrector.backend.start()

    try:
        return Session(corrector, config).run()
    finally:
        corrector.close()
