# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""
Streaming response consumer.

Corrector owns one request at a time: it pulls chunks from the backend,
drops the model's <think>...</think> section, keeps the visible text in
a single accumulator and pushes an immutable snapshot to every observer
after each visible chunk. When the stream ends the word diff is computed
once against the final text.

Usage:
    from proofread.stream import Corrector

    corrector = Corrector.from_config()
    corrector.subscribe(print)
    snapshot = corrector.submit("she dont like it")
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from .backends import StreamingBackend, create_backend
from .config import Config, get_config
from .diff import Change, diff_words
from .utils import log, truncate

THINK_OPEN = "<think>"
THINK_CLOSE = "</think>"


class StreamStatus(str, Enum):
    """Request lifecycle. SUCCESS and ERROR are terminal until the next submit."""
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


class SectionState(Enum):
    VISIBLE = "visible"
    SUPPRESSED = "suppressed"


class ThinkingFilter:
    """
    Two-state filter over the chunk stream.

    Sentinels only count when a chunk is exactly "<think>" or "</think>";
    they are never passed through. Starts visible.
    """

    def __init__(self):
        self.state = SectionState.VISIBLE

    def feed(self, chunk: str) -> Optional[str]:
        """Return the chunk if it belongs to visible output, else None."""
        if chunk == THINK_OPEN:
            self.state = SectionState.SUPPRESSED
            return None
        if chunk == THINK_CLOSE:
            self.state = SectionState.VISIBLE
            return None
        if self.state is SectionState.SUPPRESSED:
            return None
        return chunk


@dataclass(frozen=True)
class CorrectionSnapshot:
    """What the view needs to draw one frame."""
    status: StreamStatus = StreamStatus.IDLE
    prompt: str = ""
    response: str = ""
    diff: Tuple[Change, ...] = ()
    error: Optional[str] = None

    @property
    def submit_enabled(self) -> bool:
        return self.status is not StreamStatus.PENDING


Observer = Callable[[CorrectionSnapshot], None]


class Corrector:
    """Single-request streaming grammar corrector."""

    def __init__(self, backend: StreamingBackend, model: str, system_prompt: str = ""):
        self._backend = backend
        self._model = model
        self._system_prompt = system_prompt
        self._observers: List[Observer] = []

        self._status = StreamStatus.IDLE
        self._prompt = ""
        self._raw = ""
        self._response = ""
        self._diff: Tuple[Change, ...] = ()
        self._error: Optional[str] = None

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> "Corrector":
        """Build a corrector for the configured backend and model."""
        config = config or get_config()
        backend = create_backend(config.grammar.backend)
        return cls(backend, config.grammar.model, config.grammar.system_prompt)

    # ─────────────────────────────────────────────────────────────────
    # State
    # ─────────────────────────────────────────────────────────────────

    @property
    def status(self) -> StreamStatus:
        return self._status

    @property
    def response(self) -> str:
        return self._response

    @property
    def diff(self) -> Tuple[Change, ...]:
        return self._diff

    @property
    def backend(self) -> StreamingBackend:
        return self._backend

    @property
    def model(self) -> str:
        return self._model

    @property
    def can_submit(self) -> bool:
        """The submit control is enabled iff no request is in flight."""
        return self._status is not StreamStatus.PENDING

    def snapshot(self) -> CorrectionSnapshot:
        return CorrectionSnapshot(
            status=self._status,
            prompt=self._prompt,
            response=self._response,
            diff=self._diff,
            error=self._error,
        )

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer. Returns a function that unregisters it."""
        self._observers.append(observer)

        def unsubscribe():
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def close(self) -> None:
        self._backend.close()

    # ─────────────────────────────────────────────────────────────────
    # Submission
    # ─────────────────────────────────────────────────────────────────

    def submit(self, prompt: str) -> CorrectionSnapshot:
        """
        Correct prompt, publishing progress to observers.

        Does nothing when no model is configured or a request is already
        pending. Any failure ends in ERROR with the exception message as
        the response.
        """
        if not self._model:
            log("No model configured - set PROOFREAD_MODEL or [grammar] model", "INFO")
            return self.snapshot()

        if not self.can_submit:
            log("Correction already in progress", "WARN")
            return self.snapshot()

        try:
            self._prompt = prompt
            self._raw = ""
            self._response = ""
            self._diff = ()
            self._error = None
            self._status = StreamStatus.PENDING
            self._publish()

            log(f"{self._backend.name}: correcting {len(prompt)} chars with {self._model}", "AI")

            thinking = ThinkingFilter()
            for chunk in self._backend.stream(prompt, self._system_prompt, self._model):
                visible = thinking.feed(chunk)
                if visible is None:
                    continue
                self._raw += visible
                self._response = self._raw.strip()
                self._publish()

            self._diff = diff_words(prompt, self._response)
            self._status = StreamStatus.SUCCESS
            log(f"Correction complete: {len(prompt)} -> {len(self._response)} chars", "OK")
            self._publish()

        except Exception as e:
            message = str(e) or type(e).__name__
            log(f"Correction failed: {truncate(message)}", "ERR")
            self._status = StreamStatus.ERROR
            self._raw = ""
            self._response = message
            self._diff = ()
            self._error = message
            self._publish()

        return self.snapshot()

    def _publish(self) -> None:
        snapshot = self.snapshot()
        for observer in list(self._observers):
            observer(snapshot)
