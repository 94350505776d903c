# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""
LM Studio backend implementation for streaming grammar correction.

Uses LM Studio's OpenAI-compatible chat completions endpoint with
server-sent events.
"""

import json
from typing import Iterator, Tuple

import requests

from ...config import get_config
from ...prompts import get_lm_studio_messages
from ...utils import SERVICE_CHECK_TIMEOUT, log
from ..base import BackendError, StreamingBackend

SSE_DATA_PREFIX = "data:"
SSE_DONE = "[DONE]"


class LMStudioBackend(StreamingBackend):
    """Streaming backend using LM Studio's OpenAI-compatible API."""

    @property
    def name(self) -> str:
        return "LM Studio"

    def running(self) -> bool:
        """Check if LM Studio server is running."""
        config = get_config()

        if not self._is_local_url(config.lm_studio.host):
            log("LM Studio host must be localhost or LAN", "ERR")
            return False

        try:
            r = self._session.get(self._models_url(), timeout=SERVICE_CHECK_TIMEOUT)
            return r.status_code == 200
        except requests.RequestException:
            return False

    def start(self) -> bool:
        """Check LM Studio availability and verify model."""
        if not self.running():
            log("LM Studio not running - start LM Studio and load a model", "WARN")
            return False

        model_ok, model_info = self._check_model()
        if model_ok:
            log(f"LM Studio ready ({model_info})", "OK")
            return True
        log(f"LM Studio: {model_info}", "WARN")
        return False

    def stream(self, prompt: str, system: str, model: str) -> Iterator[str]:
        """Stream a chat completion, yielding delta content."""
        config = get_config()

        if not self._is_local_url(config.lm_studio.url):
            raise BackendError("LM Studio host must be localhost or LAN")

        payload = {
            "model": model,
            "messages": get_lm_studio_messages(system, prompt),
            "temperature": 0.2,
            "max_tokens": config.lm_studio.max_tokens if config.lm_studio.max_tokens > 0 else 2048,
            "stream": True,
        }

        r = self._post_stream(
            config.lm_studio.url,
            payload,
            self._get_timeout(config.lm_studio.timeout),
            headers={"Authorization": "Bearer lm-studio"},
        )
        # text/event-stream carries no charset; the body is UTF-8
        r.encoding = "utf-8"
        with r:
            try:
                for line in r.iter_lines(decode_unicode=True):
                    if not line or not line.startswith(SSE_DATA_PREFIX):
                        continue
                    data = line[len(SSE_DATA_PREFIX):].strip()
                    if data == SSE_DONE:
                        return

                    try:
                        event = json.loads(data)
                    except ValueError:
                        raise BackendError(f"Malformed stream event: {self._truncate_error(data)}")

                    if event.get("error"):
                        raise BackendError(self._response_error(event["error"]))

                    choices = event.get("choices") or []
                    if not choices:
                        continue
                    chunk = (choices[0].get("delta") or {}).get("content")
                    if chunk:
                        yield chunk
            except requests.exceptions.RequestException as e:
                raise BackendError(f"LM Studio stream interrupted: {self._truncate_error(e)}")

    # ─────────────────────────────────────────────────────────────────
    # Private methods
    # ─────────────────────────────────────────────────────────────────

    def _models_url(self) -> str:
        return get_config().lm_studio.host.rstrip("/") + "/v1/models"

    def _response_error(self, error) -> str:
        if isinstance(error, dict):
            error = error.get("message", error)
        return self._truncate_error(error)

    def _check_model(self) -> Tuple[bool, str]:
        """Check if the configured model is loaded."""
        config = get_config()

        try:
            r = self._session.get(self._models_url(), timeout=SERVICE_CHECK_TIMEOUT)
            if r.status_code != 200:
                return False, "Cannot list models"
            models = r.json().get("data", [])
        except (requests.RequestException, ValueError) as e:
            return False, self._truncate_error(e)

        if not models:
            return False, "No models loaded - load a model in LM Studio"

        model_ids = [m.get("id", "") for m in models]
        if not config.grammar.model:
            return False, f"No model configured. Available: {', '.join(model_ids[:3])}"
        if config.grammar.model not in model_ids:
            return False, f"Model '{config.grammar.model}' not found. Available: {', '.join(model_ids[:3])}"
        return True, config.grammar.model
