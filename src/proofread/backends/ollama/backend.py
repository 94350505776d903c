# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""
Ollama backend implementation for streaming grammar correction.

Reads newline-delimited JSON from /api/generate and yields each
"response" fragment as it arrives.
"""

import json
from typing import Iterator

import requests

from ..base import BackendError, StreamingBackend
from ...config import get_config
from ...prompts import get_ollama_payload
from ...utils import log, SERVICE_CHECK_TIMEOUT


class OllamaBackend(StreamingBackend):
    """Streaming backend using a local Ollama server."""

    @property
    def name(self) -> str:
        return "Ollama"

    def running(self) -> bool:
        """Check if Ollama server is running."""
        config = get_config()

        if not self._is_local_url(config.ollama.host):
            log("Ollama host must be localhost or LAN", "ERR")
            return False

        try:
            r = self._session.get(config.ollama.host, timeout=SERVICE_CHECK_TIMEOUT)
            return r.status_code == 200
        except requests.RequestException:
            return False

    def start(self) -> bool:
        """Check Ollama availability."""
        if self.running():
            config = get_config()
            log(f"Ollama ready ({config.grammar.model or 'no model set'})", "OK")
            return True

        log("Ollama not running - start with: ollama serve", "WARN")
        return False

    def stream(self, prompt: str, system: str, model: str) -> Iterator[str]:
        """Stream a completion from /api/generate."""
        config = get_config()

        if not self._is_local_url(config.ollama.url):
            raise BackendError("Ollama host must be localhost or LAN")

        payload = get_ollama_payload(model, system, prompt)
        payload["keep_alive"] = config.ollama.keep_alive

        options = {"temperature": 0.2}
        # Only set num_ctx if specified (0 = use model default)
        if config.ollama.num_ctx > 0:
            options["num_ctx"] = config.ollama.num_ctx
        payload["options"] = options

        r = self._post_stream(config.ollama.url, payload, self._get_timeout(config.ollama.timeout))
        # Ollama always sends UTF-8 NDJSON
        r.encoding = "utf-8"
        with r:
            try:
                for line in r.iter_lines(decode_unicode=True):
                    if not line:
                        continue
                    try:
                        data = json.loads(line)
                    except ValueError:
                        raise BackendError(f"Malformed stream line: {self._truncate_error(line)}")

                    if data.get("error"):
                        raise BackendError(self._truncate_error(data["error"]))

                    chunk = data.get("response", "")
                    if chunk:
                        yield chunk

                    if data.get("done"):
                        return
            except requests.exceptions.RequestException as e:
                raise BackendError(f"Ollama stream interrupted: {self._truncate_error(e)}")
