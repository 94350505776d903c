# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""
Base streaming backend interface for Local Proofread.

All backends must inherit from StreamingBackend and implement the
required methods. stream() yields raw text chunks exactly as the model
emits them; filtering of thinking sections happens in the consumer.
"""

import ipaddress
from abc import ABC, abstractmethod
from typing import Iterator, Tuple, Union
from urllib.parse import urlparse

import requests

# Shared constants
ERROR_TRUNCATE_LENGTH = 80  # Consistent error message truncation
DEFAULT_CONNECT_TIMEOUT = 10  # Default connection timeout in seconds


class BackendError(RuntimeError):
    """Raised when a backend cannot produce a stream."""
    pass


class StreamingBackend(ABC):
    """
    Abstract base class for streaming grammar backends.

    Provides shared request helpers and defines the interface that all
    backends must implement.
    """

    def __init__(self):
        self._session = requests.Session()

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of the backend."""
        pass

    @abstractmethod
    def running(self) -> bool:
        """Check if the backend service is available."""
        pass

    @abstractmethod
    def stream(self, prompt: str, system: str, model: str) -> Iterator[str]:
        """
        Stream a completion for prompt.

        Args:
            prompt: The user's text.
            system: System instruction ("" sends none).
            model: Model identifier.

        Yields:
            Text chunks in arrival order.

        Raises:
            BackendError: On connection, HTTP or protocol failures.
        """
        pass

    def start(self) -> bool:
        """
        Verify backend availability.

        Returns True if backend is ready, False otherwise.
        """
        return self.running()

    def close(self) -> None:
        """Clean up resources when shutting down."""
        try:
            self._session.close()
        except Exception:
            pass

    # ─────────────────────────────────────────────────────────────────
    # Shared utilities
    # ─────────────────────────────────────────────────────────────────

    def _get_timeout(self, timeout_config: int) -> Union[int, Tuple[int, None]]:
        """
        Get timeout value for requests.

        Args:
            timeout_config: Timeout from config (0 = unlimited read)

        Returns:
            Timeout value: (connect, read) if configured, or (connect, None) for unlimited read
        """
        if timeout_config > 0:
            return (DEFAULT_CONNECT_TIMEOUT, timeout_config)
        return (DEFAULT_CONNECT_TIMEOUT, None)  # (connect, read=unlimited)

    def _truncate_error(self, error) -> str:
        """Truncate error message to consistent length."""
        return str(error)[:ERROR_TRUNCATE_LENGTH]

    def _is_local_url(self, url: str) -> bool:
        """Check if URL points to localhost or the local network."""
        host = urlparse(url).hostname
        if not host:
            return False

        if host == "localhost":
            return True

        try:
            addr = ipaddress.ip_address(host)
        except ValueError:
            return False
        return addr.is_loopback or addr.is_private

    def _post_stream(self, url: str, payload: dict, timeout, **kwargs) -> requests.Response:
        """
        POST a streaming request and return the open response.

        Translates requests exceptions into BackendError with a short
        message suitable for display.
        """
        try:
            r = self._session.post(url, json=payload, stream=True, timeout=timeout, **kwargs)
            r.raise_for_status()
            return r
        except requests.exceptions.ConnectionError:
            raise BackendError(f"{self.name} not responding")
        except requests.exceptions.Timeout:
            raise BackendError(f"{self.name} timeout")
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "unknown"
            raise BackendError(f"HTTP error {status}: {self._response_detail(e.response)}")

    def _response_detail(self, response) -> str:
        """Best-effort short description of an error response body."""
        if response is None:
            return "no response"
        try:
            data = response.json()
        except ValueError:
            return self._truncate_error(response.text or response.reason)
        if isinstance(data, dict):
            error = data.get("error")
            if isinstance(error, dict):
                error = error.get("message")
            if error:
                return self._truncate_error(error)
        return self._truncate_error(response.reason)
