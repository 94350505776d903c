# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""LM Studio backend for streaming grammar correction."""

from .backend import LMStudioBackend

__all__ = ["LMStudioBackend"]
