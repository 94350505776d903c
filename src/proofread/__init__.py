# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""
Local Proofread - streaming grammar correction with a word diff

Type text -> a local model corrects it -> the fix streams in -> the
changes are shown word by word. All processing runs locally.
"""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("local-proofread")
except PackageNotFoundError:
    __version__ = "0.0.0"  # Not installed

from .app import main

__all__ = ["main", "__version__"]
