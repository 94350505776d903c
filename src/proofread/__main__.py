# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""Allow running as: python -m proofread"""

from .cli import run

if __name__ == "__main__":
    run()
