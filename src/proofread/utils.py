# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""
Utility functions for Local Proofread.

Includes logging, console colors and helper functions.
"""

import sys
from datetime import datetime

# Console colors
C_RESET = "\033[0m"
C_BOLD = "\033[1m"
C_DIM = "\033[2m"
C_UNDERLINE = "\033[4m"
C_STRIKE = "\033[9m"
C_RED = "\033[91m"
C_GREEN = "\033[92m"
C_YELLOW = "\033[93m"
C_CYAN = "\033[96m"
C_MAGENTA = "\033[95m"

# Log level styles
LOG_STYLES = {
    "INFO": (C_DIM, "›"),
    "OK": (C_GREEN, "✓"),
    "WARN": (C_YELLOW, "⚠"),
    "ERR": (C_RED, "✗"),
    "AI": (C_MAGENTA, "✦"),
    "APP": (C_CYAN, "◆"),
}

# Timeout values (seconds)
CLIPBOARD_TIMEOUT = 5
SERVICE_CHECK_TIMEOUT = 2

# Copy button returns to "Copy" after this many seconds
COPY_RESET_DELAY = 2.0

# Display truncation
LOG_TRUNCATE = 60


def log(msg: str, level: str = "INFO"):
    """Print a timestamped, colored log message."""
    ts = datetime.now().strftime("%H:%M:%S")
    color, sym = LOG_STYLES.get(level, (C_DIM, "›"))
    print(f"  {C_DIM}{ts}{C_RESET}  {color}{sym}{C_RESET}  {msg}", file=sys.stderr)


def truncate(text: str, length: int = LOG_TRUNCATE) -> str:
    """Truncate text with ellipsis if too long."""
    if len(text) > length:
        return text[:length] + "..."
    return text


def paint(text: str, *styles: str, enabled: bool = True) -> str:
    """Wrap text in ANSI styles, or return it unchanged when disabled."""
    if not enabled or not styles or not text:
        return text
    return f"{''.join(styles)}{text}{C_RESET}"
