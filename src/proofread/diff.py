# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""
Word-level diff between the original and corrected text.

Text is split into words, single punctuation marks and whitespace runs,
then aligned with difflib. Every character of both inputs ends up in
exactly one segment, so either side can be rebuilt from the result:

    original  == "".join(c.value for c in changes if not c.added)
    corrected == "".join(c.value for c in changes if not c.removed)

Comparison is case-sensitive: "she" -> "She" is a removal plus an addition.
"""

import html
import re
from dataclasses import dataclass
from difflib import SequenceMatcher
from typing import List, NamedTuple, Sequence, Tuple

from .utils import C_GREEN, C_RED, C_STRIKE, C_UNDERLINE, paint

# Words keep inner apostrophes ("doesn't"), punctuation stands alone
TOKEN_RE = re.compile(r"\s+|\w+(?:['’]\w+)*|[^\w\s]")
WORD_RE = re.compile(r"\w")


@dataclass(frozen=True)
class Change:
    """One diff segment. Neither flag set means unchanged."""
    value: str
    added: bool = False
    removed: bool = False

    @property
    def kind(self) -> str:
        if self.added:
            return "added"
        if self.removed:
            return "removed"
        return "unchanged"


class DiffStats(NamedTuple):
    added: int
    removed: int


def tokenize(text: str) -> List[str]:
    """Split text into word, punctuation and whitespace tokens."""
    return TOKEN_RE.findall(text)


def _append(changes: List[Change], value: str, added: bool = False, removed: bool = False):
    """Append a segment, merging it into the previous one when the kind matches."""
    if not value:
        return
    if changes:
        last = changes[-1]
        if last.added == added and last.removed == removed:
            changes[-1] = Change(last.value + value, added, removed)
            return
    changes.append(Change(value, added, removed))


def diff_words(original: str, corrected: str) -> Tuple[Change, ...]:
    """
    Compute a word-level diff.

    Args:
        original: Text as the user entered it.
        corrected: Final model output.

    Returns:
        Ordered segments; within a replacement the removed text comes
        before the added text.
    """
    a = tokenize(original)
    b = tokenize(corrected)
    matcher = SequenceMatcher(None, a, b, autojunk=False)

    changes: List[Change] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            _append(changes, "".join(a[i1:i2]))
            continue
        if tag in ("delete", "replace"):
            _append(changes, "".join(a[i1:i2]), removed=True)
        if tag in ("insert", "replace"):
            _append(changes, "".join(b[j1:j2]), added=True)

    return tuple(changes)


def original_text(changes: Sequence[Change]) -> str:
    """Rebuild the original text from a diff."""
    return "".join(c.value for c in changes if not c.added)


def corrected_text(changes: Sequence[Change]) -> str:
    """Rebuild the corrected text from a diff."""
    return "".join(c.value for c in changes if not c.removed)


def diff_stats(changes: Sequence[Change]) -> DiffStats:
    """Count words added and removed."""
    added = removed = 0
    for change in changes:
        words = sum(1 for token in tokenize(change.value) if WORD_RE.match(token))
        if change.added:
            added += words
        elif change.removed:
            removed += words
    return DiffStats(added, removed)


# ─────────────────────────────────────────────────────────────────
# Renderers
# ─────────────────────────────────────────────────────────────────

def render_ansi(changes: Sequence[Change], color: bool = True) -> str:
    """
    Render a diff for the terminal.

    With color, insertions are green and underlined and deletions red
    with strikethrough. Without color, wdiff-style markers are used:
    [-removed-] and {+added+}.
    """
    parts = []
    for change in changes:
        if change.added:
            if color:
                parts.append(paint(change.value, C_GREEN, C_UNDERLINE))
            else:
                parts.append(f"{{+{change.value}+}}")
        elif change.removed:
            if color:
                parts.append(paint(change.value, C_RED, C_STRIKE))
            else:
                parts.append(f"[-{change.value}-]")
        else:
            parts.append(change.value)
    return "".join(parts)


def render_html(changes: Sequence[Change]) -> str:
    """Render a diff as HTML fragments using <ins> and <del>."""
    parts = []
    for change in changes:
        value = html.escape(change.value)
        if change.added:
            parts.append(f'<ins class="diff-added">{value}</ins>')
        elif change.removed:
            parts.append(f'<del class="diff-removed">{value}</del>')
        else:
            parts.append(f"<span>{value}</span>")
    return "".join(parts)
