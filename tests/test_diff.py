# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""
Unit tests for the word-level diff and its renderers.

Pure functions only; no backend or terminal involved.
"""

import pytest

from proofread.diff import (
    Change,
    corrected_text,
    diff_stats,
    diff_words,
    original_text,
    render_ansi,
    render_html,
    tokenize,
)
from proofread.utils import C_GREEN, C_RED, C_STRIKE


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------

class TestTokenize:
    def test_words_whitespace_and_punctuation(self):
        assert tokenize("Hi,  you.") == ["Hi", ",", "  ", "you", "."]

    def test_contraction_is_one_token(self):
        assert tokenize("doesn't") == ["doesn't"]

    def test_tokens_cover_input(self):
        text = "Tabs\tand\nnewlines -- plus \"quotes\" & émigré"
        assert "".join(tokenize(text)) == text


# ---------------------------------------------------------------------------
# diff_words
# ---------------------------------------------------------------------------

class TestDiffWords:
    def test_grammar_example(self):
        changes = diff_words("she dont like it", "She doesn't like it.")
        removed = [c.value for c in changes if c.removed]
        added = [c.value for c in changes if c.added]
        unchanged = "".join(c.value for c in changes if not c.added and not c.removed)

        assert "dont" in removed
        assert "doesn't" in added
        assert "it" in unchanged.split()
        assert "." in added

    def test_comparison_is_case_sensitive(self):
        changes = diff_words("she", "She")
        assert changes == (Change("she", removed=True), Change("She", added=True))

    def test_identical_text_is_one_unchanged_segment(self):
        assert diff_words("All good here.", "All good here.") == (Change("All good here."),)

    def test_both_empty(self):
        assert diff_words("", "") == ()

    def test_empty_original_is_pure_addition(self):
        assert diff_words("", "Hello.") == (Change("Hello.", added=True),)

    def test_empty_correction_is_pure_removal(self):
        assert diff_words("Hello.", "") == (Change("Hello.", removed=True),)

    def test_removed_comes_before_added(self):
        changes = diff_words("a cat", "a dog")
        kinds = [c.kind for c in changes]
        assert kinds == ["unchanged", "removed", "added"]

    def test_adjacent_segments_are_merged(self):
        changes = diff_words("x", "x y z")
        assert changes == (Change("x"), Change(" y z", added=True))

    def test_flags_are_mutually_exclusive(self):
        for change in diff_words("their going too the store", "They're going to the store."):
            assert not (change.added and change.removed)

    @pytest.mark.parametrize("original, corrected", [
        ("she dont like it", "She doesn't like it."),
        ("i has   two  spaces\nand a newline", "I have two spaces\nand a newline."),
        ("", "Brand new text"),
        ("Deleted entirely", ""),
        ("their going too the store", "They're going to the store."),
        ("  leading and trailing  ", "Leading and trailing."),
    ])
    def test_round_trip(self, original, corrected):
        changes = diff_words(original, corrected)
        assert original_text(changes) == original
        assert corrected_text(changes) == corrected


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------

class TestDiffStats:
    def test_counts_words_not_punctuation(self):
        stats = diff_stats(diff_words("she dont like it", "She doesn't like it."))
        assert stats.added == 2      # She, doesn't
        assert stats.removed == 2    # she, dont

    def test_no_changes(self):
        assert diff_stats(diff_words("same", "same")) == (0, 0)


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------

class TestRenderAnsi:
    def test_styles_added_and_removed(self):
        out = render_ansi(diff_words("a cat", "a dog"))
        assert f"{C_RED}{C_STRIKE}cat" in out
        assert f"{C_GREEN}" in out and "dog" in out

    def test_plain_markers_without_color(self):
        out = render_ansi(diff_words("a cat", "a dog"), color=False)
        assert out == "a [-cat-]{+dog+}"

    def test_unchanged_text_is_plain(self):
        assert render_ansi((Change("hello"),)) == "hello"


class TestRenderHtml:
    def test_uses_ins_and_del(self):
        out = render_html(diff_words("a cat", "a dog"))
        assert '<del class="diff-removed">cat</del>' in out
        assert '<ins class="diff-added">dog</ins>' in out

    def test_escapes_markup(self):
        out = render_html((Change("<b>&</b>", added=True),))
        assert "&lt;b&gt;&amp;&lt;/b&gt;" in out
        assert "<b>" not in out
