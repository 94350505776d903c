# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""
Unit tests for cli.py command dispatch.

Backends are replaced with canned streams; output is captured with
capsys. stdout is not a TTY under pytest, so color and progress are off.
"""

import io
from unittest.mock import patch

import pytest

from proofread import config as cfg_mod
from proofread.backends import StreamingBackend
from proofread.cli import cli_main


class CannedBackend(StreamingBackend):
    def __init__(self, chunks=()):
        super().__init__()
        self.chunks = list(chunks)

    @property
    def name(self) -> str:
        return "Canned"

    def running(self) -> bool:
        return True

    def stream(self, prompt, system, model):
        return iter(self.chunks)


@pytest.fixture
def canned(monkeypatch):
    """Configure a model and route the corrector to a canned backend."""
    monkeypatch.setenv("PROOFREAD_MODEL", "test-model")
    cfg_mod.reset_config()
    backend = CannedBackend(["<think>", "reasoning", "</think>", "She", " doesn't", " like", " it."])
    with patch("proofread.stream.create_backend", return_value=backend):
        yield backend


# ---------------------------------------------------------------------------
# fix
# ---------------------------------------------------------------------------

class TestFix:
    def test_prints_correction_only(self, canned, capsys):
        assert cli_main(["fix", "--no-diff", "she", "dont", "like", "it"]) == 0
        assert capsys.readouterr().out == "She doesn't like it.\n"

    def test_piped_output_is_correction_only(self, canned, capsys):
        assert cli_main(["fix", "she dont like it"]) == 0
        assert capsys.readouterr().out == "She doesn't like it.\n"

    def test_terminal_shows_diff(self, canned, capsys, monkeypatch):
        monkeypatch.setattr("sys.stdout.isatty", lambda: True)
        assert cli_main(["fix", "she dont like it"]) == 0
        out = capsys.readouterr().out
        assert "Changes" in out
        assert "doesn't" in out

    def test_html_diff(self, canned, capsys):
        assert cli_main(["fix", "--html", "she dont like it"]) == 0
        assert '<ins class="diff-added">doesn&#x27;t</ins>' in capsys.readouterr().out

    def test_reads_stdin(self, canned, capsys, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("she dont like it\n"))
        assert cli_main(["fix", "--no-diff"]) == 0
        assert capsys.readouterr().out == "She doesn't like it.\n"

    def test_piped_stdin_without_command(self, canned, capsys, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("she dont like it"))
        assert cli_main([]) == 0
        assert "She doesn't like it." in capsys.readouterr().out

    def test_copy_flag(self, canned):
        with patch("proofread.cli.copy_to_clipboard", return_value=True) as copy:
            assert cli_main(["fix", "--copy", "--no-diff", "x"]) == 0
        copy.assert_called_once_with("She doesn't like it.")

    def test_blank_input(self, canned, capsys, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("   \n"))
        assert cli_main(["fix"]) == 1

    def test_no_model(self, capsys):
        assert cli_main(["fix", "some text"]) == 1
        assert "No model configured" in capsys.readouterr().err

    def test_backend_error_exits_non_zero(self, canned, capsys):
        def refuse(prompt, system, model):
            raise RuntimeError("Canned not responding")

        canned.stream = refuse
        assert cli_main(["fix", "text"]) == 1
        captured = capsys.readouterr()
        assert "Canned not responding" in captured.err
        assert "Canned not responding" not in captured.out

    def test_unknown_option(self):
        with pytest.raises(SystemExit) as exc:
            cli_main(["fix", "--shout", "text"])
        assert exc.value.code == 2


# ---------------------------------------------------------------------------
# diff
# ---------------------------------------------------------------------------

class TestDiff:
    def _files(self, tmp_path, a, b):
        first = tmp_path / "a.txt"
        second = tmp_path / "b.txt"
        first.write_text(a, encoding="utf-8")
        second.write_text(b, encoding="utf-8")
        return str(first), str(second)

    def test_plain_diff(self, tmp_path, capsys):
        a, b = self._files(tmp_path, "a cat", "a dog")
        assert cli_main(["diff", a, b]) == 0
        captured = capsys.readouterr()
        assert captured.out == "a [-cat-]{+dog+}\n"
        assert "+1 -1 words" in captured.err

    def test_html_diff(self, tmp_path, capsys):
        a, b = self._files(tmp_path, "a cat", "a dog")
        assert cli_main(["diff", "--html", a, b]) == 0
        assert '<del class="diff-removed">cat</del>' in capsys.readouterr().out

    def test_wrong_argument_count(self, tmp_path):
        assert cli_main(["diff", "only-one"]) == 2

    def test_missing_file(self, tmp_path, capsys):
        a, _ = self._files(tmp_path, "x", "y")
        assert cli_main(["diff", a, str(tmp_path / "missing.txt")]) == 1
        assert "Cannot read" in capsys.readouterr().err


# ---------------------------------------------------------------------------
# Setup commands
# ---------------------------------------------------------------------------

class TestBackendCommand:
    def test_lists_backends(self, capsys):
        assert cli_main(["backend"]) == 0
        out = capsys.readouterr().out
        assert "ollama" in out
        assert "lm_studio" in out

    def test_switches_backend(self, isolated_config, capsys):
        assert cli_main(["backend", "lm_studio"]) == 0
        assert cfg_mod.get_config().grammar.backend == "lm_studio"
        assert 'backend = "lm_studio"' in isolated_config.read_text()

    def test_same_backend(self, capsys):
        assert cli_main(["backend", "ollama"]) == 0
        assert "Already using" in capsys.readouterr().out

    def test_unknown_backend(self, capsys):
        assert cli_main(["backend", "cloud"]) == 1
        assert "Unknown backend" in capsys.readouterr().err


class TestConfigCommand:
    def test_path(self, isolated_config, capsys):
        assert cli_main(["config", "path"]) == 0
        assert capsys.readouterr().out.strip() == str(isolated_config)

    def test_show(self, monkeypatch, capsys):
        monkeypatch.setenv("PROOFREAD_MODEL", "gemma3:4b")
        cfg_mod.reset_config()
        assert cli_main(["config"]) == 0
        out = capsys.readouterr().out
        assert "gemma3:4b" in out
        assert "http://localhost:11434" in out

    def test_unknown_subcommand(self, capsys):
        assert cli_main(["config", "edit"]) == 1


class TestStatusCommand:
    def test_reachable(self, capsys):
        with patch("proofread.backends.ollama.OllamaBackend.running", return_value=True):
            assert cli_main(["status"]) == 0
        out = capsys.readouterr().out
        assert "Reachable" in out
        assert "not set" in out

    def test_unreachable(self, capsys):
        with patch("proofread.backends.ollama.OllamaBackend.running", return_value=False):
            assert cli_main(["status"]) == 1
        assert "Unreachable" in capsys.readouterr().out


class TestDispatch:
    def test_help(self, capsys):
        assert cli_main(["help"]) == 0
        assert "Usage:" in capsys.readouterr().out

    def test_version(self, capsys):
        assert cli_main(["version"]) == 0
        assert capsys.readouterr().out.startswith("local-proofread ")

    def test_unknown_command(self, capsys):
        assert cli_main(["frobnicate"]) == 1
        assert "Unknown command" in capsys.readouterr().err
