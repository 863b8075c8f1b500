"""Tests for diff preview and approval."""

from unittest.mock import patch

from block_editor.diff_display import (
    _format_rich_diff, compute_diff, format_colored_diff, prompt_diff_approval,
)


def test_compute_diff_unchanged():
    assert compute_diff("a.txt", "x\ny\n", "x\ny\n") is None


def test_compute_diff_headers_and_lines():
    diff = compute_diff("src/a.txt", "x\ny\n", "x\nY\n")

    assert diff.splitlines()[0] == "--- a/src/a.txt"
    assert diff.splitlines()[1] == "+++ b/src/a.txt"
    assert "-y" in diff.splitlines()
    assert "+Y" in diff.splitlines()


def test_colored_diff():
    colored = format_colored_diff("--- a\n+++ b\n@@ -1 +1 @@\n-old\n+new\n same")
    lines = colored.splitlines()

    assert lines[2] == "\033[36m@@ -1 +1 @@\033[0m"
    assert lines[3] == "\033[31m-old\033[0m"
    assert lines[4] == "\033[32m+new\033[0m"
    assert lines[5] == " same"


def test_rich_markup_escapes_brackets():
    assert _format_rich_diff("+x[0]") == "[green]+x\\[0][/green]"


class TestApproval:
    def test_nothing_to_review(self):
        assert prompt_diff_approval("a.txt", None) is True

    def test_auto_approves(self):
        assert prompt_diff_approval("a.txt", "-a\n+b", auto=True) is True

    def test_textual_result_is_used(self):
        with patch("block_editor.diff_display._textual_diff_approval",
                   return_value=False) as viewer:
            assert prompt_diff_approval("a.txt", "-a\n+b") is False
        viewer.assert_called_once_with("a.txt", "-a\n+b")

    def test_console_fallback_when_viewer_fails(self):
        with patch("block_editor.diff_display._textual_diff_approval",
                   side_effect=RuntimeError("no terminal")), \
             patch("builtins.input", side_effect=["maybe", "a"]):
            assert prompt_diff_approval("a.txt", "-a\n+b") is True

    def test_console_eof_rejects(self):
        with patch("block_editor.diff_display._textual_diff_approval",
                   side_effect=RuntimeError("no terminal")), \
             patch("builtins.input", side_effect=EOFError):
            assert prompt_diff_approval("a.txt", "-a\n+b") is False
