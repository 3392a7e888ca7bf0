"""
Tests for prompt building, completion sanitizing and remediation application.
"""

import pytest
import os
import sys
from unittest.mock import patch

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from securityagent.core.findings import Category, FileResult
from securityagent.remediation.prompts import (
    RemediationPromptBuilder, ROLE_LINE, CATEGORY_DIRECTIVES,
)
from securityagent.remediation.sanitizer import CompletionSanitizer, sanitize_completion
from securityagent.remediation.applier import RemediationApplier, restore_trailing_newline


class TestPromptBuilder:
    """Tests for remediation prompts."""

    def test_prompt_contains_directives_and_code(self):
        content = 'const t = "mysecret";\n'
        prompt = RemediationPromptBuilder().build("app.js", content, {Category.SECRET_LIKE})

        text = prompt.text
        assert text.startswith(ROLE_LINE)
        assert CATEGORY_DIRECTIVES[Category.SECRET_LIKE] in text
        assert CATEGORY_DIRECTIVES[Category.SQL_INJECTION] not in text
        assert "File: app.js" in text
        assert "Return ONLY the complete corrected source code" in text
        assert text.endswith(content)

    def test_directives_in_canonical_order(self):
        prompt = RemediationPromptBuilder().build(
            "app.js", "x", [Category.SECRET_LIKE, Category.XSS, Category.SQL_INJECTION],
        )
        text = prompt.text
        sql = text.index(CATEGORY_DIRECTIVES[Category.SQL_INJECTION])
        xss = text.index(CATEGORY_DIRECTIVES[Category.XSS])
        secret = text.index(CATEGORY_DIRECTIVES[Category.SECRET_LIKE])
        assert sql < xss < secret

    def test_build_is_deterministic(self):
        builder = RemediationPromptBuilder()
        categories = {Category.XSS, Category.COMMAND_INJECTION}
        assert builder.build("a.js", "code", categories) == builder.build("a.js", "code", categories)

    def test_every_category_has_a_directive(self):
        assert set(CATEGORY_DIRECTIVES) == set(Category)


class TestSanitizer:
    """Tests for stripping markdown fences from completions."""

    @pytest.mark.parametrize("raw,expected", [
        ("```js\nfixed();\n```", "fixed();"),
        ("```javascript\nconst a = 1;\nconst b = 2;\n```\n", "const a = 1;\nconst b = 2;"),
        ("```\ncode\n```", "code"),
        ("```python3\nx = 1\n```", "x = 1"),
        ("  plain code  \n", "plain code"),
        ("```\n```", ""),
        ("", ""),
    ])
    def test_sanitize(self, raw, expected):
        assert sanitize_completion(raw) == expected

    def test_inner_fences_removed(self):
        result = sanitize_completion("a();\n```js\nb();\n```\nc();")
        assert "```" not in result
        assert result.startswith("a();")
        assert result.endswith("c();")

    def test_idempotent(self):
        raw = "```js\nconst q = db.query(sql, [id]);\n```"
        once = CompletionSanitizer().sanitize(raw)
        assert CompletionSanitizer().sanitize(once) == once

    def test_none_is_empty(self):
        assert sanitize_completion(None) == ""


class TestApplier:
    """Tests for the acceptance policy and atomic write."""

    ORIGINAL = 'const t = "mysecret";\n'
    FIXED = "const t = process.env.APP_KEY;\n"

    def test_empty_artifact_rejected(self, write_file):
        path = write_file("app.js", self.ORIGINAL)
        outcome = RemediationApplier().apply(str(path), self.ORIGINAL, "")

        assert outcome.result == FileResult.FLAGGED_UNFIXED
        assert path.read_text(encoding="utf-8") == self.ORIGINAL

    def test_identical_artifact_rejected(self, write_file):
        path = write_file("app.js", self.ORIGINAL)
        with patch("securityagent.remediation.applier.os.replace") as replace:
            outcome = RemediationApplier().apply(str(path), self.ORIGINAL, self.ORIGINAL)

        assert outcome.result == FileResult.FLAGGED_UNFIXED
        replace.assert_not_called()

    def test_accepted_artifact_written(self, write_file):
        path = write_file("app.js", self.ORIGINAL)
        outcome = RemediationApplier().apply(
            str(path), self.ORIGINAL, self.FIXED,
            frozenset({Category.SECRET_LIKE}), display_path="app.js",
        )

        assert outcome.result == FileResult.FLAGGED_FIXED
        assert outcome.file_path == "app.js"
        assert outcome.categories == frozenset({Category.SECRET_LIKE})
        assert path.read_text(encoding="utf-8") == self.FIXED
        assert "-const t = \"mysecret\";" in outcome.diff
        assert "+const t = process.env.APP_KEY;" in outcome.diff

    def test_no_temp_files_left(self, tmp_path, write_file):
        path = write_file("app.js", self.ORIGINAL)
        RemediationApplier().apply(str(path), self.ORIGINAL, self.FIXED)
        assert sorted(os.listdir(tmp_path)) == ["app.js"]

    def test_file_mode_preserved(self, write_file):
        path = write_file("run.js", self.ORIGINAL)
        os.chmod(path, 0o755)
        RemediationApplier().apply(str(path), self.ORIGINAL, self.FIXED)
        assert os.stat(path).st_mode & 0o777 == 0o755

    def test_dry_run_does_not_write(self, write_file):
        path = write_file("app.js", self.ORIGINAL)
        outcome = RemediationApplier(dry_run=True).apply(str(path), self.ORIGINAL, self.FIXED)

        assert outcome.result == FileResult.FLAGGED_UNFIXED
        assert outcome.message == "dry run"
        assert outcome.diff
        assert path.read_text(encoding="utf-8") == self.ORIGINAL

    def test_write_failure_is_error(self, tmp_path, write_file):
        path = write_file("app.js", self.ORIGINAL)
        with patch("securityagent.remediation.applier.os.replace", side_effect=OSError("disk full")):
            outcome = RemediationApplier().apply(str(path), self.ORIGINAL, self.FIXED)

        assert outcome.result == FileResult.ERROR
        assert "disk full" in outcome.message
        assert path.read_text(encoding="utf-8") == self.ORIGINAL
        assert sorted(os.listdir(tmp_path)) == ["app.js"]

    def test_unencodable_artifact_leaves_no_temp_file(self, tmp_path, write_file):
        path = write_file("app.js", self.ORIGINAL)
        outcome = RemediationApplier().apply(str(path), self.ORIGINAL, 'fixed("\ud800");\n')

        assert outcome.result == FileResult.ERROR
        assert outcome.message.startswith("write failed")
        assert path.read_text(encoding="utf-8") == self.ORIGINAL
        assert sorted(os.listdir(tmp_path)) == ["app.js"]

    def test_trailing_newline_restored(self, write_file):
        path = write_file("app.js", self.ORIGINAL)
        outcome = RemediationApplier().apply(str(path), self.ORIGINAL, self.FIXED.rstrip())

        assert outcome.result == FileResult.FLAGGED_FIXED
        assert path.read_text(encoding="utf-8") == self.FIXED

    def test_echo_without_final_newline_rejected(self, write_file):
        path = write_file("app.js", self.ORIGINAL)
        with patch("securityagent.remediation.applier.os.replace") as replace:
            outcome = RemediationApplier().apply(str(path), self.ORIGINAL, self.ORIGINAL.strip())

        assert outcome.result == FileResult.FLAGGED_UNFIXED
        replace.assert_not_called()

    @pytest.mark.parametrize("original,artifact,expected", [
        ("a\r\n", "b", "b\r\n"),
        ("a\n", "b", "b\n"),
        ("a", "b", "b"),
        ("a\n", "b\n", "b\n"),
    ])
    def test_restore_trailing_newline(self, original, artifact, expected):
        assert restore_trailing_newline(original, artifact) == expected

    def test_missing_directory_is_error(self, tmp_path):
        path = tmp_path / "gone" / "app.js"
        outcome = RemediationApplier().apply(str(path), self.ORIGINAL, self.FIXED)
        assert outcome.result == FileResult.ERROR

    def test_generate_diff(self):
        diff = RemediationApplier().generate_diff("a\n", "b\n", "x.js")
        assert diff.startswith("--- a/x.js\n+++ b/x.js\n")
