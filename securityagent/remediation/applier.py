"""
Remediation applier.

Decides whether a sanitized completion may replace a file and writes
it atomically:
- empty or unchanged artifacts are rejected and the file is untouched
- accepted artifacts replace the full file content in one rename
- write failures are reported, never swallowed
"""

import difflib
import logging
import os
import shutil
import tempfile
from typing import FrozenSet

from securityagent.core.findings import Category, FileOutcome, FileResult

logger = logging.getLogger(__name__)


def restore_trailing_newline(original: str, artifact: str) -> str:
    """Give the artifact the original's final line terminator if it lacks one."""
    if artifact.endswith("\n"):
        return artifact
    if original.endswith("\r\n"):
        return artifact + "\r\n"
    if original.endswith("\n"):
        return artifact + "\n"
    return artifact


class RemediationApplier:
    """
    Applies accepted remediations to the working tree.

    There is no backup copy: version control is the undo mechanism.
    """

    def __init__(self, dry_run: bool = False, encoding: str = "utf-8"):
        self.dry_run = dry_run
        self.encoding = encoding

    def apply(
        self,
        file_path: str,
        original: str,
        artifact: str,
        categories: FrozenSet[Category] = frozenset(),
        display_path: str = "",
    ) -> FileOutcome:
        """
        Apply the acceptance policy and write the artifact if accepted.

        Args:
            file_path: Path of the file on disk.
            original: The content the remediation was generated from.
            artifact: The sanitized completion.
            categories: Categories that were flagged, carried into the outcome.
            display_path: Path used in logs and reports (defaults to file_path).

        Returns:
            A FileOutcome with FLAGGED_FIXED, FLAGGED_UNFIXED or ERROR.
        """
        label = display_path or file_path

        if not artifact:
            logger.warning("⚠ %s: AI returned an empty artifact; file left unchanged", label)
            return FileOutcome(label, FileResult.FLAGGED_UNFIXED, categories, "empty artifact")

        # Sanitized text is trimmed
        artifact = restore_trailing_newline(original, artifact)

        if artifact == original:
            logger.warning("⚠ %s: AI returned the original content unchanged", label)
            return FileOutcome(label, FileResult.FLAGGED_UNFIXED, categories, "artifact identical to original")

        diff = self.generate_diff(original, artifact, label)

        if self.dry_run:
            logger.info("[DRY RUN] %s: remediation available, not written\n%s", label, diff)
            return FileOutcome(label, FileResult.FLAGGED_UNFIXED, categories, "dry run", diff)

        try:
            self._atomic_write(file_path, artifact)
        except (OSError, UnicodeError) as e:
            logger.error("❌ %s: could not write remediation: %s", label, e)
            return FileOutcome(label, FileResult.ERROR, categories, f"write failed: {e}", diff)

        logger.info(
            "✅ %s: remediation applied (%d -> %d bytes)",
            label,
            len(original.encode(self.encoding)),
            len(artifact.encode(self.encoding)),
        )
        return FileOutcome(label, FileResult.FLAGGED_FIXED, categories, "remediation applied", diff)

    def _atomic_write(self, file_path: str, content: str) -> None:
        """Write content to a sibling temp file and rename it over the target."""
        directory = os.path.dirname(os.path.abspath(file_path))
        fd, tmp_path = tempfile.mkstemp(prefix=".securityagent-", suffix=".tmp", dir=directory)

        try:
            with os.fdopen(fd, "w", encoding=self.encoding, newline="") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            if os.path.exists(file_path):
                shutil.copymode(file_path, tmp_path)
            os.replace(tmp_path, file_path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def generate_diff(self, original: str, fixed: str, file_path: str) -> str:
        """Generate a unified diff between original and fixed code."""
        diff = difflib.unified_diff(
            original.splitlines(keepends=True),
            fixed.splitlines(keepends=True),
            fromfile=f"a/{file_path}",
            tofile=f"b/{file_path}",
        )
        return "".join(diff)
