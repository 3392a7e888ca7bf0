"""
CLI output formatter for human-readable results.
"""

from typing import List
import sys

from securityagent.core.findings import (
    FileOutcome, FileResult, RunOutcome, VulnerabilityVerdict, sort_categories,
)
from securityagent.utils import truncate_string


# ANSI color codes
class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"


def supports_color() -> bool:
    """Check if the terminal supports color output."""
    if not hasattr(sys.stdout, "isatty"):
        return False
    if not sys.stdout.isatty():
        return False
    return True


# Glyph and color per file result
RESULT_STYLES = {
    FileResult.FLAGGED_FIXED: ("✅", "FIXED", Colors.GREEN),
    FileResult.FLAGGED_UNFIXED: ("⚠", "UNFIXED", Colors.YELLOW),
    FileResult.ERROR: ("❌", "ERROR", Colors.RED),
    FileResult.SKIPPED: ("·", "SKIPPED", Colors.DIM),
}


class CLIFormatter:
    """
    Formats run outcomes and scan verdicts for human-readable CLI output.
    """

    def __init__(self, use_color: bool = True, verbose: bool = False):
        self.use_color = use_color and supports_color()
        self.verbose = verbose

    def _color(self, text: str, color: str) -> str:
        """Apply color to text if colors are enabled."""
        if self.use_color:
            return f"{color}{text}{Colors.RESET}"
        return text

    def _header(self, title: str) -> List[str]:
        return [
            "",
            self._color("=" * 70, Colors.DIM),
            self._color(f" {title} ", Colors.BOLD),
            self._color("=" * 70, Colors.DIM),
            "",
        ]

    def format_outcome(self, outcome: RunOutcome, fail_on_error: bool = False) -> str:
        """Format the result of a remediation run."""
        lines = self._header("SECURITY REMEDIATION RESULTS")

        lines.append(self._color("Summary", Colors.BOLD))
        lines.append(self._color("-" * 40, Colors.DIM))
        lines.append(f"  Files processed:   {outcome.files_processed}")
        lines.append(f"  Remediated:        {outcome.fixed_count}")
        lines.append(f"  Not fixed:         {outcome.unfixed_count}")
        lines.append(f"  Clean (skipped):   {outcome.skipped_count}")
        lines.append(f"  Errors:            {outcome.error_count}")
        lines.append(f"  Exit code:         {outcome.exit_code(fail_on_error)}")
        lines.append("")

        if not outcome.outcomes:
            lines.append(self._color("  No changed source files.", Colors.GREEN))
            lines.append("")
            return "\n".join(lines)

        lines.append(self._color("Files", Colors.BOLD))
        lines.append(self._color("-" * 40, Colors.DIM))
        for file_outcome in outcome.outcomes:
            lines.extend(self._format_file_outcome(file_outcome))

        lines.append("")
        return "\n".join(lines)

    def _format_file_outcome(self, file_outcome: FileOutcome) -> List[str]:
        glyph, label, color = RESULT_STYLES[file_outcome.result]
        lines = [f"  {glyph} {self._color(f'[{label}]', color)} {file_outcome.file_path}"]

        if file_outcome.categories:
            names = ", ".join(c.label for c in sort_categories(file_outcome.categories))
            lines.append(f"      {self._color('Categories:', Colors.DIM)} {names}")
        if file_outcome.message:
            lines.append(f"      {self._color('Detail:', Colors.DIM)} {file_outcome.message}")

        if file_outcome.diff and self.verbose:
            lines.append("")
            for diff_line in file_outcome.diff.splitlines():
                if diff_line.startswith("+") and not diff_line.startswith("+++"):
                    diff_line = self._color(diff_line, Colors.GREEN)
                elif diff_line.startswith("-") and not diff_line.startswith("---"):
                    diff_line = self._color(diff_line, Colors.RED)
                lines.append(f"      {diff_line}")
            lines.append("")

        return lines

    def format_verdicts(self, verdicts: List[VulnerabilityVerdict]) -> str:
        """Format the result of a detection-only scan."""
        flagged = [v for v in verdicts if v.is_flagged]
        lines = self._header("SECURITY SCAN RESULTS")

        lines.append(f"  Files scanned:     {len(verdicts)}")
        lines.append(f"  Files flagged:     {len(flagged)}")
        lines.append("")

        if not flagged:
            lines.append(self._color("  No vulnerability patterns found!", Colors.GREEN))
            lines.append("")
            return "\n".join(lines)

        for verdict in flagged:
            names = ", ".join(c.label for c in sort_categories(verdict.categories))
            lines.append(self._color(f"🚨 {verdict.file_path}", Colors.CYAN) + f"  [{names}]")
            findings = verdict.findings if self.verbose else verdict.findings[:5]
            for finding in findings:
                lines.append(
                    f"    {finding.line:4} │ {self._color(finding.rule_id, Colors.DIM)} "
                    f"{truncate_string(finding.matched_text, 60)}"
                )
            hidden = len(verdict.findings) - len(findings)
            if hidden > 0:
                lines.append(self._color(f"    ... {hidden} more (use -v)", Colors.DIM))
            lines.append("")

        return "\n".join(lines)
