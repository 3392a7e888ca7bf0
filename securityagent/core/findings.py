"""
Data structures for the remediation pipeline.

This module defines the vulnerability categories, detection verdicts,
per-file outcomes and the aggregate run outcome that maps to the
process exit code.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Any, FrozenSet, Iterable, Tuple
import json


# Process exit codes consumed by the host automation
EXIT_CLEAN = 0
EXIT_FATAL = 1
EXIT_CHANGES_APPLIED = 2
EXIT_FILE_ERRORS = 3
EXIT_INTERRUPTED = 130


class Category(Enum):
    """Vulnerability categories recognized by the detector."""
    SECRET_LIKE = "secret_like"
    SQL_INJECTION = "sql_injection"
    XSS = "xss"
    COMMAND_INJECTION = "command_injection"

    @property
    def label(self) -> str:
        labels = {
            Category.SECRET_LIKE: "Hard-coded secret",
            Category.SQL_INJECTION: "SQL injection",
            Category.XSS: "Cross-site scripting (XSS)",
            Category.COMMAND_INJECTION: "Command injection",
        }
        return labels[self]


# Fixed order used for prompts and reports
CATEGORY_ORDER: Tuple[Category, ...] = (
    Category.SQL_INJECTION,
    Category.XSS,
    Category.COMMAND_INJECTION,
    Category.SECRET_LIKE,
)


def sort_categories(categories: Iterable[Category]) -> List[Category]:
    """Return categories in their canonical order."""
    present = set(categories)
    return [c for c in CATEGORY_ORDER if c in present]


class FileResult(Enum):
    """Outcome of processing a single file."""
    SKIPPED = "skipped"
    FLAGGED_UNFIXED = "flagged-unfixed"
    FLAGGED_FIXED = "flagged-fixed"
    ERROR = "error"


@dataclass(frozen=True)
class Finding:
    """A single pattern match inside a file."""
    rule_id: str
    category: Category
    file_path: str
    line: int
    matched_text: str
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule_id": self.rule_id,
            "category": self.category.value,
            "file_path": self.file_path,
            "line": self.line,
            "matched_text": self.matched_text,
            "description": self.description,
        }


@dataclass(frozen=True)
class VulnerabilityVerdict:
    """
    Result of running the detector over one file's content.

    A file is flagged when at least one category matched.
    """
    file_path: str
    categories: FrozenSet[Category] = frozenset()
    findings: Tuple[Finding, ...] = ()

    @property
    def is_flagged(self) -> bool:
        return bool(self.categories)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file_path": self.file_path,
            "is_flagged": self.is_flagged,
            "categories": [c.value for c in sort_categories(self.categories)],
            "findings": [f.to_dict() for f in self.findings],
        }


@dataclass(frozen=True)
class RemediationPrompt:
    """The instruction payload sent to a generative backend for one file."""
    file_path: str
    original_content: str
    instructions: Tuple[str, ...]
    categories: FrozenSet[Category] = frozenset()

    @property
    def text(self) -> str:
        """Render the prompt as the single string submitted to the backend."""
        lines = list(self.instructions)
        lines.append("")
        lines.append(f"File: {self.file_path}")
        lines.append("")
        lines.append("Code:")
        lines.append(self.original_content)
        return "\n".join(lines)


@dataclass
class FileOutcome:
    """Per-file result of a pipeline run."""
    file_path: str
    result: FileResult
    categories: FrozenSet[Category] = frozenset()
    message: str = ""
    diff: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "file_path": self.file_path,
            "result": self.result.value,
            "categories": [c.value for c in sort_categories(self.categories)],
            "message": self.message,
        }
        if self.diff:
            data["diff"] = self.diff
        return data


@dataclass(frozen=True)
class RunOutcome:
    """
    Aggregate outcome of a pipeline run.

    Built once at the end of a run from the ordered per-file outcomes.
    """
    outcomes: Tuple[FileOutcome, ...] = field(default_factory=tuple)

    @classmethod
    def from_outcomes(cls, outcomes: Iterable[FileOutcome]) -> "RunOutcome":
        return cls(outcomes=tuple(outcomes))

    @property
    def per_file_result(self) -> Dict[str, FileResult]:
        return {o.file_path: o.result for o in self.outcomes}

    @property
    def any_change_applied(self) -> bool:
        return any(o.result == FileResult.FLAGGED_FIXED for o in self.outcomes)

    def count(self, result: FileResult) -> int:
        return sum(1 for o in self.outcomes if o.result == result)

    @property
    def fixed_count(self) -> int:
        return self.count(FileResult.FLAGGED_FIXED)

    @property
    def unfixed_count(self) -> int:
        return self.count(FileResult.FLAGGED_UNFIXED)

    @property
    def skipped_count(self) -> int:
        return self.count(FileResult.SKIPPED)

    @property
    def error_count(self) -> int:
        return self.count(FileResult.ERROR)

    @property
    def files_processed(self) -> int:
        return len(self.outcomes)

    def exit_code(self, fail_on_error: bool = False) -> int:
        """
        Map the outcome to a process exit code.

        Applied changes always win so the host re-validates and commits them.
        File errors only change the status when fail_on_error is set.
        """
        if self.any_change_applied:
            return EXIT_CHANGES_APPLIED
        if fail_on_error and self.error_count > 0:
            return EXIT_FILE_ERRORS
        return EXIT_CLEAN

    def to_dict(self, fail_on_error: bool = False) -> Dict[str, Any]:
        return {
            "summary": {
                "files_processed": self.files_processed,
                "fixed": self.fixed_count,
                "unfixed": self.unfixed_count,
                "skipped": self.skipped_count,
                "errors": self.error_count,
                "any_change_applied": self.any_change_applied,
                "exit_code": self.exit_code(fail_on_error),
            },
            "files": [o.to_dict() for o in self.outcomes],
        }

    def to_json(self, indent: int = 2, fail_on_error: bool = False) -> str:
        return json.dumps(self.to_dict(fail_on_error), indent=indent)
