"""Core pipeline components and data structures."""

from securityagent.core.findings import (
    Category, Finding, VulnerabilityVerdict, FileResult, FileOutcome, RunOutcome,
)
from securityagent.core.rules import Rule, PatternRule, RuleRegistry
from securityagent.core.detector import VulnerabilityDetector
from securityagent.core.changes import ChangeSetResolver

__all__ = [
    "Category",
    "Finding",
    "VulnerabilityVerdict",
    "FileResult",
    "FileOutcome",
    "RunOutcome",
    "Rule",
    "PatternRule",
    "RuleRegistry",
    "VulnerabilityDetector",
    "ChangeSetResolver",
]
