"""
Vulnerability detector.

Runs the registered pattern rules over raw file content and reduces
their findings into a single verdict per file.
"""

import logging
from typing import Iterable, List, Optional

from securityagent.core.findings import Category, Finding, VulnerabilityVerdict
from securityagent.core.rules import AnalysisContext, Rule, RuleRegistry

# Import rules to register them
import securityagent.rules  # noqa: F401

logger = logging.getLogger(__name__)


class VulnerabilityDetector:
    """
    Pure predicate over file content.

    Each pattern family is applied independently and the verdict carries
    the union of matched categories. Detection never touches the disk.
    """

    def __init__(
        self,
        categories: Optional[Iterable[Category]] = None,
        registry: Optional[RuleRegistry] = None,
    ):
        self.registry = registry or RuleRegistry.get_instance()
        self.categories = frozenset(categories) if categories else frozenset(Category)

    @property
    def rules(self) -> List[Rule]:
        """Enabled rules restricted to the configured categories."""
        return [
            r for r in self.registry.get_enabled_rules()
            if r.metadata.category in self.categories
        ]

    def detect(self, content: str, file_path: str = "<memory>") -> VulnerabilityVerdict:
        """
        Detect vulnerabilities in a file's content.

        Args:
            content: Raw file content.
            file_path: Path used to label findings.

        Returns:
            A VulnerabilityVerdict; flagged if any category matched.
        """
        context = AnalysisContext(file_path=file_path, content=content)
        findings: List[Finding] = []

        for detection_rule in self.rules:
            findings.extend(detection_rule.analyze(context))

        findings.sort(key=lambda f: (f.line, f.rule_id))
        verdict = VulnerabilityVerdict(
            file_path=file_path,
            categories=frozenset(f.category for f in findings),
            findings=tuple(findings),
        )

        if verdict.is_flagged:
            logger.debug(
                "%s: %d finding(s) in %s",
                file_path,
                len(findings),
                ", ".join(sorted(c.value for c in verdict.categories)),
            )

        return verdict
