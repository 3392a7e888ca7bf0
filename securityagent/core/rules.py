"""
Rule engine for the vulnerability detector.

This module provides the base classes for defining pattern rules,
as well as the registry for managing and discovering them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Dict, Optional, Type, Generator
import re

from securityagent.core.findings import Category, Finding


@dataclass
class RuleMetadata:
    """Metadata for a rule."""
    rule_id: str
    description: str
    category: Category
    cwe_id: Optional[str] = None
    enabled_by_default: bool = True


class Rule(ABC):
    """
    Base class for all detection rules.

    Each rule is responsible for detecting one pattern family in
    raw file content. Rules never modify the content they inspect.
    """

    def __init__(self):
        self._enabled = self.metadata.enabled_by_default

    @property
    @abstractmethod
    def metadata(self) -> RuleMetadata:
        """Return rule metadata."""
        pass

    @abstractmethod
    def analyze(self, context: "AnalysisContext") -> Generator[Finding, None, None]:
        """
        Analyze the content and yield findings.

        Args:
            context: The analysis context holding the file content.

        Yields:
            Finding objects for each match.
        """
        pass

    def is_enabled(self) -> bool:
        """Check if this rule is enabled."""
        return self._enabled

    def enable(self):
        """Enable this rule."""
        self._enabled = True

    def disable(self):
        """Disable this rule."""
        self._enabled = False

    def create_finding(self, context: "AnalysisContext", line: int, matched_text: str) -> Finding:
        """Create a finding using the rule's metadata as defaults."""
        return Finding(
            rule_id=self.metadata.rule_id,
            category=self.metadata.category,
            file_path=context.file_path,
            line=line,
            matched_text=matched_text,
            description=self.metadata.description,
        )


class PatternRule(Rule):
    """
    A rule that uses regex patterns to detect issues.

    Patterns run line by line. This is deliberately heuristic: there is
    no parser behind it, so both false positives and false negatives
    are expected.
    """

    @property
    @abstractmethod
    def patterns(self) -> List[re.Pattern]:
        """Return the regex patterns to match."""
        pass

    def analyze(self, context: "AnalysisContext") -> Generator[Finding, None, None]:
        """Analyze using pattern matching."""
        for line_num, line in enumerate(context.lines, start=1):
            for pattern in self.patterns:
                match = pattern.search(line)
                if match:
                    yield self.create_finding(context, line_num, match.group())
                    # One finding per line is enough for a verdict
                    break


class RuleRegistry:
    """
    Registry for managing and discovering rules.

    Rules are registered by ID and grouped by category.
    """

    _instance: Optional["RuleRegistry"] = None

    def __init__(self):
        self._rules: Dict[str, Type[Rule]] = {}
        self._instances: Dict[str, Rule] = {}

    @classmethod
    def get_instance(cls) -> "RuleRegistry":
        """Get the singleton registry instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def register(self, rule_class: Type[Rule]) -> Type[Rule]:
        """
        Register a rule class.

        Can be used as a decorator:

        @registry.register
        class MyRule(PatternRule):
            ...
        """
        instance = rule_class()
        rule_id = instance.metadata.rule_id
        self._rules[rule_id] = rule_class
        self._instances[rule_id] = instance
        return rule_class

    def get_rule(self, rule_id: str) -> Optional[Rule]:
        """Get a rule instance by ID."""
        return self._instances.get(rule_id)

    def get_rules_for_category(self, category: Category) -> List[Rule]:
        """Get all enabled rules for a given category."""
        return [
            r for r in self._instances.values()
            if r.metadata.category == category and r.is_enabled()
        ]

    def get_enabled_rules(self) -> List[Rule]:
        """Get all enabled rules."""
        return [r for r in self._instances.values() if r.is_enabled()]

    @property
    def rule_count(self) -> int:
        """Return the number of registered rules."""
        return len(self._rules)


class AnalysisContext:
    """
    Context provided to rules during analysis.
    """

    def __init__(self, file_path: str, content: str):
        self.file_path = file_path
        self.content = content
        self._lines: Optional[List[str]] = None

    @property
    def lines(self) -> List[str]:
        """Get the source code lines."""
        if self._lines is None:
            self._lines = self.content.splitlines()
        return self._lines


# Global registry instance
registry = RuleRegistry.get_instance()


def rule(cls: Type[Rule]) -> Type[Rule]:
    """
    Decorator to register a rule with the global registry.

    Usage:
        @rule
        class MyRule(PatternRule):
            ...
    """
    return registry.register(cls)
