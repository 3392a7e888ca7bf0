"""
Injection vulnerability detection rules.

Detects SQL injection and command injection using line-level pattern
matching. No SQL or shell parsing is attempted.
"""

import re
from typing import List

from securityagent.core.rules import PatternRule, RuleMetadata, rule
from securityagent.core.findings import Category


# Upper-case SQL verbs followed by whitespace, as written in query strings
_SQL_VERB = r"\b(?:SELECT|INSERT|UPDATE|DELETE)\s"


@rule
class SQLInjectionRule(PatternRule):
    """
    Detects SQL statements built by string concatenation or interpolation.

    SQL injection occurs when user-controlled input is concatenated
    directly into SQL queries without proper parameterization.
    """

    @property
    def metadata(self) -> RuleMetadata:
        return RuleMetadata(
            rule_id="SEC-SQLI-001",
            description="SQL statement built with string concatenation or interpolation.",
            category=Category.SQL_INJECTION,
            cwe_id="CWE-89",
        )

    _PATTERNS = [
        # "SELECT ... '" + name
        re.compile(_SQL_VERB + r".*['\"`].*\+"),
        # `SELECT ... ${name}`
        re.compile(_SQL_VERB + r".*\$\{"),
        # "SELECT ... '%s'" % name
        re.compile(_SQL_VERB + r".*['\"]\s*%\s*[\w(]"),
        # "SELECT ... {}".format(name)
        re.compile(_SQL_VERB + r".*\.format\s*\("),
        # f"SELECT ... {name}"
        re.compile(r"\bf['\"].*" + _SQL_VERB + r".*\{\w"),
    ]

    @property
    def patterns(self) -> List[re.Pattern]:
        return self._PATTERNS


@rule
class ShellExecutionRule(PatternRule):
    """
    Detects calls to shell-interpreting process execution primitives.

    Every call is reported, whether or not its argument is visibly
    interpolated.
    """

    @property
    def metadata(self) -> RuleMetadata:
        return RuleMetadata(
            rule_id="SEC-CMDI-001",
            description="Call to a shell-interpreting process execution primitive.",
            category=Category.COMMAND_INJECTION,
            cwe_id="CWE-78",
        )

    _PATTERNS = [
        re.compile(r"\bexec(?:Sync)?\s*\("),
        re.compile(r"\bos\.(?:system|popen)\s*\("),
        re.compile(r"\bsubprocess\.(?:getoutput|getstatusoutput)\s*\("),
        re.compile(r"\bshell\s*=\s*True\b"),
        re.compile(r"\bshell\s*:\s*true\b"),
        re.compile(r"\b(?:shell_exec|passthru)\s*\("),
    ]

    @property
    def patterns(self) -> List[re.Pattern]:
        return self._PATTERNS


@rule
class TemplateInterpolationRule(PatternRule):
    """
    Flags any template-style interpolation marker in the file.

    This is the broadest rule in the battery and the main source of
    over-flagging: every ``${...}`` counts as potential command injection.
    """

    @property
    def metadata(self) -> RuleMetadata:
        return RuleMetadata(
            rule_id="SEC-CMDI-002",
            description="Template interpolation marker that may feed a command or query.",
            category=Category.COMMAND_INJECTION,
            cwe_id="CWE-78",
        )

    _PATTERNS = [
        re.compile(r"\$\{[^}]*\}"),
    ]

    @property
    def patterns(self) -> List[re.Pattern]:
        return self._PATTERNS
