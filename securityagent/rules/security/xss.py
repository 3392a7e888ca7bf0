"""
Cross-Site Scripting (XSS) vulnerability detection rules.
"""

import re
from typing import List

from securityagent.core.rules import PatternRule, RuleMetadata, rule
from securityagent.core.findings import Category


@rule
class UnescapedHTMLRule(PatternRule):
    """
    Detects variables interpolated directly into HTML-rendering calls.

    Covers server responses built from template literals or concatenation
    as well as the common DOM sinks.
    """

    @property
    def metadata(self) -> RuleMetadata:
        return RuleMetadata(
            rule_id="SEC-XSS-001",
            description="Variable interpolated into rendered HTML without escaping.",
            category=Category.XSS,
            cwe_id="CWE-79",
        )

    _PATTERNS = [
        # res.send(`<h1>${name}</h1>`)
        re.compile(r"res\.send\s*\(\s*`"),
        # res.send("<h1>" + name)
        re.compile(r"res\.(?:send|write|end)\s*\([^)]*['\"]\s*\+"),
        # el.innerHTML = value / `...` / "..." + value
        re.compile(r"\.(?:innerHTML|outerHTML)\s*\+?=\s*(?:[A-Za-z_$`]|['\"][^'\"]*['\"]\s*\+)"),
        re.compile(r"document\.write(?:ln)?\s*\("),
        re.compile(r"dangerouslySetInnerHTML"),
        re.compile(r"render_template_string\s*\(\s*f['\"]"),
        re.compile(r"render_template_string\s*\([^)]*(?:\.format\s*\(|['\"]\s*%|\+)"),
        re.compile(r"Markup\s*\(\s*f['\"]"),
    ]

    @property
    def patterns(self) -> List[re.Pattern]:
        return self._PATTERNS
