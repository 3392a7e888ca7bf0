"""
Hard-coded secrets detection rules.

Flags identifiers that conventionally name sensitive values such as
tokens, passwords and API keys.
"""

import re
from typing import List

from securityagent.core.rules import PatternRule, RuleMetadata, rule
from securityagent.core.findings import Category


@rule
class SecretIdentifierRule(PatternRule):
    """
    Detects secret-like identifier fragments anywhere in a file.

    Over-broad: a value read from the environment
    (``process.env.SECRET_TOKEN``) matches just like a literal one.
    """

    @property
    def metadata(self) -> RuleMetadata:
        return RuleMetadata(
            rule_id="SEC-SECRET-001",
            description="Identifier fragment conventionally naming a secret, token, password or API key.",
            category=Category.SECRET_LIKE,
            cwe_id="CWE-798",
        )

    _PATTERNS = [
        re.compile(r"secret", re.IGNORECASE),
        re.compile(r"token", re.IGNORECASE),
        re.compile(r"api[_-]?key", re.IGNORECASE),
        re.compile(r"passw(?:or)?d", re.IGNORECASE),
    ]

    @property
    def patterns(self) -> List[re.Pattern]:
        return self._PATTERNS
