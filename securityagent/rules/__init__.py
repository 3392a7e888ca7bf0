"""
Detection rules.

This module contains the pattern rules for every vulnerability
category the detector reports.
"""

# Import all rules to register them
from securityagent.rules.security import injection, xss, secrets

__all__ = [
    "injection",
    "xss",
    "secrets",
]
