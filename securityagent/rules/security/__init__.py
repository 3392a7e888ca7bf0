"""
Security vulnerability detection rules.
"""

from securityagent.rules.security import injection
from securityagent.rules.security import xss
from securityagent.rules.security import secrets

__all__ = [
    "injection",
    "xss",
    "secrets",
]
