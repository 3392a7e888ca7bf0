"""
AI-powered remediation.

Builds remediation prompts, cleans up model completions and applies
accepted fixes to the working tree.
"""

from securityagent.remediation.prompts import RemediationPromptBuilder
from securityagent.remediation.sanitizer import CompletionSanitizer, sanitize_completion
from securityagent.remediation.applier import RemediationApplier

__all__ = [
    "RemediationPromptBuilder",
    "CompletionSanitizer",
    "sanitize_completion",
    "RemediationApplier",
]
