"""
Security Remediation Agent

Detects injection and secret-exposure patterns in the files changed by a
pull request and rewrites them with a generative model, as a CI gate.
"""

__version__ = "1.0.0"
__author__ = "Security Agent Team"

from securityagent.core.findings import Category, FileResult, RunOutcome, VulnerabilityVerdict
from securityagent.core.pipeline import PipelineDriver
from securityagent.config import AgentConfig

__all__ = [
    "PipelineDriver",
    "Category",
    "FileResult",
    "RunOutcome",
    "VulnerabilityVerdict",
    "AgentConfig",
]
