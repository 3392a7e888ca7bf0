"""
JSON output formatter for machine-readable results.
"""

import json
from typing import List

from securityagent.core.findings import RunOutcome, VulnerabilityVerdict


class JSONFormatter:
    """
    Formats run outcomes and scan verdicts as JSON for machine consumption.
    """

    def __init__(self, indent: int = 2, verbose: bool = False):
        self.indent = indent
        self.verbose = verbose

    def format_outcome(self, outcome: RunOutcome, fail_on_error: bool = False) -> str:
        """Format a remediation run as JSON."""
        data = outcome.to_dict(fail_on_error)

        if not self.verbose:
            for file_data in data["files"]:
                file_data.pop("diff", None)

        return json.dumps(data, indent=self.indent, default=str)

    def format_verdicts(self, verdicts: List[VulnerabilityVerdict]) -> str:
        """Format a detection-only scan as JSON."""
        data = {
            "summary": {
                "files_scanned": len(verdicts),
                "files_flagged": sum(1 for v in verdicts if v.is_flagged),
            },
            "files": [v.to_dict() for v in verdicts],
        }
        return json.dumps(data, indent=self.indent, default=str)
