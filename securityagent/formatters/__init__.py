"""
Output formatters for run outcomes and scan results.

Provides:
- Human-readable CLI output
- JSON for machine processing
"""

from securityagent.formatters.cli import CLIFormatter
from securityagent.formatters.json_formatter import JSONFormatter

__all__ = [
    "CLIFormatter",
    "JSONFormatter",
]


def get_formatter(format_name: str, verbose: bool = False, use_color: bool = True):
    """Get a formatter by name."""
    name = format_name.lower()

    if name in ("text", "cli"):
        return CLIFormatter(use_color=use_color, verbose=verbose)
    if name == "json":
        return JSONFormatter(verbose=verbose)

    raise ValueError(f"Unknown format: {format_name}")
