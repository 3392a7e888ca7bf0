"""
Entry point for running the security agent as a module.

Usage:
    python -m securityagent fix
    python -m securityagent --help
"""

import sys
from securityagent.cli import main

if __name__ == "__main__":
    sys.exit(main())
