"""
CLI entry point for cbind package.

Usage:
    python -m cbind <command> [options]
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
