#!/usr/bin/env python3
"""
Remove duplicate users, keeping the most recent admin (or most recent account) per email.

Usage:
    python scripts/cleanup_duplicates.py [OPTIONS]

Same as `python -m maintenance.main dedupe-users`; run with --help for options.
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from maintenance.main import cli

if __name__ == "__main__":
    cli(["dedupe-users", *sys.argv[1:]])
