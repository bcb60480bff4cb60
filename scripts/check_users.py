#!/usr/bin/env python3
"""
List every user account in the database.

Usage:
    python scripts/check_users.py [OPTIONS]

Same as `python -m maintenance.main users`; run with --help for options.
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from maintenance.main import cli

if __name__ == "__main__":
    cli(["users", *sys.argv[1:]])
