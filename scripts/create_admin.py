#!/usr/bin/env python3
"""
Create the bootstrap admin account from ADMIN_* settings if it does not exist.

Usage:
    python scripts/create_admin.py [OPTIONS]

Same as `python -m maintenance.main seed-admin`; run with --help for options.
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from maintenance.main import cli

if __name__ == "__main__":
    cli(["seed-admin", *sys.argv[1:]])
