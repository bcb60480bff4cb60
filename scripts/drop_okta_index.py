#!/usr/bin/env python3
"""
Drop the legacy oktaId_1 unique index that blocks new registrations.

Usage:
    python scripts/drop_okta_index.py [OPTIONS]

Same as `python -m maintenance.main drop-index`; run with --help for options.
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from maintenance.main import cli

if __name__ == "__main__":
    cli(["drop-index", *sys.argv[1:]])
