#!/usr/bin/env python3
"""
Import Traveling Tree House stops from a JSON file.

Usage:
    python scripts/import_traveling_stops.py [OPTIONS]

Same as `python -m maintenance.main import-stops`; run with --help for options.
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from maintenance.main import cli

if __name__ == "__main__":
    cli(["import-stops", *sys.argv[1:]])
