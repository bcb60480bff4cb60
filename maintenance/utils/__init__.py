"""Utility modules for the maintenance commands."""

from maintenance.utils.logging import setup_logging
from maintenance.utils.text import normalize_email, parse_int

__all__ = [
    # Logging
    "setup_logging",
    # Text utilities
    "normalize_email",
    "parse_int",
]
