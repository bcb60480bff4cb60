"""
Bulk importers for JSON exports.

Each importer screens and validates records one by one and reports what was
imported, skipped and rejected.
"""

from .base import (
    BaseImporter,
    ImportResult,
    Outcome,
    RecordOutcome,
    RecordSkipped,
    load_json_records,
)
from .traveling_stops import TravelingStopImporter

__all__ = [
    "BaseImporter",
    "ImportResult",
    "Outcome",
    "RecordOutcome",
    "RecordSkipped",
    "load_json_records",
    "TravelingStopImporter",
]
