"""
Base importer for JSON record files.

Importers read a JSON array, screen each record, and persist the ones that
pass. A bad record never aborts the batch: it is counted as skipped (failed
screening) or errored (failed validation or the write) with a reason.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from loguru import logger

from maintenance.exceptions import ImportFileError, StoreError


class Outcome(str, Enum):
    IMPORTED = "imported"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass
class RecordOutcome:
    """What happened to one input record."""
    index: int
    label: str
    outcome: Outcome
    reason: str | None = None


@dataclass
class ImportResult:
    """Result of an import run."""
    source: str
    records_total: int = 0
    imported: int = 0
    skipped: int = 0
    errors: int = 0
    outcomes: list[RecordOutcome] = field(default_factory=list)
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def duration_seconds(self) -> float | None:
        """Calculate duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def record(self, outcome: RecordOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome.outcome is Outcome.IMPORTED:
            self.imported += 1
        elif outcome.outcome is Outcome.SKIPPED:
            self.skipped += 1
        else:
            self.errors += 1


class RecordSkipped(Exception):
    """Raised by ``screen`` when a record should be skipped, not imported."""


def load_json_records(path: Path) -> list[dict[str, Any]]:
    """
    Read a JSON file that must contain an array.

    Raises:
        ImportFileError: If the file is unreadable, not JSON, or not an array.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ImportFileError(f"Failed to read JSON file {path}: {e}") from e

    if not isinstance(data, list):
        raise ImportFileError(f"{path} must contain a JSON array of records")

    return data


class BaseImporter(ABC):
    """
    Abstract base class for JSON importers.

    Subclasses must implement:
    - screen(): Reject records that should be skipped (raise RecordSkipped)
    - save(): Validate and persist one record (raise on failure)
    """

    name: str = None

    def __init__(self, progress_callback=None):
        """
        Args:
            progress_callback: Optional callback for per-record progress.
                               Signature: callback(outcome: RecordOutcome)
        """
        if self.name is None:
            raise ValueError("name must be set in subclass")
        self.progress_callback = progress_callback

    def label(self, item: Any) -> str:
        """Human-readable name for a record in reports."""
        return "Unknown"

    @abstractmethod
    def screen(self, item: dict[str, Any]) -> None:
        """Raise RecordSkipped if the record should not be imported."""

    @abstractmethod
    def save(self, item: dict[str, Any]) -> Any:
        """Validate and persist a screened record."""

    def _process(self, index: int, item: Any) -> RecordOutcome:
        label = self.label(item)
        if not isinstance(item, dict):
            return RecordOutcome(index, label, Outcome.SKIPPED, "Not a JSON object")

        try:
            self.screen(item)
        except RecordSkipped as e:
            return RecordOutcome(index, label, Outcome.SKIPPED, str(e))

        try:
            self.save(item)
        except (ValueError, StoreError) as e:
            logger.debug(f"Record {index} ({label}) failed: {e}")
            return RecordOutcome(index, label, Outcome.ERROR, str(e))

        return RecordOutcome(index, label, Outcome.IMPORTED)

    def run(self, records: list[Any], source: str = "<memory>") -> ImportResult:
        """
        Import every record, continuing past individual failures.

        Args:
            records: Parsed JSON records
            source: Where the records came from, for the report

        Returns:
            ImportResult with per-record outcomes
        """
        result = ImportResult(source=source, records_total=len(records), started_at=datetime.now(timezone.utc))
        logger.info(f"Importing {len(records)} {self.name} records from {source}")

        for index, item in enumerate(records):
            outcome = self._process(index, item)
            result.record(outcome)
            if self.progress_callback:
                self.progress_callback(outcome)

        result.completed_at = datetime.now(timezone.utc)
        logger.info(
            f"Import complete: {result.imported} imported, "
            f"{result.skipped} skipped, {result.errors} errors, "
            f"{result.duration_seconds:.1f}s"
        )
        return result

    def run_file(self, path: Path) -> ImportResult:
        return self.run(load_json_records(path), source=str(path))
