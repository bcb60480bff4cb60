"""
Exception hierarchy for the maintenance commands.

Connectivity failures are fatal for a command; per-record import problems are
recorded on the result instead of being raised.
"""

from typing import Any, Optional


class MaintenanceError(Exception):
    """Base class for all maintenance errors."""

    code: str = "MAINTENANCE_ERROR"
    detail: str = "Maintenance operation failed"

    def __init__(self, detail: Optional[str] = None, extra: Optional[dict[str, Any]] = None):
        self.detail = detail or self.__class__.detail
        self.extra = extra or {}
        super().__init__(self.detail)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary for logging."""
        return {"code": self.code, "message": self.detail, **self.extra}


class StoreConnectionError(MaintenanceError):
    """The document store could not be reached."""

    code = "STORE_UNAVAILABLE"
    detail = "Could not connect to MongoDB"


class StoreError(MaintenanceError):
    """A read or write against the document store failed."""

    code = "STORE_ERROR"
    detail = "Document store operation failed"


class DeletionAborted(MaintenanceError):
    """Duplicate cleanup stopped at the first failed deletion.

    ``report`` holds what had been deleted before the failure.
    """

    code = "DELETION_ABORTED"
    detail = "Duplicate cleanup aborted"

    def __init__(self, detail: Optional[str] = None, report=None, record_id: Any = None):
        super().__init__(detail, extra={"record_id": str(record_id)} if record_id is not None else None)
        self.report = report
        self.record_id = record_id


class ImportFileError(MaintenanceError):
    """The import source could not be read or is not a JSON array."""

    code = "IMPORT_FILE_INVALID"
    detail = "Import file could not be read"
