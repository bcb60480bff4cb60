"""
Importer for Traveling Tree House stops exported as JSON.

Expected input is an array of objects using the dashboard's field names::

    [{"date": "2024-03-02", "stopName": "Little Sprouts", "stopType": "daycare",
      "stopAddress": "12 Elm St", "stopZipCode": "19104", "booksDistributed": 40}]
"""

from typing import Any

from pydantic import ValidationError

from maintenance.database import TravelingStopStore
from maintenance.ingesters.base import BaseImporter, RecordSkipped
from maintenance.models import STOP_TYPES, TravelingStop
from maintenance.utils.text import parse_int

REQUIRED_FIELDS = ("date", "stopName", "stopType", "stopAddress", "stopZipCode")


def describe_validation_error(error: ValidationError) -> str:
    """Collapse a pydantic error into one line, e.g. ``stopZipCode: String should match pattern``."""
    parts = []
    for err in error.errors():
        location = ".".join(str(part) for part in err["loc"]) or "record"
        parts.append(f"{location}: {err['msg']}")
    return "; ".join(parts)


class TravelingStopImporter(BaseImporter):
    """Create one TravelingStop document per valid input record."""

    name = "traveling stop"

    def __init__(self, store: TravelingStopStore, progress_callback=None):
        super().__init__(progress_callback=progress_callback)
        self.store = store

    def label(self, item: Any) -> str:
        if isinstance(item, dict) and item.get("stopName"):
            date = item.get("date")
            return f"{item['stopName']} ({date})" if date else str(item["stopName"])
        return "Unknown"

    def screen(self, item: dict[str, Any]) -> None:
        missing = [name for name in REQUIRED_FIELDS if not item.get(name)]
        if "booksDistributed" not in item:
            missing.append("booksDistributed")
        if missing:
            raise RecordSkipped(f"Missing required fields: {', '.join(missing)}")

        if item["stopType"] not in STOP_TYPES:
            raise RecordSkipped(f'Invalid stop type "{item["stopType"]}"')

    def build(self, item: dict[str, Any]) -> TravelingStop:
        """Map an input record onto the model, filling defaults for optional fields."""
        books = parse_int(item["booksDistributed"])
        if books is None:
            raise ValueError(f"booksDistributed: not a number ({item['booksDistributed']!r})")

        data = {
            "date": item["date"],
            "stopName": item["stopName"],
            "stopType": item["stopType"],
            "stopAddress": item["stopAddress"],
            "stopZipCode": item["stopZipCode"],
            "booksDistributed": books,
            "contactMethod": item.get("contactMethod") or "",
            "howHeardAboutUs": item.get("howHeardAboutUs") or "",
            "didWeReadToThem": item.get("didWeReadToThem") or False,
            "notes": item.get("notes") or "",
        }
        for key in ("daycareSettings", "branchSettings", "communityEventSettings"):
            if item.get(key):
                data[key] = item[key]

        try:
            return TravelingStop.model_validate(data)
        except ValidationError as e:
            raise ValueError(describe_validation_error(e)) from e

    def save(self, item: dict[str, Any]) -> Any:
        return self.store.create(self.build(item))
