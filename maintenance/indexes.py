"""
Secondary index inspection and removal.

The users collection once carried a unique index on ``oktaId``. After login
moved to local accounts every new user had a null ``oktaId``, so the second
registration collided on that index. Dropping it is the migration.
"""

from dataclasses import dataclass, field
from typing import Any

from loguru import logger
from pymongo.collection import Collection
from pymongo.errors import OperationFailure, PyMongoError

from maintenance.exceptions import StoreError

# MongoDB server error code for a missing index
INDEX_NOT_FOUND = 27


@dataclass(frozen=True)
class IndexInfo:
    name: str
    key: dict[str, Any] = field(default_factory=dict)
    unique: bool = False
    sparse: bool = False

    @classmethod
    def from_spec(cls, spec: dict[str, Any]) -> "IndexInfo":
        return cls(
            name=spec["name"],
            key=dict(spec.get("key", {})),
            unique=bool(spec.get("unique", False)),
            sparse=bool(spec.get("sparse", False)),
        )

    def describe(self) -> str:
        flags = [flag for flag, on in (("unique", self.unique), ("sparse", self.sparse)) if on]
        suffix = f" [{', '.join(flags)}]" if flags else ""
        return f"{self.name}: {self.key}{suffix}"


@dataclass
class DropResult:
    name: str
    before: list[IndexInfo]
    after: list[IndexInfo]
    dropped: bool

    @property
    def already_absent(self) -> bool:
        return not self.dropped


def is_index_not_found(error: OperationFailure) -> bool:
    if error.code == INDEX_NOT_FOUND:
        return True
    details = error.details or {}
    if details.get("codeName") == "IndexNotFound":
        return True
    return "index not found" in str(error).lower()


class IndexManager:
    """List and drop indexes on one collection."""

    def __init__(self, collection: Collection):
        self.collection = collection

    def list_indexes(self) -> list[IndexInfo]:
        try:
            return [IndexInfo.from_spec(spec) for spec in self.collection.list_indexes()]
        except PyMongoError as e:
            raise StoreError(f"Failed to list indexes on {self.collection.name}: {e}") from e

    def drop(self, name: str) -> bool:
        """
        Drop an index by name.

        Returns:
            True if dropped, False if the index did not exist.
        """
        try:
            self.collection.drop_index(name)
        except OperationFailure as e:
            if is_index_not_found(e):
                logger.info(f"Index {name} not present on {self.collection.name}")
                return False
            raise StoreError(f"Failed to drop index {name}: {e}") from e
        except PyMongoError as e:
            raise StoreError(f"Failed to drop index {name}: {e}") from e

        logger.info(f"Dropped index {name} on {self.collection.name}")
        return True

    def migrate(self, name: str) -> DropResult:
        """Drop ``name`` if present, recording the indexes before and after."""
        before = self.list_indexes()
        if any(index.name == name for index in before):
            dropped = self.drop(name)
        else:
            logger.info(f"Index {name} not present on {self.collection.name}, nothing to do")
            dropped = False
        after = self.list_indexes() if dropped else before
        return DropResult(name=name, before=before, after=after, dropped=dropped)
