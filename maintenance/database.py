"""
MongoDB access for the maintenance commands.

Connections are explicit: ``connect()`` yields a database handle that the
caller wraps in collection stores. Nothing here keeps a module-level client.
"""

import re
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Optional

from loguru import logger
from pydantic import ValidationError
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, OperationFailure, PyMongoError

from maintenance.config import settings
from maintenance.exceptions import StoreConnectionError, StoreError
from maintenance.models import TravelingStop, User, utcnow
from maintenance.utils.text import normalize_email


# =============================================================================
# Connection
# =============================================================================

def create_client(uri: Optional[str] = None, timeout_ms: Optional[int] = None) -> MongoClient:
    """Create a client; pymongo connects lazily on first use."""
    return MongoClient(
        uri or settings.mongo.uri,
        serverSelectionTimeoutMS=timeout_ms or settings.mongo.server_selection_timeout_ms,
        tz_aware=True,
    )


@contextmanager
def connect(uri: Optional[str] = None) -> Iterator[Database]:
    """
    Context manager for a database connection.

    Pings the server up front so an unreachable store fails before any work
    starts. The client is always closed on exit.

    Raises:
        StoreConnectionError: If the server cannot be reached or rejects us.
    """
    client = create_client(uri)
    try:
        try:
            client.admin.command("ping")
        except (ConnectionFailure, OperationFailure) as e:
            raise StoreConnectionError(f"Could not connect to MongoDB: {e}") from e

        database = client.get_default_database(default=settings.mongo.db)
        logger.info(f"Connected to MongoDB database '{database.name}'")
        yield database
    finally:
        client.close()
        logger.info("Disconnected from MongoDB")


# =============================================================================
# Users
# =============================================================================

class UserStore:
    """Reads and deletes documents in the users collection."""

    def __init__(self, collection: Collection):
        self.collection = collection

    @classmethod
    def from_database(cls, database: Database, name: Optional[str] = None) -> "UserStore":
        return cls(database[name or settings.maintenance.users_collection])

    @staticmethod
    def _to_user(doc: dict[str, Any]) -> User:
        try:
            return User.from_document(doc)
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            raise StoreError(
                f"User {doc.get('_id')} is malformed ({fields})",
                extra={"record_id": str(doc.get("_id"))},
            ) from e

    def fetch_all(self) -> list[User]:
        """All users, most recently created first."""
        try:
            cursor = self.collection.find({}).sort("createdAt", DESCENDING)
            return [self._to_user(doc) for doc in cursor]
        except PyMongoError as e:
            raise StoreError(f"Failed to read users: {e}") from e

    def list_by_email(self) -> list[User]:
        """All users ordered by email, for listings."""
        try:
            cursor = self.collection.find({}).sort("email", ASCENDING)
            return [self._to_user(doc) for doc in cursor]
        except PyMongoError as e:
            raise StoreError(f"Failed to read users: {e}") from e

    def find_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive exact match on the normalized email."""
        pattern = f"^{re.escape(normalize_email(email))}$"
        try:
            doc = self.collection.find_one({"email": {"$regex": pattern, "$options": "i"}})
        except PyMongoError as e:
            raise StoreError(f"Failed to look up {email}: {e}") from e
        return self._to_user(doc) if doc else None

    def create(self, user: User) -> User:
        """Insert a new user and return it with its assigned id."""
        document = user.to_document()
        document.pop("_id", None)
        document["email"] = normalize_email(user.email)
        document.setdefault("createdAt", utcnow())
        try:
            result = self.collection.insert_one(document)
        except PyMongoError as e:
            raise StoreError(f"Failed to create user {user.email}: {e}") from e
        document["_id"] = result.inserted_id
        return User.from_document(document)

    def delete_by_id(self, user_id: Any) -> bool:
        """
        Delete one user.

        Returns:
            True if a document was removed, False if it no longer existed.
        """
        try:
            result = self.collection.delete_one({"_id": user_id})
        except PyMongoError as e:
            raise StoreError(f"Failed to delete user {user_id}: {e}") from e
        return result.deleted_count == 1


# =============================================================================
# Traveling Tree House stops
# =============================================================================

class TravelingStopStore:
    """Inserts and summarizes documents in the traveling stops collection."""

    def __init__(self, collection: Collection):
        self.collection = collection

    @classmethod
    def from_database(cls, database: Database, name: Optional[str] = None) -> "TravelingStopStore":
        return cls(database[name or settings.maintenance.stops_collection])

    def create(self, stop: TravelingStop) -> Any:
        """Insert a stop and return the new document id."""
        try:
            result = self.collection.insert_one(stop.to_document())
        except PyMongoError as e:
            raise StoreError(f"Failed to save stop {stop.stop_name}: {e}") from e
        return result.inserted_id

    def count(self) -> int:
        try:
            return self.collection.count_documents({})
        except PyMongoError as e:
            raise StoreError(f"Failed to count stops: {e}") from e

    def stats(self) -> dict[str, int]:
        """Totals across every stop."""
        pipeline = [
            {
                "$group": {
                    "_id": None,
                    "totalStops": {"$sum": 1},
                    "totalBooks": {"$sum": "$booksDistributed"},
                    "uniqueLocations": {"$addToSet": "$stopName"},
                    "uniqueZipCodes": {"$addToSet": "$stopZipCode"},
                }
            },
            {
                "$project": {
                    "_id": 0,
                    "totalStops": 1,
                    "totalBooks": 1,
                    "uniqueLocations": {"$size": "$uniqueLocations"},
                    "uniqueZipCodes": {"$size": "$uniqueZipCodes"},
                }
            },
        ]
        try:
            result = list(self.collection.aggregate(pipeline))
        except PyMongoError as e:
            raise StoreError(f"Failed to aggregate stop statistics: {e}") from e
        if not result:
            return {"totalStops": 0, "totalBooks": 0, "uniqueLocations": 0, "uniqueZipCodes": 0}
        return result[0]

    def stats_by_type(self) -> list[dict[str, Any]]:
        """Count, total and average books per stop type."""
        pipeline = [
            {
                "$group": {
                    "_id": "$stopType",
                    "count": {"$sum": 1},
                    "totalBooks": {"$sum": "$booksDistributed"},
                    "avgBooks": {"$avg": "$booksDistributed"},
                }
            },
            {
                "$project": {
                    "_id": 0,
                    "stopType": "$_id",
                    "count": 1,
                    "totalBooks": 1,
                    "avgBooks": {"$round": ["$avgBooks", 0]},
                }
            },
            {"$sort": {"stopType": 1}},
        ]
        try:
            return list(self.collection.aggregate(pipeline))
        except PyMongoError as e:
            raise StoreError(f"Failed to aggregate stop statistics: {e}") from e
