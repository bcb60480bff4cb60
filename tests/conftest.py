# SPDX-License-Identifier: MIT
"""Pytest configuration and fixtures for the maintenance toolkit tests."""

import os
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import pytest

# Set test environment variables before importing the package
os.environ["APP_ENV"] = "test"
os.environ.setdefault("MONGO_URI", "mongodb://localhost:27017/test")
os.environ["SENTRY_ENABLED"] = "false"
os.environ["SENTRY_DSN"] = ""
os.environ.setdefault("DISABLE_LOGGING", "1")

from bson import ObjectId  # noqa: E402

from maintenance.exceptions import StoreError  # noqa: E402
from maintenance.models import User  # noqa: E402
from maintenance.utils.text import normalize_email  # noqa: E402

BASE_TIME = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def no_sentry(mocker):
    """Keep the Sentry client inert for the whole run."""
    mocker.patch("sentry_sdk.init")
    mocker.patch("sentry_sdk.capture_exception")


class InMemoryUserStore:
    """
    Dictionary-backed stand-in for UserStore.

    ``fetch_all`` returns users in insertion order, not creation order, so
    callers cannot lean on the store for sorting. Ids in ``fail_on`` raise
    StoreError when deleted.
    """

    def __init__(self, users=(), fail_on=()):
        self.users = {user.id: user for user in users}
        self.fail_on = set(fail_on)
        self.delete_calls: list[Any] = []

    def fetch_all(self) -> list[User]:
        return list(self.users.values())

    def list_by_email(self) -> list[User]:
        return sorted(self.users.values(), key=lambda u: u.email)

    def find_by_email(self, email: str):
        wanted = normalize_email(email)
        for user in self.users.values():
            if normalize_email(user.email) == wanted:
                return user
        return None

    def create(self, user: User) -> User:
        created = user.model_copy(update={
            "id": ObjectId(),
            "email": normalize_email(user.email),
            "created_at": user.created_at or BASE_TIME,
        })
        self.users[created.id] = created
        return created

    def delete_by_id(self, user_id) -> bool:
        self.delete_calls.append(user_id)
        if user_id in self.fail_on:
            raise StoreError(f"Failed to delete user {user_id}: connection reset")
        return self.users.pop(user_id, None) is not None

    def emails(self) -> list[str]:
        return [user.email for user in self.users.values()]


@pytest.fixture
def make_user() -> Callable[..., User]:
    """Factory for users created ``minutes_ago`` before a fixed base time."""

    def _make(email: str, role: str = "volunteer", minutes_ago: int | None = 0, **fields) -> User:
        created_at = None if minutes_ago is None else BASE_TIME - timedelta(minutes=minutes_ago)
        return User(
            id=ObjectId(),
            email=email,
            role=role,
            first_name=fields.pop("first_name", "Test"),
            last_name=fields.pop("last_name", role.title()),
            created_at=created_at,
            **fields,
        )

    return _make


@pytest.fixture
def user_store() -> Callable[..., InMemoryUserStore]:
    """Factory for in-memory user stores."""
    return InMemoryUserStore


@pytest.fixture
def mock_collection(mocker):
    """A MagicMock standing in for a pymongo collection."""
    collection = mocker.MagicMock()
    collection.name = "users"
    return collection


@pytest.fixture
def sample_stop_data() -> dict:
    """A valid Traveling Tree House stop as exported by the dashboard."""
    return {
        "date": "2024-03-02",
        "stopName": "Little Sprouts Daycare",
        "stopType": "daycare",
        "stopAddress": "12 Elm St",
        "stopZipCode": "19104",
        "booksDistributed": 40,
    }
