"""
Duplicate user resolution.

Users are grouped by normalized email. Each group with more than one member
keeps a single record: the most recently created admin if the group has one,
otherwise the most recently created user. Everything else in the group is
deleted, one document at a time.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Protocol

from loguru import logger

from maintenance.exceptions import DeletionAborted, StoreError
from maintenance.models import User
from maintenance.utils.text import normalize_email


class UserSource(Protocol):
    """What the resolver needs from the persistence layer."""

    def fetch_all(self) -> list[User]: ...

    def delete_by_id(self, user_id: Any) -> bool: ...


class KeepReason(str, Enum):
    ADMIN = "admin"
    MOST_RECENT = "most_recent"


@dataclass
class DuplicateGroup:
    """A set of users sharing one normalized email, and the decision for it."""
    email: str
    kept: User
    removed: list[User]
    reason: KeepReason

    @property
    def size(self) -> int:
        return len(self.removed) + 1


@dataclass
class ResolutionPlan:
    """Decisions for every duplicate group found in a scan."""
    total_records: int
    groups: list[DuplicateGroup] = field(default_factory=list)

    @property
    def duplicates_found(self) -> bool:
        return bool(self.groups)

    @property
    def records_to_delete(self) -> list[User]:
        return [user for group in self.groups for user in group.removed]


@dataclass
class CleanupReport:
    """Outcome of applying a plan."""
    plan: ResolutionPlan
    dry_run: bool = False
    deleted: list[Any] = field(default_factory=list)
    already_gone: list[Any] = field(default_factory=list)
    backup_path: Any = None

    @property
    def deleted_count(self) -> int:
        return len(self.deleted)


_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def sort_newest_first(users: Iterable[User]) -> list[User]:
    """
    Order users by creation time, newest first.

    The sort is stable, so users with equal (or missing) timestamps keep the
    order they were given in. Missing timestamps sort as oldest.
    """
    return sorted(users, key=lambda u: u.created_at or _OLDEST, reverse=True)


def group_by_email(users: Iterable[User]) -> dict[str, list[User]]:
    """Partition users by normalized email, preserving input order within groups."""
    groups: dict[str, list[User]] = {}
    for user in users:
        groups.setdefault(normalize_email(user.email), []).append(user)
    return groups


def choose_record(users: list[User]) -> tuple[User, KeepReason]:
    """Pick the user to keep from a group already ordered newest first."""
    for user in users:
        if user.is_admin:
            return user, KeepReason.ADMIN
    return users[0], KeepReason.MOST_RECENT


def plan_cleanup(users: Iterable[User]) -> ResolutionPlan:
    """Decide, without touching the store, which users to keep and remove."""
    ordered = sort_newest_first(users)
    plan = ResolutionPlan(total_records=len(ordered))

    for email, members in group_by_email(ordered).items():
        if len(members) < 2:
            continue
        kept, reason = choose_record(members)
        removed = [user for user in members if user is not kept]
        plan.groups.append(DuplicateGroup(email=email, kept=kept, removed=removed, reason=reason))

    return plan


class DuplicateResolver:
    """
    Scan the users collection and remove duplicate accounts.

    Deletions are fail-fast: the first store error stops the run and raises
    DeletionAborted carrying everything deleted up to that point. A user that
    has already disappeared is counted as gone, not as a failure.

    There is no locking; users created after the scan are not considered.
    """

    def __init__(self, store: UserSource):
        self.store = store

    def plan(self) -> ResolutionPlan:
        users = self.store.fetch_all()
        logger.info(f"Scanned {len(users)} users")
        plan = plan_cleanup(users)
        logger.info(
            f"Found {len(plan.groups)} duplicate groups, "
            f"{len(plan.records_to_delete)} users to remove"
        )
        return plan

    def apply(self, plan: ResolutionPlan, dry_run: bool = False) -> CleanupReport:
        report = CleanupReport(plan=plan, dry_run=dry_run)
        if dry_run:
            return report

        for group in plan.groups:
            for user in group.removed:
                try:
                    removed = self.store.delete_by_id(user.id)
                except StoreError as e:
                    logger.error(f"Deleting {user.id} ({group.email}) failed, aborting: {e}")
                    raise DeletionAborted(
                        f"Stopped after {report.deleted_count} deletions: {e.detail}",
                        report=report,
                        record_id=user.id,
                    ) from e

                if removed:
                    report.deleted.append(user.id)
                    logger.debug(f"Deleted {user.id} ({group.email})")
                else:
                    report.already_gone.append(user.id)
                    logger.warning(f"User {user.id} ({group.email}) was already gone")

        return report

    def run(self, dry_run: bool = False) -> CleanupReport:
        return self.apply(self.plan(), dry_run=dry_run)
