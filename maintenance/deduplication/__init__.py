"""
Deduplication of user accounts.

These modules decide which account survives when several share an email and
remove the others.
"""

from maintenance.deduplication.resolver import (
    CleanupReport,
    DuplicateGroup,
    DuplicateResolver,
    KeepReason,
    ResolutionPlan,
    choose_record,
    group_by_email,
    plan_cleanup,
    sort_newest_first,
)

__all__ = [
    "CleanupReport",
    "DuplicateGroup",
    "DuplicateResolver",
    "KeepReason",
    "ResolutionPlan",
    "choose_record",
    "group_by_email",
    "plan_cleanup",
    "sort_newest_first",
]
