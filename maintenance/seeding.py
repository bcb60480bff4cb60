"""
Admin account seeding.

Creates the bootstrap admin only when no user with the configured email
exists, so it is safe to rerun.
"""

from dataclasses import dataclass
from typing import Optional, Protocol

import bcrypt
from loguru import logger

from maintenance.config import AdminSettings, settings
from maintenance.models import ROLE_ADMIN, User
from maintenance.utils.text import normalize_email

BCRYPT_ROUNDS = 10


class AdminStore(Protocol):
    def find_by_email(self, email: str) -> Optional[User]: ...

    def create(self, user: User) -> User: ...


def hash_password(password: str) -> str:
    """Bcrypt hash with an embedded random salt, as the web app stores it."""
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash
        return False


@dataclass
class SeedResult:
    user: User
    created: bool


def build_admin(profile: AdminSettings) -> User:
    """Turn the configured profile into an unsaved admin user."""
    return User(
        email=normalize_email(profile.email.strip()),
        first_name=profile.first_name,
        last_name=profile.last_name,
        okta_id=profile.okta_id or None,
        password=hash_password(profile.password) if profile.password else None,
        role=ROLE_ADMIN,
    )


def seed_admin(store: AdminStore, profile: AdminSettings | None = None) -> SeedResult:
    """Ensure an account exists for the admin email.

    An existing account is left untouched, whatever its role.
    """
    profile = profile or settings.admin
    existing = store.find_by_email(profile.email.strip())
    if existing:
        logger.info(f"Admin already exists: {existing.email} ({existing.role})")
        return SeedResult(user=existing, created=False)

    user = store.create(build_admin(profile))
    logger.info(f"Admin created: {user.email} - ID: {user.id}")
    return SeedResult(user=user, created=True)
