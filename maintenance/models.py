"""
Document models for the TreeHouse Books MongoDB collections.

Pydantic models map MongoDB documents (camelCase keys, ``_id``) to Python
attributes and carry the field validation the web application enforces on
save. Only the collections the maintenance commands touch are modelled.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # pymongo hands back naive datetimes that are already UTC
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Document(BaseModel):
    """Base class for models persisted as MongoDB documents."""

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    id: Optional[Any] = Field(default=None, alias="_id")

    @classmethod
    def from_document(cls, document: dict[str, Any]):
        """Build a model from a raw MongoDB document."""
        return cls.model_validate(document)

    def to_document(self) -> dict[str, Any]:
        """Serialize to a MongoDB document (camelCase keys, no unset ``_id``)."""
        return self.model_dump(by_alias=True, exclude_none=True)


# =============================================================================
# Users
# =============================================================================

ROLE_ADMIN = "admin"
ROLES = ("volunteer", "staff", ROLE_ADMIN)


class User(Document):
    """
    A dashboard account.

    ``email`` is the login identifier. The database historically did not
    enforce its uniqueness case-insensitively, which is why duplicate cleanup
    exists.
    """

    email: str
    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")
    role: str = "volunteer"
    password: Optional[str] = None  # bcrypt hash, never plain text
    okta_id: Optional[str] = Field(default=None, alias="oktaId")
    reset_token: Optional[str] = Field(default=None, alias="resetToken")
    reset_token_expiry: Optional[datetime] = Field(default=None, alias="resetTokenExpiry")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")

    @field_validator("created_at", "reset_token_expiry")
    @classmethod
    def normalize_timestamp(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(v)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def describe(self) -> str:
        """One-line summary used in console reports."""
        return f"{self.full_name} ({self.role}) - ID: {self.id}"


# =============================================================================
# Traveling Tree House stops
# =============================================================================

# Extend here when the program adds new kinds of stops
STOP_TYPES = ("daycare", "branch", "community_event")

ZIP_CODE_PATTERN = r"^\d{5}(-\d{4})?$"


class DaycareSettings(BaseModel):
    """Only meaningful when ``stop_type`` is ``daycare``."""

    model_config = ConfigDict(populate_by_name=True)

    has_sticker_displayed: bool = Field(default=False, alias="hasStickerDisplayed")


class BranchSettings(BaseModel):
    """Only meaningful when ``stop_type`` is ``branch``."""

    model_config = ConfigDict(populate_by_name=True)

    has_signage_displayed: bool = Field(default=False, alias="hasSignageDisplayed")


class CommunityEventSettings(BaseModel):
    """Only meaningful when ``stop_type`` is ``community_event``."""

    model_config = ConfigDict(populate_by_name=True)

    were_we_on_flyer: bool = Field(default=False, alias="wereWeOnFlyer")
    featured_on_their_social_media: bool = Field(default=False, alias="featuredOnTheirSocialMedia")
    did_we_share_on_our_social_media: bool = Field(default=False, alias="didWeShareOnOurSocialMedia")


class TravelingStop(Document):
    """
    A mobile book-distribution visit to a daycare, library branch or
    community event.
    """

    # Exports often carry ZIP codes and names as bare numbers
    model_config = ConfigDict(coerce_numbers_to_str=True)

    # Core fields (required)
    date: str = Field(..., min_length=1, description="Visit date, YYYY-MM-DD")
    stop_name: str = Field(..., alias="stopName", min_length=1, max_length=200)
    stop_type: str = Field(..., alias="stopType")
    stop_address: str = Field(..., alias="stopAddress", min_length=1, max_length=500)
    stop_zip_code: str = Field(..., alias="stopZipCode", pattern=ZIP_CODE_PATTERN)
    books_distributed: int = Field(..., alias="booksDistributed", ge=0, le=100000)

    # Contact & marketing
    contact_method: str = Field(default="", alias="contactMethod", max_length=500)
    how_heard_about_us: str = Field(default="", alias="howHeardAboutUs", max_length=500)

    did_we_read_to_them: bool = Field(default=False, alias="didWeReadToThem")

    daycare_settings: DaycareSettings = Field(default_factory=DaycareSettings, alias="daycareSettings")
    branch_settings: BranchSettings = Field(default_factory=BranchSettings, alias="branchSettings")
    community_event_settings: CommunityEventSettings = Field(
        default_factory=CommunityEventSettings, alias="communityEventSettings"
    )

    notes: str = Field(default="", max_length=2000)

    # Metadata
    created_by: Optional[Any] = Field(default=None, alias="createdBy")
    created_at: datetime = Field(default_factory=utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=utcnow, alias="updatedAt")

    @field_validator("stop_type")
    @classmethod
    def known_stop_type(cls, v: str) -> str:
        if v not in STOP_TYPES:
            raise ValueError(f"{v} is not a valid stop type")
        return v

    @field_validator("created_at", "updated_at")
    @classmethod
    def normalize_timestamp(cls, v: datetime) -> datetime:
        return _as_utc(v)
