"""
User account owned by the user service
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from teamfinder.models.team import utc_now


class User(BaseModel):
    id: str
    username: str
    email: str
    gaming_platform: Optional[str] = None
    preferred_game: Optional[str] = None
    skill_level: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("email")
    @classmethod
    def normalize_email_field(cls, v: str) -> str:
        return normalize_email(v)


def normalize_email(email: str) -> str:
    """Emails are stored lower-cased so uniqueness ignores case"""
    return email.strip().lower()


# Profile fields a user may change after registration
USER_PROFILE_FIELDS = ("username", "email", "gaming_platform", "preferred_game", "skill_level")
