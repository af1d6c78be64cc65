"""
Notification payload pushed to clients and rendered into emails
"""

from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel, Field

from teamfinder.models.team import utc_now


class Notification(BaseModel):
    type: str
    message: str
    timestamp: datetime = Field(default_factory=utc_now)
    data: Dict[str, Any] = Field(default_factory=dict)


def user_group(user_id: str) -> str:
    return f"user-{user_id}"


def team_group(team_id: str) -> str:
    return f"team-{team_id}"
