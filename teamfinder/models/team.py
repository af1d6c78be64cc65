"""
Team-matching service data: teams, memberships and the local replica of users
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


def utc_now():
    """Helper function for Pydantic default_factory to get current UTC time"""
    return datetime.now(timezone.utc)


class TeamRole(str, Enum):
    OWNER = "Owner"
    CAPTAIN = "Captain"
    MEMBER = "Member"


class ReplicaUser(BaseModel):
    """Copy of a user record owned by the user service, written only by consumed events"""
    id: str
    username: str
    email: str
    gaming_platform: Optional[str] = None
    preferred_game: Optional[str] = None
    skill_level: Optional[str] = None


# Fields of ReplicaUser a user.updated event may overwrite
REPLICA_USER_FIELDS = ("username", "email", "gaming_platform", "preferred_game", "skill_level")


class TeamMember(BaseModel):
    id: str
    team_id: str
    user_id: str
    username: str  # denormalized at join time
    role: TeamRole = TeamRole.MEMBER
    joined_at: datetime = Field(default_factory=utc_now)


class Team(BaseModel):
    id: str
    name: str
    game: str = ""
    platform: str = ""
    skill_level: str = ""
    max_players: int = Field(default=5, ge=1)
    owner_id: str
    is_open: bool = True
    created_at: datetime = Field(default_factory=utc_now)
    members: List[TeamMember] = Field(default_factory=list)

    @property
    def current_players(self) -> int:
        return len(self.members)

    def is_member(self, user_id: str) -> bool:
        return any(m.user_id == user_id for m in self.members)
