"""
API schemas for team endpoints
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from teamfinder.models.team import Team, TeamRole


class TeamCreate(BaseModel):
    """Schema for creating a new team"""
    name: str = Field(..., min_length=1, max_length=100)
    game: str = Field(default="", max_length=100)
    platform: str = Field(default="", max_length=50)
    skill_level: str = Field(default="", max_length=50)
    max_players: int = Field(default=5, ge=1, le=100)
    is_open: bool = True
    owner_id: str = Field(..., min_length=1)


class TeamMembershipRequest(BaseModel):
    """Schema for joining or leaving a team"""
    user_id: str = Field(..., min_length=1)


class TeamMemberResponse(BaseModel):
    user_id: str
    username: str
    role: TeamRole
    joined_at: datetime


class TeamResponse(BaseModel):
    """Schema for team responses including members"""
    id: str
    name: str
    game: str
    platform: str
    skill_level: str
    max_players: int
    current_players: int
    owner_id: str
    is_open: bool
    created_at: datetime
    members: List[TeamMemberResponse]

    @classmethod
    def from_team(cls, team: Team) -> "TeamResponse":
        return cls(
            **team.model_dump(exclude={"members"}),
            current_players=team.current_players,
            members=[TeamMemberResponse(**m.model_dump()) for m in team.members],
        )
