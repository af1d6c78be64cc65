"""
Team API endpoints
"""

from typing import List

from fastapi import APIRouter, Depends, Query, status

from teamfinder.api.dependencies import get_team_service
from teamfinder.schemas.team import TeamCreate, TeamMembershipRequest, TeamResponse
from teamfinder.services import TeamService

router = APIRouter()


@router.post("", response_model=TeamResponse, status_code=status.HTTP_201_CREATED)
async def create_team(
    team: TeamCreate,
    service: TeamService = Depends(get_team_service),
):
    """Create a new team owned by `owner_id`"""
    return TeamResponse.from_team(await service.create_team(team))


@router.get("", response_model=List[TeamResponse])
async def list_teams(service: TeamService = Depends(get_team_service)):
    return [TeamResponse.from_team(t) for t in await service.list_teams()]


@router.get("/{team_id}", response_model=TeamResponse)
async def get_team(team_id: str, service: TeamService = Depends(get_team_service)):
    return TeamResponse.from_team(await service.get_team(team_id))


@router.post("/{team_id}/join", response_model=TeamResponse)
async def join_team(
    team_id: str,
    request: TeamMembershipRequest,
    service: TeamService = Depends(get_team_service),
):
    return TeamResponse.from_team(await service.join_team(team_id, request.user_id))


@router.post("/{team_id}/leave", status_code=status.HTTP_204_NO_CONTENT)
async def leave_team(
    team_id: str,
    request: TeamMembershipRequest,
    service: TeamService = Depends(get_team_service),
):
    await service.leave_team(team_id, request.user_id)


@router.delete("/{team_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_team(
    team_id: str,
    user_id: str = Query(..., min_length=1),
    service: TeamService = Depends(get_team_service),
):
    """Delete a team; `user_id` must be the owner"""
    await service.delete_team(team_id, user_id)
