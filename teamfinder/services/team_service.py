"""
Team service containing the team-matching business rules
"""

import uuid
from typing import List

from teamfinder.core.errors import ErrorResponse
from teamfinder.core.logger import logger
from teamfinder.core.results import Outcome
from teamfinder.events import TeamCreatedEvent, TeamDeletedEvent, TeamJoinedEvent, TeamLeftEvent
from teamfinder.messaging.publisher import EventPublisher
from teamfinder.models.team import Team, TeamMember, TeamRole
from teamfinder.repositories.base import TeamRepository
from teamfinder.schemas.team import TeamCreate


class TeamService:
    """
    Service layer for team workflows.

    Every mutation is committed to the repository before its event is
    published; a failed publish never fails the workflow.
    """

    def __init__(self, repository: TeamRepository, publisher: EventPublisher):
        self.repository = repository
        self.publisher = publisher

    async def create_team(self, team_data: TeamCreate) -> Team:
        """Create a team with its owner as the first member"""
        owner = await self.repository.get_user(team_data.owner_id)
        if owner is None:
            raise ErrorResponse("User not found", status_code=404)

        team_id = str(uuid.uuid4())
        team = Team(
            id=team_id,
            **team_data.model_dump(),
            members=[
                TeamMember(
                    id=str(uuid.uuid4()),
                    team_id=team_id,
                    user_id=owner.id,
                    username=owner.username,
                    role=TeamRole.OWNER,
                )
            ],
        )

        result = await self.repository.create_team(team)
        if result.outcome is Outcome.CONFLICT:
            raise ErrorResponse("Team name already exists", status_code=409)

        logger.info(
            f"Created team {team.name}",
            metadata={"event": "create_team", "team_id": team.id, "owner_id": owner.id},
        )

        await self.publisher.publish(
            TeamCreatedEvent(team_id=team.id, team_name=team.name, owner_id=owner.id)
        )
        return team

    async def get_team(self, team_id: str) -> Team:
        team = await self.repository.get_team(team_id)
        if team is None:
            raise ErrorResponse("Team not found", status_code=404)
        return team

    async def list_teams(self) -> List[Team]:
        return await self.repository.list_teams()

    async def join_team(self, team_id: str, user_id: str) -> Team:
        """Add a known user to an open team that still has room"""
        team = await self.get_team(team_id)
        user = await self.repository.get_user(user_id)
        if user is None:
            raise ErrorResponse("User not found", status_code=404)
        if not team.is_open:
            raise ErrorResponse("Team is not open for new members", status_code=400)
        if team.is_member(user_id):
            raise ErrorResponse("User is already a member of this team", status_code=409)
        if team.current_players >= team.max_players:
            raise ErrorResponse("Team is full", status_code=400)

        member = TeamMember(
            id=str(uuid.uuid4()),
            team_id=team.id,
            user_id=user.id,
            username=user.username,
        )
        result = await self.repository.add_member(member)
        if result.outcome is Outcome.CONFLICT:
            raise ErrorResponse("User is already a member of this team", status_code=409)
        if result.outcome is Outcome.NOT_FOUND:
            raise ErrorResponse("Team not found", status_code=404)

        logger.info(
            f"User {user.username} joined team {team.name}",
            metadata={"event": "join_team", "team_id": team.id, "user_id": user.id},
        )

        await self.publisher.publish(
            TeamJoinedEvent(
                team_id=team.id,
                team_name=team.name,
                user_id=user.id,
                username=user.username,
            )
        )
        return await self.get_team(team_id)

    async def leave_team(self, team_id: str, user_id: str) -> None:
        team = await self.get_team(team_id)
        if team.owner_id == user_id:
            raise ErrorResponse("Team owner cannot leave the team", status_code=400)

        member = next((m for m in team.members if m.user_id == user_id), None)
        if member is None:
            raise ErrorResponse("User is not a member of this team", status_code=404)

        result = await self.repository.remove_member(team_id, user_id)
        if result.outcome is Outcome.NOT_FOUND:
            raise ErrorResponse("User is not a member of this team", status_code=404)

        logger.info(
            f"User {member.username} left team {team.name}",
            metadata={"event": "leave_team", "team_id": team.id, "user_id": user_id},
        )

        await self.publisher.publish(
            TeamLeftEvent(
                team_id=team.id,
                team_name=team.name,
                user_id=user_id,
                username=member.username,
            )
        )

    async def delete_team(self, team_id: str, user_id: str) -> None:
        """Delete a team; only its owner may do so"""
        team = await self.get_team(team_id)
        if team.owner_id != user_id:
            raise ErrorResponse("Only the team owner can delete the team", status_code=403)

        result = await self.repository.delete_team(team_id)
        if result.outcome is Outcome.NOT_FOUND:
            raise ErrorResponse("Team not found", status_code=404)

        logger.info(
            f"Deleted team {team.name}",
            metadata={"event": "delete_team", "team_id": team.id, **result.data},
        )

        await self.publisher.publish(TeamDeletedEvent(team_id=team.id, team_name=team.name))
