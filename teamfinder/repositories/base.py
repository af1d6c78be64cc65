"""
Team Repository Interface
Storage contract of the team-matching service. The user methods form the
replica write path and are only called from consumed user events.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from teamfinder.core.results import Result
from teamfinder.models.team import ReplicaUser, Team, TeamMember


class TeamRepository(ABC):
    """Abstract base class for team-matching storage backends"""

    # Replica of users owned by the user service

    @abstractmethod
    async def add_user(self, user: ReplicaUser) -> Result:
        """
        Insert a replica user

        Returns:
            OK when inserted, CONFLICT when a user with the same id already exists
        """

    @abstractmethod
    async def update_user(self, user_id: str, changes: Dict[str, Any]) -> Result:
        """
        Overwrite the given fields of a replica user and the username
        denormalized on their memberships

        Returns:
            OK when updated, NOT_FOUND when the user is unknown
        """

    @abstractmethod
    async def delete_user(self, user_id: str) -> Result:
        """
        Remove a replica user, every team they own with all of its memberships,
        and their memberships in other teams, as one atomic change

        Returns:
            OK with `removed_teams` and `removed_memberships` counts, NOT_FOUND when unknown
        """

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[ReplicaUser]:
        pass

    @abstractmethod
    async def list_users(self) -> List[ReplicaUser]:
        pass

    # Teams owned by this service

    @abstractmethod
    async def create_team(self, team: Team) -> Result:
        """
        Insert a team together with its initial members

        Returns:
            OK when inserted, CONFLICT when the team name is taken
        """

    @abstractmethod
    async def get_team(self, team_id: str) -> Optional[Team]:
        """Get a team with its members"""

    @abstractmethod
    async def list_teams(self) -> List[Team]:
        pass

    @abstractmethod
    async def add_member(self, member: TeamMember) -> Result:
        """
        Returns:
            OK when added, CONFLICT when the user is already a member
        """

    @abstractmethod
    async def remove_member(self, team_id: str, user_id: str) -> Result:
        """
        Returns:
            OK when removed, NOT_FOUND when there was no such membership
        """

    @abstractmethod
    async def delete_team(self, team_id: str) -> Result:
        """
        Remove a team and all of its memberships

        Returns:
            OK when removed, NOT_FOUND when the team is unknown
        """

    async def ensure_indexes(self) -> None:
        """Create backend indexes; nothing to do for backends without them"""
        return None
