"""
In-process team repository for local development and tests
"""

import asyncio
from typing import Any, Dict, List, Optional

from teamfinder.core.results import Result
from teamfinder.models.team import REPLICA_USER_FIELDS, ReplicaUser, Team, TeamMember
from teamfinder.repositories.base import TeamRepository


class InMemoryTeamRepository(TeamRepository):
    """
    Dictionary-backed TeamRepository.

    Every mutation works on copies of the affected tables and swaps them in at
    the end under one lock, so a multi-table change is applied entirely or not
    at all.
    """

    def __init__(self):
        self._lock = asyncio.Lock()
        self.users: Dict[str, ReplicaUser] = {}
        self.teams: Dict[str, Team] = {}  # stored without members
        self.members: Dict[str, TeamMember] = {}

    async def add_user(self, user: ReplicaUser) -> Result:
        async with self._lock:
            if user.id in self.users:
                return Result.conflict(f"User {user.id} already exists")
            self.users = {**self.users, user.id: user.model_copy()}
            return Result.ok()

    async def update_user(self, user_id: str, changes: Dict[str, Any]) -> Result:
        async with self._lock:
            user = self.users.get(user_id)
            if user is None:
                return Result.not_found(f"User {user_id} not found")

            fields = {k: v for k, v in changes.items() if k in REPLICA_USER_FIELDS}
            users = {**self.users, user_id: user.model_copy(update=fields)}
            members = self.members
            if "username" in fields:
                members = {
                    key: m.model_copy(update={"username": fields["username"]}) if m.user_id == user_id else m
                    for key, m in self.members.items()
                }
            self.users, self.members = users, members
            return Result.ok()

    async def delete_user(self, user_id: str) -> Result:
        async with self._lock:
            if user_id not in self.users:
                return Result.not_found(f"User {user_id} not found")

            owned = {team_id for team_id, t in self.teams.items() if t.owner_id == user_id}
            members = {
                key: m for key, m in self.members.items()
                if m.team_id not in owned and m.user_id != user_id
            }
            removed_memberships = len(self.members) - len(members)
            teams = {team_id: t for team_id, t in self.teams.items() if team_id not in owned}
            users = {uid: u for uid, u in self.users.items() if uid != user_id}

            self.users, self.teams, self.members = users, teams, members
            return Result.ok(
                removed_teams=len(owned),
                removed_memberships=removed_memberships,
            )

    async def get_user(self, user_id: str) -> Optional[ReplicaUser]:
        user = self.users.get(user_id)
        return user.model_copy() if user else None

    async def list_users(self) -> List[ReplicaUser]:
        return [u.model_copy() for u in self.users.values()]

    async def create_team(self, team: Team) -> Result:
        async with self._lock:
            if team.id in self.teams:
                return Result.conflict(f"Team {team.id} already exists")
            if any(t.name == team.name for t in self.teams.values()):
                return Result.conflict("Team name already exists")

            members = dict(self.members)
            for member in team.members:
                members[member.id] = member.model_copy()
            self.teams = {**self.teams, team.id: team.model_copy(update={"members": []})}
            self.members = members
            return Result.ok()

    async def get_team(self, team_id: str) -> Optional[Team]:
        team = self.teams.get(team_id)
        if team is None:
            return None
        return self._with_members(team)

    async def list_teams(self) -> List[Team]:
        return [self._with_members(t) for t in self.teams.values()]

    def _with_members(self, team: Team) -> Team:
        members = sorted(
            (m.model_copy() for m in self.members.values() if m.team_id == team.id),
            key=lambda m: m.joined_at,
        )
        return team.model_copy(update={"members": members})

    async def add_member(self, member: TeamMember) -> Result:
        async with self._lock:
            if member.team_id not in self.teams:
                return Result.not_found(f"Team {member.team_id} not found")
            if any(m.team_id == member.team_id and m.user_id == member.user_id for m in self.members.values()):
                return Result.conflict("User is already a member of this team")
            self.members = {**self.members, member.id: member.model_copy()}
            return Result.ok()

    async def remove_member(self, team_id: str, user_id: str) -> Result:
        async with self._lock:
            members = {
                key: m for key, m in self.members.items()
                if not (m.team_id == team_id and m.user_id == user_id)
            }
            if len(members) == len(self.members):
                return Result.not_found(f"User {user_id} is not a member of team {team_id}")
            self.members = members
            return Result.ok()

    async def delete_team(self, team_id: str) -> Result:
        async with self._lock:
            if team_id not in self.teams:
                return Result.not_found(f"Team {team_id} not found")
            members = {key: m for key, m in self.members.items() if m.team_id != team_id}
            teams = {tid: t for tid, t in self.teams.items() if tid != team_id}
            removed_memberships = len(self.members) - len(members)
            self.teams, self.members = teams, members
            return Result.ok(removed_memberships=removed_memberships)
