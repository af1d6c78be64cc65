"""
MongoDB team repository
Every multi-document change runs inside one transaction, so an event is either
fully applied or not at all.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, IndexModel
from pymongo.errors import DuplicateKeyError, PyMongoError

from teamfinder.core.errors import StoreUnavailableError
from teamfinder.core.logger import logger
from teamfinder.core.results import Result
from teamfinder.models.team import REPLICA_USER_FIELDS, ReplicaUser, Team, TeamMember
from teamfinder.repositories.base import TeamRepository


def _to_doc(model, exclude=None) -> Dict[str, Any]:
    doc = {
        key: value.value if isinstance(value, Enum) else value
        for key, value in model.model_dump(mode="python", exclude=exclude).items()
    }
    doc["_id"] = doc.pop("id")
    return doc


def _from_doc(doc: Dict[str, Any]) -> Dict[str, Any]:
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    return doc


class MongoTeamRepository(TeamRepository):
    """TeamRepository backed by the `users`, `teams` and `team_members` collections"""

    def __init__(self, database: AsyncIOMotorDatabase):
        self.database = database
        self.client = database.client
        self.users = database["users"]
        self.teams = database["teams"]
        self.members = database["team_members"]
        self._indexes_created = False

    async def ensure_indexes(self) -> None:
        """Create indexes backing idempotency and cascades"""
        if self._indexes_created:
            return

        try:
            await self.teams.create_indexes([
                IndexModel([("name", ASCENDING)], unique=True, name="name_unique"),
                IndexModel([("owner_id", ASCENDING)], name="owner_id_idx"),
            ])
            await self.members.create_indexes([
                IndexModel(
                    [("team_id", ASCENDING), ("user_id", ASCENDING)],
                    unique=True,
                    name="team_user_unique",
                ),
                IndexModel([("user_id", ASCENDING)], name="user_id_idx"),
            ])
        except PyMongoError as e:
            self._unavailable("creating indexes", e)

        self._indexes_created = True
        logger.info("Team repository indexes created")

    def _unavailable(self, operation: str, error: PyMongoError):
        logger.error(f"MongoDB error {operation}", error=error)
        raise StoreUnavailableError(f"Database error {operation}") from error

    async def add_user(self, user: ReplicaUser) -> Result:
        try:
            await self.users.insert_one(_to_doc(user))
            return Result.ok()
        except DuplicateKeyError:
            return Result.conflict(f"User {user.id} already exists")
        except PyMongoError as e:
            self._unavailable("adding replica user", e)

    async def update_user(self, user_id: str, changes: Dict[str, Any]) -> Result:
        fields = {k: v for k, v in changes.items() if k in REPLICA_USER_FIELDS}
        try:
            async with await self.client.start_session() as session:
                async with session.start_transaction():
                    if fields:
                        result = await self.users.update_one(
                            {"_id": user_id}, {"$set": fields}, session=session
                        )
                        found = result.matched_count > 0
                    else:
                        found = await self.users.count_documents(
                            {"_id": user_id}, limit=1, session=session
                        ) > 0
                    if not found:
                        return Result.not_found(f"User {user_id} not found")

                    if "username" in fields:
                        await self.members.update_many(
                            {"user_id": user_id},
                            {"$set": {"username": fields["username"]}},
                            session=session,
                        )
            return Result.ok()
        except PyMongoError as e:
            self._unavailable("updating replica user", e)

    async def delete_user(self, user_id: str) -> Result:
        try:
            async with await self.client.start_session() as session:
                async with session.start_transaction():
                    if await self.users.find_one({"_id": user_id}, session=session) is None:
                        return Result.not_found(f"User {user_id} not found")

                    owned = [
                        doc["_id"]
                        async for doc in self.teams.find({"owner_id": user_id}, {"_id": 1}, session=session)
                    ]
                    removed_owned = await self.members.delete_many(
                        {"team_id": {"$in": owned}}, session=session
                    )
                    removed_other = await self.members.delete_many(
                        {"user_id": user_id}, session=session
                    )
                    await self.teams.delete_many({"_id": {"$in": owned}}, session=session)
                    await self.users.delete_one({"_id": user_id}, session=session)

            return Result.ok(
                removed_teams=len(owned),
                removed_memberships=removed_owned.deleted_count + removed_other.deleted_count,
            )
        except PyMongoError as e:
            self._unavailable("deleting replica user", e)

    async def get_user(self, user_id: str) -> Optional[ReplicaUser]:
        try:
            doc = await self.users.find_one({"_id": user_id})
        except PyMongoError as e:
            self._unavailable("getting replica user", e)
        return ReplicaUser(**_from_doc(doc)) if doc else None

    async def list_users(self) -> List[ReplicaUser]:
        try:
            docs = await self.users.find().to_list(length=None)
        except PyMongoError as e:
            self._unavailable("listing replica users", e)
        return [ReplicaUser(**_from_doc(doc)) for doc in docs]

    async def create_team(self, team: Team) -> Result:
        try:
            async with await self.client.start_session() as session:
                async with session.start_transaction():
                    await self.teams.insert_one(_to_doc(team, exclude={"members"}), session=session)
                    if team.members:
                        await self.members.insert_many(
                            [_to_doc(m) for m in team.members], session=session
                        )
            return Result.ok()
        except DuplicateKeyError:
            return Result.conflict("Team name already exists")
        except PyMongoError as e:
            self._unavailable("creating team", e)

    async def get_team(self, team_id: str) -> Optional[Team]:
        try:
            doc = await self.teams.find_one({"_id": team_id})
            if doc is None:
                return None
            members = await self.members.find({"team_id": team_id}).sort("joined_at", ASCENDING).to_list(length=None)
        except PyMongoError as e:
            self._unavailable("getting team", e)
        return Team(**_from_doc(doc), members=[TeamMember(**_from_doc(m)) for m in members])

    async def list_teams(self) -> List[Team]:
        try:
            docs = await self.teams.find().to_list(length=None)
            members = await self.members.find().sort("joined_at", ASCENDING).to_list(length=None)
        except PyMongoError as e:
            self._unavailable("listing teams", e)

        by_team: Dict[str, List[TeamMember]] = {}
        for m in members:
            member = TeamMember(**_from_doc(m))
            by_team.setdefault(member.team_id, []).append(member)
        return [
            Team(**_from_doc(doc), members=by_team.get(str(doc["_id"]), []))
            for doc in docs
        ]

    async def add_member(self, member: TeamMember) -> Result:
        try:
            if await self.teams.count_documents({"_id": member.team_id}, limit=1) == 0:
                return Result.not_found(f"Team {member.team_id} not found")
            await self.members.insert_one(_to_doc(member))
            return Result.ok()
        except DuplicateKeyError:
            return Result.conflict("User is already a member of this team")
        except PyMongoError as e:
            self._unavailable("adding team member", e)

    async def remove_member(self, team_id: str, user_id: str) -> Result:
        try:
            result = await self.members.delete_one({"team_id": team_id, "user_id": user_id})
        except PyMongoError as e:
            self._unavailable("removing team member", e)
        if result.deleted_count == 0:
            return Result.not_found(f"User {user_id} is not a member of team {team_id}")
        return Result.ok()

    async def delete_team(self, team_id: str) -> Result:
        try:
            async with await self.client.start_session() as session:
                async with session.start_transaction():
                    deleted = await self.teams.delete_one({"_id": team_id}, session=session)
                    if deleted.deleted_count == 0:
                        return Result.not_found(f"Team {team_id} not found")
                    removed = await self.members.delete_many({"team_id": team_id}, session=session)
            return Result.ok(removed_memberships=removed.deleted_count)
        except PyMongoError as e:
            self._unavailable("deleting team", e)
