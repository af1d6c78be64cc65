"""
User service: account lifecycle and the user events it publishes
"""

import uuid
from typing import List

from teamfinder.core.errors import ErrorResponse
from teamfinder.core.logger import logger
from teamfinder.core.results import Outcome, Result
from teamfinder.events import UserDeletedEvent, UserRegisteredEvent, UserUpdatedEvent
from teamfinder.messaging.publisher import EventPublisher
from teamfinder.models.user import User
from teamfinder.repositories.users import UserRepository
from teamfinder.schemas.user import UserCreate, UserUpdate


def _raise_for(result: Result) -> None:
    if result.outcome is Outcome.NOT_FOUND:
        raise ErrorResponse("User not found", status_code=404)
    if result.outcome is Outcome.CONFLICT:
        raise ErrorResponse(result.detail or "User already exists", status_code=409)


class UserService:
    """Service layer for user accounts"""

    def __init__(self, repository: UserRepository, publisher: EventPublisher):
        self.repository = repository
        self.publisher = publisher

    async def register_user(self, user_data: UserCreate) -> User:
        user = User(id=str(uuid.uuid4()), **user_data.model_dump())
        _raise_for(await self.repository.create(user))

        logger.info(
            f"Registered user {user.username}",
            metadata={"event": "register_user", "user_id": user.id},
        )

        await self.publisher.publish(
            UserRegisteredEvent(
                user_id=user.id,
                username=user.username,
                email=user.email,
                gaming_platform=user.gaming_platform,
                preferred_game=user.preferred_game,
                skill_level=user.skill_level,
            )
        )
        return user

    async def get_user(self, user_id: str) -> User:
        user = await self.repository.get(user_id)
        if user is None:
            raise ErrorResponse("User not found", status_code=404)
        return user

    async def list_users(self) -> List[User]:
        return await self.repository.list()

    async def update_user(self, user_id: str, user_data: UserUpdate) -> User:
        changes = user_data.model_dump(exclude_unset=True)
        for required in ("username", "email"):
            if required in changes and changes[required] is None:
                raise ErrorResponse(f"{required} cannot be empty", status_code=400)

        result = await self.repository.update(user_id, changes)
        _raise_for(result)
        user: User = result.data["user"]

        logger.info(
            f"Updated user {user.username}",
            metadata={"event": "update_user", "user_id": user.id, "fields": sorted(changes)},
        )

        # Carries the full profile, not just the changed fields
        await self.publisher.publish(
            UserUpdatedEvent(
                user_id=user.id,
                username=user.username,
                email=user.email,
                gaming_platform=user.gaming_platform,
                preferred_game=user.preferred_game,
                skill_level=user.skill_level,
            )
        )
        return user

    async def delete_user(self, user_id: str) -> None:
        _raise_for(await self.repository.delete(user_id))

        logger.info(
            f"Deleted user {user_id}",
            metadata={"event": "delete_user", "user_id": user_id},
        )

        await self.publisher.publish(UserDeletedEvent(user_id=user_id))
