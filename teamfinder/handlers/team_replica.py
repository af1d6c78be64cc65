"""
User Replica Handlers
Keep the team-matching service's copy of user records in step with the user
service. These handlers are the only writers of replica users.
"""

from typing import Dict

from teamfinder.core.errors import StoreUnavailableError
from teamfinder.core.logger import logger
from teamfinder.core.results import Result
from teamfinder.events import UserDeletedEvent, UserRegisteredEvent, UserUpdatedEvent
from teamfinder.messaging.dispatcher import EventHandler
from teamfinder.models.team import ReplicaUser
from teamfinder.repositories.base import TeamRepository


class TeamReplicaHandlers:
    """Apply user lifecycle events to a TeamRepository"""

    def __init__(self, repository: TeamRepository):
        self.repository = repository

    def registry(self) -> Dict[str, EventHandler]:
        """Handlers keyed by routing key"""
        return {
            UserRegisteredEvent.routing_key: self.handle_user_registered,
            UserUpdatedEvent.routing_key: self.handle_user_updated,
            UserDeletedEvent.routing_key: self.handle_user_deleted,
        }

    async def handle_user_registered(self, event: UserRegisteredEvent) -> Result:
        user = ReplicaUser(
            id=event.user_id,
            username=event.username,
            email=event.email,
            gaming_platform=event.gaming_platform,
            preferred_game=event.preferred_game,
            skill_level=event.skill_level,
        )
        try:
            result = await self.repository.add_user(user)
        except StoreUnavailableError as e:
            return Result.retryable(str(e))

        if result.is_ok:
            logger.info(
                f"Replicated user {event.username}",
                metadata={"userId": event.user_id},
            )
        else:
            logger.info(
                f"User {event.user_id} already replicated, skipping",
                metadata={"userId": event.user_id, "outcome": result.outcome.value},
            )
        return result

    async def handle_user_updated(self, event: UserUpdatedEvent) -> Result:
        changes = event.changed_fields()
        try:
            result = await self.repository.update_user(event.user_id, changes)
        except StoreUnavailableError as e:
            return Result.retryable(str(e))

        if result.is_ok:
            logger.info(
                f"Updated replica of user {event.user_id}",
                metadata={"userId": event.user_id, "fields": sorted(changes)},
            )
        else:
            logger.warning(
                f"User {event.user_id} not in replica, update ignored",
                metadata={"userId": event.user_id},
            )
        return result

    async def handle_user_deleted(self, event: UserDeletedEvent) -> Result:
        try:
            result = await self.repository.delete_user(event.user_id)
        except StoreUnavailableError as e:
            return Result.retryable(str(e))

        if result.is_ok:
            logger.info(
                f"Removed user {event.user_id} from replica",
                metadata={"userId": event.user_id, **result.data},
            )
        else:
            logger.info(
                f"User {event.user_id} not in replica, nothing to delete",
                metadata={"userId": event.user_id},
            )
        return result
