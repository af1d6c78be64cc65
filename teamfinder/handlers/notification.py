"""
Notification Handlers
Turn user and team lifecycle events into real-time notifications
"""

from typing import Dict

from teamfinder.core.logger import logger
from teamfinder.core.results import Result
from teamfinder.events import (
    DomainEvent,
    TeamCreatedEvent,
    TeamDeletedEvent,
    TeamJoinedEvent,
    TeamLeftEvent,
    UserDeletedEvent,
    UserRegisteredEvent,
    UserUpdatedEvent,
)
from teamfinder.messaging.dispatcher import EventHandler
from teamfinder.notifications.models import Notification
from teamfinder.notifications.service import NotificationService


def _notification(type_: str, message: str, event: DomainEvent) -> Notification:
    return Notification(type=type_, message=message, data=event.model_dump(by_alias=True, exclude_unset=True))


class NotificationHandlers:
    """Handlers for both notification queues"""

    def __init__(self, service: NotificationService):
        self.service = service

    def registry(self) -> Dict[str, EventHandler]:
        """Handlers keyed by routing key"""
        return {
            UserRegisteredEvent.routing_key: self.handle_user_registered,
            UserUpdatedEvent.routing_key: self.handle_user_updated,
            UserDeletedEvent.routing_key: self.handle_user_deleted,
            TeamCreatedEvent.routing_key: self.handle_team_created,
            TeamJoinedEvent.routing_key: self.handle_team_joined,
            TeamLeftEvent.routing_key: self.handle_team_left,
            TeamDeletedEvent.routing_key: self.handle_team_deleted,
        }

    async def handle_user_registered(self, event: UserRegisteredEvent) -> Result:
        await self.service.send_to_user(
            event.user_id,
            _notification(
                "UserRegistered",
                f"Welcome, {event.username}! Your account has been created successfully.",
                event,
            ),
        )
        return Result.ok()

    async def handle_user_updated(self, event: UserUpdatedEvent) -> Result:
        await self.service.send_to_user(
            event.user_id,
            _notification("UserUpdated", "Your profile has been updated successfully.", event),
        )
        return Result.ok()

    async def handle_user_deleted(self, event: UserDeletedEvent) -> Result:
        # Nobody is left to receive a push for a deleted account
        logger.info(f"User {event.user_id} deleted, no notification sent", metadata={"userId": event.user_id})
        return Result.ok()

    async def handle_team_created(self, event: TeamCreatedEvent) -> Result:
        await self.service.send_to_user(
            event.owner_id,
            _notification(
                "TeamCreated",
                f"Your team '{event.team_name}' has been created successfully!",
                event,
            ),
        )
        return Result.ok()

    async def handle_team_joined(self, event: TeamJoinedEvent) -> Result:
        await self.service.send_to_user(
            event.user_id,
            _notification(
                "TeamJoined",
                f"You have successfully joined the team '{event.team_name}'!",
                event,
            ),
        )
        await self.service.send_to_team(
            event.team_id,
            _notification("TeamMemberJoined", f"{event.username} has joined the team!", event),
        )
        return Result.ok()

    async def handle_team_left(self, event: TeamLeftEvent) -> Result:
        await self.service.send_to_user(
            event.user_id,
            _notification("TeamLeft", f"You have left the team '{event.team_name}'.", event),
        )
        await self.service.send_to_team(
            event.team_id,
            _notification("TeamMemberLeft", f"{event.username} has left the team.", event),
        )
        return Result.ok()

    async def handle_team_deleted(self, event: TeamDeletedEvent) -> Result:
        await self.service.send_to_team(
            event.team_id,
            _notification("TeamDeleted", f"Team '{event.team_name}' has been deleted.", event),
        )
        return Result.ok()
