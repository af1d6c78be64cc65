"""
Notification Service
Pushes notifications to connected clients and sends notification emails
"""

import asyncio
from typing import Iterable

from teamfinder.core.logger import logger
from teamfinder.notifications.connection_manager import ConnectionManager
from teamfinder.notifications.email_service import EmailService
from teamfinder.notifications.models import Notification, team_group, user_group

RECEIVE_NOTIFICATION = "ReceiveNotification"


class NotificationService:
    """
    Real-time pushes are best effort: failures are logged and never raised.
    Email sends report failure to the caller.
    """

    def __init__(self, connections: ConnectionManager, email_service: EmailService):
        self.connections = connections
        self.email_service = email_service

    async def send_to_all(self, notification: Notification) -> None:
        await self._push(None, notification)

    async def send_to_user(self, user_id: str, notification: Notification) -> None:
        await self._push(user_group(user_id), notification)

    async def send_to_team(self, team_id: str, notification: Notification) -> None:
        await self._push(team_group(team_id), notification)

    async def _push(self, group, notification: Notification) -> None:
        payload = notification.model_dump(mode="json")
        try:
            if group is None:
                delivered = await self.connections.broadcast(RECEIVE_NOTIFICATION, payload)
            else:
                delivered = await self.connections.send_to_group(group, RECEIVE_NOTIFICATION, payload)
        except Exception as e:
            logger.error(
                f"Failed to push {notification.type} notification",
                metadata={"group": group or "all"},
                error=e,
            )
            return

        logger.info(
            f"Sent {notification.type} notification",
            metadata={"group": group or "all", "delivered": delivered},
        )

    async def send_email_to_user(self, email: str, notification: Notification) -> None:
        await self.email_service.send_email_notification(email, notification)

    async def send_email_to_users(self, emails: Iterable[str], notification: Notification) -> None:
        """Send to every address concurrently; raises the first failure once all have settled"""
        sends = [self.email_service.send_email_notification(email, notification) for email in emails]
        results = await asyncio.gather(*sends, return_exceptions=True)
        errors = [r for r in results if isinstance(r, BaseException)]
        if errors:
            logger.error(
                f"{len(errors)} of {len(results)} notification emails failed",
                metadata={"type": notification.type},
            )
            raise errors[0]
