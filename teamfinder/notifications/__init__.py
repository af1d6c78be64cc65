"""
Notification fan-out gateway
"""

from .connection_manager import ConnectionManager
from .email_service import EmailService
from .models import Notification, team_group, user_group
from .service import RECEIVE_NOTIFICATION, NotificationService

__all__ = [
    "ConnectionManager",
    "EmailService",
    "Notification",
    "team_group",
    "user_group",
    "RECEIVE_NOTIFICATION",
    "NotificationService",
]
