"""
Messaging module
Publisher, consumer and dispatcher for the RabbitMQ topic exchanges
"""

from .consumer import ConsumerState, EventConsumer
from .dispatcher import Disposition, EventDispatcher, RetryPolicy
from .publisher import EventPublisher
from .topology import (
    NOTIFICATION_TEAM_EVENTS,
    NOTIFICATION_USER_EVENTS,
    TEAM_SERVICE_USER_EVENTS,
    QueueBinding,
)

__all__ = [
    "ConsumerState",
    "EventConsumer",
    "Disposition",
    "EventDispatcher",
    "RetryPolicy",
    "EventPublisher",
    "NOTIFICATION_TEAM_EVENTS",
    "NOTIFICATION_USER_EVENTS",
    "TEAM_SERVICE_USER_EVENTS",
    "QueueBinding",
]
