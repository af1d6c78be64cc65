"""
Event contract shared by every publisher and consumer
"""

from .models import (
    EVENT_TYPES,
    TEAM_EVENTS_EXCHANGE,
    USER_EVENTS_EXCHANGE,
    DomainEvent,
    EventKind,
    TeamCreatedEvent,
    TeamDeletedEvent,
    TeamJoinedEvent,
    TeamLeftEvent,
    UserDeletedEvent,
    UserRegisteredEvent,
    UserUpdatedEvent,
)
from .serialization import (
    deserialize_event,
    event_for_kind,
    routing_keys_for_exchange,
    serialize_event,
)

__all__ = [
    "EVENT_TYPES",
    "TEAM_EVENTS_EXCHANGE",
    "USER_EVENTS_EXCHANGE",
    "DomainEvent",
    "EventKind",
    "TeamCreatedEvent",
    "TeamDeletedEvent",
    "TeamJoinedEvent",
    "TeamLeftEvent",
    "UserDeletedEvent",
    "UserRegisteredEvent",
    "UserUpdatedEvent",
    "deserialize_event",
    "event_for_kind",
    "routing_keys_for_exchange",
    "serialize_event",
]
