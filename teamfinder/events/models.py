"""
Domain events exchanged between the Team Finder services

Each event model is immutable and owns exactly one routing key. The wire format
is a UTF-8 JSON object with camelCase field names.
"""

from enum import Enum
from typing import ClassVar, Dict, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

USER_EVENTS_EXCHANGE = "user_events"
TEAM_EVENTS_EXCHANGE = "team_events"


class EventKind(str, Enum):
    USER_REGISTERED = "UserRegistered"
    USER_UPDATED = "UserUpdated"
    USER_DELETED = "UserDeleted"
    TEAM_CREATED = "TeamCreated"
    TEAM_JOINED = "TeamJoined"
    TEAM_LEFT = "TeamLeft"
    TEAM_DELETED = "TeamDeleted"


class DomainEvent(BaseModel):
    """Base class for all published events"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    kind: ClassVar[EventKind]
    routing_key: ClassVar[str]
    exchange: ClassVar[str]


# User events
class UserRegisteredEvent(DomainEvent):
    kind: ClassVar[EventKind] = EventKind.USER_REGISTERED
    routing_key: ClassVar[str] = "user.registered"
    exchange: ClassVar[str] = USER_EVENTS_EXCHANGE

    user_id: str = Field(..., min_length=1)
    username: str
    email: str
    gaming_platform: Optional[str] = None
    preferred_game: Optional[str] = None
    skill_level: Optional[str] = None


class UserUpdatedEvent(DomainEvent):
    kind: ClassVar[EventKind] = EventKind.USER_UPDATED
    routing_key: ClassVar[str] = "user.updated"
    exchange: ClassVar[str] = USER_EVENTS_EXCHANGE

    user_id: str = Field(..., min_length=1)
    username: str
    email: str
    gaming_platform: Optional[str] = None
    preferred_game: Optional[str] = None
    skill_level: Optional[str] = None

    def changed_fields(self) -> Dict[str, Optional[str]]:
        """Profile fields carried by this event, keyed by replica field name"""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if name != "user_id"
        }


class UserDeletedEvent(DomainEvent):
    kind: ClassVar[EventKind] = EventKind.USER_DELETED
    routing_key: ClassVar[str] = "user.deleted"
    exchange: ClassVar[str] = USER_EVENTS_EXCHANGE

    user_id: str = Field(..., min_length=1)


# Team events
class TeamCreatedEvent(DomainEvent):
    kind: ClassVar[EventKind] = EventKind.TEAM_CREATED
    routing_key: ClassVar[str] = "team.created"
    exchange: ClassVar[str] = TEAM_EVENTS_EXCHANGE

    team_id: str = Field(..., min_length=1)
    team_name: str
    owner_id: str = Field(..., min_length=1)


class TeamJoinedEvent(DomainEvent):
    kind: ClassVar[EventKind] = EventKind.TEAM_JOINED
    routing_key: ClassVar[str] = "team.joined"
    exchange: ClassVar[str] = TEAM_EVENTS_EXCHANGE

    team_id: str = Field(..., min_length=1)
    team_name: str
    user_id: str = Field(..., min_length=1)
    username: str


class TeamLeftEvent(DomainEvent):
    kind: ClassVar[EventKind] = EventKind.TEAM_LEFT
    routing_key: ClassVar[str] = "team.left"
    exchange: ClassVar[str] = TEAM_EVENTS_EXCHANGE

    team_id: str = Field(..., min_length=1)
    team_name: str
    user_id: str = Field(..., min_length=1)
    username: str


class TeamDeletedEvent(DomainEvent):
    kind: ClassVar[EventKind] = EventKind.TEAM_DELETED
    routing_key: ClassVar[str] = "team.deleted"
    exchange: ClassVar[str] = TEAM_EVENTS_EXCHANGE

    team_id: str = Field(..., min_length=1)
    team_name: str


EVENT_TYPES: Tuple[Type[DomainEvent], ...] = (
    UserRegisteredEvent,
    UserUpdatedEvent,
    UserDeletedEvent,
    TeamCreatedEvent,
    TeamJoinedEvent,
    TeamLeftEvent,
    TeamDeletedEvent,
)

EVENTS_BY_KIND: Dict[EventKind, Type[DomainEvent]] = {e.kind: e for e in EVENT_TYPES}
EVENTS_BY_ROUTING_KEY: Dict[str, Type[DomainEvent]] = {e.routing_key: e for e in EVENT_TYPES}
