"""
Encoding and decoding of domain events for the message bus
"""

import json
from typing import List, Type

from pydantic import ValidationError

from teamfinder.core.errors import EventDeserializationError, UnknownRoutingKeyError
from teamfinder.events.models import (
    EVENT_TYPES,
    EVENTS_BY_KIND,
    EVENTS_BY_ROUTING_KEY,
    DomainEvent,
    EventKind,
)


def serialize_event(event: DomainEvent) -> bytes:
    """
    Encode an event as a UTF-8 JSON object using its wire field names

    Optional fields that were never set are left out of the payload.
    """
    return event.model_dump_json(by_alias=True, exclude_unset=True).encode("utf-8")


def deserialize_event(routing_key: str, body: bytes) -> DomainEvent:
    """
    Decode a message body into the event published under `routing_key`

    Args:
        routing_key: Routing key the message was delivered with
        body: Raw message body

    Returns:
        The decoded event

    Raises:
        UnknownRoutingKeyError: No event kind uses this routing key
        EventDeserializationError: The body is not a valid payload for the kind
    """
    event_type = EVENTS_BY_ROUTING_KEY.get(routing_key)
    if event_type is None:
        raise UnknownRoutingKeyError(routing_key)

    try:
        payload = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError, RecursionError) as e:
        # ValueError also covers oversized integer literals, RecursionError deep nesting
        raise EventDeserializationError(routing_key, f"invalid JSON ({e})") from e

    if not isinstance(payload, dict):
        raise EventDeserializationError(routing_key, "payload is not a JSON object")

    try:
        return event_type.model_validate(payload)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise EventDeserializationError(routing_key, f"invalid fields: {fields}") from e


def event_for_kind(kind: EventKind) -> Type[DomainEvent]:
    """Get the event model for an event kind"""
    return EVENTS_BY_KIND[kind]


def routing_keys_for_exchange(exchange: str) -> List[str]:
    """All routing keys published to an exchange, in declaration order"""
    return [e.routing_key for e in EVENT_TYPES if e.exchange == exchange]
