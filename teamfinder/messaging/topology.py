"""
Exchange and queue contracts for the Team Finder message bus
"""

from dataclasses import dataclass
from typing import Tuple

from teamfinder.events import TEAM_EVENTS_EXCHANGE, USER_EVENTS_EXCHANGE, routing_keys_for_exchange


@dataclass(frozen=True)
class QueueBinding:
    """A durable, non-exclusive queue bound to an exchange under one or more routing keys"""

    exchange: str
    queue: str
    routing_keys: Tuple[str, ...]

    @property
    def dead_letter_exchange(self) -> str:
        return f"{self.exchange}.dlx"

    @property
    def dead_letter_queue(self) -> str:
        return f"{self.queue}.dead_letter"


def _binding(exchange: str, queue: str) -> QueueBinding:
    return QueueBinding(exchange, queue, tuple(routing_keys_for_exchange(exchange)))


NOTIFICATION_USER_EVENTS = _binding(USER_EVENTS_EXCHANGE, "notification_service_user_events")
NOTIFICATION_TEAM_EVENTS = _binding(TEAM_EVENTS_EXCHANGE, "notification_service_team_events")
TEAM_SERVICE_USER_EVENTS = _binding(USER_EVENTS_EXCHANGE, "team_service_user_events")
