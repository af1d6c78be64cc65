"""
Event Dispatcher
Decodes consumed messages, routes them to handlers by routing key and decides
whether each message is acknowledged, requeued or dead-lettered
"""

from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Dict, Mapping, Optional

from teamfinder.core.errors import EventDeserializationError, UnknownRoutingKeyError
from teamfinder.core.logger import logger
from teamfinder.core.results import Outcome, Result
from teamfinder.events import DomainEvent, deserialize_event

EventHandler = Callable[[DomainEvent], Awaitable[Result]]


class Disposition(str, Enum):
    ACK = "ack"
    REQUEUE = "requeue"
    DEAD_LETTER = "dead_letter"


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded retry for handler failures.

    `max_attempts` counts deliveries of one message, including the first.
    Zero disables the bound: failures are requeued forever.
    """

    max_attempts: int = 10
    backoff_seconds: float = 0.5
    max_backoff_seconds: float = 5.0

    @property
    def unbounded(self) -> bool:
        return self.max_attempts <= 0

    def backoff_for(self, attempt: int) -> float:
        """Delay before handing back a message that failed `attempt` times"""
        return min(self.backoff_seconds * attempt, self.max_backoff_seconds)


class AttemptTracker:
    """Counts failed deliveries per message id, forgetting the oldest entries first"""

    def __init__(self, capacity: int = 10000):
        self.capacity = capacity
        self._attempts: "OrderedDict[str, int]" = OrderedDict()

    def record_failure(self, message_id: str) -> int:
        attempts = self._attempts.pop(message_id, 0) + 1
        self._attempts[message_id] = attempts
        while len(self._attempts) > self.capacity:
            self._attempts.popitem(last=False)
        return attempts

    def count(self, message_id: str) -> int:
        return self._attempts.get(message_id, 0)

    def forget(self, message_id: str) -> None:
        self._attempts.pop(message_id, None)

    def __len__(self) -> int:
        return len(self._attempts)


class EventDispatcher:
    """Routes decoded events to the handler registered for their routing key"""

    def __init__(
        self,
        handlers: Mapping[str, EventHandler],
        retry_policy: Optional[RetryPolicy] = None,
        name: str = "dispatcher",
    ):
        self.handlers: Dict[str, EventHandler] = dict(handlers)
        self.retry_policy = retry_policy or RetryPolicy()
        self.name = name
        self.attempts = AttemptTracker()

    async def dispatch(
        self,
        routing_key: str,
        body: bytes,
        message_id: Optional[str] = None,
        redelivered: bool = False,
    ) -> Disposition:
        """
        Process one message and decide its fate

        Args:
            routing_key: Routing key the message was delivered with
            body: Raw message body
            message_id: Broker message id, used to count retries
            redelivered: Whether the broker has delivered this message before

        Returns:
            Disposition telling the consumer how to settle the message
        """
        log_meta = {
            "consumer": self.name,
            "routingKey": routing_key,
            "messageId": message_id,
            "redelivered": redelivered,
        }

        try:
            event = deserialize_event(routing_key, body)
        except UnknownRoutingKeyError:
            logger.warning(f"⚠️ Unknown routing key: {routing_key}, dropping message", metadata=log_meta)
            return Disposition.ACK
        except EventDeserializationError as e:
            # Poison message: acknowledged, never requeued
            logger.error(
                f"❌ Failed to deserialize {routing_key} event, dropping message",
                metadata=log_meta,
                error=e,
            )
            return Disposition.ACK

        handler = self.handlers.get(routing_key)
        if handler is None:
            logger.warning(f"⚠️ No handler registered for routing key: {routing_key}", metadata=log_meta)
            return Disposition.ACK

        try:
            result = await handler(event)
        except Exception as e:
            logger.error(f"❌ Handler for {routing_key} raised", metadata=log_meta, error=e)
            result = Result.retryable(str(e))

        if result.outcome is Outcome.OK:
            logger.debug(f"✅ Processed {routing_key}", metadata=log_meta)
        elif result.outcome in (Outcome.NOT_FOUND, Outcome.CONFLICT):
            logger.info(
                f"Skipped {routing_key}: {result.detail or result.outcome.value}",
                metadata={**log_meta, "outcome": result.outcome.value},
            )
        else:
            return self._on_failure(routing_key, message_id, result, log_meta)

        if message_id:
            self.attempts.forget(message_id)
        return Disposition.ACK

    def _on_failure(self, routing_key: str, message_id: Optional[str], result: Result, log_meta: dict) -> Disposition:
        if self.retry_policy.unbounded or not message_id:
            logger.warning(f"Requeueing {routing_key}: {result.detail}", metadata=log_meta)
            return Disposition.REQUEUE

        attempts = self.attempts.record_failure(message_id)
        if attempts >= self.retry_policy.max_attempts:
            self.attempts.forget(message_id)
            logger.error(
                f"Giving up on {routing_key} after {attempts} attempts, dead-lettering",
                metadata={**log_meta, "attempts": attempts, "reason": result.detail},
            )
            return Disposition.DEAD_LETTER

        logger.warning(
            f"Requeueing {routing_key} (attempt {attempts}/{self.retry_policy.max_attempts})",
            metadata={**log_meta, "attempts": attempts, "reason": result.detail},
        )
        return Disposition.REQUEUE

    def backoff_for(self, message_id: Optional[str]) -> float:
        """Delay the consumer should wait before requeueing a failed message"""
        if not message_id:
            return self.retry_policy.backoff_seconds
        return self.retry_policy.backoff_for(max(self.attempts.count(message_id), 1))
