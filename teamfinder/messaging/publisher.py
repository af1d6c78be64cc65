"""
RabbitMQ Event Publisher
Publishes domain events to a durable topic exchange using aio-pika
"""

import asyncio
import uuid
from datetime import datetime, timezone
from typing import Optional

import aio_pika
from aio_pika import DeliveryMode, ExchangeType

from teamfinder.core.correlation_id import get_correlation_id
from teamfinder.core.logger import logger
from teamfinder.events import DomainEvent, serialize_event


class EventPublisher:
    """
    Best-effort publisher bound to one topic exchange.

    If the broker cannot be reached in `connect()` the publisher stays degraded:
    every `publish()` logs a warning and returns, so the owning service keeps
    serving requests without messaging.
    """

    def __init__(
        self,
        rabbitmq_url: str,
        exchange_name: str,
        service_name: str = "teamfinder",
        publish_timeout: float = 5.0,
    ):
        self.rabbitmq_url = rabbitmq_url
        self.exchange_name = exchange_name
        self.service_name = service_name
        self.publish_timeout = publish_timeout
        self.connection: Optional[aio_pika.abc.AbstractRobustConnection] = None
        self.channel: Optional[aio_pika.abc.AbstractChannel] = None
        self.exchange: Optional[aio_pika.abc.AbstractExchange] = None

    @property
    def is_degraded(self) -> bool:
        return self.exchange is None

    async def connect(self) -> None:
        """Connect and declare the exchange; failures leave the publisher degraded"""
        try:
            logger.info(
                "Connecting publisher to RabbitMQ...",
                metadata={"exchange": self.exchange_name},
            )
            self.connection = await aio_pika.connect_robust(self.rabbitmq_url)
            self.channel = await self.connection.channel(publisher_confirms=True)

            # Declaring an existing durable exchange with the same type is a no-op
            self.exchange = await self.channel.declare_exchange(
                self.exchange_name,
                ExchangeType.TOPIC,
                durable=True,
                auto_delete=False,
            )
            logger.info(
                "✅ Publisher ready",
                metadata={"exchange": self.exchange_name},
            )
        except Exception as e:
            logger.warning(
                "RabbitMQ unavailable, publisher running in degraded mode",
                metadata={"exchange": self.exchange_name},
                error=e,
            )
            await self._release()

    async def publish(self, event: DomainEvent, routing_key: Optional[str] = None) -> None:
        """
        Publish an event; never raises.

        Args:
            event: The event to publish
            routing_key: Optional explicit routing key, must match the event's own key
        """
        routing_key = routing_key or event.routing_key
        correlation_id = get_correlation_id()
        log_meta = {
            "exchange": self.exchange_name,
            "routingKey": routing_key,
            "eventType": event.kind.value,
        }

        if routing_key != event.routing_key:
            logger.error(
                f"Refusing to publish {event.kind.value} under routing key {routing_key}",
                correlation_id=correlation_id,
                metadata=log_meta,
            )
            return

        if event.exchange != self.exchange_name:
            logger.error(
                f"{event.kind.value} belongs to exchange {event.exchange}",
                correlation_id=correlation_id,
                metadata=log_meta,
            )
            return

        if self.is_degraded:
            logger.warning(
                "RabbitMQ connection not available. Message not published.",
                correlation_id=correlation_id,
                metadata=log_meta,
            )
            return

        try:
            message = aio_pika.Message(
                body=serialize_event(event),
                content_type="application/json",
                content_encoding="utf-8",
                delivery_mode=DeliveryMode.PERSISTENT,
                message_id=str(uuid.uuid4()),
                correlation_id=correlation_id,
                timestamp=datetime.now(timezone.utc),
                type=event.kind.value,
                app_id=self.service_name,
            )
            await asyncio.wait_for(
                self.exchange.publish(message, routing_key=routing_key),
                timeout=self.publish_timeout,
            )
            logger.info(
                f"📤 Published event: {routing_key}",
                correlation_id=correlation_id,
                metadata={**log_meta, "messageId": message.message_id},
            )
        except Exception as e:
            # Publishing failures shouldn't break the main flow
            logger.error(
                f"Failed to publish event: {routing_key}",
                correlation_id=correlation_id,
                metadata=log_meta,
                error=e,
            )

    def is_healthy(self) -> bool:
        """Check if the publisher can currently reach the broker"""
        return (
            not self.is_degraded
            and self.connection is not None
            and not self.connection.is_closed
        )

    async def close(self) -> None:
        """Close channel and connection; safe to call more than once"""
        logger.info("🛑 Closing publisher...", metadata={"exchange": self.exchange_name})
        await self._release()

    async def _release(self) -> None:
        channel, connection = self.channel, self.connection
        self.exchange = None
        self.channel = None
        self.connection = None
        try:
            if channel is not None and not channel.is_closed:
                await channel.close()
            if connection is not None and not connection.is_closed:
                await connection.close()
        except Exception as e:
            logger.warning(
                "Error closing publisher connection",
                metadata={"exchange": self.exchange_name},
                error=e,
            )
