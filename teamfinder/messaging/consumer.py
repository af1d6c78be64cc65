"""
RabbitMQ Event Consumer
Binds a durable queue to a topic exchange and feeds its messages, one at a time
and in queue order, through an EventDispatcher
"""

import asyncio
import hashlib
from enum import Enum
from typing import Any, Dict, Optional

import aio_pika
from aio_pika import ExchangeType
from aio_pika.exceptions import ChannelPreconditionFailed

from teamfinder.core.correlation_id import create_correlation_id, set_correlation_id
from teamfinder.core.logger import logger
from teamfinder.messaging.dispatcher import Disposition, EventDispatcher
from teamfinder.messaging.topology import QueueBinding


class ConsumerState(str, Enum):
    DISCONNECTED = "disconnected"
    BOUND = "bound"
    DISABLED = "disabled"
    FAILED = "failed"
    CLOSED = "closed"


def fallback_message_id(routing_key: str, body: bytes) -> str:
    """Stable id for messages published without a message_id"""
    digest = hashlib.sha256(routing_key.encode("utf-8") + b"\x00" + body).hexdigest()
    return f"sha256:{digest}"


class EventConsumer:
    """
    Consumer for one queue binding.

    A failed setup moves the consumer to DISABLED for the rest of the process
    lifetime; `run()` then returns without raising so the service stays up.
    A consume loop that dies after binding ends in FAILED.
    """

    def __init__(
        self,
        rabbitmq_url: str,
        binding: QueueBinding,
        dispatcher: EventDispatcher,
        prefetch_count: int = 1,
        dead_letter_enabled: bool = True,
        shutdown_timeout: float = 10.0,
    ):
        self.rabbitmq_url = rabbitmq_url
        self.binding = binding
        self.dispatcher = dispatcher
        self.prefetch_count = prefetch_count
        self.dead_letter_enabled = dead_letter_enabled
        self.shutdown_timeout = shutdown_timeout
        self.state = ConsumerState.DISCONNECTED
        self.connection: Optional[aio_pika.abc.AbstractRobustConnection] = None
        self.channel: Optional[aio_pika.abc.AbstractChannel] = None
        self.queue: Optional[aio_pika.abc.AbstractQueue] = None
        self.processed_count = 0
        self._task: Optional[asyncio.Task] = None
        self._stopping = False
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def queue_name(self) -> str:
        return self.binding.queue

    async def connect(self) -> bool:
        """
        Connect, declare exchange and queue and bind every routing key

        Returns:
            True when the consumer is bound, False when it has been disabled
        """
        if self.state is not ConsumerState.DISCONNECTED:
            return self.state is ConsumerState.BOUND

        try:
            logger.info(
                "Connecting consumer to RabbitMQ...",
                metadata={"exchange": self.binding.exchange, "queue": self.queue_name},
            )
            self.connection = await aio_pika.connect_robust(self.rabbitmq_url)
            self.channel = await self.connection.channel()

            # One unacknowledged message at a time keeps queue order per consumer
            await self.channel.set_qos(prefetch_count=self.prefetch_count)

            exchange = await self.channel.declare_exchange(
                self.binding.exchange,
                ExchangeType.TOPIC,
                durable=True,
                auto_delete=False,
            )

            arguments = None
            if self.dead_letter_enabled:
                arguments = await self._declare_dead_letter()

            self.queue = await self.channel.declare_queue(
                self.queue_name,
                durable=True,
                exclusive=False,
                auto_delete=False,
                arguments=arguments,
            )
            for routing_key in self.binding.routing_keys:
                await self.queue.bind(exchange, routing_key=routing_key)

            self.state = ConsumerState.BOUND
            logger.info(
                "✅ Consumer bound",
                metadata={
                    "exchange": self.binding.exchange,
                    "queue": self.queue_name,
                    "routingKeys": list(self.binding.routing_keys),
                },
            )
            return True

        except ChannelPreconditionFailed as e:
            logger.error(
                f"❌ Queue {self.queue_name} already exists with different arguments, consumer disabled. "
                "Delete the queue so it can be redeclared, or set DEAD_LETTER_ENABLED to match it",
                metadata={"exchange": self.binding.exchange, "queue": self.queue_name},
                error=e,
            )
            self.state = ConsumerState.DISABLED
            await self._release()
            return False

        except Exception as e:
            logger.error(
                f"❌ Failed to set up consumer for {self.queue_name}, consumer disabled",
                metadata={"exchange": self.binding.exchange, "queue": self.queue_name},
                error=e,
            )
            self.state = ConsumerState.DISABLED
            await self._release()
            return False

    async def _declare_dead_letter(self) -> Dict[str, Any]:
        dlx = await self.channel.declare_exchange(
            self.binding.dead_letter_exchange,
            ExchangeType.DIRECT,
            durable=True,
        )
        dead_letter_queue = await self.channel.declare_queue(
            self.binding.dead_letter_queue,
            durable=True,
        )
        await dead_letter_queue.bind(dlx, routing_key=self.queue_name)
        return {
            "x-dead-letter-exchange": self.binding.dead_letter_exchange,
            "x-dead-letter-routing-key": self.queue_name,
        }

    async def run(self) -> None:
        """Connect if needed, then consume until stopped"""
        if not await self.connect():
            logger.warning(
                f"RabbitMQ channel not available. Consumer for {self.queue_name} not started."
            )
            return

        logger.info(f"🎯 Consumer started - listening for events on queue: {self.queue_name}")
        try:
            async with self.queue.iterator() as queue_iter:
                async for message in queue_iter:
                    # Left unacknowledged; the broker redelivers it after the channel closes
                    if self._stopping:
                        break
                    self._idle.clear()
                    try:
                        await self.handle_message(message)
                    finally:
                        self._idle.set()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # Messaging errors stay inside the consumer; the service keeps running
            logger.error(f"❌ Error while consuming from {self.queue_name}, consumer failed", error=e)
            self.state = ConsumerState.FAILED
            await self._release()

    async def handle_message(self, message: aio_pika.abc.AbstractIncomingMessage) -> Disposition:
        """Dispatch one delivery and settle it according to the outcome"""
        routing_key = message.routing_key or ""
        message_id = message.message_id or fallback_message_id(routing_key, message.body)
        set_correlation_id(message.correlation_id or create_correlation_id())

        logger.info(
            f"📨 Received event: {routing_key}",
            metadata={"queue": self.queue_name, "messageId": message_id, "redelivered": message.redelivered},
        )

        try:
            disposition = await self.dispatcher.dispatch(
                routing_key, message.body, message_id, redelivered=bool(message.redelivered)
            )
        except Exception as e:
            logger.error(
                f"❌ Unexpected error dispatching {routing_key}, rejecting message",
                metadata={"queue": self.queue_name, "messageId": message_id},
                error=e,
            )
            disposition = Disposition.DEAD_LETTER

        try:
            if disposition is Disposition.ACK:
                await message.ack()
            elif disposition is Disposition.REQUEUE:
                await asyncio.sleep(self.dispatcher.backoff_for(message_id))
                await message.nack(requeue=True)
            else:
                await message.reject(requeue=False)
        except Exception as e:
            # The broker redelivers anything left unsettled
            logger.error(
                f"Failed to settle message on {self.queue_name}",
                metadata={"messageId": message_id, "disposition": disposition.value},
                error=e,
            )
        self.processed_count += 1
        return disposition

    def start_in_background(self) -> asyncio.Task:
        """Run the consumer as a background task of the current event loop"""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run(), name=f"consumer:{self.queue_name}")
        return self._task

    async def stop(self) -> None:
        """
        Stop consuming and release channel and connection

        A message being handled is allowed to finish and settle, up to
        `shutdown_timeout` seconds, before the consume loop is cancelled.
        """
        logger.info(f"🛑 Stopping consumer for {self.queue_name}...")
        self._stopping = True
        task, self._task = self._task, None
        if task is not None and not task.done():
            try:
                await asyncio.wait_for(self._idle.wait(), timeout=self.shutdown_timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    f"In-flight message on {self.queue_name} did not finish within {self.shutdown_timeout}s, cancelling"
                )
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        await self._release()
        if self.state not in (ConsumerState.DISABLED, ConsumerState.FAILED):
            self.state = ConsumerState.CLOSED

    async def _release(self) -> None:
        channel, connection = self.channel, self.connection
        self.queue = None
        self.channel = None
        self.connection = None
        try:
            if channel is not None and not channel.is_closed:
                await channel.close()
                logger.info("📦 Channel closed", metadata={"queue": self.queue_name})
            if connection is not None and not connection.is_closed:
                await connection.close()
                logger.info("🔌 RabbitMQ connection closed", metadata={"queue": self.queue_name})
        except Exception as e:
            logger.warning(f"Error closing consumer for {self.queue_name}", error=e)

    def is_healthy(self) -> bool:
        """Check if the consumer is bound and its connection is open"""
        return (
            self.state is ConsumerState.BOUND
            and self.connection is not None
            and not self.connection.is_closed
        )

    def get_stats(self) -> Dict[str, Any]:
        """Get consumer statistics for health reporting"""
        return {
            "queue": self.queue_name,
            "exchange": self.binding.exchange,
            "state": self.state.value,
            "processed": self.processed_count,
            "pendingRetries": len(self.dispatcher.attempts),
        }
