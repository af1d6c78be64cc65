"""
Service container
Builds every component a service role needs from the configuration and owns
their connections for the lifetime of the application
"""

from typing import List, Optional

from teamfinder.core.config import SERVICE_ROLES, Config
from teamfinder.core.logger import logger
from teamfinder.db.mongodb import MongoDatabase
from teamfinder.events import TEAM_EVENTS_EXCHANGE, USER_EVENTS_EXCHANGE
from teamfinder.handlers import NotificationHandlers, TeamReplicaHandlers
from teamfinder.messaging import (
    NOTIFICATION_TEAM_EVENTS,
    NOTIFICATION_USER_EVENTS,
    TEAM_SERVICE_USER_EVENTS,
    EventConsumer,
    EventDispatcher,
    EventPublisher,
    QueueBinding,
    RetryPolicy,
)
from teamfinder.notifications import ConnectionManager, EmailService, NotificationService
from teamfinder.repositories import (
    InMemoryTeamRepository,
    InMemoryUserRepository,
    MongoTeamRepository,
    MongoUserRepository,
    TeamRepository,
    UserRepository,
)
from teamfinder.services import TeamService, UserService

STORE_BACKENDS = ("mongodb", "memory")


class ServiceContainer:
    """
    Components of one service process.

    Construction only wires objects together; `start()` opens connections and
    launches consumers, `stop()` releases everything in reverse order.
    """

    def __init__(self, config: Config):
        if config.service_role not in SERVICE_ROLES:
            raise ValueError(f"Unknown service role: {config.service_role}")
        if config.store_backend not in STORE_BACKENDS:
            raise ValueError(f"Unknown store backend: {config.store_backend}")

        self.config = config
        self.role = config.service_role
        self.retry_policy = RetryPolicy(
            max_attempts=config.max_delivery_attempts,
            backoff_seconds=config.retry_backoff_seconds,
            max_backoff_seconds=config.retry_backoff_max_seconds,
        )

        self.mongo: Optional[MongoDatabase] = None
        self.publisher: Optional[EventPublisher] = None
        self.consumers: List[EventConsumer] = []

        self.user_repository: Optional[UserRepository] = None
        self.team_repository: Optional[TeamRepository] = None
        self.user_service: Optional[UserService] = None
        self.team_service: Optional[TeamService] = None

        self.connections: Optional[ConnectionManager] = None
        self.email_service: Optional[EmailService] = None
        self.notification_service: Optional[NotificationService] = None

        if self.role == "user":
            self.publisher = self._publisher(USER_EVENTS_EXCHANGE)
            if config.store_backend == "memory":
                self.user_repository = InMemoryUserRepository()
        elif self.role == "team_matching":
            self.publisher = self._publisher(TEAM_EVENTS_EXCHANGE)
            if config.store_backend == "memory":
                self.team_repository = InMemoryTeamRepository()
        else:
            self.connections = ConnectionManager(send_timeout=config.websocket_send_timeout_seconds)
            self.email_service = EmailService.from_config(config)
            self.notification_service = NotificationService(self.connections, self.email_service)
            handlers = NotificationHandlers(self.notification_service).registry()
            self.consumers = [
                self._consumer(NOTIFICATION_USER_EVENTS, handlers),
                self._consumer(NOTIFICATION_TEAM_EVENTS, handlers),
            ]

        self._build_services()

    def _publisher(self, exchange: str) -> EventPublisher:
        return EventPublisher(
            self.config.rabbitmq_url,
            exchange,
            service_name=self.config.service_name,
            publish_timeout=self.config.publish_timeout_seconds,
        )

    def _consumer(self, binding: QueueBinding, handlers) -> EventConsumer:
        relevant = {key: handler for key, handler in handlers.items() if key in binding.routing_keys}
        dispatcher = EventDispatcher(relevant, retry_policy=self.retry_policy, name=binding.queue)
        return EventConsumer(
            self.config.rabbitmq_url,
            binding,
            dispatcher,
            prefetch_count=self.config.consumer_prefetch_count,
            dead_letter_enabled=self.config.dead_letter_enabled,
            shutdown_timeout=self.config.consumer_shutdown_timeout_seconds,
        )

    def _build_services(self) -> None:
        if self.user_repository is not None:
            self.user_service = UserService(self.user_repository, self.publisher)
        if self.team_repository is not None:
            self.team_service = TeamService(self.team_repository, self.publisher)
            if not self.consumers:
                handlers = TeamReplicaHandlers(self.team_repository).registry()
                self.consumers = [self._consumer(TEAM_SERVICE_USER_EVENTS, handlers)]

    @property
    def needs_store(self) -> bool:
        return self.role in ("user", "team_matching")

    async def start(self) -> None:
        """Open store and broker connections and start consuming"""
        if self.needs_store and self.config.store_backend == "mongodb":
            self.mongo = MongoDatabase(self.config)
            database = await self.mongo.connect()
            if self.role == "user":
                self.user_repository = MongoUserRepository(database)
            else:
                self.team_repository = MongoTeamRepository(database)
            self._build_services()

        for repository in (self.user_repository, self.team_repository):
            if repository is not None:
                await repository.ensure_indexes()

        if self.publisher is not None:
            await self.publisher.connect()

        for consumer in self.consumers:
            consumer.start_in_background()

        logger.info(
            f"Service container started for role {self.role}",
            metadata={
                "storeBackend": self.config.store_backend if self.needs_store else None,
                "consumers": [c.queue_name for c in self.consumers],
            },
        )

    async def stop(self) -> None:
        """Stop consumers, then close the publisher and the database"""
        for consumer in self.consumers:
            await consumer.stop()
        if self.publisher is not None:
            await self.publisher.close()
        if self.mongo is not None:
            await self.mongo.close()
        logger.info(f"Service container stopped for role {self.role}")
