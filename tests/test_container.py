"""Tests for per-role service wiring"""
import pytest
from unittest.mock import AsyncMock, patch

from teamfinder.container import ServiceContainer
from teamfinder.core.config import Config
from teamfinder.messaging import EventConsumer, EventPublisher


def make_container(role, **kwargs):
    return ServiceContainer(Config(service_role=role, store_backend="memory", **kwargs))


class TestServiceContainer:

    def test_user_role(self):
        container = make_container("user")
        assert container.publisher.exchange_name == "user_events"
        assert container.user_service is not None
        assert container.consumers == []

    def test_team_matching_role_consumes_user_events(self):
        container = make_container("team_matching")
        assert container.publisher.exchange_name == "team_events"
        assert [c.queue_name for c in container.consumers] == ["team_service_user_events"]

    def test_notification_role(self):
        container = make_container("notification")
        assert container.publisher is None
        assert len(container.consumers) == 2
        assert container.notification_service is not None

    def test_retry_policy_from_config(self):
        container = make_container("team_matching", max_delivery_attempts=0)
        assert container.retry_policy.max_attempts == 0

    @pytest.mark.parametrize("kwargs", [{"service_role": "billing"}, {"store_backend": "redis"}])
    def test_rejects_unknown_settings(self, kwargs):
        options = {"service_role": "user", "store_backend": "memory", **kwargs}
        with pytest.raises(ValueError):
            ServiceContainer(Config(**options))

    @pytest.mark.asyncio
    async def test_start_and_stop(self):
        container = make_container("team_matching")
        with patch.object(EventPublisher, "connect", AsyncMock()) as connect, \
                patch.object(EventPublisher, "close", AsyncMock()) as close, \
                patch.object(EventConsumer, "start_in_background") as start_consumer, \
                patch.object(EventConsumer, "stop", AsyncMock()) as stop_consumer:
            await container.start()
            await container.stop()

        connect.assert_awaited_once()
        start_consumer.assert_called_once()
        stop_consumer.assert_awaited_once()
        close.assert_awaited_once()
