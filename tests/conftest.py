"""Shared test fixtures"""
import pytest
from unittest.mock import AsyncMock, MagicMock

from teamfinder.messaging.publisher import EventPublisher
from teamfinder.models.team import ReplicaUser
from teamfinder.notifications import ConnectionManager, EmailService, NotificationService
from teamfinder.repositories import InMemoryTeamRepository, InMemoryUserRepository


@pytest.fixture
def mock_publisher():
    """Publisher double recording published events"""
    publisher = MagicMock(spec=EventPublisher)
    publisher.publish = AsyncMock()
    return publisher


@pytest.fixture
def team_repository():
    return InMemoryTeamRepository()


@pytest.fixture
def user_repository():
    return InMemoryUserRepository()


@pytest.fixture
def replica_user():
    return ReplicaUser(id="u1", username="alice", email="alice@example.com", preferred_game="Valorant")


@pytest.fixture
def mock_email_service():
    service = MagicMock(spec=EmailService)
    service.send_email_notification = AsyncMock()
    return service


@pytest.fixture
def mock_notification_service():
    service = MagicMock(spec=NotificationService)
    service.send_to_all = AsyncMock()
    service.send_to_user = AsyncMock()
    service.send_to_team = AsyncMock()
    service.send_email_to_user = AsyncMock()
    service.send_email_to_users = AsyncMock()
    return service


@pytest.fixture
def connection_manager():
    return ConnectionManager()


@pytest.fixture
def notification_service(connection_manager, mock_email_service):
    return NotificationService(connection_manager, mock_email_service)


@pytest.fixture
def fake_websocket():
    websocket = MagicMock()
    websocket.accept = AsyncMock()
    websocket.send_json = AsyncMock()
    return websocket
