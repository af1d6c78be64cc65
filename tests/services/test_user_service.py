"""Tests for user account workflows"""
import pytest

from teamfinder.core.errors import ErrorResponse
from teamfinder.events import UserDeletedEvent, UserRegisteredEvent, UserUpdatedEvent
from teamfinder.schemas.user import UserCreate, UserUpdate
from teamfinder.services import UserService


@pytest.fixture
def service(user_repository, mock_publisher):
    return UserService(user_repository, mock_publisher)


def last_published(mock_publisher):
    return mock_publisher.publish.await_args.args[0]


class TestUserService:

    @pytest.mark.asyncio
    async def test_register_publishes_user_registered(self, service, mock_publisher):
        user = await service.register_user(
            UserCreate(username="alice", email="alice@example.com", preferred_game="Valorant")
        )

        event = last_published(mock_publisher)
        assert isinstance(event, UserRegisteredEvent)
        assert (event.user_id, event.username, event.preferred_game) == (user.id, "alice", "Valorant")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "second",
        [
            UserCreate(username="other", email="ALICE@example.com"),
            UserCreate(username="alice", email="other@example.com"),
        ],
    )
    async def test_register_rejects_taken_email_or_username(self, service, mock_publisher, second):
        await service.register_user(UserCreate(username="alice", email="alice@example.com"))

        with pytest.raises(ErrorResponse) as exc_info:
            await service.register_user(second)

        assert exc_info.value.status_code == 409
        assert mock_publisher.publish.await_count == 1

    @pytest.mark.asyncio
    async def test_update_publishes_full_profile(self, service, mock_publisher):
        user = await service.register_user(
            UserCreate(username="alice", email="alice@example.com", skill_level="Gold")
        )

        updated = await service.update_user(user.id, UserUpdate(username="alice2"))

        assert updated.username == "alice2"
        event = last_published(mock_publisher)
        assert isinstance(event, UserUpdatedEvent)
        assert event.changed_fields()["skill_level"] == "Gold"
        assert event.username == "alice2"

    @pytest.mark.asyncio
    async def test_update_unknown_user(self, service):
        with pytest.raises(ErrorResponse) as exc_info:
            await service.update_user("ghost", UserUpdate(username="bob"))
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_update_cannot_clear_username(self, service):
        user = await service.register_user(UserCreate(username="alice", email="alice@example.com"))
        with pytest.raises(ErrorResponse) as exc_info:
            await service.update_user(user.id, UserUpdate(username=None))
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_delete_publishes_user_deleted(self, service, mock_publisher):
        user = await service.register_user(UserCreate(username="alice", email="alice@example.com"))

        await service.delete_user(user.id)

        assert last_published(mock_publisher) == UserDeletedEvent(user_id=user.id)
        with pytest.raises(ErrorResponse):
            await service.get_user(user.id)

    @pytest.mark.asyncio
    async def test_delete_unknown_user(self, service, mock_publisher):
        with pytest.raises(ErrorResponse) as exc_info:
            await service.delete_user("ghost")
        assert exc_info.value.status_code == 404
        mock_publisher.publish.assert_not_awaited()
