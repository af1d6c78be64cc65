"""Tests for team workflows"""
import pytest

from teamfinder.core.errors import ErrorResponse
from teamfinder.events import TeamCreatedEvent, TeamDeletedEvent, TeamJoinedEvent, TeamLeftEvent
from teamfinder.models.team import ReplicaUser, TeamRole
from teamfinder.schemas.team import TeamCreate
from teamfinder.services import TeamService

BOB = ReplicaUser(id="u2", username="bob", email="bob@example.com")


@pytest.fixture
def service(team_repository, mock_publisher):
    return TeamService(team_repository, mock_publisher)


async def seed(repository, *users):
    for user in users:
        await repository.add_user(user)


def published(mock_publisher):
    return [c.args[0] for c in mock_publisher.publish.await_args_list]


class TestCreateTeam:

    @pytest.mark.asyncio
    async def test_owner_becomes_first_member(self, service, team_repository, replica_user, mock_publisher):
        await seed(team_repository, replica_user)

        team = await service.create_team(TeamCreate(name="Raiders", game="Valorant", owner_id="u1"))

        stored = await team_repository.get_team(team.id)
        assert [(m.user_id, m.role) for m in stored.members] == [("u1", TeamRole.OWNER)]
        assert published(mock_publisher) == [
            TeamCreatedEvent(team_id=team.id, team_name="Raiders", owner_id="u1"),
        ]

    @pytest.mark.asyncio
    async def test_unknown_owner(self, service, mock_publisher):
        with pytest.raises(ErrorResponse) as exc_info:
            await service.create_team(TeamCreate(name="Raiders", owner_id="ghost"))
        assert exc_info.value.status_code == 404
        mock_publisher.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_duplicate_name(self, service, team_repository, replica_user, mock_publisher):
        await seed(team_repository, replica_user)
        await service.create_team(TeamCreate(name="Raiders", owner_id="u1"))

        with pytest.raises(ErrorResponse) as exc_info:
            await service.create_team(TeamCreate(name="Raiders", owner_id="u1"))

        assert exc_info.value.status_code == 409
        assert mock_publisher.publish.await_count == 1


class TestMembership:

    @pytest.mark.asyncio
    async def test_join_team(self, service, team_repository, replica_user, mock_publisher):
        await seed(team_repository, replica_user, BOB)
        team = await service.create_team(TeamCreate(name="Raiders", owner_id="u1"))

        joined = await service.join_team(team.id, "u2")

        assert joined.current_players == 2
        assert published(mock_publisher)[-1] == TeamJoinedEvent(
            team_id=team.id, team_name="Raiders", user_id="u2", username="bob"
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "team_kwargs, user_id, status_code",
        [
            ({"is_open": False}, "u2", 400),
            ({"max_players": 1}, "u2", 400),
            ({}, "u1", 409),
            ({}, "ghost", 404),
        ],
    )
    async def test_join_rejections(self, service, team_repository, replica_user, team_kwargs, user_id, status_code):
        await seed(team_repository, replica_user, BOB)
        team = await service.create_team(TeamCreate(name="Raiders", owner_id="u1", **team_kwargs))

        with pytest.raises(ErrorResponse) as exc_info:
            await service.join_team(team.id, user_id)

        assert exc_info.value.status_code == status_code

    @pytest.mark.asyncio
    async def test_join_unknown_team(self, service):
        with pytest.raises(ErrorResponse) as exc_info:
            await service.join_team("nope", "u1")
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_leave_team(self, service, team_repository, replica_user, mock_publisher):
        await seed(team_repository, replica_user, BOB)
        team = await service.create_team(TeamCreate(name="Raiders", owner_id="u1"))
        await service.join_team(team.id, "u2")

        await service.leave_team(team.id, "u2")

        assert (await team_repository.get_team(team.id)).current_players == 1
        assert published(mock_publisher)[-1] == TeamLeftEvent(
            team_id=team.id, team_name="Raiders", user_id="u2", username="bob"
        )

    @pytest.mark.asyncio
    async def test_owner_cannot_leave(self, service, team_repository, replica_user):
        await seed(team_repository, replica_user)
        team = await service.create_team(TeamCreate(name="Raiders", owner_id="u1"))

        with pytest.raises(ErrorResponse) as exc_info:
            await service.leave_team(team.id, "u1")
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_leave_when_not_member(self, service, team_repository, replica_user):
        await seed(team_repository, replica_user)
        team = await service.create_team(TeamCreate(name="Raiders", owner_id="u1"))

        with pytest.raises(ErrorResponse) as exc_info:
            await service.leave_team(team.id, "u2")
        assert exc_info.value.status_code == 404


class TestDeleteTeam:

    @pytest.mark.asyncio
    async def test_owner_deletes_team(self, service, team_repository, replica_user, mock_publisher):
        await seed(team_repository, replica_user, BOB)
        team = await service.create_team(TeamCreate(name="Raiders", owner_id="u1"))
        await service.join_team(team.id, "u2")

        await service.delete_team(team.id, "u1")

        assert await team_repository.get_team(team.id) is None
        assert team_repository.members == {}
        assert published(mock_publisher)[-1] == TeamDeletedEvent(team_id=team.id, team_name="Raiders")

    @pytest.mark.asyncio
    async def test_non_owner_cannot_delete(self, service, team_repository, replica_user, mock_publisher):
        await seed(team_repository, replica_user, BOB)
        team = await service.create_team(TeamCreate(name="Raiders", owner_id="u1"))

        with pytest.raises(ErrorResponse) as exc_info:
            await service.delete_team(team.id, "u2")

        assert exc_info.value.status_code == 403
        assert await team_repository.get_team(team.id) is not None
