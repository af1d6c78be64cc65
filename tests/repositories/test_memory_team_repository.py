"""Tests for the in-memory team repository"""
import pytest

from teamfinder.core.results import Outcome
from teamfinder.models.team import ReplicaUser, Team, TeamMember, TeamRole


def team_with_owner(team_id, name, owner):
    return Team(
        id=team_id,
        name=name,
        owner_id=owner.id,
        members=[
            TeamMember(id=f"{team_id}-{owner.id}", team_id=team_id, user_id=owner.id,
                       username=owner.username, role=TeamRole.OWNER)
        ],
    )


def member(team_id, user):
    return TeamMember(id=f"{team_id}-{user.id}", team_id=team_id, user_id=user.id, username=user.username)


ALICE = ReplicaUser(id="u1", username="alice", email="alice@example.com")
BOB = ReplicaUser(id="u2", username="bob", email="bob@example.com")


class TestReplicaWrites:

    @pytest.mark.asyncio
    async def test_add_user_twice_is_conflict_noop(self, team_repository):
        assert (await team_repository.add_user(ALICE)).is_ok
        renamed = ALICE.model_copy(update={"username": "mallory"})

        result = await team_repository.add_user(renamed)

        assert result.outcome is Outcome.CONFLICT
        assert (await team_repository.get_user("u1")).username == "alice"

    @pytest.mark.asyncio
    async def test_update_unknown_user_is_not_found(self, team_repository):
        result = await team_repository.update_user("ghost", {"username": "x"})
        assert result.outcome is Outcome.NOT_FOUND
        assert await team_repository.list_users() == []

    @pytest.mark.asyncio
    async def test_update_only_touches_given_fields(self, team_repository):
        await team_repository.add_user(ALICE.model_copy(update={"preferred_game": "Valorant"}))

        await team_repository.update_user("u1", {"email": "new@example.com", "unknown": "ignored"})

        user = await team_repository.get_user("u1")
        assert user.email == "new@example.com"
        assert user.preferred_game == "Valorant"

    @pytest.mark.asyncio
    async def test_username_change_reaches_memberships(self, team_repository):
        await team_repository.add_user(ALICE)
        await team_repository.add_user(BOB)
        await team_repository.create_team(team_with_owner("t1", "Raiders", ALICE))
        await team_repository.add_member(member("t1", BOB))

        await team_repository.update_user("u2", {"username": "robert"})

        team = await team_repository.get_team("t1")
        assert {m.user_id: m.username for m in team.members} == {"u1": "alice", "u2": "robert"}

    @pytest.mark.asyncio
    async def test_delete_user_cascades(self, team_repository):
        carol = ReplicaUser(id="u3", username="carol", email="carol@example.com")
        for user in (ALICE, BOB, carol):
            await team_repository.add_user(user)
        await team_repository.create_team(team_with_owner("t1", "Raiders", ALICE))
        await team_repository.add_member(member("t1", BOB))
        await team_repository.create_team(team_with_owner("t2", "Knights", BOB))
        await team_repository.add_member(member("t2", ALICE))
        await team_repository.add_member(member("t2", carol))

        result = await team_repository.delete_user("u1")

        assert result.is_ok
        assert result.data == {"removed_teams": 1, "removed_memberships": 3}
        assert await team_repository.get_user("u1") is None
        assert await team_repository.get_team("t1") is None
        knights = await team_repository.get_team("t2")
        assert [m.user_id for m in knights.members] == ["u2", "u3"]
        assert all(m.team_id != "t1" for m in team_repository.members.values())

    @pytest.mark.asyncio
    async def test_delete_unknown_user_is_not_found(self, team_repository):
        assert (await team_repository.delete_user("ghost")).outcome is Outcome.NOT_FOUND

    @pytest.mark.asyncio
    async def test_replaying_the_event_order_rebuilds_the_same_state(self, team_repository):
        async def replay(repository):
            await repository.add_user(ALICE)
            await repository.add_user(BOB)
            await repository.update_user("u1", {"username": "alice2"})
            await repository.delete_user("u2")
            await repository.add_user(BOB)

        await replay(team_repository)
        first = sorted(u.model_dump_json() for u in await team_repository.list_users())
        # Replaying again on top is a series of no-ops and conflicts
        await replay(team_repository)
        second = sorted(u.model_dump_json() for u in await team_repository.list_users())

        assert first == second
        assert {u.username for u in await team_repository.list_users()} == {"alice2", "bob"}


class TestTeams:

    @pytest.mark.asyncio
    async def test_team_name_is_unique(self, team_repository):
        await team_repository.create_team(team_with_owner("t1", "Raiders", ALICE))
        result = await team_repository.create_team(team_with_owner("t2", "Raiders", BOB))
        assert result.outcome is Outcome.CONFLICT
        assert await team_repository.get_team("t2") is None

    @pytest.mark.asyncio
    async def test_membership_is_unique(self, team_repository):
        await team_repository.create_team(team_with_owner("t1", "Raiders", ALICE))
        await team_repository.add_member(member("t1", BOB))
        duplicate = TeamMember(id="other", team_id="t1", user_id="u2", username="bob")

        assert (await team_repository.add_member(duplicate)).outcome is Outcome.CONFLICT

    @pytest.mark.asyncio
    async def test_add_member_to_unknown_team(self, team_repository):
        assert (await team_repository.add_member(member("nope", BOB))).outcome is Outcome.NOT_FOUND

    @pytest.mark.asyncio
    async def test_remove_member(self, team_repository):
        await team_repository.create_team(team_with_owner("t1", "Raiders", ALICE))
        await team_repository.add_member(member("t1", BOB))

        assert (await team_repository.remove_member("t1", "u2")).is_ok
        assert (await team_repository.remove_member("t1", "u2")).outcome is Outcome.NOT_FOUND

    @pytest.mark.asyncio
    async def test_delete_team_removes_memberships(self, team_repository):
        await team_repository.create_team(team_with_owner("t1", "Raiders", ALICE))
        await team_repository.add_member(member("t1", BOB))

        result = await team_repository.delete_team("t1")

        assert result.data == {"removed_memberships": 2}
        assert team_repository.members == {}
        assert (await team_repository.delete_team("t1")).outcome is Outcome.NOT_FOUND

    @pytest.mark.asyncio
    async def test_returned_teams_are_copies(self, team_repository):
        await team_repository.create_team(team_with_owner("t1", "Raiders", ALICE))
        team = await team_repository.get_team("t1")
        team.members.clear()
        assert (await team_repository.get_team("t1")).current_players == 1
