"""Tests for the event dispatcher and retry policy"""
import pytest
from unittest.mock import AsyncMock

from teamfinder.core.results import Result
from teamfinder.events import TeamCreatedEvent, UserDeletedEvent, serialize_event
from teamfinder.messaging.dispatcher import AttemptTracker, Disposition, EventDispatcher, RetryPolicy

USER_DELETED = serialize_event(UserDeletedEvent(user_id="u1"))


class TestRetryPolicy:

    def test_backoff_is_linear_and_capped(self):
        policy = RetryPolicy(max_attempts=5, backoff_seconds=0.5, max_backoff_seconds=2.0)
        assert policy.backoff_for(1) == 0.5
        assert policy.backoff_for(3) == 1.5
        assert policy.backoff_for(10) == 2.0

    def test_zero_attempts_is_unbounded(self):
        assert RetryPolicy(max_attempts=0).unbounded
        assert not RetryPolicy(max_attempts=3).unbounded


class TestAttemptTracker:

    def test_counts_and_forgets(self):
        tracker = AttemptTracker()
        assert tracker.record_failure("m1") == 1
        assert tracker.record_failure("m1") == 2
        assert tracker.count("m1") == 2
        tracker.forget("m1")
        assert tracker.count("m1") == 0

    def test_evicts_oldest_entries(self):
        tracker = AttemptTracker(capacity=2)
        for message_id in ("a", "b", "c"):
            tracker.record_failure(message_id)
        assert len(tracker) == 2
        assert tracker.count("a") == 0
        assert tracker.count("c") == 1


class TestEventDispatcher:

    @pytest.mark.asyncio
    async def test_routes_to_handler_and_acks(self):
        handler = AsyncMock(return_value=Result.ok())
        dispatcher = EventDispatcher({"user.deleted": handler})

        disposition = await dispatcher.dispatch("user.deleted", USER_DELETED, "m1")

        assert disposition is Disposition.ACK
        handler.assert_awaited_once_with(UserDeletedEvent(user_id="u1"))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("result", [Result.not_found("gone"), Result.conflict("dup")])
    async def test_expected_absence_and_duplicates_are_acked(self, result):
        dispatcher = EventDispatcher({"user.deleted": AsyncMock(return_value=result)})
        assert await dispatcher.dispatch("user.deleted", USER_DELETED, "m1") is Disposition.ACK

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            b"{not json",
            pytest.param(b'{"userId": ' + b"1" * 5000 + b"}", id="oversized-integer"),
            pytest.param(b"[" * 100000 + b"]" * 100000, id="deeply-nested"),
        ],
    )
    async def test_poison_message_is_acked_without_calling_handler(self, body):
        handler = AsyncMock(return_value=Result.ok())
        dispatcher = EventDispatcher({"user.deleted": handler})

        disposition = await dispatcher.dispatch("user.deleted", body, "m1", redelivered=True)

        assert disposition is Disposition.ACK
        handler.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_routing_key_is_acked(self):
        dispatcher = EventDispatcher({})
        assert await dispatcher.dispatch("team.archived", b"{}", "m1") is Disposition.ACK

    @pytest.mark.asyncio
    async def test_missing_handler_is_acked(self):
        dispatcher = EventDispatcher({"user.deleted": AsyncMock(return_value=Result.ok())})
        body = serialize_event(TeamCreatedEvent(team_id="t1", team_name="Raiders", owner_id="u1"))
        assert await dispatcher.dispatch("team.created", body, "m1") is Disposition.ACK

    @pytest.mark.asyncio
    async def test_handler_exception_is_requeued(self):
        handler = AsyncMock(side_effect=RuntimeError("boom"))
        dispatcher = EventDispatcher({"user.deleted": handler}, RetryPolicy(max_attempts=3))

        assert await dispatcher.dispatch("user.deleted", USER_DELETED, "m1") is Disposition.REQUEUE
        assert dispatcher.attempts.count("m1") == 1

    @pytest.mark.asyncio
    async def test_dead_letters_after_max_attempts(self):
        handler = AsyncMock(return_value=Result.retryable("store down"))
        dispatcher = EventDispatcher({"user.deleted": handler}, RetryPolicy(max_attempts=3))

        dispositions = [await dispatcher.dispatch("user.deleted", USER_DELETED, "m1") for _ in range(3)]

        assert dispositions == [Disposition.REQUEUE, Disposition.REQUEUE, Disposition.DEAD_LETTER]
        assert dispatcher.attempts.count("m1") == 0

    @pytest.mark.asyncio
    async def test_unbounded_policy_always_requeues(self):
        handler = AsyncMock(return_value=Result.retryable())
        dispatcher = EventDispatcher({"user.deleted": handler}, RetryPolicy(max_attempts=0))

        for _ in range(20):
            assert await dispatcher.dispatch("user.deleted", USER_DELETED, "m1") is Disposition.REQUEUE

    @pytest.mark.asyncio
    async def test_success_after_retry_resets_attempts(self):
        handler = AsyncMock(side_effect=[Result.retryable(), Result.ok()])
        dispatcher = EventDispatcher({"user.deleted": handler}, RetryPolicy(max_attempts=3))

        assert await dispatcher.dispatch("user.deleted", USER_DELETED, "m1") is Disposition.REQUEUE
        assert await dispatcher.dispatch("user.deleted", USER_DELETED, "m1") is Disposition.ACK
        assert len(dispatcher.attempts) == 0

    @pytest.mark.asyncio
    async def test_backoff_grows_with_attempts(self):
        policy = RetryPolicy(max_attempts=10, backoff_seconds=1.0, max_backoff_seconds=10.0)
        dispatcher = EventDispatcher({"user.deleted": AsyncMock(return_value=Result.retryable())}, policy)

        await dispatcher.dispatch("user.deleted", USER_DELETED, "m1")
        await dispatcher.dispatch("user.deleted", USER_DELETED, "m1")

        assert dispatcher.backoff_for("m1") == 2.0
        assert dispatcher.backoff_for(None) == 1.0
