"""Unit tests for the submission attempt counter."""
import json

import pytest

from workshop_registration.services.abuse_counter import (
    LOCKOUT_DURATION_MS,
    MAX_ATTEMPTS,
    STORAGE_KEY,
    TIME_WINDOW_MS,
    AbuseCounter,
)
from workshop_registration.utils.kv_scope import InMemoryScope


class FakeClock:
    """Controllable clock returning epoch seconds."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms / 1000


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scope():
    return InMemoryScope()


@pytest.fixture
def counter(scope, clock):
    return AbuseCounter(scope, clock=clock)


class TestCanSubmit:
    """Test can_submit function."""

    def test_first_attempt_allowed(self, counter):
        result = counter.can_submit()
        assert result.allowed is True
        assert result.remaining_attempts == MAX_ATTEMPTS - 1
        assert result.message is None

    def test_warning_when_fewer_than_three_remaining(self, counter):
        results = [counter.can_submit() for _ in range(MAX_ATTEMPTS - 1)]

        assert [r.remaining_attempts for r in results] == [4, 3, 2, 1]
        assert results[1].message is None
        assert results[2].message == "Warning: 2 attempts remaining."
        assert results[3].message == "Warning: 1 attempt remaining."

    def test_reaching_max_attempts_locks_out(self, counter, scope):
        for _ in range(MAX_ATTEMPTS - 1):
            assert counter.can_submit().allowed is True

        result = counter.can_submit()
        assert result.allowed is False
        assert result.message == "Too many registration attempts. Please try again in 60 minutes."

        state = json.loads(scope.get_item(STORAGE_KEY))
        assert state["lockout_until"] is not None

    def test_call_after_max_attempts_is_denied(self, counter, clock):
        for _ in range(MAX_ATTEMPTS):
            counter.can_submit()
            clock.advance(1000)

        result = counter.can_submit()
        assert result.allowed is False
        assert "Too many registration attempts" in result.message

    def test_locked_out_attempts_are_not_recorded(self, counter, scope, clock):
        for _ in range(MAX_ATTEMPTS):
            counter.can_submit()
        before = json.loads(scope.get_item(STORAGE_KEY))

        clock.advance(10 * 60 * 1000)
        result = counter.can_submit()

        assert result.allowed is False
        assert result.message == "Too many registration attempts. Please try again in 50 minutes."
        assert json.loads(scope.get_item(STORAGE_KEY)) == before

    def test_singular_minute_message(self, counter, clock):
        for _ in range(MAX_ATTEMPTS):
            counter.can_submit()
        clock.advance(LOCKOUT_DURATION_MS - 30 * 1000)

        assert counter.can_submit().message == "Too many registration attempts. Please try again in 1 minute."

    def test_allowed_again_after_lockout_expires(self, counter, clock):
        for _ in range(MAX_ATTEMPTS):
            counter.can_submit()

        clock.advance(LOCKOUT_DURATION_MS)
        result = counter.can_submit()

        assert result.allowed is True
        assert result.remaining_attempts == MAX_ATTEMPTS - 1

    def test_old_attempts_leave_the_window(self, counter, clock):
        for _ in range(MAX_ATTEMPTS - 1):
            counter.can_submit()

        clock.advance(TIME_WINDOW_MS)
        result = counter.can_submit()

        assert result.allowed is True
        assert result.remaining_attempts == MAX_ATTEMPTS - 1

    def test_sliding_window_keeps_recent_attempts(self, counter, clock):
        counter.can_submit()
        clock.advance(TIME_WINDOW_MS - 1000)
        for _ in range(MAX_ATTEMPTS - 2):
            counter.can_submit()

        # The first attempt is still inside the window
        assert counter.can_submit().allowed is False

    @pytest.mark.parametrize("raw", ["not json", "[1, 2]", '{"attempts": ["x"]}', '{"attempts": 5}'])
    def test_corrupt_state_treated_as_empty(self, clock, raw):
        counter = AbuseCounter(InMemoryScope({STORAGE_KEY: raw}), clock=clock)
        result = counter.can_submit()
        assert result.allowed is True
        assert result.remaining_attempts == MAX_ATTEMPTS - 1

    def test_custom_limits(self, scope, clock):
        counter = AbuseCounter(scope, clock=clock, max_attempts=2, lockout_duration_ms=5 * 60 * 1000)
        assert counter.can_submit().allowed is True
        result = counter.can_submit()
        assert result.allowed is False
        assert "5 minutes" in result.message


class TestStatusAndReset:
    """Test get_status and reset."""

    def test_status_does_not_record_attempts(self, counter):
        counter.can_submit()
        status = counter.get_status()
        assert status == {"locked": False, "attempts": 1, "max_attempts": MAX_ATTEMPTS, "remaining_attempts": 4}
        assert counter.get_status()["attempts"] == 1

    def test_status_while_locked(self, counter):
        for _ in range(MAX_ATTEMPTS):
            counter.can_submit()
        status = counter.get_status()
        assert status["locked"] is True
        assert status["lockout_minutes"] == 60

    def test_reset_clears_lockout(self, counter):
        for _ in range(MAX_ATTEMPTS):
            counter.can_submit()
        counter.reset()
        assert counter.can_submit().allowed is True
