"""Submission attempt counter with temporary lockout.

This is advisory friction against scripted or repeated submissions, not a
security control. The state lives in the visitor's own scope (their
Streamlit session), so a visitor can reset it at will. Real throttling
has to happen in the storage backend.
"""
import json
import logging
import math
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from workshop_registration.utils.kv_scope import KeyValueScope

logger = logging.getLogger(__name__)

STORAGE_KEY = "workshop_registration_attempts"
MAX_ATTEMPTS = 5
TIME_WINDOW_MS = 15 * 60 * 1000
LOCKOUT_DURATION_MS = 60 * 60 * 1000
WARNING_THRESHOLD = 3


@dataclass
class AbuseCounterState:
    """Attempt timestamps (epoch ms) in the window plus optional lockout expiry."""

    attempts: List[int] = field(default_factory=list)
    lockout_until: Optional[int] = None


@dataclass(frozen=True)
class AbuseCheck:
    """Result of asking whether a submission may proceed."""

    allowed: bool
    remaining_attempts: Optional[int] = None
    message: Optional[str] = None


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def lockout_message(minutes: int) -> str:
    return f"Too many registration attempts. Please try again in {_plural(minutes, 'minute')}."


class AbuseCounter:
    """Counts submission attempts in a sliding window."""

    def __init__(
        self,
        scope: KeyValueScope,
        clock: Callable[[], float] = time.time,
        max_attempts: int = MAX_ATTEMPTS,
        time_window_ms: int = TIME_WINDOW_MS,
        lockout_duration_ms: int = LOCKOUT_DURATION_MS,
        storage_key: str = STORAGE_KEY,
    ):
        self.scope = scope
        self.clock = clock
        self.max_attempts = max_attempts
        self.time_window_ms = time_window_ms
        self.lockout_duration_ms = lockout_duration_ms
        self.storage_key = storage_key

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def _load(self) -> AbuseCounterState:
        raw = self.scope.get_item(self.storage_key)
        if not raw:
            return AbuseCounterState()
        try:
            data = json.loads(raw)
            attempts = [int(ts) for ts in data.get("attempts", [])]
            lockout_until = data.get("lockout_until")
            return AbuseCounterState(
                attempts=attempts,
                lockout_until=int(lockout_until) if lockout_until is not None else None,
            )
        except (ValueError, TypeError, AttributeError):
            logger.warning("Discarding unreadable attempt counter state")
            return AbuseCounterState()

    def _save(self, state: AbuseCounterState) -> None:
        self.scope.set_item(
            self.storage_key,
            json.dumps({"attempts": state.attempts, "lockout_until": state.lockout_until}),
        )

    def _recent(self, state: AbuseCounterState, now: int) -> List[int]:
        return [ts for ts in state.attempts if now - ts < self.time_window_ms]

    def _active_lockout_minutes(self, state: AbuseCounterState, now: int) -> Optional[int]:
        if state.lockout_until is not None and now < state.lockout_until:
            return math.ceil((state.lockout_until - now) / 60000)
        return None

    def can_submit(self) -> AbuseCheck:
        """
        Record a submission attempt and decide whether it may proceed.

        Returns:
            AbuseCheck
            - denied with a wait message while locked out (nothing recorded)
            - denied with a lockout message when this attempt reaches the limit
            - allowed with the remaining count, plus a warning when fewer
              than 3 attempts remain
        """
        state = self._load()
        now = self._now_ms()

        minutes = self._active_lockout_minutes(state, now)
        if minutes is not None:
            return AbuseCheck(allowed=False, message=lockout_message(minutes))

        if state.lockout_until is not None:
            # Lockout expired, start over with a fresh window
            state = AbuseCounterState()
            self._save(state)

        state.attempts = self._recent(state, now)
        state.attempts.append(now)

        if len(state.attempts) >= self.max_attempts:
            state.lockout_until = now + self.lockout_duration_ms
            self._save(state)
            logger.warning("Submission attempt limit reached; locking out for %d ms", self.lockout_duration_ms)
            return AbuseCheck(
                allowed=False,
                message=lockout_message(math.ceil(self.lockout_duration_ms / 60000)),
            )

        self._save(state)
        remaining = self.max_attempts - len(state.attempts)
        message = None
        if remaining < WARNING_THRESHOLD:
            message = f"Warning: {_plural(remaining, 'attempt')} remaining."
        return AbuseCheck(allowed=True, remaining_attempts=remaining, message=message)

    def get_status(self) -> dict:
        """Current counter status, without recording an attempt."""
        state = self._load()
        now = self._now_ms()
        recent = len(self._recent(state, now))

        minutes = self._active_lockout_minutes(state, now)
        if minutes is not None:
            return {
                "locked": True,
                "attempts": recent,
                "max_attempts": self.max_attempts,
                "lockout_minutes": minutes,
            }
        return {
            "locked": False,
            "attempts": recent,
            "max_attempts": self.max_attempts,
            "remaining_attempts": max(self.max_attempts - recent, 0),
        }

    def reset(self) -> None:
        """Clear all recorded attempts and any lockout."""
        self._save(AbuseCounterState())
