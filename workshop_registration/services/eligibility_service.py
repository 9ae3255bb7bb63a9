"""Registration eligibility: deadline checks and countdown helpers."""
from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Optional

from workshop_registration.models.workshop_event import WorkshopEvent

REASON_EVENT_NOT_FOUND = "Event not found"
REASON_DEADLINE_PASSED = "Registration deadline has passed"
REASON_OPEN = "Registration is open"


@dataclass(frozen=True)
class EligibilityStatus:
    """Whether an event currently accepts registrations."""

    is_open: bool
    reason: str
    deadline: Optional[datetime] = None


@dataclass(frozen=True)
class TimeRemaining:
    """Non-negative countdown until a deadline."""

    days: int
    hours: int
    minutes: int
    seconds: int
    expired: bool


def check_status(
    event_id: str,
    now: Optional[datetime] = None,
    events: Optional[Mapping[str, WorkshopEvent]] = None,
) -> EligibilityStatus:
    """
    Check whether registration is open for an event.

    Args:
        event_id: Workshop event ID
        now: Current local time (defaults to datetime.now())
        events: Event catalog; the configured catalog when omitted

    Returns:
        EligibilityStatus
        - closed, "Event not found" for unknown IDs
        - open with deadline None when no deadline is configured
        - closed, "Registration deadline has passed" once now > deadline
        - open otherwise
    """
    if events is None:
        from workshop_registration.services.event_service import get_events
        events = get_events()

    event = events.get(event_id)
    if event is None:
        return EligibilityStatus(is_open=False, reason=REASON_EVENT_NOT_FOUND)

    deadline = event.deadline()
    if deadline is None:
        return EligibilityStatus(is_open=True, reason=REASON_OPEN)

    now = now or datetime.now()
    if now > deadline:
        return EligibilityStatus(is_open=False, reason=REASON_DEADLINE_PASSED, deadline=deadline)

    return EligibilityStatus(is_open=True, reason=REASON_OPEN, deadline=deadline)


def time_remaining(deadline: Optional[datetime], now: Optional[datetime] = None) -> Optional[TimeRemaining]:
    """Break ``deadline - now`` into days/hours/minutes/seconds."""
    if deadline is None:
        return None

    now = now or datetime.now()
    diff = (deadline - now).total_seconds()
    if diff <= 0:
        return TimeRemaining(days=0, hours=0, minutes=0, seconds=0, expired=True)

    total_seconds = int(diff)
    return TimeRemaining(
        days=total_seconds // 86400,
        hours=(total_seconds % 86400) // 3600,
        minutes=(total_seconds % 3600) // 60,
        seconds=total_seconds % 60,
        expired=False,
    )


def format_deadline(deadline: Optional[datetime]) -> Optional[str]:
    """
    Format a deadline for display.

    Example: 2025-11-11 23:59:59 → "November 11, 2025 at 11:59 PM"
    """
    if deadline is None:
        return None
    hour = deadline.hour % 12 or 12
    meridiem = "AM" if deadline.hour < 12 else "PM"
    return f"{deadline.strftime('%B')} {deadline.day}, {deadline.year} at {hour}:{deadline.minute:02d} {meridiem}"


def format_countdown(remaining: Optional[TimeRemaining]) -> str:
    """Format a countdown as DD:HH:MM:SS."""
    if remaining is None or remaining.expired:
        return "00:00:00:00"
    return f"{remaining.days:02d}:{remaining.hours:02d}:{remaining.minutes:02d}:{remaining.seconds:02d}"
