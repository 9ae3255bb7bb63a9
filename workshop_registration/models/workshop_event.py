"""Workshop event data model."""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from workshop_registration.utils.date_utils import parse_deadline
from workshop_registration.utils.validation import (
    validate_date_format,
    validate_time_of_day_format,
)


@dataclass(frozen=True)
class WorkshopEvent:
    """Capacity-limited workshop event, configured once per process."""

    id: str
    name: str
    level: str
    capacity: int
    start_date: str
    end_date: str
    registration_deadline: Optional[str] = None
    registration_deadline_time: Optional[str] = None

    def __post_init__(self):
        """Validate event configuration after initialization."""
        if not self.id or not self.id.strip():
            raise ValueError("Event ID cannot be empty")

        if not self.name or not self.name.strip():
            raise ValueError("Event name cannot be empty")

        if not isinstance(self.capacity, int) or isinstance(self.capacity, bool) or self.capacity <= 0:
            raise ValueError("Capacity must be a positive integer")

        validate_date_format(self.start_date)
        validate_date_format(self.end_date)

        if self.end_date < self.start_date:
            raise ValueError(f"End date ({self.end_date}) cannot be before start date ({self.start_date})")

        if self.registration_deadline is not None:
            validate_date_format(self.registration_deadline)
            if self.registration_deadline_time is not None:
                validate_time_of_day_format(self.registration_deadline_time)
        elif self.registration_deadline_time is not None:
            raise ValueError("Deadline time requires a deadline date")

    @property
    def has_deadline(self) -> bool:
        return self.registration_deadline is not None

    def deadline(self) -> Optional[datetime]:
        """Absolute local deadline, or None when registration never closes."""
        if self.registration_deadline is None:
            return None
        return parse_deadline(self.registration_deadline, self.registration_deadline_time)

    @classmethod
    def from_dict(cls, event_id: str, data: Dict[str, Any]) -> "WorkshopEvent":
        """Build an event from its catalog entry."""
        return cls(
            id=event_id,
            name=data["name"],
            level=data.get("level", ""),
            capacity=data["capacity"],
            start_date=data["start_date"],
            end_date=data["end_date"],
            registration_deadline=data.get("registration_deadline"),
            registration_deadline_time=data.get("registration_deadline_time"),
        )
