"""Registration data models."""
from dataclasses import InitVar, asdict, dataclass, field
from typing import Any, Dict, Optional

from workshop_registration.utils.validation import VALID_GRADES, normalize_email

STATUS_REGISTERED = "registered"
STATUS_WAITLISTED = "waitlisted"
VALID_STATUSES = [STATUS_REGISTERED, STATUS_WAITLISTED]


@dataclass
class RegistrationForm:
    """Raw form input, before validation."""

    student_name: str = ""
    student_email: str = ""
    student_grade: str = ""
    parent_name: str = ""
    parent_email: str = ""
    parent_phone: str = ""
    student_experience: str = ""
    motivation: str = ""
    workshop_level: str = ""


@dataclass
class RegistrationRecord:
    """One student's registration for a workshop event."""

    student_name: str
    student_email: str
    student_grade: str
    parent_name: str
    parent_email: str
    parent_phone: str
    workshop_level: str
    workshop_event_id: str
    status: str = STATUS_REGISTERED
    student_experience: str = ""
    motivation: str = ""
    created_at: Optional[str] = None  # ISO 8601, assigned by storage
    id: Optional[str] = field(default=None)
    validate: InitVar[bool] = True

    def __post_init__(self, validate: bool):
        """Validate record invariants."""
        if not validate:
            return

        if not self.workshop_event_id:
            raise ValueError("Event ID cannot be empty")

        if self.status not in VALID_STATUSES:
            raise ValueError(f"Status must be one of {VALID_STATUSES}, got: {self.status}")

        if self.student_grade and self.student_grade not in VALID_GRADES:
            raise ValueError(f"Grade must be one of {VALID_GRADES}, got: {self.student_grade}")

        if (self.student_email and self.parent_email
                and normalize_email(self.student_email) == normalize_email(self.parent_email)):
            raise ValueError("Student email and parent email must differ")

    @property
    def is_waitlisted(self) -> bool:
        return self.status == STATUS_WAITLISTED

    def to_dict(self, include_storage_fields: bool = True) -> Dict[str, Any]:
        """
        Serialize to the storage wire format.

        Args:
            include_storage_fields: When False, omit the storage-assigned
                ``id`` and ``created_at`` keys (used for inserts)
        """
        data = asdict(self)
        if not include_storage_fields:
            data.pop("id", None)
            data.pop("created_at", None)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegistrationRecord":
        """
        Build a record from a storage row, ignoring unknown columns.

        Stored rows are not re-checked against the write-side invariants.
        """
        return cls(
            student_name=data.get("student_name", ""),
            student_email=data.get("student_email", ""),
            student_grade=data.get("student_grade", ""),
            parent_name=data.get("parent_name", ""),
            parent_email=data.get("parent_email", ""),
            parent_phone=data.get("parent_phone", ""),
            workshop_level=data.get("workshop_level", ""),
            workshop_event_id=data.get("workshop_event_id", ""),
            status=data.get("status", STATUS_REGISTERED),
            student_experience=data.get("student_experience") or "",
            motivation=data.get("motivation") or "",
            created_at=data.get("created_at"),
            id=str(data["id"]) if data.get("id") is not None else None,
            validate=False,
        )
