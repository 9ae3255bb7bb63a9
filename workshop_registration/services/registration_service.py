"""Registration workflow for workshop submissions."""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Mapping, Optional, Tuple

import httpx

from workshop_registration.models.registration import (
    STATUS_REGISTERED,
    STATUS_WAITLISTED,
    RegistrationForm,
    RegistrationRecord,
)
from workshop_registration.models.workshop_event import WorkshopEvent
from workshop_registration.services.abuse_counter import AbuseCounter
from workshop_registration.services.eligibility_service import check_status
from workshop_registration.storage.base import RegistrationStorage
from workshop_registration.utils.exceptions import (
    AbuseLockoutError,
    ConfigurationError,
    DuplicateRegistrationError,
    EligibilityClosedError,
    StoragePermissionError,
    TransportError,
    ValidationError,
)
from workshop_registration.utils.validation import (
    format_name,
    normalize_email,
    validate_registration_form,
)

logger = logging.getLogger(__name__)

SUCCEEDED = "succeeded"
REJECTED = "rejected"
FAILED = "failed"

# Error kinds used to pick the user-facing message
KIND_VALIDATION = "validation"
KIND_ELIGIBILITY_CLOSED = "eligibility_closed"
KIND_ABUSE_LOCKOUT = "abuse_lockout"
KIND_DUPLICATE = "duplicate"
KIND_TRANSPORT = "transport"
KIND_CONFIGURATION = "configuration"
KIND_UNCLASSIFIED = "unclassified"

DUPLICATE_MESSAGE = (
    "This student is already registered for this workshop event. "
    "Each student can only register once per event."
)
CONFIGURATION_MESSAGE = "Database connection error. Please check your configuration or contact support."
TRANSPORT_MESSAGE = (
    "Unable to connect to registration system. "
    "Please check your internet connection and try again."
)
SUPABASE_MESSAGE = "Database connection error. Please ensure the database is properly configured."
GENERIC_MESSAGE = "Sorry, there was an error submitting your registration. Please try again or contact support."
VALIDATION_MESSAGE = "Please correct the highlighted fields."


@dataclass
class SubmissionOutcome:
    """Terminal result of one submission attempt."""

    state: str
    message: str = ""
    error_kind: Optional[str] = None
    field_errors: Dict[str, str] = field(default_factory=dict)
    record: Optional[RegistrationRecord] = None
    error: Optional[BaseException] = None
    warning: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state == SUCCEEDED

    @property
    def status(self) -> Optional[str]:
        """Status of the stored record (registered / waitlisted)."""
        return self.record.status if self.record else None


def classify_error(error: BaseException) -> Tuple[str, str]:
    """
    Map a storage-stage error to an error kind and user-facing message.

    Inspects the exception type, its ``code`` attribute and its message.

    Returns:
        Tuple of (error_kind, user_message)
    """
    message = str(error)
    lowered = message.lower()

    if (isinstance(error, DuplicateRegistrationError)
            or getattr(error, "code", None) == DuplicateRegistrationError.code
            or "already registered" in lowered):
        return KIND_DUPLICATE, DUPLICATE_MESSAGE

    if isinstance(error, ConfigurationError) or "not initialized" in lowered:
        return KIND_CONFIGURATION, CONFIGURATION_MESSAGE

    if (isinstance(error, (TransportError, httpx.TransportError, ConnectionError))
            or "api error" in lowered
            or "fetch" in lowered):
        return KIND_TRANSPORT, TRANSPORT_MESSAGE

    if "supabase" in lowered:
        return KIND_CONFIGURATION, SUPABASE_MESSAGE

    if message:
        return KIND_UNCLASSIFIED, f"Error: {message}"
    return KIND_UNCLASSIFIED, GENERIC_MESSAGE


class RegistrationWorkflow:
    """
    Runs one submission through validation, gates and persistence.

    Order of steps:
        1. field validation (all fields, aggregated)
        2. eligibility gate (deadline)
        3. abuse gate (attempt counter)
        4. duplicate check
        5. capacity check, deciding registered vs waitlisted
        6. insert

    Steps 4-6 are sequential but not atomic with respect to other
    visitors; two concurrent submissions can both see a free seat.
    """

    def __init__(
        self,
        storage: Optional[RegistrationStorage],
        abuse_counter: AbuseCounter,
        events: Mapping[str, WorkshopEvent],
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.storage = storage
        self.abuse_counter = abuse_counter
        self.events = events
        self.clock = clock

    def submit(self, form: RegistrationForm, event_id: str) -> SubmissionOutcome:
        """
        Submit a registration form for an event.

        Args:
            form: Raw form input
            event_id: Workshop event to register for

        Returns:
            SubmissionOutcome in state succeeded, rejected or failed.
            Never raises for validation, gate or storage errors.
        """
        try:
            return self._run(form, event_id)
        except ValidationError as e:
            return SubmissionOutcome(
                state=REJECTED,
                message=VALIDATION_MESSAGE,
                error_kind=KIND_VALIDATION,
                field_errors=e.field_errors,
                error=e,
            )
        except EligibilityClosedError as e:
            return SubmissionOutcome(state=REJECTED, message=str(e), error_kind=KIND_ELIGIBILITY_CLOSED, error=e)
        except AbuseLockoutError as e:
            return SubmissionOutcome(state=REJECTED, message=str(e), error_kind=KIND_ABUSE_LOCKOUT, error=e)
        except DuplicateRegistrationError as e:
            logger.info("Duplicate registration rejected for event %s", event_id)
            return SubmissionOutcome(state=REJECTED, message=DUPLICATE_MESSAGE, error_kind=KIND_DUPLICATE, error=e)
        except Exception as e:
            logger.exception("Registration error for event %s", event_id)
            kind, message = classify_error(e)
            state = REJECTED if kind == KIND_DUPLICATE else FAILED
            return SubmissionOutcome(state=state, message=message, error_kind=kind, error=e)

    def _run(self, form: RegistrationForm, event_id: str) -> SubmissionOutcome:
        field_errors = validate_registration_form(form)
        if field_errors:
            raise ValidationError(field_errors)

        status = check_status(event_id, now=self.clock(), events=self.events)
        if not status.is_open:
            raise EligibilityClosedError(f"Registration is closed: {status.reason}")

        attempt = self.abuse_counter.can_submit()
        if not attempt.allowed:
            raise AbuseLockoutError(attempt.message)

        if self.storage is None:
            raise ConfigurationError("Database adapter not initialized. Please check your configuration.")

        event = self.events[event_id]
        record = build_record(form, event)

        if self._find_existing(record.student_email, event_id) is not None:
            raise DuplicateRegistrationError()

        count = self._count_registered(event_id)
        if count >= event.capacity:
            record.status = STATUS_WAITLISTED

        # A uniqueness violation here surfaces as DuplicateRegistrationError
        inserted = self.storage.insert_registration(record)
        logger.info("Registration saved for event %s with status %s", event_id, inserted.status)

        return SubmissionOutcome(
            state=SUCCEEDED,
            message=confirmation_message(inserted),
            record=inserted,
            warning=attempt.message,
        )

    def _find_existing(self, student_email: str, event_id: str) -> Optional[RegistrationRecord]:
        try:
            return self.storage.check_existing_registration(student_email, event_id)
        except StoragePermissionError as e:
            logger.warning("Duplicate check unavailable (%s); relying on insert constraint", e)
            return None

    def _count_registered(self, event_id: str) -> int:
        try:
            return self.storage.get_registration_count(event_id)
        except StoragePermissionError as e:
            logger.warning("Registration count unavailable (%s); defaulting to 0", e)
            return 0


def build_record(form: RegistrationForm, event: WorkshopEvent) -> RegistrationRecord:
    """Normalize validated form input into a new registration record."""
    return RegistrationRecord(
        student_name=format_name(form.student_name),
        student_email=normalize_email(form.student_email),
        student_grade=form.student_grade,
        parent_name=format_name(form.parent_name),
        parent_email=normalize_email(form.parent_email),
        parent_phone=form.parent_phone.strip(),
        workshop_level=(form.workshop_level or "").strip() or event.level,
        workshop_event_id=event.id,
        status=STATUS_REGISTERED,
        student_experience=(form.student_experience or "").strip(),
        motivation=(form.motivation or "").strip(),
    )


def confirmation_message(record: RegistrationRecord) -> str:
    """Confirmation text for a stored registration."""
    if record.is_waitlisted:
        return (
            f"{record.student_name} has been added to the waitlist. "
            "We will contact you if a spot becomes available."
        )
    return f"{record.student_name} is registered! A confirmation will be sent to {record.parent_email}."
