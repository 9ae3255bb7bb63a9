"""Custom exception classes."""
from typing import Dict, Optional


class RegistrationError(Exception):
    """Base class for registration workflow errors."""
    pass


class ValidationError(RegistrationError):
    """Raised when form fields fail validation."""

    def __init__(self, field_errors: Dict[str, str]):
        self.field_errors = dict(field_errors)
        super().__init__(
            "Invalid fields: " + ", ".join(sorted(self.field_errors))
        )


class EligibilityClosedError(RegistrationError):
    """Raised when registration is closed for the event."""
    pass


class AbuseLockoutError(RegistrationError):
    """Raised when the submission attempt limit has been reached."""
    pass


class DuplicateRegistrationError(RegistrationError):
    """Raised when the student is already registered for the event."""

    code = "DUPLICATE"

    def __init__(self, message: str = "Student already registered for this event"):
        super().__init__(message)


class TransportError(RegistrationError):
    """Raised when the storage backend cannot be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class StoragePermissionError(RegistrationError):
    """Raised when the storage backend refuses a read."""
    pass


class ConfigurationError(RegistrationError):
    """Raised when the storage backend is missing or misconfigured."""
    pass


class UnclassifiedError(RegistrationError):
    """Raised for storage failures with no more specific category."""
    pass
