"""Storage port for registration records.

Concrete backends translate their own failure modes into the shared
exceptions from ``workshop_registration.utils.exceptions``:

- ``StoragePermissionError`` when a read is refused (callers treat it as
  "not found" / zero)
- ``DuplicateRegistrationError`` when an insert violates the
  (student email, event) uniqueness constraint
- ``TransportError`` when the backend cannot be reached
- ``ConfigurationError`` when the backend is not usable as configured
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from workshop_registration.models.registration import RegistrationRecord


class RegistrationStorage(ABC):
    """Persistence contract used by the registration workflow."""

    name = "abstract"

    @abstractmethod
    def initialize(self) -> None:
        """
        Validate configuration and prepare the backend.

        Raises:
            ConfigurationError: If the backend cannot be used
        """

    @abstractmethod
    def check_existing_registration(self, student_email: str, event_id: str) -> Optional[RegistrationRecord]:
        """
        Look up a registration by student email and event.

        Returns:
            The existing record, or None when not found
        """

    @abstractmethod
    def get_registration_count(self, event_id: str) -> int:
        """Count records with status 'registered' (waitlisted excluded)."""

    @abstractmethod
    def insert_registration(self, record: RegistrationRecord) -> RegistrationRecord:
        """
        Persist a new registration.

        Returns:
            The stored record, with storage-assigned fields where available
        """

    @abstractmethod
    def get_registrations(self, event_id: str) -> List[RegistrationRecord]:
        """All registrations for an event, newest first."""
