"""Registration storage in a local JSON file."""
import logging
import uuid
from datetime import datetime
from typing import List, Optional

from workshop_registration.models.registration import STATUS_REGISTERED, RegistrationRecord
from workshop_registration.storage.base import RegistrationStorage
from workshop_registration.storage.json_files import load_json, lock_file, save_json
from workshop_registration.utils.exceptions import ConfigurationError, DuplicateRegistrationError
from workshop_registration.utils.validation import normalize_email

logger = logging.getLogger(__name__)


class JsonFileStorage(RegistrationStorage):
    """
    Stores all registrations in one JSON document.

    File layout::

        {"registrations": [{"id": "...", "student_email": "...", ...}]}

    Inserts run under an exclusive file lock and enforce uniqueness of
    (student email, event), so this backend never needs the read-side
    permission fallbacks of the hosted backends.
    """

    name = "json"

    def __init__(self, file_path: str):
        self.file_path = file_path

    def initialize(self) -> None:
        if not self.file_path:
            raise ConfigurationError("JSON storage requires a registrations file path")

        try:
            with lock_file(self.file_path):
                data = load_json(self.file_path, default={})
                if "registrations" not in data:
                    data["registrations"] = []
                    save_json(self.file_path, data, backup=False)
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Cannot open registrations file {self.file_path}: {e}") from e

        logger.info("JSON storage initialized at %s", self.file_path)

    def _rows(self) -> List[dict]:
        return load_json(self.file_path, default={"registrations": []}).get("registrations", [])

    def check_existing_registration(self, student_email: str, event_id: str) -> Optional[RegistrationRecord]:
        email = normalize_email(student_email)
        for row in self._rows():
            if row.get("workshop_event_id") == event_id and normalize_email(row.get("student_email", "")) == email:
                return RegistrationRecord.from_dict(row)
        return None

    def get_registration_count(self, event_id: str) -> int:
        return sum(
            1 for row in self._rows()
            if row.get("workshop_event_id") == event_id and row.get("status") == STATUS_REGISTERED
        )

    def insert_registration(self, record: RegistrationRecord) -> RegistrationRecord:
        email = normalize_email(record.student_email)

        with lock_file(self.file_path):
            # Reload data from file to get latest state
            data = load_json(self.file_path, default={"registrations": []})
            rows = data.setdefault("registrations", [])

            for row in rows:
                if (row.get("workshop_event_id") == record.workshop_event_id
                        and normalize_email(row.get("student_email", "")) == email):
                    raise DuplicateRegistrationError()

            row = record.to_dict(include_storage_fields=False)
            row["id"] = str(uuid.uuid4())
            row["created_at"] = datetime.now().astimezone().isoformat()
            rows.append(row)

            save_json(self.file_path, data, backup=True)

        return RegistrationRecord.from_dict(row)

    def get_registrations(self, event_id: str) -> List[RegistrationRecord]:
        rows = [row for row in self._rows() if row.get("workshop_event_id") == event_id]
        rows.sort(key=lambda row: row.get("created_at") or "", reverse=True)
        return [RegistrationRecord.from_dict(row) for row in rows]
