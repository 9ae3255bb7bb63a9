"""Registration storage in a hosted Supabase (PostgREST) table."""
import logging
from typing import Any, Dict, List, Optional

import httpx

from workshop_registration.models.registration import STATUS_REGISTERED, RegistrationRecord
from workshop_registration.storage.base import RegistrationStorage
from workshop_registration.utils.exceptions import (
    ConfigurationError,
    DuplicateRegistrationError,
    StoragePermissionError,
    TransportError,
    UnclassifiedError,
)

logger = logging.getLogger(__name__)

TABLE = "workshop_registrations"

# PostgreSQL error codes surfaced by PostgREST
INSUFFICIENT_PRIVILEGE = "42501"
UNIQUE_VIOLATION = "23505"


class SupabaseStorage(RegistrationStorage):
    """
    Reads and writes ``workshop_registrations`` through the Supabase REST API.

    The public (anon) key usually has INSERT rights only; row-level security
    hides SELECTs. Reads therefore raise ``StoragePermissionError`` and the
    table's unique constraint on (student_email, workshop_event_id) is the
    real duplicate guard.
    """

    name = "supabase"

    def __init__(self, url: str, anon_key: str, timeout: float = 10.0, client: Optional[httpx.Client] = None):
        self.url = (url or "").rstrip("/")
        self.anon_key = anon_key or ""
        self.timeout = timeout
        self._client = client

    def initialize(self) -> None:
        if not self.url or not self.anon_key:
            raise ConfigurationError("Supabase configuration missing: set SUPABASE_URL and SUPABASE_ANON_KEY")
        if not self.url.startswith("https://") and not self.url.startswith("http://"):
            raise ConfigurationError(f"SUPABASE_URL must be an http(s) URL: {self.url}")

        if self._client is None:
            self._client = httpx.Client(
                base_url=f"{self.url}/rest/v1",
                timeout=self.timeout,
                headers={
                    "apikey": self.anon_key,
                    "Authorization": f"Bearer {self.anon_key}",
                    "Accept": "application/json",
                },
            )
        logger.info("Supabase storage initialized for %s", self.url)

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            raise ConfigurationError("Supabase adapter not initialized. Call initialize() first.")
        return self._client

    def _request(self, method: str, **kwargs: Any) -> httpx.Response:
        try:
            return self.client.request(method, f"/{TABLE}", **kwargs)
        except httpx.RequestError as exc:
            raise TransportError(f"Failed to reach Supabase: {exc}") from exc

    @staticmethod
    def _error_body(response: httpx.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    @staticmethod
    def _is_permission_error(response: httpx.Response, body: Dict[str, Any]) -> bool:
        message = str(body.get("message", "")).lower()
        return (
            response.status_code in (401, 403)
            or body.get("code") == INSUFFICIENT_PRIVILEGE
            or "row-level security" in message
        )

    def _raise_for_read(self, response: httpx.Response) -> None:
        if not response.is_error:
            return
        body = self._error_body(response)
        if self._is_permission_error(response, body):
            raise StoragePermissionError(f"Supabase refused read: {body.get('message', response.status_code)}")
        raise UnclassifiedError(
            f"Supabase error ({body.get('code', response.status_code)}): {body.get('message', '')}".rstrip(": ")
        )

    def check_existing_registration(self, student_email: str, event_id: str) -> Optional[RegistrationRecord]:
        response = self._request(
            "GET",
            params={
                "select": "*",
                "student_email": f"eq.{student_email}",
                "workshop_event_id": f"eq.{event_id}",
                "limit": "1",
            },
        )
        if response.is_error:
            body = self._error_body(response)
            if self._is_permission_error(response, body):
                raise StoragePermissionError("SELECT blocked by row-level security")
            # The unique constraint still guards the insert
            logger.warning("Error checking existing registration: %s", body or response.status_code)
            return None

        rows = response.json() or []
        return RegistrationRecord.from_dict(rows[0]) if rows else None

    def get_registration_count(self, event_id: str) -> int:
        response = self._request(
            "GET",
            params={
                "select": "id",
                "workshop_event_id": f"eq.{event_id}",
                "status": f"eq.{STATUS_REGISTERED}",
                "limit": "1",
            },
            headers={"Prefer": "count=exact"},
        )
        self._raise_for_read(response)
        return parse_content_range_total(response.headers.get("Content-Range"))

    def insert_registration(self, record: RegistrationRecord) -> RegistrationRecord:
        payload = record.to_dict(include_storage_fields=False)
        # Minimal return so the anon role doesn't need SELECT rights
        response = self._request("POST", json=[payload], headers={"Prefer": "return=minimal"})

        if response.is_error:
            body = self._error_body(response)
            if body.get("code") == UNIQUE_VIOLATION or response.status_code == 409:
                raise DuplicateRegistrationError()
            raise UnclassifiedError(
                f"Supabase error ({body.get('code', response.status_code)}): {body.get('message', '')}".rstrip(": ")
            )

        return RegistrationRecord.from_dict(payload)

    def get_registrations(self, event_id: str) -> List[RegistrationRecord]:
        response = self._request(
            "GET",
            params={
                "select": "*",
                "workshop_event_id": f"eq.{event_id}",
                "order": "created_at.desc",
            },
        )
        self._raise_for_read(response)
        return [RegistrationRecord.from_dict(row) for row in response.json() or []]


def parse_content_range_total(header: Optional[str]) -> int:
    """
    Extract the total from a PostgREST Content-Range header.

    Examples: "0-0/12" → 12, "*/0" → 0, "0-0/*" or missing → 0
    """
    if not header or "/" not in header:
        return 0
    total = header.rsplit("/", 1)[1].strip()
    return int(total) if total.isdigit() else 0
