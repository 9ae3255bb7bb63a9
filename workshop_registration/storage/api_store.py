"""Registration storage behind a REST API (MySQL / MSSQL deployments)."""
import logging
from typing import Any, Dict, List, Optional

import httpx

from workshop_registration.models.registration import RegistrationRecord
from workshop_registration.storage.base import RegistrationStorage
from workshop_registration.utils.exceptions import (
    ConfigurationError,
    DuplicateRegistrationError,
    StoragePermissionError,
    TransportError,
)

logger = logging.getLogger(__name__)

PERMISSION_STATUSES = {401, 403}


class ApiStorage(RegistrationStorage):
    """
    Talks to a small registration API that owns the SQL database.

    Endpoints:
        POST /registrations/check   {"studentEmail", "eventId"} -> {"registration": {...} | null}
        GET  /registrations/count?eventId=...                   -> {"count": n}
        POST /registrations         {record}                    -> {"registration": {...}}
        GET  /registrations?eventId=...                         -> {"registrations": [...]}
    """

    name = "api"

    def __init__(self, api_url: str, timeout: float = 10.0, client: Optional[httpx.Client] = None):
        self.api_url = (api_url or "").rstrip("/")
        self.timeout = timeout
        self._client = client

    def initialize(self) -> None:
        if not self.api_url:
            raise ConfigurationError("API storage requires API_URL")
        if not self.api_url.startswith(("http://", "https://")):
            raise ConfigurationError(f"API_URL must be an http(s) URL: {self.api_url}")

        if self._client is None:
            self._client = httpx.Client(
                base_url=self.api_url,
                timeout=self.timeout,
                headers={"Accept": "application/json"},
            )
        logger.info("API storage initialized for %s", self.api_url)

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            raise ConfigurationError("Database adapter not initialized. Call initialize() first.")
        return self._client

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return self.client.request(method, path, **kwargs)
        except httpx.RequestError as exc:
            raise TransportError(f"Failed to reach registration API: {exc}") from exc

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.status_code in PERMISSION_STATUSES:
            raise StoragePermissionError(f"API refused access: {response.status_code}")
        if response.is_error:
            raise TransportError(f"API error: {response.status_code}", status_code=response.status_code)

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    def check_existing_registration(self, student_email: str, event_id: str) -> Optional[RegistrationRecord]:
        response = self._request(
            "POST",
            "/registrations/check",
            json={"studentEmail": student_email, "eventId": event_id},
        )
        if response.status_code == 404:
            return None
        self._raise_for_status(response)

        row = self._json(response).get("registration")
        return RegistrationRecord.from_dict(row) if row else None

    def get_registration_count(self, event_id: str) -> int:
        response = self._request("GET", "/registrations/count", params={"eventId": event_id})
        self._raise_for_status(response)
        return int(self._json(response).get("count") or 0)

    def insert_registration(self, record: RegistrationRecord) -> RegistrationRecord:
        response = self._request(
            "POST",
            "/registrations",
            json=record.to_dict(include_storage_fields=False),
        )
        if response.is_error:
            body = self._json(response)
            if response.status_code == 409 or body.get("code") == DuplicateRegistrationError.code:
                raise DuplicateRegistrationError()
            raise TransportError(f"API error: {response.status_code}", status_code=response.status_code)

        row = self._json(response).get("registration")
        return RegistrationRecord.from_dict(row) if row else record

    def get_registrations(self, event_id: str) -> List[RegistrationRecord]:
        response = self._request("GET", "/registrations", params={"eventId": event_id})
        self._raise_for_status(response)
        rows = self._json(response).get("registrations") or []
        return [RegistrationRecord.from_dict(row) for row in rows]
