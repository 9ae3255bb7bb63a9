"""Unit tests for SupabaseStorage against a mocked PostgREST endpoint."""
import json

import httpx
import pytest

from workshop_registration.models.registration import RegistrationRecord
from workshop_registration.storage.supabase_store import SupabaseStorage, parse_content_range_total
from workshop_registration.utils.exceptions import (
    ConfigurationError,
    DuplicateRegistrationError,
    StoragePermissionError,
    UnclassifiedError,
)

SUPABASE_URL = "https://demo.supabase.co"
REST_URL = f"{SUPABASE_URL}/rest/v1"

RLS_ERROR = {
    "code": "42501",
    "message": 'new row violates row-level security policy for table "workshop_registrations"',
}


def make_record():
    return RegistrationRecord(
        student_name="Ada Lovelace",
        student_email="ada@example.com",
        student_grade="10",
        parent_name="Anne Byron",
        parent_email="anne@example.com",
        parent_phone="5551234567",
        workshop_level="Explorer Level",
        workshop_event_id="evt-1",
    )


def make_storage(handler):
    client = httpx.Client(base_url=REST_URL, transport=httpx.MockTransport(handler))
    storage = SupabaseStorage(SUPABASE_URL, "anon-key", client=client)
    storage.initialize()
    return storage


class TestParseContentRange:
    """Test parse_content_range_total."""

    @pytest.mark.parametrize("header,expected", [
        ("0-0/12", 12),
        ("*/0", 0),
        ("0-0/*", 0),
        (None, 0),
        ("", 0),
    ])
    def test_totals(self, header, expected):
        assert parse_content_range_total(header) == expected


class TestInitialize:
    """Test initialize."""

    def test_missing_key(self):
        with pytest.raises(ConfigurationError, match="SUPABASE_ANON_KEY"):
            SupabaseStorage(SUPABASE_URL, "").initialize()

    def test_missing_url(self):
        with pytest.raises(ConfigurationError):
            SupabaseStorage("", "anon-key").initialize()

    def test_default_client_sends_key_headers(self):
        storage = SupabaseStorage(SUPABASE_URL, "anon-key")
        storage.initialize()

        assert str(storage.client.base_url).rstrip("/") == REST_URL
        assert storage.client.headers["apikey"] == "anon-key"
        assert storage.client.headers["Authorization"] == "Bearer anon-key"


class TestCheckExisting:
    """Test check_existing_registration."""

    def test_filters_by_email_and_event(self):
        seen = {}

        def handler(request):
            seen.update(request.url.params)
            seen["path"] = request.url.path
            return httpx.Response(200, json=[])

        assert make_storage(handler).check_existing_registration("ada@example.com", "evt-1") is None
        assert seen["path"] == "/rest/v1/workshop_registrations"
        assert seen["student_email"] == "eq.ada@example.com"
        assert seen["workshop_event_id"] == "eq.evt-1"
        assert seen["limit"] == "1"

    def test_found(self):
        row = dict(make_record().to_dict(), id=42)
        storage = make_storage(lambda request: httpx.Response(200, json=[row]))
        assert storage.check_existing_registration("ada@example.com", "evt-1").id == "42"

    def test_rls_block_is_permission_error(self):
        storage = make_storage(lambda request: httpx.Response(401, json=RLS_ERROR))
        with pytest.raises(StoragePermissionError):
            storage.check_existing_registration("ada@example.com", "evt-1")

    def test_other_error_returns_none(self):
        storage = make_storage(lambda request: httpx.Response(500, json={"code": "XX000", "message": "boom"}))
        assert storage.check_existing_registration("ada@example.com", "evt-1") is None


class TestCount:
    """Test get_registration_count."""

    def test_reads_exact_count_header(self):
        def handler(request):
            assert request.headers["Prefer"] == "count=exact"
            assert request.url.params["status"] == "eq.registered"
            return httpx.Response(200, json=[{"id": 1}], headers={"Content-Range": "0-0/12"})

        assert make_storage(handler).get_registration_count("evt-1") == 12

    def test_empty_table(self):
        storage = make_storage(lambda request: httpx.Response(200, json=[], headers={"Content-Range": "*/0"}))
        assert storage.get_registration_count("evt-1") == 0

    def test_permission_denied(self):
        storage = make_storage(lambda request: httpx.Response(403, json={"message": "permission denied"}))
        with pytest.raises(StoragePermissionError):
            storage.get_registration_count("evt-1")

    def test_rls_code(self):
        storage = make_storage(lambda request: httpx.Response(400, json=RLS_ERROR))
        with pytest.raises(StoragePermissionError):
            storage.get_registration_count("evt-1")


class TestInsert:
    """Test insert_registration."""

    def test_posts_single_row_with_minimal_return(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["prefer"] = request.headers["Prefer"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(201)

        stored = make_storage(handler).insert_registration(make_record())

        assert seen["method"] == "POST"
        assert seen["prefer"] == "return=minimal"
        assert len(seen["body"]) == 1
        assert seen["body"][0]["student_email"] == "ada@example.com"
        assert "id" not in seen["body"][0]
        assert stored.student_email == "ada@example.com"
        assert stored.id is None

    def test_unique_violation_is_duplicate(self):
        body = {"code": "23505", "message": "duplicate key value violates unique constraint"}
        storage = make_storage(lambda request: httpx.Response(409, json=body))
        with pytest.raises(DuplicateRegistrationError):
            storage.insert_registration(make_record())

    def test_other_error_is_unclassified(self):
        body = {"code": "23502", "message": "null value in column"}
        storage = make_storage(lambda request: httpx.Response(400, json=body))
        with pytest.raises(UnclassifiedError, match=r"Supabase error \(23502\): null value in column"):
            storage.insert_registration(make_record())


class TestList:
    """Test get_registrations."""

    def test_orders_newest_first(self):
        def handler(request):
            assert request.url.params["order"] == "created_at.desc"
            return httpx.Response(200, json=[dict(make_record().to_dict(), id="b"), dict(make_record().to_dict(), id="a")])

        assert [r.id for r in make_storage(handler).get_registrations("evt-1")] == ["b", "a"]

    def test_hidden_by_rls(self):
        storage = make_storage(lambda request: httpx.Response(401, json=RLS_ERROR))
        with pytest.raises(StoragePermissionError):
            storage.get_registrations("evt-1")

    def test_rows_outside_write_rules_still_listed(self):
        odd = dict(make_record().to_dict(), id="z", status="cancelled", parent_email="ada@example.com")
        storage = make_storage(lambda request: httpx.Response(200, json=[odd]))

        assert [r.status for r in storage.get_registrations("evt-1")] == ["cancelled"]
