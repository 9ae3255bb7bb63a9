"""Unit tests for create_storage."""
import pytest

from workshop_registration.config import Settings
from workshop_registration.storage.api_store import ApiStorage
from workshop_registration.storage.factory import create_storage
from workshop_registration.storage.json_store import JsonFileStorage
from workshop_registration.storage.supabase_store import SupabaseStorage
from workshop_registration.utils.exceptions import ConfigurationError


class TestCreateStorage:
    """Test backend selection."""

    def test_json(self, tmp_path):
        path = tmp_path / "registrations.json"
        storage = create_storage(Settings(db_type="json", registrations_file=str(path)))

        assert isinstance(storage, JsonFileStorage)
        assert path.exists()

    @pytest.mark.parametrize("db_type", ["api", "mysql", "MSSQL"])
    def test_api_family(self, db_type):
        storage = create_storage(Settings(db_type=db_type, api_url="https://api.example.com", storage_timeout=3.0))

        assert isinstance(storage, ApiStorage)
        assert storage.timeout == 3.0

    def test_supabase(self):
        storage = create_storage(Settings(
            db_type="supabase",
            supabase_url="https://demo.supabase.co",
            supabase_anon_key="anon-key",
        ))
        assert isinstance(storage, SupabaseStorage)

    def test_supabase_without_credentials(self):
        with pytest.raises(ConfigurationError, match="Supabase configuration missing"):
            create_storage(Settings(db_type="supabase"))

    def test_api_without_url(self):
        with pytest.raises(ConfigurationError):
            create_storage(Settings(db_type="api"))

    def test_unknown_type(self):
        with pytest.raises(ConfigurationError, match="Unknown database type"):
            create_storage(Settings(db_type="mongodb"))
