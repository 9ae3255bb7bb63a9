"""Creates the configured storage backend."""
import logging

from workshop_registration.config import SUPPORTED_DB_TYPES, Settings
from workshop_registration.storage.api_store import ApiStorage
from workshop_registration.storage.base import RegistrationStorage
from workshop_registration.storage.json_store import JsonFileStorage
from workshop_registration.storage.supabase_store import SupabaseStorage
from workshop_registration.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def create_storage(settings: Settings) -> RegistrationStorage:
    """
    Build and initialize the backend named by ``settings.db_type``.

    Args:
        settings: Loaded application settings

    Returns:
        An initialized RegistrationStorage

    Raises:
        ConfigurationError: If the type is unknown or the backend's
            parameters are missing
    """
    db_type = (settings.db_type or "").lower()

    if db_type == "json":
        storage: RegistrationStorage = JsonFileStorage(settings.registrations_file)
    elif db_type in ("api", "mysql", "mssql"):
        storage = ApiStorage(settings.api_url, timeout=settings.storage_timeout)
    elif db_type == "supabase":
        storage = SupabaseStorage(
            settings.supabase_url,
            settings.supabase_anon_key,
            timeout=settings.storage_timeout,
        )
    else:
        raise ConfigurationError(
            f"Unknown database type: {db_type!r}. Use one of {', '.join(SUPPORTED_DB_TYPES)}"
        )

    storage.initialize()
    logger.info("Database adapter initialized: %s", db_type)
    return storage
