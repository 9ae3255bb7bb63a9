"""Workshop event catalog with caching."""
import logging
from typing import Dict, List, Optional

from workshop_registration.models.workshop_event import WorkshopEvent
from workshop_registration.storage.json_files import load_json

logger = logging.getLogger(__name__)

# Catalog file path, overridden from settings at startup
EVENTS_FILE = "data/events.json"

# Cache variables
_events_cache: Optional[Dict[str, WorkshopEvent]] = None
_current_event_id: Optional[str] = None


def _clear_cache():
    """Clear the event catalog cache."""
    global _events_cache, _current_event_id
    _events_cache = None
    _current_event_id = None


def set_events_file(file_path: str) -> None:
    """Point the catalog at a different file and drop cached events."""
    global EVENTS_FILE
    if file_path != EVENTS_FILE:
        EVENTS_FILE = file_path
        _clear_cache()


def _load_catalog() -> None:
    global _events_cache, _current_event_id

    data = load_json(EVENTS_FILE)
    events = {}
    for event_id, event_data in data.get("events", {}).items():
        events[event_id] = WorkshopEvent.from_dict(event_id, event_data)

    _events_cache = events
    _current_event_id = data.get("current_event_id")
    logger.info("Loaded %d workshop event(s) from %s", len(events), EVENTS_FILE)


def get_events() -> Dict[str, WorkshopEvent]:
    """
    Load all configured events, keyed by event ID.

    Raises:
        FileNotFoundError: If the catalog file doesn't exist
        json.JSONDecodeError: If the catalog is malformed
        ValueError: If an event entry is invalid
    """
    if _events_cache is None:
        _load_catalog()
    return _events_cache


def get_all_events() -> List[WorkshopEvent]:
    """All events ordered by start date."""
    return sorted(get_events().values(), key=lambda e: e.start_date)


def get_event_by_id(event_id: str) -> Optional[WorkshopEvent]:
    """
    Get an event by ID.

    Returns:
        WorkshopEvent, or None if it doesn't exist
    """
    return get_events().get(event_id)


def get_current_event_id(override: Optional[str] = None) -> Optional[str]:
    """
    Resolve the active event.

    Args:
        override: Event ID from configuration, which wins over the
            catalog's ``current_event_id``
    """
    if override:
        return override
    get_events()
    return _current_event_id
