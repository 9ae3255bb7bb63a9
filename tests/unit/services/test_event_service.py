"""Unit tests for event_service."""
import json
from datetime import datetime
from pathlib import Path

import pytest

from workshop_registration.services import event_service
from workshop_registration.services.eligibility_service import check_status

SHIPPED_CATALOG = Path(__file__).resolve().parents[3] / "data" / "events.json"


@pytest.fixture
def catalog_file(tmp_path):
    path = tmp_path / "events.json"
    path.write_text(json.dumps({
        "current_event_id": "explorer-nov",
        "events": {
            "explorer-nov": {
                "name": "Explorer November",
                "level": "Explorer Level",
                "capacity": 12,
                "start_date": "2025-11-15",
                "end_date": "2025-12-20",
                "registration_deadline": "2025-11-11",
                "registration_deadline_time": "23:59",
            },
            "builder-oct": {
                "name": "Builder October",
                "level": "Builder Level",
                "capacity": 6,
                "start_date": "2025-10-01",
                "end_date": "2025-10-30",
            },
        },
    }), encoding="utf-8")
    return str(path)


@pytest.fixture(autouse=True)
def use_catalog(catalog_file, monkeypatch):
    monkeypatch.setattr(event_service, "EVENTS_FILE", catalog_file)
    event_service._clear_cache()
    yield
    event_service._clear_cache()


class TestEventCatalog:
    """Test catalog loading and lookups."""

    def test_get_events_keyed_by_id(self):
        events = event_service.get_events()
        assert set(events) == {"explorer-nov", "builder-oct"}
        assert events["explorer-nov"].capacity == 12

    def test_get_all_events_sorted_by_start_date(self):
        assert [e.id for e in event_service.get_all_events()] == ["builder-oct", "explorer-nov"]

    def test_get_event_by_id(self):
        assert event_service.get_event_by_id("builder-oct").name == "Builder October"
        assert event_service.get_event_by_id("missing") is None

    def test_catalog_is_cached(self, catalog_file):
        first = event_service.get_events()
        with open(catalog_file, "w", encoding="utf-8") as f:
            json.dump({"events": {}}, f)
        assert event_service.get_events() is first

    def test_current_event_from_catalog(self):
        assert event_service.get_current_event_id() == "explorer-nov"

    def test_current_event_override(self):
        assert event_service.get_current_event_id("builder-oct") == "builder-oct"

    def test_set_events_file_reloads(self, tmp_path):
        other = tmp_path / "other.json"
        other.write_text(json.dumps({"events": {}}), encoding="utf-8")
        event_service.get_events()

        event_service.set_events_file(str(other))
        assert event_service.get_events() == {}
        assert event_service.get_current_event_id() is None

    def test_missing_file_raises(self, monkeypatch, tmp_path):
        monkeypatch.setattr(event_service, "EVENTS_FILE", str(tmp_path / "nope.json"))
        event_service._clear_cache()
        with pytest.raises(FileNotFoundError):
            event_service.get_events()

    def test_invalid_event_raises(self, monkeypatch, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"events": {"x": {
            "name": "X", "capacity": 0, "start_date": "2025-01-01", "end_date": "2025-01-02",
        }}}), encoding="utf-8")
        monkeypatch.setattr(event_service, "EVENTS_FILE", str(bad))
        event_service._clear_cache()
        with pytest.raises(ValueError, match="Capacity"):
            event_service.get_events()


class TestShippedCatalog:
    """Test the sample catalog in data/events.json."""

    def test_current_event_is_open(self):
        event_service.set_events_file(str(SHIPPED_CATALOG))
        events = event_service.get_events()
        current = event_service.get_current_event_id()

        assert current in events
        assert check_status(current, now=datetime(2026, 10, 19), events=events).is_open
