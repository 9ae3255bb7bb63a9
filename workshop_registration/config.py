"""Configuration for the workshop registration app.

Values come from environment variables, optionally provided through a
``.env`` file in the working directory. ``get_settings()`` reads the
environment at call time so tests can override it with monkeypatch.
"""

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Directory Configuration ---

DATA_DIR = Path("data")

DEFAULT_REGISTRATIONS_FILE = str(DATA_DIR / "registrations.json")
DEFAULT_EVENTS_FILE = str(DATA_DIR / "events.json")

# --- Storage Configuration ---

# Backend selector: 'json', 'api' (also 'mysql' / 'mssql'), or 'supabase'
SUPPORTED_DB_TYPES = ("json", "api", "mysql", "mssql", "supabase")
DEFAULT_DB_TYPE = "json"
DEFAULT_STORAGE_TIMEOUT = 10.0

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class Settings:
    """Static settings loaded once at process start."""

    db_type: str = DEFAULT_DB_TYPE
    registrations_file: str = DEFAULT_REGISTRATIONS_FILE
    api_url: str = ""
    supabase_url: str = ""
    supabase_anon_key: str = ""
    storage_timeout: float = DEFAULT_STORAGE_TIMEOUT
    events_file: str = DEFAULT_EVENTS_FILE
    current_event_id: Optional[str] = None
    log_level: str = "INFO"


def get_settings() -> Settings:
    """Build settings from the current environment."""
    timeout_raw = os.getenv("STORAGE_TIMEOUT", str(DEFAULT_STORAGE_TIMEOUT))
    try:
        timeout = float(timeout_raw)
    except ValueError:
        timeout = DEFAULT_STORAGE_TIMEOUT

    return Settings(
        db_type=os.getenv("DB_TYPE", DEFAULT_DB_TYPE).strip().lower(),
        registrations_file=os.getenv("REGISTRATIONS_FILE", DEFAULT_REGISTRATIONS_FILE),
        api_url=os.getenv("API_URL", "").strip(),
        supabase_url=os.getenv("SUPABASE_URL", "").strip(),
        supabase_anon_key=os.getenv("SUPABASE_ANON_KEY", "").strip(),
        storage_timeout=timeout,
        events_file=os.getenv("EVENTS_FILE", DEFAULT_EVENTS_FILE),
        current_event_id=os.getenv("CURRENT_EVENT_ID") or None,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the Streamlit process."""
    root = logging.getLogger()
    root.setLevel(level)

    # Streamlit re-executes the script on every interaction
    if any(getattr(h, "_workshop_handler", False) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    handler._workshop_handler = True
    root.addHandler(handler)

    # Silence noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
