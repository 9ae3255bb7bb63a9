"""
Workshop registration application
Run with: streamlit run app.py
"""
import logging
from typing import Optional

import streamlit as st

from workshop_registration.config import configure_logging, get_settings
from workshop_registration.services import event_service
from workshop_registration.services.abuse_counter import AbuseCounter
from workshop_registration.services.eligibility_service import check_status
from workshop_registration.services.registration_service import RegistrationWorkflow
from workshop_registration.storage.base import RegistrationStorage
from workshop_registration.storage.factory import create_storage
from workshop_registration.ui.admin_panel import render_admin_panel
from workshop_registration.ui.registration_form import render_confirmation, render_registration_form
from workshop_registration.utils.exceptions import ConfigurationError
from workshop_registration.utils.kv_scope import SessionStateScope

logger = logging.getLogger(__name__)


# Streamlit page configuration
st.set_page_config(
    page_title="Workshop Registration",
    page_icon="🎓",
    layout="centered",
    initial_sidebar_state="collapsed"
)


@st.cache_resource
def _create_storage() -> RegistrationStorage:
    # Exceptions are not cached, so a misconfiguration is retried on the next run
    return create_storage(get_settings())


def get_storage() -> Optional[RegistrationStorage]:
    """The process-wide storage backend, or None if it cannot be created."""
    try:
        return _create_storage()
    except ConfigurationError as e:
        logger.error("Storage backend unavailable: %s", e)
        return None


def initialize_session_state():
    """Initialize session state defaults."""
    if "current_page" not in st.session_state:
        st.session_state.current_page = "register"


def render_navigation():
    """Top navigation."""
    nav_col1, nav_col2 = st.columns([4, 1])

    with nav_col1:
        if st.button("📝 Register", key="nav_register"):
            st.session_state.current_page = "register"

    with nav_col2:
        if st.button("👤 Admin", use_container_width=True, key="nav_admin"):
            st.session_state.current_page = "admin"


def render_current_page():
    """Render the page selected in session state."""
    settings = get_settings()
    event_service.set_events_file(settings.events_file)
    events = event_service.get_events()
    event_id = event_service.get_current_event_id(settings.current_event_id)
    event = events.get(event_id) if event_id else None
    storage = get_storage()

    page = st.session_state.current_page
    if page == "register":
        if event is None:
            st.error(f"Workshop event not found: {event_id}")
            return
        workflow = RegistrationWorkflow(
            storage=storage,
            abuse_counter=AbuseCounter(SessionStateScope()),
            events=events,
        )
        render_registration_form(workflow, event, check_status(event.id, events=events))

    elif page == "confirmation":
        render_confirmation()

    elif page == "admin":
        render_admin_panel(storage, event)

    else:
        st.error(f"Unknown page: {page}")
        if st.button("Back to registration"):
            st.session_state.current_page = "register"
            st.rerun()


def main():
    """Application entry point."""
    configure_logging(get_settings().log_level)
    try:
        initialize_session_state()
        render_navigation()
        render_current_page()
    except Exception as e:
        logger.exception("Unhandled exception during app execution")
        st.error("Something went wrong. Please refresh the page.")
        with st.expander("🔍 Error details"):
            st.code(str(e))

        if st.button("🔄 Reload"):
            st.session_state.clear()
            st.rerun()


if __name__ == "__main__":
    main()
