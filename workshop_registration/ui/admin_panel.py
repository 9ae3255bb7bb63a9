"""Admin panel: registrations for the current event."""
import logging
import traceback
from typing import List, Optional

import streamlit as st

from workshop_registration.models.registration import RegistrationRecord
from workshop_registration.models.workshop_event import WorkshopEvent
from workshop_registration.services.admin_service import (
    is_admin_authenticated,
    login_admin,
    logout_admin,
    summarize_registrations,
)
from workshop_registration.services.registration_service import classify_error
from workshop_registration.storage.base import RegistrationStorage
from workshop_registration.utils.exceptions import StoragePermissionError
from workshop_registration.utils.validation import GRADE_LABELS

logger = logging.getLogger(__name__)

TABLE_COLUMNS = [
    "created_at",
    "status",
    "student_name",
    "student_email",
    "student_grade",
    "parent_name",
    "parent_email",
    "parent_phone",
    "workshop_level",
]


def _registration_rows(records: List[RegistrationRecord]) -> List[dict]:
    """Flatten records into table rows with readable grades."""
    rows = []
    for record in records:
        data = record.to_dict()
        row = {column: data.get(column) or "" for column in TABLE_COLUMNS}
        row["student_grade"] = GRADE_LABELS.get(record.student_grade, record.student_grade)
        rows.append(row)
    return rows


def _show_admin_exception(error: Exception, context: str) -> None:
    """Display error details in UI and log full traceback."""
    logger.exception("Admin panel error during %s", context)
    _, message = classify_error(error)
    st.error(f"❌ {context} failed: {message}")
    with st.expander("🔍 Error details"):
        st.code("".join(traceback.format_exception(type(error), error, error.__traceback__)))


def _render_login() -> None:
    with st.form("admin_login_form"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submit = st.form_submit_button("Log in")

    if submit:
        success, message = login_admin(username, password)
        if success:
            st.success(message)
            st.rerun()
        else:
            st.error(message)


def render_admin_panel(storage: Optional[RegistrationStorage], event: Optional[WorkshopEvent]) -> None:
    """Admin page: login gate, then the registration list."""
    st.header("👤 Admin")

    if not is_admin_authenticated():
        _render_login()
        return

    if st.button("Log out"):
        logout_admin()
        st.rerun()

    if event is None:
        st.error("No active workshop event is configured")
        return
    if storage is None:
        st.error("Database connection error. Please check your configuration or contact support.")
        return

    st.subheader(event.name)
    try:
        records = storage.get_registrations(event.id)
    except StoragePermissionError:
        st.warning("The storage backend does not allow listing registrations with the current credentials.")
        return
    except Exception as e:
        _show_admin_exception(e, "Loading registrations")
        return

    summary = summarize_registrations(records, event.capacity)
    col1, col2, col3 = st.columns(3)
    col1.metric("Registered", f"{summary.registered} / {summary.capacity}")
    col2.metric("Waitlisted", summary.waitlisted)
    col3.metric("Seats left", summary.seats_left)

    if records:
        st.dataframe(_registration_rows(records), use_container_width=True, hide_index=True)
    else:
        st.info("No registrations yet")
