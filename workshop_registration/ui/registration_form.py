"""Registration form page."""
import html
import logging
from datetime import datetime
from typing import Dict, Optional

import streamlit as st

from workshop_registration.models.registration import RegistrationForm
from workshop_registration.models.workshop_event import WorkshopEvent
from workshop_registration.services.eligibility_service import (
    EligibilityStatus,
    format_countdown,
    format_deadline,
    time_remaining,
)
from workshop_registration.services.registration_service import (
    KIND_VALIDATION,
    RegistrationWorkflow,
    SubmissionOutcome,
)
from workshop_registration.ui.html_utils import html_block, status_badge
from workshop_registration.utils.validation import GRADE_LABELS, VALID_GRADES

logger = logging.getLogger(__name__)

OPEN_COLOR = "#22c55e"
CLOSED_COLOR = "#ff4444"

FIELD_ERRORS_KEY = "registration_field_errors"
FORM_MESSAGE_KEY = "registration_form_message"
CONFIRMATION_KEY = "registration_confirmation"


def _status_banner_html(event: WorkshopEvent, status: EligibilityStatus, now: Optional[datetime] = None) -> str:
    """Status section: open/closed badge, capacity note and countdown."""
    if not status.is_open:
        detail = f"{html.escape(status.reason)}."
        if status.deadline:
            detail += f" The deadline was {format_deadline(status.deadline)}."
        return html_block(f"""
            <div class="registration-status">
                {status_badge("Registration Closed", CLOSED_COLOR)}
                <p>{detail}</p>
            </div>
        """)

    capacity_note = (
        f"Limited to {event.capacity} students. "
        "Additional registrations will be waitlisted."
    )
    if status.deadline is None:
        return html_block(f"""
            <div class="registration-status">
                {status_badge("Registration Open", OPEN_COLOR)}
                <p>{html.escape(capacity_note)}</p>
            </div>
        """)

    countdown = format_countdown(time_remaining(status.deadline, now=now))
    return html_block(f"""
        <div class="registration-status">
            {status_badge("Registration Open", OPEN_COLOR)}
            <p>{html.escape(capacity_note)}</p>
            <p>Closes in: <span class="countdown">{countdown}</span> (D:H:M:S)</p>
            <p>{format_deadline(status.deadline)}</p>
        </div>
    """)


def _show_field_error(errors: Dict[str, str], field: str) -> None:
    if field in errors:
        st.caption(f":red[{errors[field]}]")


def render_registration_status(event: WorkshopEvent, status: EligibilityStatus) -> None:
    st.markdown(_status_banner_html(event, status), unsafe_allow_html=True)


def remember_outcome(outcome: SubmissionOutcome) -> None:
    """Keep the outcome in session state so the next rerun can show it."""
    if outcome.succeeded:
        st.session_state[CONFIRMATION_KEY] = {
            "status": outcome.status,
            "student_name": outcome.record.student_name,
            "message": outcome.message,
            "warning": outcome.warning,
        }
        st.session_state[FIELD_ERRORS_KEY] = {}
        st.session_state[FORM_MESSAGE_KEY] = None
        st.session_state.current_page = "confirmation"
        return

    st.session_state[FIELD_ERRORS_KEY] = outcome.field_errors if outcome.error_kind == KIND_VALIDATION else {}
    st.session_state[FORM_MESSAGE_KEY] = outcome.message


def render_registration_form(workflow: RegistrationWorkflow, event: WorkshopEvent, status: EligibilityStatus) -> None:
    """Render the form and run the workflow on submit."""
    st.subheader(event.name)
    render_registration_status(event, status)

    errors: Dict[str, str] = st.session_state.get(FIELD_ERRORS_KEY) or {}
    form_message = st.session_state.get(FORM_MESSAGE_KEY)
    if form_message:
        st.error(f"❌ {form_message}")

    with st.form("registration_form", clear_on_submit=False):
        st.markdown("#### Student Information")
        student_name = st.text_input("Student name", key="student_name")
        _show_field_error(errors, "student_name")
        student_email = st.text_input("Student email", key="student_email")
        _show_field_error(errors, "student_email")
        student_grade = st.selectbox(
            "Grade",
            options=[""] + VALID_GRADES,
            format_func=lambda g: GRADE_LABELS.get(g, "Select a grade"),
            key="student_grade",
        )
        _show_field_error(errors, "student_grade")
        student_experience = st.text_area("Prior AI or programming experience (optional)", key="student_experience")

        st.markdown("#### Parent / Guardian Information")
        parent_name = st.text_input("Parent/guardian name", key="parent_name")
        _show_field_error(errors, "parent_name")
        parent_email = st.text_input("Parent/guardian email", key="parent_email")
        _show_field_error(errors, "parent_email")
        parent_phone = st.text_input("Parent/guardian phone", placeholder="(555) 123-4567", key="parent_phone")
        _show_field_error(errors, "parent_phone")

        motivation = st.text_area("What do you hope to learn? (optional)", key="motivation")
        _show_field_error(errors, "motivation")

        submitted = st.form_submit_button(
            f"Register for {event.level or event.name}" if status.is_open else "Registration Closed",
            type="primary",
            use_container_width=True,
            disabled=not status.is_open,
        )

    if not submitted:
        return

    form = RegistrationForm(
        student_name=student_name,
        student_email=student_email,
        student_grade=student_grade,
        parent_name=parent_name,
        parent_email=parent_email,
        parent_phone=parent_phone,
        student_experience=student_experience,
        motivation=motivation,
        workshop_level=event.level,
    )

    with st.spinner("Submitting..."):
        outcome = workflow.submit(form, event.id)

    logger.info("Submission for event %s finished: %s", event.id, outcome.state)
    remember_outcome(outcome)
    st.rerun()


def render_confirmation() -> None:
    """Confirmation view after a successful submission."""
    confirmation = st.session_state.get(CONFIRMATION_KEY)
    if not confirmation:
        st.session_state.current_page = "register"
        st.rerun()
        return

    if confirmation["status"] == "waitlisted":
        st.warning(f"📝 {confirmation['message']}")
    else:
        st.success(f"✅ {confirmation['message']}")
        st.balloons()

    if confirmation.get("warning"):
        st.info(confirmation["warning"])

    if st.button("Register another student"):
        st.session_state[CONFIRMATION_KEY] = None
        st.session_state.current_page = "register"
        st.rerun()
