"""Admin authentication and registration summaries."""
import os
from dataclasses import dataclass
from typing import List, Tuple

import streamlit as st

from workshop_registration.models.registration import STATUS_REGISTERED, RegistrationRecord

SESSION_KEY = "admin_authenticated"


@dataclass(frozen=True)
class RegistrationSummary:
    """Registered / waitlisted totals for one event."""

    registered: int
    waitlisted: int
    capacity: int

    @property
    def seats_left(self) -> int:
        return max(self.capacity - self.registered, 0)


def authenticate_admin(username: str, password: str) -> bool:
    """
    Authenticate admin credentials.

    Credentials come from ADMIN_USERNAME / ADMIN_PASSWORD (a ``.env`` file
    is loaded by ``workshop_registration.config``). An empty password
    never authenticates.
    """
    admin_username = os.getenv("ADMIN_USERNAME", "admin")
    admin_password = os.getenv("ADMIN_PASSWORD", "")

    if not admin_password:
        return False
    return username == admin_username and password == admin_password


def is_admin_authenticated() -> bool:
    """True if the admin flag is set in the current Streamlit session."""
    return st.session_state.get(SESSION_KEY, False)


def login_admin(username: str, password: str) -> Tuple[bool, str]:
    """
    Log in admin user.

    Returns:
        Tuple of (success: bool, message: str)
    """
    if authenticate_admin(username, password):
        st.session_state[SESSION_KEY] = True
        return True, "Logged in"
    return False, "Invalid username or password"


def logout_admin() -> None:
    """Clear the admin flag from the session."""
    if SESSION_KEY in st.session_state:
        del st.session_state[SESSION_KEY]


def summarize_registrations(records: List[RegistrationRecord], capacity: int) -> RegistrationSummary:
    """Count registered and waitlisted records against capacity."""
    return RegistrationSummary(
        registered=sum(1 for r in records if r.status == STATUS_REGISTERED),
        waitlisted=sum(1 for r in records if r.is_waitlisted),
        capacity=capacity,
    )
