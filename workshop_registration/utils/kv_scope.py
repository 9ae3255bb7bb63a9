"""Small key-value scopes for per-visitor client state."""
from abc import ABC, abstractmethod
from typing import Dict, MutableMapping, Optional

import streamlit as st


class KeyValueScope(ABC):
    """String key-value store owned by a single visitor."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value, or None if missing."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""


class InMemoryScope(KeyValueScope):
    """Dictionary-backed scope for tests and scripts."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value


class SessionStateScope(KeyValueScope):
    """
    Scope backed by Streamlit session state.

    The state belongs to the visitor's browser session, so anything kept
    here can be reset by that visitor simply by opening a new session.
    """

    def __init__(self, session_state: Optional[MutableMapping] = None):
        self._state = session_state if session_state is not None else st.session_state

    def get_item(self, key: str) -> Optional[str]:
        value = self._state.get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        self._state[key] = value
