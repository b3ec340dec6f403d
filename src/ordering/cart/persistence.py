"""Cart persistence port and the session-scoped adapter.

A cart lives only as long as the browsing session that owns it. The port
stores plain serialized lines so adapters never depend on cart classes.
"""

import copy
from abc import ABC, abstractmethod


class CartPersistence(ABC):
    """Abstract load/save interface for session carts."""

    @abstractmethod
    def load(self, session_id: str) -> list[dict]:
        """Return the serialized lines stored for a session (empty when none)."""
        ...

    @abstractmethod
    def save(self, session_id: str, lines: list[dict]) -> None:
        """Replace the stored lines for a session."""
        ...

    @abstractmethod
    def discard(self, session_id: str) -> None:
        """Forget everything stored for a session (session end)."""
        ...


class SessionCartPersistence(CartPersistence):
    """Keeps carts in process memory, keyed by session id."""

    def __init__(self) -> None:
        self._sessions: dict[str, list[dict]] = {}

    def load(self, session_id: str) -> list[dict]:
        return copy.deepcopy(self._sessions.get(session_id, []))

    def save(self, session_id: str, lines: list[dict]) -> None:
        self._sessions[session_id] = copy.deepcopy(lines)

    def discard(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    @property
    def session_ids(self) -> list[str]:
        return list(self._sessions)


_current_persistence: CartPersistence | None = None


def get_cart_persistence() -> CartPersistence:
    """Return the active cart persistence. Defaults to SessionCartPersistence."""
    global _current_persistence
    if _current_persistence is None:
        _current_persistence = SessionCartPersistence()
    return _current_persistence


def set_cart_persistence(persistence: CartPersistence) -> None:
    """Override the active cart persistence (useful for tests)."""
    global _current_persistence
    _current_persistence = persistence


def reset_cart_persistence() -> None:
    """Reset to default persistence."""
    global _current_persistence
    _current_persistence = None
