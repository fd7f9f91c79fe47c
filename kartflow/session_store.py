"""
In-memory session state store.

Holds per-session UI state (the order-creation cart, the customer form
draft and queued toast notifications) keyed by the session id carried in
the session token. Entries expire with the session TTL and the store is
bounded; an evicted session simply starts over with an empty cart.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from cachetools import TTLCache  # type: ignore[import-untyped]

from .config import settings
from .domain.cart import Cart
from .logging_config import get_logger

logger = get_logger(__name__)

TOAST_LEVELS = ("success", "info", "warning", "error")


@dataclass
class Toast:
    """One-shot notification shown on the next rendered page."""

    level: str
    message: str


@dataclass
class SessionState:
    """UI state for one signed-in session."""

    cart: Cart = field(default_factory=Cart)
    customer: Dict[str, str] = field(default_factory=dict)
    toasts: List[Toast] = field(default_factory=list)


class SessionStore:
    """
    TTL-bounded store of session state.

    Attributes:
        cache: TTL cache of session id to SessionState
        max_size: Maximum number of sessions kept
        ttl_seconds: Lifetime of an idle session
    """

    def __init__(self, max_size: int = 10000, ttl_seconds: float = 28800) -> None:
        self.cache: TTLCache = TTLCache(maxsize=max_size, ttl=ttl_seconds)
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds

        logger.info(
            f"Initialized SessionStore with max_size={max_size}, ttl={ttl_seconds}s"
        )

    def get(self, session_id: str) -> SessionState:
        """
        Get the state for a session, creating it when missing or expired.

        Reading an entry re-inserts it so that active sessions stay alive.
        """
        state = self.cache.get(session_id)
        if state is None:
            state = SessionState()
            logger.debug(f"Created session state for {session_id[:8]}")
        self.cache[session_id] = state
        return state

    def peek(self, session_id: str) -> Optional[SessionState]:
        return self.cache.get(session_id)

    def drop(self, session_id: str) -> None:
        self.cache.pop(session_id, None)

    def clear(self) -> None:
        self.cache.clear()

    def __len__(self) -> int:
        return len(self.cache)

    def push_toast(self, session_id: str, level: str, message: str) -> None:
        """Queue a toast for the session. Unknown levels are shown as ``info``."""
        if level not in TOAST_LEVELS:
            level = "info"
        self.get(session_id).toasts.append(Toast(level=level, message=message))

    def pop_toasts(self, session_id: str) -> List[Toast]:
        """Return and clear the queued toasts of a session."""
        state = self.peek(session_id)
        if state is None or not state.toasts:
            return []
        toasts, state.toasts = state.toasts, []
        return toasts


session_store = SessionStore(
    max_size=settings.SESSION_STORE_MAX_SIZE,
    ttl_seconds=settings.SESSION_TTL_MINUTES * 60,
)
