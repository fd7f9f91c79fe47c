"""
Authentication context.

The console runs against a mock identity provider: any non-empty
credentials sign in, the username is the local part of the email, and
accounts whose email contains "admin" are staff. Signed-in state lives in
a signed session cookie; route guards read it back on every request.
"""

import itertools
from dataclasses import dataclass
from typing import Mapping, Optional

from fastapi import Request, Response
from fastapi.responses import RedirectResponse

from .config import settings
from .exceptions import AuthenticationRequired, PermissionDenied
from .logging_config import get_logger
from .models import User
from .security import (
    create_session_token,
    decode_session_token,
    generate_session_id,
    user_from_payload,
)
from .session_store import session_store

logger = get_logger(__name__)


@dataclass
class SessionContext:
    """The signed-in user and the id of their server-side session state."""

    user: User
    session_id: str

    @property
    def is_admin(self) -> bool:
        return self.user.is_staff

    def toast(self, level: str, message: str) -> None:
        session_store.push_toast(self.session_id, level, message)


class MockAuthProvider:
    """
    Development identity provider.

    Mirrors the behavior of the console's demo mode: credentials are not
    checked against any user store.
    """

    ADMIN_MARKER = "admin"

    def __init__(self) -> None:
        self._ids = itertools.count(1)

    def login(self, email: str, password: str) -> User:
        """
        Sign a user in.

        Args:
            email: Email address entered on the login form
            password: Password entered on the login form

        Returns:
            The signed-in user

        Raises:
            AuthenticationRequired: If either credential is empty
        """
        email = (email or "").strip()
        if not email or not password:
            raise AuthenticationRequired()

        user = User(
            id=next(self._ids),
            username=email.split("@")[0],
            email=email,
            is_staff=self.ADMIN_MARKER in email.lower(),
        )
        logger.info(
            "User signed in",
            extra={"extra_fields": {"username": user.username, "is_staff": user.is_staff}},
        )
        return user

    def register(self, form: Mapping[str, str]) -> User:
        """Create a (non-staff) account from a validated registration form."""
        user = User(
            id=next(self._ids),
            username=str(form.get("username", "")).strip(),
            email=str(form.get("email", "")).strip(),
            first_name=str(form.get("first_name", "")).strip() or None,
            last_name=str(form.get("last_name", "")).strip() or None,
            phone=str(form.get("phone", "")).strip() or None,
            is_staff=False,
        )
        logger.info(
            "User registered",
            extra={"extra_fields": {"username": user.username}},
        )
        return user


auth_provider = MockAuthProvider()


def start_session(response: Response, user: User) -> SessionContext:
    """
    Sign ``user`` in on ``response`` by setting the session cookie.

    Returns:
        The new session context
    """
    session_id = generate_session_id()
    token = create_session_token(user, session_id)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_TTL_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=not settings.DEBUG,
    )
    session_store.get(session_id)
    return SessionContext(user=user, session_id=session_id)


def end_session(response: Response, session: Optional[SessionContext]) -> None:
    """Drop the session state and clear the cookie."""
    if session is not None:
        session_store.drop(session.session_id)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)


def get_session(request: Request) -> Optional[SessionContext]:
    """
    Read the session context from the request cookie.

    An expired or tampered token counts as anonymous.
    """
    cached = getattr(request.state, "session_context", None)
    if cached is not None:
        return cached

    payload = decode_session_token(request.cookies.get(settings.SESSION_COOKIE_NAME))
    user = user_from_payload(payload)
    if payload is None or user is None:
        return None

    context = SessionContext(user=user, session_id=payload["sid"])
    request.state.session_context = context
    return context


async def require_user(request: Request) -> SessionContext:
    """Route guard: a signed-in user is required."""
    session = get_session(request)
    if session is None:
        raise AuthenticationRequired(path=request.url.path)
    return session


async def require_admin(request: Request) -> SessionContext:
    """Route guard: a signed-in staff user is required."""
    session = await require_user(request)
    if not session.is_admin:
        raise PermissionDenied("admin", path=request.url.path)
    return session


def public_only(request: Request) -> Optional[Response]:
    """Guard for sign-in pages: a redirect to the dashboard when already signed in."""
    if get_session(request) is None:
        return None
    return RedirectResponse(url="/dashboard", status_code=303)
