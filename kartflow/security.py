"""
Session token utilities.

The signed-in user travels in a signed JWT held in an HTTP-only cookie.
The token also carries a session id that keys the server-side UI state
(cart and pending notifications).
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

from .config import settings
from .logging_config import get_logger
from .models import User

logger = get_logger(__name__)

TOKEN_TYPE = "session"


def generate_session_id() -> str:
    """Generate a random URL-safe session id."""
    return secrets.token_urlsafe(24)


def create_session_token(
    user: User,
    session_id: str,
    ttl_minutes: Optional[int] = None,
) -> str:
    """
    Create a signed session token for a user.

    Args:
        user: Signed-in user
        session_id: Id of the server-side session state
        ttl_minutes: Token lifetime (defaults to settings)

    Returns:
        Encoded JWT
    """
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=ttl_minutes or settings.SESSION_TTL_MINUTES)

    payload = {
        "sub": str(user.id),
        "sid": session_id,
        "type": TOKEN_TYPE,
        "user": user.model_dump(mode="json"),
        "iat": now,
        "exp": expire,
    }

    token = jwt.encode(
        payload, settings.SESSION_SECRET_KEY, algorithm=settings.SESSION_ALGORITHM
    )
    logger.debug(f"Created session token for user {user.id}, expires at {expire}")
    return token


def decode_session_token(token: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Decode and validate a session token.

    Args:
        token: JWT token string

    Returns:
        Decoded payload if valid, None otherwise
    """
    if not token:
        return None

    try:
        payload = jwt.decode(
            token,
            settings.SESSION_SECRET_KEY,
            algorithms=[settings.SESSION_ALGORITHM],
        )
    except ExpiredSignatureError:
        logger.debug("Session token expired")
        return None
    except InvalidTokenError as e:
        logger.warning(f"Invalid session token: {e}")
        return None

    if payload.get("type") != TOKEN_TYPE or not payload.get("sid"):
        logger.warning("Session token has wrong type or no session id")
        return None

    return payload


def user_from_payload(payload: Optional[Dict[str, Any]]) -> Optional[User]:
    """Rebuild the user carried by a decoded session token."""
    if not payload or not isinstance(payload.get("user"), dict):
        return None
    return User.model_validate(payload["user"])
