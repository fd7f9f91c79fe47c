"""
Jinja2 template setup and display filters.

Every page is rendered through :func:`render`, which adds the shared
layout context: application name, signed-in user, navigation and the
toasts queued for the session.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from .analytics import admin_status_color
from .auth import SessionContext
from .config import settings
from .domain.order_status import status_color
from .session_store import session_store

BASE_PATH = Path(__file__).resolve().parent

templates = Jinja2Templates(directory=str(BASE_PATH / "templates"))

DATE_FORMATS = {
    "short": "%b %d, %Y %H:%M",
    "long": "%B %d, %Y %I:%M %p",
    "date": "%b %d, %Y",
}

NAV_ITEMS = (
    {"label": "Dashboard", "path": "/dashboard"},
    {"label": "Products", "path": "/products"},
    {"label": "Orders", "path": "/orders"},
    {"label": "Create Order", "path": "/create-order"},
    {"label": "Inventory", "path": "/inventory"},
)


def format_money(value: Any) -> str:
    """
    Format an amount as dollars, e.g. ``$1,234.50``.

    Non-numeric values render as ``$0.00``.
    """
    try:
        amount = Decimal(str(value)) if value is not None else Decimal("0")
    except InvalidOperation:
        amount = Decimal("0")
    if not amount.is_finite():
        amount = Decimal("0")
    return f"${amount:,.2f}"


def parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def format_datetime(value: Any, style: str = "short") -> str:
    """
    Format an ISO timestamp for display.

    Args:
        value: ISO-8601 string or datetime
        style: ``short`` (orders table), ``long`` (order detail) or ``date``

    Returns:
        Formatted date, the raw value if it cannot be parsed, or an empty string
    """
    if value is None or value == "":
        return ""
    parsed = parse_timestamp(value)
    if parsed is None:
        return str(value)
    return parsed.strftime(DATE_FORMATS.get(style, DATE_FORMATS["short"]))


templates.env.filters["money"] = format_money
templates.env.filters["datetime"] = format_datetime
templates.env.filters["status_color"] = status_color
templates.env.filters["admin_status_color"] = admin_status_color


def render(
    request: Request,
    name: str,
    context: Optional[Dict[str, Any]] = None,
    session: Optional[SessionContext] = None,
    status_code: int = 200,
) -> HTMLResponse:
    """
    Render a page template with the shared layout context.

    Args:
        request: Incoming request
        name: Template name
        context: Page-specific context
        session: Signed-in session, if any
        status_code: HTTP status of the response

    Returns:
        Rendered HTML response
    """
    page_context: Dict[str, Any] = {
        "app_name": settings.APP_NAME,
        "user": session.user if session else None,
        "is_admin": bool(session and session.is_admin),
        "nav_items": NAV_ITEMS,
        "current_path": request.url.path,
        "toasts": session_store.pop_toasts(session.session_id) if session else [],
    }
    page_context.update(context or {})

    return templates.TemplateResponse(
        request=request,
        name=name,
        context=page_context,
        status_code=status_code,
    )


def redirect(url: str) -> RedirectResponse:
    """Redirect after a form post (303 See Other)."""
    return RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)


async def read_form(request: Request) -> Dict[str, str]:
    """Read an urlencoded form into a plain dict of stripped strings."""
    form = await request.form()
    return {key: str(value).strip() for key, value in form.items()}
