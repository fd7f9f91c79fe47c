"""
User and admin dashboards.
"""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse

from ..api_client import api_client
from ..analytics import build_admin_context, build_dashboard_stats, dashboard_charts
from ..auth import SessionContext, require_admin, require_user
from ..config import settings
from ..metrics import track_page_view
from ..templating import render

router = APIRouter(tags=["Dashboard"])


@router.get("/", response_class=HTMLResponse)
@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard(
    request: Request,
    session: SessionContext = Depends(require_user),
) -> HTMLResponse:
    """Greeting, stat cards and the sales charts."""
    track_page_view("dashboard")
    stats = await build_dashboard_stats(api_client, live=settings.DASHBOARD_LIVE_STATS)
    return render(
        request,
        "dashboard.html",
        {"stats": stats, "charts": dashboard_charts()},
        session=session,
    )


@router.get("/admin", response_class=HTMLResponse)
async def admin_dashboard(
    request: Request,
    tab: str = Query("overview", description="overview|users|orders|inventory"),
    session: SessionContext = Depends(require_admin),
) -> HTMLResponse:
    track_page_view("admin")
    context = await build_admin_context(api_client, tab)
    return render(request, "admin.html", context, session=session)
