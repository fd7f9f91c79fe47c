"""
Dashboard data assembly.

Builds the stat cards and chart series for the user dashboard and the
admin dashboard. Figures come from the static sample data unless live
stats are enabled, in which case the backend aggregates are used and the
sample data is the fallback when the backend fails.
"""

from typing import Any, Dict, List, Optional

from .api_client import EcommerceApiClient, fetch_all
from .exceptions import ConsoleException
from .logging_config import get_logger
from .models import InventoryItem, InventoryStats, OrderStats
from .sample_data import (
    ADMIN_STATS,
    CATEGORY_SPLIT,
    DASHBOARD_STATS,
    RECENT_ORDERS,
    RECENT_USERS,
    SALES_BY_MONTH,
)

logger = get_logger(__name__)

ADMIN_TABS = ("overview", "users", "orders", "inventory")

ADMIN_STATUS_COLORS = {
    "active": "success",
    "inactive": "error",
    "delivered": "success",
    "shipped": "info",
    "processing": "warning",
    "pending": "default",
}


def admin_status_color(status: str) -> str:
    return ADMIN_STATUS_COLORS.get((status or "").lower(), "default")


def chart_series(rows: List[Dict[str, Any]], key: str) -> List[Dict[str, Any]]:
    """
    Annotate chart rows with a ``percent`` of the largest ``key`` value.

    Templates draw the bars from ``percent``; an all-zero series yields 0.
    """
    peak = max((row.get(key) or 0 for row in rows), default=0)
    series = []
    for row in rows:
        value = row.get(key) or 0
        percent = round(value * 100 / peak) if peak else 0
        series.append({**row, "percent": percent})
    return series


def sample_stats() -> Dict[str, Any]:
    return {
        "orders": OrderStats.model_validate(DASHBOARD_STATS["orders"]),
        "inventory": InventoryStats.model_validate(DASHBOARD_STATS["inventory"]),
        "source": "sample",
    }


async def build_dashboard_stats(
    client: EcommerceApiClient,
    live: bool = False,
) -> Dict[str, Any]:
    """
    Collect the stat-card figures for the user dashboard.

    Args:
        client: Backend client
        live: Fetch order and inventory stats from the backend

    Returns:
        Dictionary with ``orders``, ``inventory`` and ``source`` (sample|live)
    """
    if not live:
        return sample_stats()

    try:
        order_stats, inventory_stats = await fetch_all(client.order_stats(), client.inventory_stats())
    except ConsoleException as error:
        logger.warning(
            "Live dashboard stats unavailable, using sample data",
            extra={
                "extra_fields": {
                    "error_type": type(error).__name__,
                    "error_message": error.message,
                }
            },
        )
        return sample_stats()

    return {"orders": order_stats, "inventory": inventory_stats, "source": "live"}


def dashboard_charts() -> Dict[str, Any]:
    return {
        "sales": chart_series(SALES_BY_MONTH, "sales"),
        "orders": chart_series(SALES_BY_MONTH, "orders"),
        "categories": CATEGORY_SPLIT,
    }


async def build_admin_context(client: EcommerceApiClient, tab: str) -> Dict[str, Any]:
    """
    Assemble the admin dashboard for one tab.

    Only the inventory tab talks to the backend; the other tabs show the
    sample data.
    """
    if tab not in ADMIN_TABS:
        tab = "overview"

    context: Dict[str, Any] = {
        "tab": tab,
        "tabs": ADMIN_TABS,
        "stats": ADMIN_STATS,
        "charts": dashboard_charts(),
        "recent_users": RECENT_USERS,
        "recent_orders": RECENT_ORDERS,
        "low_stock_items": [],
        "inventory_error": None,
    }

    if tab == "inventory":
        items: Optional[List[InventoryItem]] = None
        try:
            items = await client.low_stock_items()
        except ConsoleException as error:
            logger.warning(
                "Failed to load low stock items for admin dashboard",
                extra={"extra_fields": {"error_message": error.message}},
            )
            context["inventory_error"] = "Failed to fetch low stock items"
        context["low_stock_items"] = items or []

    return context
