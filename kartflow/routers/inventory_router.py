"""
Inventory pages and stock actions.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, Response

from ..api_client import api_client, fetch_all
from ..auth import SessionContext, require_user
from ..exceptions import ConsoleException, ValidationException
from ..logging_config import get_logger
from ..metrics import track_page_view, track_stock_adjustment
from ..models import InventoryItem, InventoryStats, StockMovement
from ..templating import read_form, redirect, render
from ..validators import MOVEMENT_TYPES, clean_stock_update_form

logger = get_logger(__name__)

router = APIRouter(prefix="/inventory", tags=["Inventory"])

RECENT_MOVEMENTS_LIMIT = 10


def _inventory_url(low_stock: bool) -> str:
    return "/inventory?low_stock=1" if low_stock else "/inventory"


def _first_error(errors: Dict[str, str]) -> str:
    return next(iter(errors.values()))


@router.get("", response_class=HTMLResponse)
async def inventory_page(
    request: Request,
    low_stock: bool = Query(False, description="Only low-stock items"),
    session: SessionContext = Depends(require_user),
) -> HTMLResponse:
    """
    Render stats cards, the inventory table and recent stock movements.

    Items and stats load together; if either fails the page shows an
    inline error. Movements are optional and an empty list is shown when
    they cannot be loaded.
    """
    track_page_view("inventory")
    items: List[InventoryItem] = []
    stats: Optional[InventoryStats] = None
    movements: List[StockMovement] = []
    error: Optional[str] = None

    fetch_items = api_client.low_stock_items() if low_stock else api_client.list_inventory()
    try:
        items, stats = await fetch_all(fetch_items, api_client.inventory_stats())
    except ConsoleException as exc:
        logger.error(
            "Failed to fetch inventory data",
            extra={"extra_fields": {"low_stock": low_stock, "error_message": exc.message}},
        )
        error = "Failed to fetch inventory data"

    try:
        movements = await api_client.stock_movements({"ordering": "-created_at"})
    except ConsoleException as exc:
        logger.warning(
            "Stock movements unavailable",
            extra={"extra_fields": {"error_message": exc.message}},
        )

    return render(
        request,
        "inventory.html",
        {
            "items": items,
            "stats": stats,
            "movements": movements[:RECENT_MOVEMENTS_LIMIT],
            "movement_types": MOVEMENT_TYPES,
            "low_stock": low_stock,
            "error": error,
        },
        session=session,
    )


@router.get("/movements", response_class=HTMLResponse)
async def movements_page(
    request: Request,
    movement_type: Optional[str] = Query(None, description="in|out|adjustment"),
    inventory_item: Optional[str] = Query(None, description="Inventory item id"),
    session: SessionContext = Depends(require_user),
) -> HTMLResponse:
    track_page_view("stock_movements")
    params: Dict[str, Any] = {
        "movement_type": movement_type if movement_type in MOVEMENT_TYPES else None,
        "inventory_item": inventory_item,
        "ordering": "-created_at",
    }
    movements: List[StockMovement] = []
    error: Optional[str] = None

    try:
        movements = await api_client.stock_movements(params)
    except ConsoleException as exc:
        logger.error(
            "Failed to fetch stock movements",
            extra={"extra_fields": {**params, "error_message": exc.message}},
        )
        error = "Failed to fetch stock movements"

    return render(
        request,
        "movements.html",
        {
            "movements": movements,
            "movement_types": MOVEMENT_TYPES,
            "filters": params,
            "error": error,
        },
        session=session,
    )


@router.post("/{item_id}/stock")
async def update_stock(
    request: Request,
    item_id: str,
    session: SessionContext = Depends(require_user),
) -> Response:
    form = await read_form(request)
    back = _inventory_url(form.get("low_stock") == "1")

    try:
        payload = clean_stock_update_form(form)
    except ValidationException as exc:
        session.toast("warning", _first_error(exc.errors))
        return redirect(back)

    try:
        await api_client.update_stock(item_id, payload)
    except ConsoleException as exc:
        logger.error(
            "Failed to update stock",
            extra={
                "extra_fields": {
                    "item_id": item_id,
                    "movement_type": payload["movement_type"],
                    "quantity": payload["quantity"],
                    "error_message": exc.message,
                }
            },
        )
        track_stock_adjustment(payload["movement_type"], success=False)
        session.toast("error", "Failed to update stock")
        return redirect(back)

    logger.info(
        "Stock updated",
        extra={
            "extra_fields": {
                "item_id": item_id,
                "movement_type": payload["movement_type"],
                "quantity": payload["quantity"],
            }
        },
    )
    track_stock_adjustment(payload["movement_type"], success=True)
    session.toast("success", "Stock updated successfully!")
    return redirect(back)


async def _reservation_action(
    request: Request,
    item_id: str,
    session: SessionContext,
    reserve: bool,
) -> Response:
    form = await read_form(request)
    back = _inventory_url(form.get("low_stock") == "1")

    try:
        quantity = int(form.get("quantity", ""))
    except ValueError:
        quantity = 0
    if quantity <= 0:
        session.toast("warning", "Please enter a valid quantity")
        return redirect(back)

    action = "reserve stock" if reserve else "release reservation"
    try:
        if reserve:
            await api_client.reserve_stock(item_id, {"quantity": quantity})
        else:
            await api_client.release_reservation(item_id, {"quantity": quantity})
    except ConsoleException as exc:
        logger.error(
            f"Failed to {action}",
            extra={
                "extra_fields": {
                    "item_id": item_id,
                    "quantity": quantity,
                    "error_message": exc.message,
                }
            },
        )
        session.toast("error", f"Failed to {action}")
        return redirect(back)

    done = "Stock reserved" if reserve else "Reservation released"
    session.toast("success", f"{done} successfully!")
    return redirect(back)


@router.post("/{item_id}/reserve")
async def reserve_stock(
    request: Request,
    item_id: str,
    session: SessionContext = Depends(require_user),
) -> Response:
    return await _reservation_action(request, item_id, session, reserve=True)


@router.post("/{item_id}/release")
async def release_reservation(
    request: Request,
    item_id: str,
    session: SessionContext = Depends(require_user),
) -> Response:
    return await _reservation_action(request, item_id, session, reserve=False)
