"""
Order list, order detail and order status actions.
"""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, Response

from ..api_client import api_client
from ..auth import SessionContext, require_user
from ..domain.order_status import OrderStatus, ensure_transition
from ..exceptions import (
    BackendRequestException,
    ConsoleException,
    InvalidStatusTransition,
)
from ..logging_config import get_logger
from ..metrics import track_page_view, track_status_update
from ..models import Order
from ..templating import read_form, redirect, render
from ..validators import validate_status_update

logger = get_logger(__name__)

router = APIRouter(prefix="/orders", tags=["Orders"])


def _return_url(form: Dict[str, str], order_id: str) -> str:
    """Where to go after an order action; only order pages are accepted."""
    target = form.get("next", "")
    if target == "/orders" or target.startswith("/orders?") or target == f"/orders/{order_id}":
        return target
    return "/orders"


async def _current_status(form: Dict[str, str], order_id: str) -> str:
    if form.get("current_status"):
        return form["current_status"]
    order = await api_client.get_order(order_id)
    return order.status


@router.get("", response_class=HTMLResponse)
async def list_orders(
    request: Request,
    mine: bool = Query(False, description="Only the signed-in user's orders"),
    session: SessionContext = Depends(require_user),
) -> HTMLResponse:
    track_page_view("orders")
    orders: List[Order] = []
    error: Optional[str] = None

    try:
        if mine:
            orders = await api_client.my_orders()
        else:
            orders = await api_client.list_orders()
    except ConsoleException as exc:
        logger.error(
            "Failed to fetch orders",
            extra={"extra_fields": {"mine": mine, "error_message": exc.message}},
        )
        error = "Failed to fetch orders"

    return render(
        request,
        "orders.html",
        {"orders": orders, "mine": mine, "error": error},
        session=session,
    )


@router.get("/{order_id}", response_class=HTMLResponse)
async def order_detail(
    request: Request,
    order_id: str,
    session: SessionContext = Depends(require_user),
) -> HTMLResponse:
    """
    Render one order with its items.

    A missing order renders a 404 page with a link back to the list; any
    other backend failure renders the same page with a generic message.
    """
    track_page_view("order_detail")
    try:
        order = await api_client.get_order(order_id)
    except BackendRequestException as exc:
        if not exc.is_not_found:
            logger.error(
                "Failed to fetch order",
                extra={"extra_fields": {"order_id": order_id, "status_code": exc.status_code}},
            )
        message = "Order not found" if exc.is_not_found else "Failed to fetch order details"
        return render(
            request,
            "order_detail.html",
            {"order": None, "error": message},
            session=session,
            status_code=404 if exc.is_not_found else 502,
        )
    except ConsoleException as exc:
        logger.error(
            "Failed to fetch order",
            extra={"extra_fields": {"order_id": order_id, "error_message": exc.message}},
        )
        return render(
            request,
            "order_detail.html",
            {"order": None, "error": "Failed to fetch order details"},
            session=session,
            status_code=502,
        )

    return render(request, "order_detail.html", {"order": order, "error": None}, session=session)


@router.post("/{order_id}/status")
async def update_status(
    request: Request,
    order_id: str,
    session: SessionContext = Depends(require_user),
) -> Response:
    """
    Move an order to a new status.

    The requested move is checked against the transition table before the
    backend is called; the backend stays the authority.
    """
    form = await read_form(request)
    target = form.get("status", "").lower()
    back = _return_url(form, order_id)

    try:
        current = await _current_status(form, order_id)
    except ConsoleException as exc:
        logger.error(
            "Failed to load order for status update",
            extra={"extra_fields": {"order_id": order_id, "error_message": exc.message}},
        )
        session.toast("error", "Failed to update order status")
        return redirect(back)

    errors = validate_status_update(current, target)
    if errors:
        track_status_update(target, success=False)
        session.toast("warning", errors["status"])
        return redirect(back)

    try:
        await api_client.update_order_status(order_id, target)
    except ConsoleException as exc:
        logger.error(
            "Failed to update order status",
            extra={
                "extra_fields": {
                    "order_id": order_id,
                    "current_status": current,
                    "target_status": target,
                    "error_message": exc.message,
                }
            },
        )
        track_status_update(target, success=False)
        session.toast("error", "Failed to update order status")
        return redirect(back)

    logger.info(
        "Order status updated",
        extra={"extra_fields": {"order_id": order_id, "from": current, "to": target}},
    )
    track_status_update(target, success=True)
    session.toast("success", "Order status updated successfully!")
    return redirect(back)


@router.post("/{order_id}/cancel")
async def cancel_order(
    request: Request,
    order_id: str,
    session: SessionContext = Depends(require_user),
) -> Response:
    form = await read_form(request)
    back = _return_url(form, order_id)
    cancelled = OrderStatus.CANCELLED.value

    try:
        ensure_transition(await _current_status(form, order_id), cancelled)
        await api_client.cancel_order(order_id)
    except InvalidStatusTransition as exc:
        track_status_update(cancelled, success=False)
        session.toast("warning", f"A {exc.current_status} order cannot be cancelled")
        return redirect(back)
    except ConsoleException as exc:
        logger.error(
            "Failed to cancel order",
            extra={"extra_fields": {"order_id": order_id, "error_message": exc.message}},
        )
        track_status_update(cancelled, success=False)
        session.toast("error", "Failed to cancel order")
        return redirect(back)

    logger.info("Order cancelled", extra={"extra_fields": {"order_id": order_id}})
    track_status_update(cancelled, success=True)
    session.toast("success", "Order cancelled successfully!")
    return redirect(back)
