"""
Order-creation screen.

The cart and the customer form draft live in the session state between
requests; submitting posts the order and clears both.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, Response

from ..api_client import api_client
from ..auth import SessionContext, require_user
from ..exceptions import (
    BackendRequestException,
    ConsoleException,
    InsufficientStockException,
    ValidationException,
)
from ..logging_config import get_logger
from ..metrics import track_order_created, track_page_view
from ..models import Product
from ..session_store import session_store
from ..templating import read_form, redirect, render
from ..validators import clean_customer_info

logger = get_logger(__name__)

router = APIRouter(prefix="/create-order", tags=["Orders"])

CREATE_ORDER_URL = "/create-order"
CUSTOMER_FIELDS = ("name", "email", "phone", "address")


def _parse_quantity(raw: Optional[str]) -> Optional[int]:
    try:
        return int(raw or "")
    except ValueError:
        return None


@router.get("", response_class=HTMLResponse)
async def create_order_page(
    request: Request,
    session: SessionContext = Depends(require_user),
) -> HTMLResponse:
    track_page_view("create_order")
    products: List[Product] = []
    error: Optional[str] = None

    try:
        products = await api_client.list_products()
    except ConsoleException as exc:
        logger.error(
            "Failed to fetch products for order form",
            extra={"extra_fields": {"error_message": exc.message}},
        )
        error = "Failed to fetch products"

    state = session_store.get(session.session_id)
    return render(
        request,
        "create_order.html",
        {
            "products": [product for product in products if product.in_stock],
            "cart": state.cart,
            "customer": state.customer,
            "error": error,
        },
        session=session,
    )


@router.post("/cart")
async def add_to_cart(
    request: Request,
    session: SessionContext = Depends(require_user),
) -> Response:
    """
    Add the selected product to the cart.

    The product is re-read from the backend so the stock cap uses the
    current figure.
    """
    form = await read_form(request)
    product_id = form.get("product_id", "")
    quantity = _parse_quantity(form.get("quantity"))
    cart = session_store.get(session.session_id).cart

    try:
        product = await api_client.get_product(product_id) if product_id else None
        cart.add(product, quantity if quantity is not None else 0)
    except ValidationException as exc:
        session.toast("warning", next(iter(exc.errors.values())))
    except InsufficientStockException as exc:
        session.toast("error", exc.message)
    except ConsoleException as exc:
        logger.error(
            "Failed to load product for cart",
            extra={"extra_fields": {"product_id": product_id, "error_message": exc.message}},
        )
        session.toast("error", "Failed to fetch products")
    else:
        session.toast("success", "Product added to cart!")

    return redirect(CREATE_ORDER_URL)


@router.post("/cart/{product_id}")
async def update_cart_line(
    request: Request,
    product_id: str,
    session: SessionContext = Depends(require_user),
) -> Response:
    form = await read_form(request)
    quantity = _parse_quantity(form.get("quantity"))
    if quantity is None:
        session.toast("warning", "Please enter a valid quantity")
        return redirect(CREATE_ORDER_URL)

    cart = session_store.get(session.session_id).cart
    if cart.find(product_id) is None:
        return redirect(CREATE_ORDER_URL)

    try:
        line = cart.update(product_id, quantity)
    except InsufficientStockException as exc:
        session.toast("error", exc.message)
        return redirect(CREATE_ORDER_URL)

    if line is None:
        session.toast("info", "Product removed from cart")
    return redirect(CREATE_ORDER_URL)


@router.post("/cart/{product_id}/remove")
async def remove_cart_line(
    product_id: str,
    session: SessionContext = Depends(require_user),
) -> Response:
    if session_store.get(session.session_id).cart.remove(product_id):
        session.toast("info", "Product removed from cart")
    return redirect(CREATE_ORDER_URL)


@router.post("")
async def submit_order(
    request: Request,
    session: SessionContext = Depends(require_user),
) -> Response:
    """
    Validate the cart and customer block, then create the order.

    The customer draft is kept in the session so a failed submit does not
    lose what was typed.
    """
    form = await read_form(request)
    state = session_store.get(session.session_id)
    state.customer = {name: form.get(name, "") for name in CUSTOMER_FIELDS}

    if state.cart.is_empty:
        session.toast("error", "Please add items to cart")
        return redirect(CREATE_ORDER_URL)

    try:
        customer = clean_customer_info(form)
    except ValidationException as exc:
        session.toast("error", next(iter(exc.errors.values())))
        return redirect(CREATE_ORDER_URL)

    payload = state.cart.to_order_payload(customer)
    try:
        order = await api_client.create_order(payload)
    except ConsoleException as exc:
        detail = exc.error_detail() if isinstance(exc, BackendRequestException) else None
        logger.error(
            "Failed to create order",
            extra={
                "extra_fields": {
                    "line_count": len(state.cart),
                    "error_type": type(exc).__name__,
                    "error_message": exc.message,
                    "backend_detail": detail,
                }
            },
        )
        track_order_created(success=False)
        session.toast("error", f"Failed to create order: {detail}" if detail else "Failed to create order")
        return redirect(CREATE_ORDER_URL)

    logger.info(
        "Order created",
        extra={
            "extra_fields": {
                "order_id": order.id if order else None,
                "line_count": len(state.cart),
                "total": str(state.cart.total()),
            }
        },
    )
    track_order_created(success=True)
    state.cart.clear()
    state.customer = {}
    session.toast("success", "Order created successfully!")
    return redirect(CREATE_ORDER_URL)
