"""
Product catalog pages.

The list page filters the fetched catalog in the console (``?q=`` on
name or SKU); create and edit share one form template.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, Response

from ..api_client import api_client
from ..auth import SessionContext, require_user
from ..exceptions import ConsoleException, ValidationException
from ..logging_config import get_logger
from ..metrics import track_page_view
from ..models import Product
from ..templating import read_form, redirect, render
from ..validators import clean_product_form

logger = get_logger(__name__)

router = APIRouter(prefix="/products", tags=["Products"])


def _products_url(q: Optional[str]) -> str:
    return f"/products?{urlencode({'q': q})}" if q else "/products"


def _form_page(
    request: Request,
    session: SessionContext,
    form: Dict[str, Any],
    product_id: Optional[str] = None,
    errors: Optional[Dict[str, str]] = None,
    status_code: int = 200,
) -> HTMLResponse:
    return render(
        request,
        "product_form.html",
        {"form": form, "errors": errors or {}, "product_id": product_id},
        session=session,
        status_code=status_code,
    )


def _log_failure(action: str, error: ConsoleException, **fields: Any) -> None:
    logger.error(
        f"Failed to {action}",
        extra={
            "extra_fields": {
                **fields,
                "error_type": type(error).__name__,
                "error_message": error.message,
            }
        },
    )


@router.get("", response_class=HTMLResponse)
async def list_products(
    request: Request,
    q: Optional[str] = Query(None, max_length=100, description="Filter by name or SKU"),
    session: SessionContext = Depends(require_user),
) -> HTMLResponse:
    """
    Render the product grid.

    A backend failure renders the page with an inline error instead of
    the grid.
    """
    track_page_view("products")
    products: List[Product] = []
    error: Optional[str] = None

    try:
        products = await api_client.list_products()
    except ConsoleException as exc:
        _log_failure("fetch products", exc)
        error = "Failed to fetch products"

    term = (q or "").strip()
    visible = [product for product in products if product.matches(term)] if term else products

    return render(
        request,
        "products.html",
        {"products": visible, "total": len(products), "q": term, "error": error},
        session=session,
    )


@router.get("/new", response_class=HTMLResponse)
async def new_product(
    request: Request,
    session: SessionContext = Depends(require_user),
) -> HTMLResponse:
    return _form_page(request, session, form={})


@router.post("")
async def create_product(
    request: Request,
    session: SessionContext = Depends(require_user),
) -> Response:
    form = await read_form(request)
    try:
        payload = clean_product_form(form)
    except ValidationException as exc:
        return _form_page(request, session, form, errors=exc.errors, status_code=400)

    try:
        await api_client.create_product(payload)
    except ConsoleException as exc:
        _log_failure("create product", exc, sku=payload["sku"])
        session.toast("error", "Failed to save product")
        return _form_page(request, session, form, status_code=502)

    logger.info("Product created", extra={"extra_fields": {"sku": payload["sku"]}})
    session.toast("success", "Product created successfully!")
    return redirect("/products")


@router.get("/{product_id}/edit", response_class=HTMLResponse)
async def edit_product(
    request: Request,
    product_id: str,
    session: SessionContext = Depends(require_user),
) -> Response:
    try:
        product = await api_client.get_product(product_id)
    except ConsoleException as exc:
        _log_failure("fetch product", exc, product_id=product_id)
        session.toast("error", "Failed to fetch product")
        return redirect("/products")

    form = product.model_dump(mode="json")
    return _form_page(request, session, form, product_id=product_id)


@router.post("/{product_id}")
async def update_product(
    request: Request,
    product_id: str,
    session: SessionContext = Depends(require_user),
) -> Response:
    form = await read_form(request)
    try:
        payload = clean_product_form(form)
    except ValidationException as exc:
        return _form_page(
            request, session, form, product_id=product_id, errors=exc.errors, status_code=400
        )

    try:
        await api_client.update_product(product_id, payload)
    except ConsoleException as exc:
        _log_failure("update product", exc, product_id=product_id)
        session.toast("error", "Failed to save product")
        return _form_page(request, session, form, product_id=product_id, status_code=502)

    session.toast("success", "Product updated successfully!")
    return redirect("/products")


@router.post("/{product_id}/delete")
async def delete_product(
    request: Request,
    product_id: str,
    session: SessionContext = Depends(require_user),
) -> Response:
    try:
        await api_client.delete_product(product_id)
    except ConsoleException as exc:
        _log_failure("delete product", exc, product_id=product_id)
        session.toast("error", "Failed to delete product")
    else:
        logger.info("Product deleted", extra={"extra_fields": {"product_id": product_id}})
        session.toast("success", "Product deleted successfully!")
    return redirect("/products")


@router.post("/{product_id}/availability")
async def check_availability(
    request: Request,
    product_id: str,
    session: SessionContext = Depends(require_user),
) -> Response:
    """Ask the backend for the sellable quantity and report it as a toast."""
    form = await read_form(request)
    name = form.get("name") or f"Product {product_id}"

    try:
        availability = await api_client.check_availability(product_id)
    except ConsoleException as exc:
        _log_failure("check stock", exc, product_id=product_id)
        session.toast("error", "Failed to check stock")
    else:
        session.toast("info", f"{name}: {availability.available_quantity} units available")

    return redirect(_products_url(form.get("q")))
