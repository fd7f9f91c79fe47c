"""
Form validators for the console screens.

Each ``validate_*`` function returns a mapping of field name to error
message; an empty mapping means the form is valid. The ``clean_*``
functions validate and normalize a form into the payload the backend
expects, raising ValidationException with every field error at once.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional, Tuple

from .domain.order_status import valid_next_statuses
from .exceptions import ValidationException

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")

PASSWORD_MIN_LENGTH = 6

MOVEMENT_TYPES = ("in", "out", "adjustment")

CENTS = Decimal("0.01")

FormData = Mapping[str, Any]


def _text(form: FormData, name: str) -> str:
    value = form.get(name)
    return "" if value is None else str(value).strip()


def _checked(form: FormData, name: str) -> bool:
    value = form.get(name)
    if isinstance(value, bool):
        return value
    return str(value or "").lower() in ("1", "true", "on", "yes")


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.search(email or ""))


def validate_login_form(form: FormData) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    if not _text(form, "email"):
        errors["email"] = "Email is required"
    if not form.get("password"):
        errors["password"] = "Password is required"
    return errors


def validate_registration_form(form: FormData) -> Dict[str, str]:
    """
    Validate the sign-up form.

    Args:
        form: Raw form fields (username, email, password, confirm_password,
            first_name, last_name, phone, agree_terms)

    Returns:
        Field errors; empty when valid
    """
    errors: Dict[str, str] = {}
    password = str(form.get("password") or "")

    if not _text(form, "username"):
        errors["username"] = "Username is required"

    email = _text(form, "email")
    if not email:
        errors["email"] = "Email is required"
    elif not is_valid_email(email):
        errors["email"] = "Email is invalid"

    if not password:
        errors["password"] = "Password is required"
    elif len(password) < PASSWORD_MIN_LENGTH:
        errors["password"] = f"Password must be at least {PASSWORD_MIN_LENGTH} characters"

    if password != str(form.get("confirm_password") or ""):
        errors["confirm_password"] = "Passwords do not match"

    if not _text(form, "first_name"):
        errors["first_name"] = "First name is required"

    if not _text(form, "last_name"):
        errors["last_name"] = "Last name is required"

    if not _checked(form, "agree_terms"):
        errors["agree_terms"] = "You must agree to the terms and conditions"

    return errors


def _parse_price(raw: str) -> Tuple[Optional[Decimal], Optional[str]]:
    """Parse a price into cents precision; the error message is set when it is unusable."""
    if not raw:
        return None, "Price is required"
    try:
        price = Decimal(raw)
    except InvalidOperation:
        return None, "Price must be a number"
    if not price.is_finite():
        return None, "Price must be a number"
    if price < 0:
        return None, "Price cannot be negative"
    try:
        return price.quantize(CENTS), None
    except InvalidOperation:
        return None, "Price is too large"


def _parse_int(raw: str, label: str) -> Tuple[Optional[int], Optional[str]]:
    if not raw:
        return None, f"{label} is required"
    try:
        return int(raw), None
    except ValueError:
        return None, f"{label} must be a whole number"


def validate_product_form(form: FormData) -> Dict[str, str]:
    errors: Dict[str, str] = {}

    for name, label in (("name", "Product name"), ("description", "Description"), ("sku", "SKU")):
        if not _text(form, name):
            errors[name] = f"{label} is required"

    _, price_error = _parse_price(_text(form, "price"))
    if price_error:
        errors["price"] = price_error

    stock, stock_error = _parse_int(_text(form, "stock_quantity"), "Stock quantity")
    if stock_error:
        errors["stock_quantity"] = stock_error
    elif stock is not None and stock < 0:
        errors["stock_quantity"] = "Stock quantity cannot be negative"

    return errors


def clean_product_form(form: FormData) -> Dict[str, Any]:
    """
    Validate the product form and build the create/update payload.

    Raises:
        ValidationException: If any field is invalid
    """
    errors = validate_product_form(form)
    if errors:
        raise ValidationException(errors)
    price, _ = _parse_price(_text(form, "price"))

    payload: Dict[str, Any] = {
        "name": _text(form, "name"),
        "description": _text(form, "description"),
        "price": str(price),
        "stock_quantity": int(_text(form, "stock_quantity")),
        "sku": _text(form, "sku"),
    }
    category = _text(form, "category")
    if category:
        payload["category"] = category
    image_url = _text(form, "image_url")
    if image_url:
        payload["image_url"] = image_url
    return payload


def validate_stock_update_form(form: FormData) -> Dict[str, str]:
    errors: Dict[str, str] = {}

    movement_type = _text(form, "movement_type") or "adjustment"
    if movement_type not in MOVEMENT_TYPES:
        errors["movement_type"] = "Movement type must be one of: in, out, adjustment"

    quantity, quantity_error = _parse_int(_text(form, "quantity"), "Quantity")
    if quantity_error:
        errors["quantity"] = quantity_error
    elif quantity == 0:
        errors["quantity"] = "Quantity cannot be zero"
    elif quantity is not None and quantity < 0 and movement_type in ("in", "out"):
        errors["quantity"] = "Quantity must be positive for stock in/out"

    return errors


def clean_stock_update_form(form: FormData) -> Dict[str, Any]:
    """
    Validate the stock update form and build the ``update_stock`` payload.

    Raises:
        ValidationException: If any field is invalid
    """
    errors = validate_stock_update_form(form)
    if errors:
        raise ValidationException(errors)

    return {
        "quantity": int(_text(form, "quantity")),
        "movement_type": _text(form, "movement_type") or "adjustment",
        "notes": _text(form, "notes"),
    }


def validate_customer_info(form: FormData) -> Dict[str, str]:
    """
    Validate the customer block of the create-order form.

    Every field is required; each missing field reports the same
    all-fields message.
    """
    errors: Dict[str, str] = {}
    missing = [name for name in ("name", "email", "phone", "address") if not _text(form, name)]
    for name in missing:
        errors[name] = "Please fill in all customer information"

    email = _text(form, "email")
    if email and not is_valid_email(email):
        errors["email"] = "Email is invalid"
    return errors


def clean_customer_info(form: FormData) -> Dict[str, str]:
    errors = validate_customer_info(form)
    if errors:
        raise ValidationException(errors)
    return {name: _text(form, name) for name in ("name", "email", "phone", "address")}


def validate_status_update(current_status: str, new_status: str) -> Dict[str, str]:
    """Check a requested status change against the transition table."""
    target = (new_status or "").strip().lower()
    if not target:
        return {"status": "Please choose a status"}
    if target == (current_status or "").lower():
        return {"status": "Order already has this status"}
    allowed = valid_next_statuses(current_status)
    if target not in allowed:
        if allowed:
            return {
                "status": f"Cannot move a {current_status} order to {target}. "
                f"Allowed: {', '.join(allowed)}"
            }
        return {"status": f"A {current_status} order cannot change status"}
    return {}
