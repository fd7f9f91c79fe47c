"""
Tests for the console form validators.
"""

from typing import Dict

import pytest

from kartflow.exceptions import ValidationException
from kartflow.validators import (
    clean_customer_info,
    clean_product_form,
    clean_stock_update_form,
    is_valid_email,
    validate_login_form,
    validate_product_form,
    validate_registration_form,
    validate_status_update,
)


@pytest.fixture
def registration_form() -> Dict[str, str]:
    return {
        "username": "jdoe",
        "email": "jdoe@example.com",
        "password": "secret1",
        "confirm_password": "secret1",
        "first_name": "John",
        "last_name": "Doe",
        "agree_terms": "on",
    }


@pytest.mark.parametrize(
    "email, valid",
    [
        ("a@b.co", True),
        ("first.last@shop.example.com", True),
        ("missing-at.example.com", False),
        ("no-dot@example", False),
        ("", False),
    ],
)
def test_is_valid_email(email: str, valid: bool) -> None:
    assert is_valid_email(email) is valid


def test_login_form_requires_both_fields() -> None:
    assert validate_login_form({}) == {
        "email": "Email is required",
        "password": "Password is required",
    }
    assert validate_login_form({"email": "demo@kartflow.com", "password": "demo123"}) == {}


def test_registration_form_valid(registration_form: Dict[str, str]) -> None:
    assert validate_registration_form(registration_form) == {}


def test_registration_form_reports_every_error() -> None:
    errors = validate_registration_form({"email": "bad", "password": "123", "confirm_password": "456"})

    assert errors == {
        "username": "Username is required",
        "email": "Email is invalid",
        "password": "Password must be at least 6 characters",
        "confirm_password": "Passwords do not match",
        "first_name": "First name is required",
        "last_name": "Last name is required",
        "agree_terms": "You must agree to the terms and conditions",
    }


def test_registration_password_length_boundary(registration_form: Dict[str, str]) -> None:
    registration_form["password"] = registration_form["confirm_password"] = "12345"
    assert "password" in validate_registration_form(registration_form)

    registration_form["password"] = registration_form["confirm_password"] = "123456"
    assert "password" not in validate_registration_form(registration_form)


def test_clean_product_form_builds_payload() -> None:
    payload = clean_product_form(
        {
            "name": " Desk Lamp ",
            "description": "LED lamp",
            "price": "19.5",
            "stock_quantity": "12",
            "sku": "DL-1",
            "category": "",
            "image_url": "https://cdn.example.com/lamp.png",
        }
    )

    assert payload == {
        "name": "Desk Lamp",
        "description": "LED lamp",
        "price": "19.50",
        "stock_quantity": 12,
        "sku": "DL-1",
        "image_url": "https://cdn.example.com/lamp.png",
    }


def test_clean_product_form_rejects_bad_numbers() -> None:
    with pytest.raises(ValidationException) as exc_info:
        clean_product_form(
            {
                "name": "Lamp",
                "description": "LED",
                "sku": "DL-1",
                "price": "-1",
                "stock_quantity": "2.5",
            }
        )

    assert exc_info.value.errors == {
        "price": "Price cannot be negative",
        "stock_quantity": "Stock quantity must be a whole number",
    }


def test_clean_product_form_requires_text_fields() -> None:
    with pytest.raises(ValidationException) as exc_info:
        clean_product_form({"price": "1", "stock_quantity": "0"})

    assert set(exc_info.value.errors) == {"name", "description", "sku"}


def test_clean_product_form_rejects_price_beyond_decimal_precision() -> None:
    form = {"name": "Lamp", "description": "LED", "sku": "DL-1", "price": "1e30", "stock_quantity": "1"}

    assert validate_product_form(form) == {"price": "Price is too large"}
    with pytest.raises(ValidationException):
        clean_product_form(form)


def test_clean_stock_update_form_defaults_to_adjustment() -> None:
    assert clean_stock_update_form({"quantity": "-3", "notes": "count fix"}) == {
        "quantity": -3,
        "movement_type": "adjustment",
        "notes": "count fix",
    }


@pytest.mark.parametrize(
    "form, field",
    [
        ({"quantity": "0", "movement_type": "in"}, "quantity"),
        ({"quantity": "-2", "movement_type": "out"}, "quantity"),
        ({"quantity": "abc", "movement_type": "in"}, "quantity"),
        ({"quantity": "3", "movement_type": "transfer"}, "movement_type"),
    ],
)
def test_clean_stock_update_form_rejects(form: Dict[str, str], field: str) -> None:
    with pytest.raises(ValidationException) as exc_info:
        clean_stock_update_form(form)

    assert field in exc_info.value.errors


def test_clean_customer_info() -> None:
    form = {
        "name": "Jane Smith",
        "email": "jane@example.com",
        "phone": "555-0100",
        "address": "1 Market Street",
    }
    assert clean_customer_info(form) == form


def test_customer_info_missing_field_uses_shared_message() -> None:
    with pytest.raises(ValidationException) as exc_info:
        clean_customer_info({"name": "Jane", "email": "jane@example.com", "phone": ""})

    assert exc_info.value.errors == {
        "phone": "Please fill in all customer information",
        "address": "Please fill in all customer information",
    }


def test_customer_info_rejects_bad_email() -> None:
    with pytest.raises(ValidationException) as exc_info:
        clean_customer_info(
            {"name": "Jane", "email": "jane", "phone": "1", "address": "Street"}
        )

    assert exc_info.value.errors == {"email": "Email is invalid"}


def test_validate_status_update() -> None:
    assert validate_status_update("pending", "confirmed") == {}
    assert validate_status_update("pending", "") == {"status": "Please choose a status"}
    assert validate_status_update("pending", "pending") == {
        "status": "Order already has this status"
    }
    assert "Allowed: confirmed, cancelled" in validate_status_update("pending", "shipped")["status"]
    assert validate_status_update("delivered", "shipped") == {
        "status": "A delivered order cannot change status"
    }
