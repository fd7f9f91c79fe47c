"""
Tests for custom exception classes.
"""

from kartflow.exceptions import (
    AuthenticationRequired,
    BackendRequestException,
    BackendTimeoutException,
    ConsoleException,
    InsufficientStockException,
    PermissionDenied,
    ServiceUnavailableException,
    ValidationException,
)


def test_console_exception_basic() -> None:
    exc = ConsoleException("Test error")

    assert exc.message == "Test error"
    assert exc.details == {}
    assert str(exc) == "Test error"


def test_console_exception_with_details() -> None:
    exc = ConsoleException("Test error", details={"code": "ERR001"})

    assert exc.details["code"] == "ERR001"


def test_service_unavailable_default_message() -> None:
    exc = ServiceUnavailableException("ecommerce-api")

    assert exc.service_name == "ecommerce-api"
    assert exc.message == "Service 'ecommerce-api' is currently unavailable"


def test_service_unavailable_custom_message() -> None:
    exc = ServiceUnavailableException("ecommerce-api", message="Backend offline")

    assert exc.message == "Backend offline"


def test_backend_timeout_message() -> None:
    exc = BackendTimeoutException("GET", "/orders/", 10.0)

    assert exc.timeout_seconds == 10.0
    assert exc.message == "Backend request GET /orders/ timed out after 10.0s"


def test_backend_request_exception_detail() -> None:
    exc = BackendRequestException("POST", "/orders/", 400, payload={"detail": "Insufficient stock"})

    assert exc.status_code == 400
    assert exc.is_not_found is False
    assert exc.error_detail() == "Insufficient stock"
    assert exc.message == "Backend returned 400 for POST /orders/"


def test_backend_request_exception_without_json_body() -> None:
    exc = BackendRequestException("GET", "/orders/1/", 404)

    assert exc.is_not_found is True
    assert exc.error_detail() is None


def test_validation_exception_lists_fields() -> None:
    exc = ValidationException({"sku": "SKU is required", "name": "Product name is required"})

    assert exc.errors["sku"] == "SKU is required"
    assert exc.message == "Validation failed for: name, sku"


def test_insufficient_stock_details() -> None:
    exc = InsufficientStockException("Only 2 items available", available=2, requested=5)

    assert exc.details == {"available": 2, "requested": 5}


def test_guard_exceptions_are_console_exceptions() -> None:
    assert isinstance(AuthenticationRequired("/orders"), ConsoleException)

    denied = PermissionDenied("admin", path="/admin")
    assert isinstance(denied, ConsoleException)
    assert denied.required_role == "admin"
    assert denied.message == "Role 'admin' required"
