"""
KartFlow Console Tests - Test Configuration.

Provides pytest fixtures for signed-in sessions and sample backend
payloads, and resets the in-memory session store between tests.
"""

from typing import Any, Dict, Iterator, List, Tuple

import pytest

from kartflow.config import settings
from kartflow.models import Product, User
from kartflow.security import create_session_token, generate_session_id
from kartflow.session_store import session_store

SessionCookies = Tuple[Dict[str, str], str]


def make_session(user: User) -> SessionCookies:
    """Return the cookie jar content and session id of a signed-in ``user``."""
    session_id = generate_session_id()
    token = create_session_token(user, session_id)
    return {settings.SESSION_COOKIE_NAME: token}, session_id


@pytest.fixture(autouse=True)
def clear_session_store() -> Iterator[None]:
    session_store.clear()
    yield
    session_store.clear()


@pytest.fixture
def demo_user() -> User:
    return User(id=1, username="demo", email="demo@kartflow.com")


@pytest.fixture
def admin_user() -> User:
    return User(id=2, username="admin", email="admin@kartflow.com", is_staff=True)


@pytest.fixture
def user_session(demo_user: User) -> SessionCookies:
    """Cookies and session id for a signed-in non-staff user."""
    return make_session(demo_user)


@pytest.fixture
def admin_session(admin_user: User) -> SessionCookies:
    """Cookies and session id for a signed-in staff user."""
    return make_session(admin_user)


@pytest.fixture
def product_payload() -> Dict[str, Any]:
    """
    Sample product as returned by ``GET /products/{id}/``.

    Returns:
        Dictionary with backend product fields
    """
    return {
        "id": 7,
        "name": "Wireless Mouse",
        "description": "Ergonomic 2.4GHz mouse",
        "price": "24.99",
        "stock_quantity": 5,
        "sku": "WM-001",
        "category": 3,
        "image_url": None,
        "is_active": True,
        "created_at": "2025-01-05T14:30:00Z",
        "updated_at": "2025-01-05T14:30:00Z",
    }


@pytest.fixture
def product(product_payload: Dict[str, Any]) -> Product:
    return Product.model_validate(product_payload)


@pytest.fixture
def order_payload() -> Dict[str, Any]:
    """
    Sample order as returned by ``GET /orders/{id}/``.

    Returns:
        Dictionary with backend order fields including nested items
    """
    return {
        "id": "3f2c9a7e-1b44-4d0a-9c55-0e6f1d2a8b90",
        "user": {"id": 1, "username": "demo"},
        "status": "pending",
        "total_amount": "1234.50",
        "shipping_address": "1 Market Street\nSpringfield",
        "customer_name": "Jane Smith",
        "customer_email": "jane@example.com",
        "customer_phone": "555-0100",
        "items": [
            {
                "id": 1,
                "product": {"id": 7, "name": "Wireless Mouse", "sku": "WM-001", "price": "24.99"},
                "quantity": 2,
                "unit_price": "24.99",
            },
            {
                "id": 2,
                "product": 9,
                "product_name": "Desk Lamp",
                "quantity": 1,
                "unit_price": "1184.52",
            },
        ],
        "created_at": "2025-01-05T14:30:00Z",
        "updated_at": "2025-01-06T09:15:00Z",
    }


@pytest.fixture
def inventory_payload() -> List[Dict[str, Any]]:
    return [
        {
            "id": 11,
            "product_name": "Wireless Mouse",
            "product_sku": "WM-001",
            "current_stock": 5,
            "reserved_stock": 1,
            "available_stock": 4,
            "reorder_level": 10,
            "is_low_stock": True,
            "last_updated": "2025-01-05T14:30:00Z",
        },
        {
            "id": 12,
            "product_name": "USB Cable",
            "product_sku": "UC-002",
            "current_stock": 0,
            "reserved_stock": 0,
            "reorder_level": 5,
            "is_low_stock": True,
            "last_updated": "not-a-date",
        },
    ]


def pytest_configure(config: Any) -> None:
    """
    Configure pytest with custom markers.

    Args:
        config: Pytest configuration object
    """
    config.addinivalue_line(
        "markers",
        "unit: mark test as unit test",
    )
