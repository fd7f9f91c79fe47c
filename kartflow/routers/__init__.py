"""
Page routers for the console screens.
"""

from . import (
    auth_router,
    create_order_router,
    dashboard_router,
    inventory_router,
    orders_router,
    products_router,
)

__all__ = [
    "auth_router",
    "dashboard_router",
    "products_router",
    "orders_router",
    "create_order_router",
    "inventory_router",
]
