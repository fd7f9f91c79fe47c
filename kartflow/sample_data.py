"""
Static sample data for the dashboards.

The dashboards run in demo mode by default and show these figures instead
of backend aggregates.
"""

from decimal import Decimal
from typing import Any, Dict, List

SALES_BY_MONTH: List[Dict[str, Any]] = [
    {"month": "Jan", "sales": 4000, "orders": 240},
    {"month": "Feb", "sales": 3000, "orders": 198},
    {"month": "Mar", "sales": 5000, "orders": 312},
    {"month": "Apr", "sales": 7000, "orders": 445},
    {"month": "May", "sales": 6000, "orders": 378},
    {"month": "Jun", "sales": 8000, "orders": 512},
]

CATEGORY_SPLIT: List[Dict[str, Any]] = [
    {"name": "Electronics", "value": 35, "color": "#3f51b5"},
    {"name": "Clothing", "value": 25, "color": "#4caf50"},
    {"name": "Books", "value": 20, "color": "#ff9800"},
    {"name": "Home & Garden", "value": 20, "color": "#f44336"},
]

DASHBOARD_STATS: Dict[str, Dict[str, Any]] = {
    "orders": {"total_orders": 24, "total_spent": Decimal("48265")},
    "inventory": {"total_items": 8, "low_stock_items": 2},
}

ADMIN_STATS: List[Dict[str, str]] = [
    {"title": "Total Users", "value": "1,247", "icon": "people", "color": "#3f51b5", "change": "+12%"},
    {"title": "Total Products", "value": "324", "icon": "inventory", "color": "#4caf50", "change": "+8%"},
    {"title": "Total Orders", "value": "2,156", "icon": "cart", "color": "#ff9800", "change": "+15%"},
    {"title": "Revenue", "value": "$48,265", "icon": "money", "color": "#f44336", "change": "+23%"},
]

RECENT_USERS: List[Dict[str, Any]] = [
    {"id": 1, "name": "John Doe", "email": "john@example.com", "role": "Customer", "status": "Active"},
    {"id": 2, "name": "Jane Smith", "email": "jane@example.com", "role": "Customer", "status": "Active"},
    {"id": 3, "name": "Admin User", "email": "admin@kartflow.com", "role": "Admin", "status": "Active"},
    {"id": 4, "name": "Test User", "email": "test@example.com", "role": "Customer", "status": "Inactive"},
]

RECENT_ORDERS: List[Dict[str, Any]] = [
    {"id": "ORD-001", "customer": "John Doe", "amount": "$299.99", "status": "Delivered", "date": "2025-01-10"},
    {"id": "ORD-002", "customer": "Jane Smith", "amount": "$149.99", "status": "Shipped", "date": "2025-01-09"},
    {"id": "ORD-003", "customer": "Bob Johnson", "amount": "$79.99", "status": "Processing", "date": "2025-01-08"},
    {"id": "ORD-004", "customer": "Alice Wilson", "amount": "$199.99", "status": "Pending", "date": "2025-01-08"},
]

DEMO_CREDENTIALS: Dict[str, Dict[str, str]] = {
    "user": {"email": "demo@kartflow.com", "password": "demo123"},
    "admin": {"email": "admin@kartflow.com", "password": "admin123"},
}
