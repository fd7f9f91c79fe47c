"""
Pydantic models for backend records.

Records are mirrored from the REST backend's JSON responses. Parsing is
lenient: unknown fields are ignored and missing optional fields default,
so a backend adding a column never breaks a page.
"""

from decimal import Decimal
from typing import Any, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, field_validator

from .domain.order_status import (
    is_cancellable,
    status_color,
    valid_next_statuses,
)

RecordId = Union[int, str]

ModelT = TypeVar("ModelT", bound=BaseModel)


class Record(BaseModel):
    """Base model for backend records."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Product(Record):
    """Catalog product."""

    id: Optional[RecordId] = None
    name: str = ""
    description: Optional[str] = ""
    price: Decimal = Decimal("0")
    stock_quantity: int = 0
    sku: str = ""
    category: Optional[Union[str, int]] = None
    image_url: Optional[str] = None
    is_active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("name", "sku", "description", mode="before")
    @classmethod
    def null_text_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def in_stock(self) -> bool:
        return self.stock_quantity > 0

    @property
    def stock_level(self) -> str:
        """``high`` above 10 units, ``low`` while any remain, ``out`` otherwise."""
        if self.stock_quantity > 10:
            return "high"
        if self.stock_quantity > 0:
            return "low"
        return "out"

    def matches(self, term: str) -> bool:
        """Case-insensitive match of ``term`` against name or SKU."""
        needle = term.strip().lower()
        if not needle:
            return True
        return needle in self.name.lower() or needle in self.sku.lower()


class OrderItem(Record):
    """Single line of an order."""

    id: Optional[RecordId] = None
    product: Optional[Union[Product, int, str]] = None
    product_name: Optional[str] = None
    quantity: int = 0
    unit_price: Decimal = Decimal("0")

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def name(self) -> str:
        if isinstance(self.product, Product):
            return self.product.name
        return self.product_name or f"Product {self.product}"

    @property
    def sku(self) -> str:
        if isinstance(self.product, Product):
            return self.product.sku
        return ""


class Order(Record):
    """Customer order."""

    id: RecordId
    user: Any = None
    status: str = "pending"
    total_amount: Decimal = Decimal("0")
    shipping_address: Optional[str] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    items: List[OrderItem] = []
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def short_id(self) -> str:
        return str(self.id)[:8]

    @property
    def customer(self) -> str:
        if self.customer_name:
            return self.customer_name
        if isinstance(self.user, dict):
            return str(self.user.get("username") or self.user.get("email") or "")
        return "" if self.user is None else str(self.user)

    @property
    def status_color(self) -> str:
        return status_color(self.status)

    @property
    def next_statuses(self) -> List[str]:
        return valid_next_statuses(self.status)

    @property
    def cancellable(self) -> bool:
        return is_cancellable(self.status)

    @property
    def was_updated(self) -> bool:
        return bool(self.updated_at) and self.updated_at != self.created_at

    @property
    def item_count(self) -> int:
        return len(self.items)


class InventoryItem(Record):
    """Stock record for one product."""

    id: RecordId
    product: Any = None
    product_name: Optional[str] = None
    product_sku: Optional[str] = None
    current_stock: int = 0
    reserved_stock: int = 0
    available_stock: Optional[int] = None
    reorder_level: Optional[int] = None
    is_low_stock: bool = False
    last_updated: Optional[str] = None

    @property
    def available(self) -> int:
        if self.available_stock is not None:
            return self.available_stock
        return self.current_stock - self.reserved_stock

    @property
    def stock_status(self) -> str:
        """``out`` when empty, ``low`` when flagged by the backend, ``ok`` otherwise."""
        if self.current_stock == 0:
            return "out"
        if self.is_low_stock:
            return "low"
        return "ok"

    @property
    def stock_status_color(self) -> str:
        return {"out": "error", "low": "warning"}.get(self.stock_status, "success")

    @property
    def display_name(self) -> str:
        if self.product_name:
            return self.product_name
        if isinstance(self.product, dict):
            return str(self.product.get("name", ""))
        return f"Item {self.id}"


class StockMovement(Record):
    """Audit record of a stock change."""

    id: Optional[RecordId] = None
    inventory_item: Any = None
    product_name: Optional[str] = None
    movement_type: str = "adjustment"
    quantity: int = 0
    notes: Optional[str] = None
    created_by: Any = None
    created_at: Optional[str] = None


class User(Record):
    """Signed-in console user."""

    id: RecordId
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    is_staff: bool = False

    @property
    def role_label(self) -> str:
        return "Administrator" if self.is_staff else "Customer"

    @property
    def initial(self) -> str:
        return self.username[:1].upper() if self.username else "U"

    @property
    def display_name(self) -> str:
        full_name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return full_name or self.username


class OrderStats(Record):
    """Aggregates from ``/orders/order_stats/``."""

    model_config = ConfigDict(extra="allow")

    total_orders: int = 0
    total_spent: Decimal = Decimal("0")


class InventoryStats(Record):
    """Aggregates from ``/inventory/inventory_stats/``."""

    model_config = ConfigDict(extra="allow")

    total_items: int = 0
    low_stock_items: int = 0
    out_of_stock_items: int = 0
    total_stock_value: Decimal = Decimal("0")


class Availability(Record):
    """Response of ``/products/{id}/check_availability/``."""

    available: bool = False
    available_quantity: int = 0
    requested_quantity: Optional[int] = None


def unwrap_results(payload: Any) -> List[Any]:
    """
    Normalize a list response.

    Accepts either a bare JSON array or a paginated object with a
    ``results`` key.
    """
    if payload is None:
        return []
    if isinstance(payload, dict):
        return list(payload.get("results") or [])
    return list(payload)


def parse_records(model: Type[ModelT], payload: Any) -> List[ModelT]:
    """Parse a list response into ``model`` instances."""
    return [model.model_validate(entry) for entry in unwrap_results(payload)]
