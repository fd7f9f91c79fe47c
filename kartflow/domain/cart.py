"""
Order-creation cart.

Session-scoped list of product lines assembled on the create-order screen.
Quantities are capped by the stock figure of the product snapshot taken
when the line was added; the backend re-checks stock when the order is
submitted.
"""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional

from ..exceptions import InsufficientStockException, ValidationException
from ..models import Product

CENTS = Decimal("0.01")


@dataclass
class CartLine:
    """One product and its requested quantity."""

    product: Product
    quantity: int

    @property
    def product_id(self) -> str:
        return str(self.product.id)

    @property
    def line_total(self) -> Decimal:
        return (self.product.price * self.quantity).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass
class Cart:
    """
    Cart of order lines.

    Lines keep insertion order. A product appears at most once; adding it
    again merges the quantities.
    """

    lines: List[CartLine] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def find(self, product_id: Any) -> Optional[CartLine]:
        key = str(product_id)
        for line in self.lines:
            if line.product_id == key:
                return line
        return None

    def add(self, product: Optional[Product], quantity: int) -> CartLine:
        """
        Add a product to the cart.

        Args:
            product: Product to add
            quantity: Units to add

        Returns:
            The new or merged cart line

        Raises:
            ValidationException: If no product was selected or quantity is not positive
            InsufficientStockException: If the (merged) quantity exceeds stock
        """
        if product is None:
            raise ValidationException({"product": "Please select a product"})
        if quantity <= 0:
            raise ValidationException({"quantity": "Please enter a valid quantity"})

        stock = product.stock_quantity
        if quantity > stock:
            raise InsufficientStockException(
                f"Only {stock} items available in stock",
                available=stock,
                requested=quantity,
            )

        existing = self.find(product.id)
        if existing is not None:
            new_quantity = existing.quantity + quantity
            if new_quantity > stock:
                raise InsufficientStockException(
                    f"Cannot add more items. Only {stock} available",
                    available=stock,
                    requested=new_quantity,
                )
            existing.quantity = new_quantity
            existing.product = product
            return existing

        line = CartLine(product=product, quantity=quantity)
        self.lines.append(line)
        return line

    def update(self, product_id: Any, quantity: int) -> Optional[CartLine]:
        """
        Set the quantity of a line. Zero or less removes it.

        Returns:
            The updated line, or None if it was removed or not in the cart

        Raises:
            InsufficientStockException: If quantity exceeds stock
        """
        line = self.find(product_id)
        if line is None:
            return None

        if quantity <= 0:
            self.remove(product_id)
            return None

        stock = line.product.stock_quantity
        if quantity > stock:
            raise InsufficientStockException(
                f"Only {stock} items available",
                available=stock,
                requested=quantity,
            )

        line.quantity = quantity
        return line

    def remove(self, product_id: Any) -> bool:
        key = str(product_id)
        before = len(self.lines)
        self.lines = [line for line in self.lines if line.product_id != key]
        return len(self.lines) != before

    def clear(self) -> None:
        self.lines = []

    def total(self) -> Decimal:
        """Sum of price times quantity, rounded to cents."""
        amount = sum((line.product.price * line.quantity for line in self.lines), Decimal("0"))
        return amount.quantize(CENTS, rounding=ROUND_HALF_UP)

    def to_order_payload(self, customer: Dict[str, str]) -> Dict[str, Any]:
        """
        Build the body for ``POST /orders/``.

        Args:
            customer: Validated customer info with name, email, phone, address

        Raises:
            ValidationException: If the cart is empty
        """
        if self.is_empty:
            raise ValidationException({"cart": "Please add items to cart"})

        return {
            "customer_name": customer["name"],
            "customer_email": customer["email"],
            "customer_phone": customer["phone"],
            "shipping_address": customer["address"],
            "items": [
                {"product": line.product.id, "quantity": line.quantity}
                for line in self.lines
            ],
        }
