"""
pos/cart.py

The working cart of the billing screen. Lines are immutable CartLine
snapshots; every change replaces the affected line.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Mapping, Optional

from ...database.errors import OutOfStockError, ValidationError
from ...database.models import CartLine, Product

__all__ = ["CUSTOMER_TIER", "TECHNICIAN_TIER", "unit_price", "Cart"]

CUSTOMER_TIER = "customer"
TECHNICIAN_TIER = "technician"


def unit_price(product: Product, tier: str = CUSTOMER_TIER, return_mode: bool = False) -> float:
    """Tier price of the product, negated for returns."""
    price = product.technician_price if tier == TECHNICIAN_TIER else product.customer_price
    return -float(price) if return_mode else float(price)


class Cart:
    """
    Ordered cart lines keyed by product id.

    `tier` follows the active code (technician or customer prices) and
    `return_mode` makes newly added lines negative.
    """

    def __init__(self) -> None:
        self._lines: list[CartLine] = []
        self.tier: str = CUSTOMER_TIER
        self.return_mode: bool = False

    # ---- Queries ----------------------------------------------------------

    @property
    def lines(self) -> tuple[CartLine, ...]:
        return tuple(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def is_empty(self) -> bool:
        return not self._lines

    def line_for(self, product_id: str) -> Optional[CartLine]:
        for line in self._lines:
            if line.product_id == product_id:
                return line
        return None

    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    # ---- Commands ---------------------------------------------------------

    def add_line(
        self,
        product: Product,
        quantity_delta: int = 1,
        *,
        tier: Optional[str] = None,
        return_mode: Optional[bool] = None,
    ) -> CartLine:
        """
        Add `quantity_delta` of a product. An existing line for the same
        product is merged and re-totalled at the current signed price.
        Sales of an out-of-stock product are refused; returns are not.
        """
        tier = self.tier if tier is None else tier
        return_mode = self.return_mode if return_mode is None else return_mode
        if quantity_delta <= 0:
            raise ValidationError("Quantity must be at least 1.")
        if product.stock_quantity <= 0 and not return_mode:
            raise OutOfStockError(f"{product.part_name} is out of stock.")

        price = unit_price(product, tier, return_mode)
        for i, line in enumerate(self._lines):
            if line.product_id == product.id:
                qty = line.quantity + quantity_delta
                new = replace(line, quantity=qty, price=price, total=round(qty * price, 2))
                self._lines[i] = new
                return new

        new = CartLine(
            product_id=product.id,
            part_name=product.part_name,
            quantity=quantity_delta,
            price=price,
            total=round(quantity_delta * price, 2),
        )
        self._lines.append(new)
        return new

    def remove_line(self, product_id: str) -> bool:
        before = len(self._lines)
        self._lines = [line for line in self._lines if line.product_id != product_id]
        return len(self._lines) != before

    def reprice(self, tier: str, catalog: Mapping[str, Product]) -> None:
        """Re-price every line to `tier`, keeping each line's sign."""
        self.tier = tier
        out = []
        for line in self._lines:
            p = catalog.get(line.product_id)
            if p is None:
                out.append(line)
                continue
            price = unit_price(p, tier, line.price < 0)
            out.append(replace(line, price=price, total=round(line.quantity * price, 2)))
        self._lines = out

    def clear(self) -> None:
        self._lines = []
        self.return_mode = False
        self.tier = CUSTOMER_TIER
