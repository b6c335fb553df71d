"""
inventory/stock.py

Stock movements caused by bills and by manual edits. These functions only
decide what changes; ProductsRepo applies them inside a store transaction
and writes the audit logs.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Mapping, Optional

from ...constants import (
    DEAD_STOCK_CRITICAL_DAYS,
    DEAD_STOCK_WARNING_DAYS,
    MACHINE_TYPES,
    STOCK_REASONS,
)
from ...database.errors import PendingReasonRequired, ValidationError
from ...database.models import Bill, Product
from ...utils.helpers import parse_iso

__all__ = [
    "StockMovement",
    "bill_movements",
    "apply_bill_effects",
    "manual_edit_change",
    "apply_manual_edit",
    "dead_stock_status",
    "days_since_sale",
    "search_catalog",
]

RETURN_RESTOCK = "Return Restock"


@dataclass(frozen=True)
class StockMovement:
    product_id: str
    change: int
    new_stock: int
    is_return: bool


# -----------------------------
# Bill effects
# -----------------------------

def bill_movements(bill: Bill) -> list[tuple[str, int, bool]]:
    """
    (product_id, signed change, is_return) per bill line. A line with a
    negative unit price is a returned item and puts stock back.
    """
    out = []
    for line in bill.items:
        is_return = line.price < 0
        change = line.quantity if is_return else -line.quantity
        out.append((line.product_id, change, is_return))
    return out


def apply_bill_effects(
    bill: Bill,
    catalog: Mapping[str, Product],
    when: str,
) -> list[StockMovement]:
    """
    Mutate the catalog products for a finalized bill: sold lines lose
    stock and get `last_sold_date = when`; returned lines gain stock.
    Lines whose product is no longer in the catalog are skipped.
    """
    moves: list[StockMovement] = []
    for product_id, change, is_return in bill_movements(bill):
        p = catalog.get(product_id)
        if p is None:
            continue
        p.stock_quantity += change
        if not is_return:
            p.last_sold_date = when
        moves.append(StockMovement(p.id, change, p.stock_quantity, is_return))
    return moves


# -----------------------------
# Manual edits
# -----------------------------

def manual_edit_change(current: Product, new_quantity: int) -> int:
    return int(new_quantity) - int(current.stock_quantity)


def apply_manual_edit(
    current: Product,
    new_quantity: int,
    reason: Optional[str],
) -> int:
    """
    Validate a manual quantity change and return the signed difference.

    A non-zero difference without a reason is held: PendingReasonRequired
    is raised and nothing is changed. The caller commits the edit only
    once it can pass one of the closed reason codes.
    """
    if new_quantity is None or int(new_quantity) < 0:
        raise ValidationError("Stock quantity cannot be negative.")
    change = manual_edit_change(current, new_quantity)
    if change == 0:
        return 0
    if not reason:
        raise PendingReasonRequired(current.id, change)
    if reason not in STOCK_REASONS:
        raise ValidationError(f"Unknown stock adjustment reason: {reason}")
    return change


# -----------------------------
# Dead stock
# -----------------------------

def days_since_sale(product: Product, now: Optional[datetime] = None) -> Optional[int]:
    sold = parse_iso(product.last_sold_date)
    if sold is None:
        return None
    return ((now or datetime.now()) - sold).days


def dead_stock_status(product: Product, now: Optional[datetime] = None) -> str:
    """'critical' past 180 days without a sale, 'warning' past 90, else 'normal'."""
    days = days_since_sale(product, now)
    if days is None:
        return "normal"
    if days > DEAD_STOCK_CRITICAL_DAYS:
        return "critical"
    if days > DEAD_STOCK_WARNING_DAYS:
        return "warning"
    return "normal"


# -----------------------------
# Search
# -----------------------------

def search_catalog(
    products: Iterable[Product],
    query: str = "",
    machine_type: Optional[str] = None,
) -> list[Product]:
    """
    Case-insensitive match over part name, barcode and compatible models,
    optionally restricted to one machine type ('All' or None means any).
    """
    if machine_type and machine_type != "All" and machine_type not in MACHINE_TYPES:
        raise ValidationError(f"Unknown machine type: {machine_type}")
    q = (query or "").strip().lower()
    out = []
    for p in products:
        if machine_type and machine_type != "All" and p.machine_type != machine_type:
            continue
        if q and not (
            q in p.part_name.lower()
            or q in p.barcode.lower()
            or any(q in m.lower() for m in p.compatible_models)
        ):
            continue
        out.append(p)
    return out
