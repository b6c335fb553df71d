"""
pos/billing.py

Bill totals. Pure functions: nothing here touches the store.

    subtotal  = Σ line totals (negative for returns)
    discount  = promo discount on a positive subtotal
    taxable   = subtotal − discount
    tax       = taxable × 18% when GST is on
    total     = manual override if one is set, else taxable + tax
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from ...constants import TAX_RATE
from ...database.errors import ValidationError
from ...database.models import CartLine
from .codes import FIXED, PERCENT, ActiveCode

__all__ = ["BillTotals", "discount_for", "parse_manual_total", "compile_bill"]


@dataclass(frozen=True)
class BillTotals:
    subtotal: float
    discount: float
    taxable: float
    tax: float
    total: float
    calculated_total: float

    @property
    def is_overridden(self) -> bool:
        return self.total != self.calculated_total


def _r2(x: float) -> float:
    return round(x + 0.0, 2)


def discount_for(subtotal: float, code: Optional[ActiveCode]) -> float:
    """
    Promo discount for a subtotal. A flat discount never exceeds the
    subtotal. Net-return carts (subtotal ≤ 0) get no promo discount.
    """
    if code is None or subtotal <= 0:
        return 0.0
    if code.kind == PERCENT:
        return subtotal * code.value / 100.0
    if code.kind == FIXED:
        return min(code.value, subtotal)
    return 0.0


def parse_manual_total(text: str) -> float:
    """Parse the manual override box. Accepts '1,250.50' and '₹ 900'."""
    cleaned = (text or "").replace(",", "").replace("₹", "").strip()
    if not cleaned:
        raise ValidationError("Enter a manual total.")
    try:
        value = float(cleaned)
    except ValueError:
        raise ValidationError(f"Manual total must be a number, not {text!r}.")
    if value != value or value in (float("inf"), float("-inf")):
        raise ValidationError("Manual total must be a finite number.")
    return _r2(value)


def compile_bill(
    lines: Iterable[CartLine],
    code: Optional[ActiveCode] = None,
    tax_enabled: bool = False,
    manual_total: Optional[str] = None,
) -> BillTotals:
    """
    Totals for the current cart. With a manual override the total is the
    parsed override; unparseable override text leaves the computed total
    in place (checkout rejects it separately).
    """
    subtotal = sum(line.total for line in lines)
    discount = discount_for(subtotal, code)
    taxable = subtotal - discount
    tax = taxable * TAX_RATE if tax_enabled else 0.0
    calculated = _r2(taxable + tax)

    total = calculated
    if manual_total is not None and str(manual_total).strip():
        try:
            total = parse_manual_total(manual_total)
        except ValidationError:
            total = calculated

    return BillTotals(
        subtotal=_r2(subtotal),
        discount=_r2(discount),
        taxable=_r2(taxable),
        tax=_r2(tax),
        total=total,
        calculated_total=calculated,
    )
