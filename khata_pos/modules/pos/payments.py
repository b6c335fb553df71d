"""
pos/payments.py

How a bill total is paid: one instrument, or a split across Cash, Online
and Khata. Khata allocations turn into ledger postings against the
selected technician. Pure functions.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Union

from ...constants import KHATA, PAYMENT_METHODS, SPLIT, SPLIT_TOLERANCE
from ...database.errors import SplitMismatchError, ValidationError
from ...database.models import SplitPayment

__all__ = [
    "SINGLE",
    "SPLIT",
    "KhataPosting",
    "default_split",
    "build_payments",
    "khata_postings",
    "payment_method_label",
    "is_paid",
]

SINGLE = "Single"

SplitInput = Union[Mapping[str, float], Iterable[SplitPayment]]


@dataclass(frozen=True)
class KhataPosting:
    technician_id: str
    amount: float
    kind: str  # Debit | Credit


def default_split(total: float) -> dict[str, float]:
    """Split editor seed: everything in cash."""
    return {"Cash": round(float(total), 2), "Online": 0.0, "Khata": 0.0}


def _as_payments(splits: SplitInput) -> list[SplitPayment]:
    if isinstance(splits, Mapping):
        items = [SplitPayment(m, float(a or 0.0)) for m, a in splits.items()]
    else:
        items = list(splits)
    for p in items:
        if p.method not in PAYMENT_METHODS:
            raise ValidationError(f"Unknown payment method: {p.method}")
    return [SplitPayment(p.method, round(float(p.amount), 2)) for p in items if p.amount != 0]


def build_payments(
    mode: str,
    total: float,
    single_method: Optional[str] = None,
    splits: Optional[SplitInput] = None,
    technician_id: Optional[str] = None,
) -> tuple[SplitPayment, ...]:
    """
    Single mode: one payment of the whole total by `single_method`.
    Split mode: the non-zero allocations, which must add up to the total
    within ₹1.
    Any Khata allocation needs a technician.
    """
    total = round(float(total), 2)
    if mode == SINGLE:
        method = single_method or "Cash"
        if method not in PAYMENT_METHODS:
            raise ValidationError(f"Unknown payment method: {method}")
        payments = [SplitPayment(method, total)]
    elif mode == SPLIT:
        payments = _as_payments(splits or {})
        split_total = round(sum(p.amount for p in payments), 2)
        if abs(split_total - total) > SPLIT_TOLERANCE:
            raise SplitMismatchError(split_total, total)
    else:
        raise ValidationError(f"Unknown payment mode: {mode}")

    if any(p.method == KHATA for p in payments) and not technician_id:
        raise ValidationError("Select a Technician for Khata payment.")
    return tuple(payments)


def khata_postings(
    payments: Iterable[SplitPayment],
    technician_id: Optional[str],
) -> list[KhataPosting]:
    """
    Ledger postings implied by the payments: a positive Khata amount is
    a Debit (technician owes more), a negative one (refund on a return)
    a Credit of its absolute value. Zero amounts post nothing.
    """
    out = []
    for p in payments:
        if p.method != KHATA or p.amount == 0:
            continue
        if not technician_id:
            raise ValidationError("Select a Technician for Khata payment.")
        kind = "Debit" if p.amount > 0 else "Credit"
        out.append(KhataPosting(technician_id, round(abs(p.amount), 2), kind))
    return out


def payment_method_label(mode: str, payments: Iterable[SplitPayment]) -> str:
    """Bill.payment_method: the single instrument, or 'Split'."""
    payments = list(payments)
    if mode == SPLIT:
        return SPLIT
    return payments[0].method if payments else "Cash"


def is_paid(payments: Iterable[SplitPayment]) -> bool:
    """A bill is unpaid only when every payment goes on Khata."""
    payments = list(payments)
    if not payments:
        return True
    return not all(p.method == KHATA for p in payments)
