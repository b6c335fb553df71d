"""
pos/checkout.py

Turns the POS session into a finalized Bill. All validation happens up
front; the Khata postings, stock movements and the bill itself are then
written in one store transaction, so a failure anywhere leaves nothing
behind.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from ... import config
from ...constants import BILL_TYPES, RETURN_REASONS, WALK_IN_CUSTOMER
from ...database.errors import NotFoundError, ValidationError
from ...database.models import Bill, CartLine
from ...database.repositories.bills_repo import BillsRepo
from ...database.repositories.products_repo import ProductsRepo
from ...database.repositories.technicians_repo import TechniciansRepo
from ...database.store import AppStore
from ...utils.helpers import now_iso, parse_iso
from .billing import compile_bill, parse_manual_total
from .codes import MANUAL, ActiveCode
from .payments import SINGLE, build_payments, is_paid, khata_postings, payment_method_label
from .session import PosSession

_log = logging.getLogger(__name__)

SUMMARY_LIMIT = 50


@dataclass(frozen=True)
class CheckoutRequest:
    lines: tuple[CartLine, ...]
    code: Optional[ActiveCode] = None
    tax_enabled: bool = False
    manual_total: str = ""
    manual_description: str = ""
    bill_type: str = "Final"
    customer_name: str = ""
    customer_mobile: str = ""
    technician_id: Optional[str] = None
    payment_mode: str = SINGLE
    single_method: str = "Cash"
    splits: dict = field(default_factory=dict)
    return_mode: bool = False
    return_reason: str = RETURN_REASONS[0]

    @classmethod
    def from_session(cls, s: PosSession) -> "CheckoutRequest":
        return cls(
            lines=s.cart.lines,
            code=s.code,
            tax_enabled=s.tax_enabled,
            manual_total=s.manual_total,
            manual_description=s.manual_description,
            bill_type=s.bill_type,
            customer_name=s.customer_name,
            customer_mobile=s.customer_mobile,
            technician_id=s.technician_id,
            payment_mode=s.payment_mode,
            single_method=s.single_method,
            splits=dict(s.splits),
            return_mode=s.return_mode,
            return_reason=s.return_reason,
        )

    @property
    def is_manual(self) -> bool:
        return self.code is not None and self.code.kind == MANUAL


def bill_notes(req: CheckoutRequest) -> str:
    if req.return_mode:
        return f"RETURN: {req.return_reason}"
    if req.is_manual:
        desc = (req.manual_description or "").strip()
        return f"Manual Adj: {desc}" if desc else "Price Adjusted Manually"
    return ""


def khata_description(bill_id: str, lines, notes: str) -> str:
    summary = ", ".join(f"{line.part_name} ({line.quantity})" for line in lines)
    if notes:
        summary += f" | {notes}"
    return f"Bill #{bill_id[-4:]} (Partial): {summary[:SUMMARY_LIMIT]}..."


class CheckoutService:
    def __init__(
        self,
        store: AppStore,
        estimates_affect_stock: Optional[bool] = None,
    ):
        self.store = store
        self.products = ProductsRepo(store)
        self.bills = BillsRepo(store)
        self.technicians = TechniciansRepo(store)
        self.estimates_affect_stock = (
            config.ESTIMATES_AFFECT_STOCK if estimates_affect_stock is None else estimates_affect_stock
        )

    def checkout(self, req: CheckoutRequest) -> Bill:
        if not req.lines:
            raise ValidationError("Cart is empty.")
        if req.bill_type not in BILL_TYPES:
            raise ValidationError(f"Bill type must be one of: {', '.join(BILL_TYPES)}")
        if req.is_manual and req.manual_total.strip():
            parse_manual_total(req.manual_total)

        totals = compile_bill(
            req.lines,
            req.code,
            req.tax_enabled,
            req.manual_total if req.is_manual else None,
        )
        payments = build_payments(
            req.payment_mode,
            totals.total,
            single_method=req.single_method,
            splits=req.splits,
            technician_id=req.technician_id,
        )

        tech = None
        if req.technician_id:
            tech = self.technicians.get(req.technician_id)
            if tech is None:
                raise NotFoundError(f"Technician {req.technician_id} not found.")

        if tech is not None:
            customer_name, customer_mobile = tech.name, tech.mobile
        else:
            customer_name = req.customer_name.strip() or WALK_IN_CUSTOMER
            customer_mobile = req.customer_mobile.strip()

        when = now_iso()
        notes = bill_notes(req)
        bill = Bill(
            id=self.bills.new_bill_id(parse_iso(when).date()),
            date=when,
            items=tuple(req.lines),
            subtotal=totals.subtotal,
            gst=totals.tax,
            total=totals.total,
            type=req.bill_type,
            customer_name=customer_name,
            customer_mobile=customer_mobile or None,
            payment_method=payment_method_label(req.payment_mode, payments),
            payments=payments,
            is_paid=is_paid(payments),
            notes=notes or None,
        )

        applies_effects = bill.type == "Final" or self.estimates_affect_stock
        with self.store.transaction():
            if applies_effects:
                desc = khata_description(bill.id, bill.items, notes)
                for posting in khata_postings(payments, req.technician_id):
                    self.technicians.post(posting.technician_id, posting.amount, posting.kind, desc)
                self.products.apply_bill_effects(bill)
            self.bills.add(bill)

        _log.info(
            "Bill %s saved: %s %s, total %.2f (%s)",
            bill.id, bill.type, bill.payment_method, bill.total, bill.customer_name,
        )
        return bill

    def checkout_session(self, session: PosSession) -> Bill:
        bill = self.checkout(CheckoutRequest.from_session(session))
        session.reset()
        return bill
