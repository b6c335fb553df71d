"""
pos/session.py

Everything the billing screen holds between scans: the cart, the active
code, the manual override, customer and payment choices. The Qt
controller only forwards user actions here.
"""
from __future__ import annotations

import logging
from typing import Optional

from ...constants import BILL_TYPES, RETURN_REASONS, VOID_ALERT_THRESHOLD
from ...database.errors import AuthorizationError, NotFoundError, ValidationError
from ...database.models import CartLine, Product
from ...database.repositories.logs_repo import LogsRepo
from ...database.repositories.products_repo import ProductsRepo
from ...database.repositories.settings_repo import SettingsRepo
from ...utils.auth import Authorizer
from .billing import BillTotals, compile_bill
from .cart import CUSTOMER_TIER, Cart
from .codes import MANUAL, ActiveCode, resolve_code, tier_for
from .payments import SINGLE, default_split

_log = logging.getLogger(__name__)


class PosSession:
    def __init__(
        self,
        products: ProductsRepo,
        logs: LogsRepo,
        settings: SettingsRepo,
        authorizer: Authorizer,
    ):
        self.products = products
        self.logs = logs
        self.settings = settings
        self.authorizer = authorizer
        self.cart = Cart()
        self.reset()

    def reset(self) -> None:
        """Back to an empty walk-in bill (after checkout or on start)."""
        self.cart.clear()
        self.code: Optional[ActiveCode] = None
        self.manual_total = ""
        self.manual_description = ""
        self.tax_enabled = False
        self.bill_type = BILL_TYPES[0]
        self.customer_name = ""
        self.customer_mobile = ""
        self.technician_id: Optional[str] = None
        self.payment_mode = SINGLE
        self.single_method = "Cash"
        self.splits: dict[str, float] = default_split(0.0)
        self.return_reason = RETURN_REASONS[0]

    # ---- Cart -------------------------------------------------------------

    @property
    def return_mode(self) -> bool:
        return self.cart.return_mode

    def set_return_mode(self, enabled: bool) -> None:
        self.cart.return_mode = bool(enabled)

    def add_product(self, product: Product, quantity: int = 1) -> CartLine:
        return self.cart.add_line(product, quantity)

    def add_by_barcode(self, barcode: str) -> CartLine:
        p = self.products.get_by_barcode(barcode)
        if p is None:
            raise NotFoundError(f"No product with barcode {barcode.strip()}.")
        return self.add_product(p)

    def remove(self, product_id: str) -> bool:
        return self.cart.remove_line(product_id)

    def needs_clear_authorization(self) -> bool:
        return self.settings.no_bill_no_exit and not self.cart.is_empty()

    def clear(self, secret: Optional[str] = None) -> None:
        """
        Void the cart. Under the no-bill-no-exit policy a non-empty cart
        needs the admin PIN; a wrong PIN leaves everything as it was.
        Voiding more than ₹2000 is recorded as a security event.
        """
        if self.needs_clear_authorization() and not self.authorizer.is_admin(secret or ""):
            raise AuthorizationError("Incorrect PIN")
        if not self.cart.is_empty():
            total = self.totals().total
            if total > VOID_ALERT_THRESHOLD:
                self.logs.security(
                    "VOID_BILL",
                    f"Cart cleared with value ₹{total:g}. Items: {len(self.cart)}",
                    "medium",
                )
        self.cart.clear()
        self.code = None
        self.manual_total = ""
        self.manual_description = ""

    # ---- Codes ------------------------------------------------------------

    def apply_code(self, text: str) -> Optional[ActiveCode]:
        """
        Apply a typed code, replacing any active one. Invalid codes raise
        and leave the session unchanged; empty input does nothing.
        """
        code = resolve_code(text, self.settings.tech_code)
        if code is None:
            return self.code
        self.code = code
        self.manual_total = ""
        self.cart.reprice(tier_for(code), self.products.catalog_map())
        if code.kind == MANUAL:
            # seeded from the repriced lines so the override matches the subtotal shown
            self.manual_total = f"{self.totals().calculated_total:g}"
        else:
            self.manual_description = ""
        return code

    def remove_code(self) -> None:
        self.code = None
        self.manual_total = ""
        self.manual_description = ""
        self.cart.reprice(CUSTOMER_TIER, self.products.catalog_map())

    # ---- Totals / payment ---------------------------------------------------

    def totals(self) -> BillTotals:
        manual = self.manual_total if self.code is not None and self.code.kind == MANUAL else None
        return compile_bill(self.cart.lines, self.code, self.tax_enabled, manual)

    def set_bill_type(self, bill_type: str) -> None:
        if bill_type not in BILL_TYPES:
            raise ValidationError(f"Bill type must be one of: {', '.join(BILL_TYPES)}")
        self.bill_type = bill_type

    def start_split(self) -> None:
        """Seed the split editor with the whole total in cash."""
        self.splits = default_split(self.totals().total)
