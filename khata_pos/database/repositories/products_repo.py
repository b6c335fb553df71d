# khata_pos/database/repositories/products_repo.py
from __future__ import annotations

import logging
import re
import uuid
from dataclasses import replace
from typing import Iterable, Optional

from ...constants import MACHINE_TYPES
from ...modules.inventory import stock
from ...utils.helpers import now_iso
from ..errors import ImportFormatError, NotFoundError, ValidationError
from ..models import Bill, Product
from ..store import AppStore
from .logs_repo import LogsRepo

_log = logging.getLogger(__name__)

_GENERATED_BARCODE = re.compile(r"^BR-(\d+)$")

# (log field, Product attribute)
_PRICE_TIERS = (
    ("Customer", "customer_price"),
    ("Technician", "technician_price"),
    ("Purchase", "purchase_price"),
)


def next_generated_barcode(existing: Iterable[str]) -> str:
    """BR-NNNN, one past the highest generated barcode already in use."""
    last = 1000
    for code in existing:
        m = _GENERATED_BARCODE.match(code or "")
        if m:
            last = max(last, int(m.group(1)))
    return f"BR-{last + 1:04d}"


def new_product_id() -> str:
    return uuid.uuid4().hex[:9]


class ProductsRepo:
    def __init__(self, store: AppStore):
        self.store = store
        self.logs = LogsRepo(store)

    # ---------------------------- validation ----------------------------

    @staticmethod
    def _validate(p: Product) -> None:
        if not (p.part_name or "").strip():
            raise ValidationError("Part name cannot be empty.")
        if p.machine_type not in MACHINE_TYPES:
            raise ValidationError(f"Machine type must be one of: {', '.join(MACHINE_TYPES)}")
        for label, value in (
            ("Purchase price", p.purchase_price),
            ("Technician price", p.technician_price),
            ("Customer price", p.customer_price),
        ):
            if value is None or float(value) < 0:
                raise ValidationError(f"{label} cannot be negative.")
        if int(p.stock_quantity) < 0:
            raise ValidationError("Stock quantity cannot be negative.")

    # ---------------------------- Products ----------------------------

    def list_products(self) -> list[Product]:
        return list(self.store.state.inventory)

    def get(self, product_id: str) -> Product | None:
        for p in self.store.state.inventory:
            if p.id == product_id:
                return p
        return None

    def get_by_barcode(self, barcode: str) -> Product | None:
        code = (barcode or "").strip().lower()
        if not code:
            return None
        for p in self.store.state.inventory:
            if p.barcode.lower() == code:
                return p
        return None

    def search(self, query: str = "", machine_type: Optional[str] = None) -> list[Product]:
        return stock.search_catalog(self.store.state.inventory, query, machine_type)

    def catalog_map(self) -> dict[str, Product]:
        return {p.id: p for p in self.store.state.inventory}

    def low_stock(self) -> list[Product]:
        return [p for p in self.store.state.inventory if p.is_low_stock]

    def create(self, product: Product) -> Product:
        """
        Add a product. A missing id or barcode is generated. Logs the
        opening quantity as 'New Stock' and a STOCK_EDIT security event.
        """
        self._validate(product)
        with self.store.transaction() as st:
            barcode = (product.barcode or "").strip()
            if not barcode:
                barcode = next_generated_barcode(p.barcode for p in st.inventory)
            elif self.get_by_barcode(barcode) is not None:
                raise ValidationError(f"Barcode {barcode} is already used by another product.")
            p = replace(
                product,
                id=product.id or new_product_id(),
                barcode=barcode,
                part_name=product.part_name.strip(),
                last_sold_date=product.last_sold_date or now_iso(),
            )
            if self.get(p.id) is not None:
                raise ValidationError(f"Product id {p.id} already exists.")
            st.inventory.insert(0, p)
            self.logs.stock(p, p.stock_quantity, "New Stock", p.stock_quantity)
            self.logs.security("STOCK_EDIT", f"Added new product: {p.part_name}", "medium")
            self.store.notify("inventory")
        _log.info("Product created: %s (%s)", p.part_name, p.id)
        return p

    def update(self, edited: Product, reason: Optional[str] = None) -> Product:
        """
        Replace a product with its edited version.

        If the stock quantity changed and no reason is given,
        PendingReasonRequired is raised and nothing is written; call again
        with the chosen reason to commit. Changed price tiers are logged.
        """
        current = self.get(edited.id)
        if current is None:
            raise NotFoundError(f"Product {edited.id} not found.")
        self._validate(edited)
        change = stock.apply_manual_edit(current, edited.stock_quantity, reason)

        barcode = (edited.barcode or "").strip() or current.barcode
        other = self.get_by_barcode(barcode)
        if other is not None and other.id != current.id:
            raise ValidationError(f"Barcode {barcode} is already used by another product.")

        with self.store.transaction() as st:
            new = replace(edited, barcode=barcode)
            for field, attr in _PRICE_TIERS:
                old_val, new_val = getattr(current, attr), getattr(new, attr)
                if float(old_val) != float(new_val):
                    self.logs.price(current, field, old_val, new_val)
            idx = next(i for i, p in enumerate(st.inventory) if p.id == current.id)
            st.inventory[idx] = new
            if change:
                self.logs.stock(new, change, reason, new.stock_quantity)
            self.store.notify("inventory")
        return new

    # ---------------------------- Bill effects ----------------------------

    def apply_bill_effects(self, bill: Bill) -> list[stock.StockMovement]:
        """Move stock for a finalized bill; returned lines get a 'Return Restock' log."""
        with self.store.transaction():
            moves = stock.apply_bill_effects(bill, self.catalog_map(), bill.date)
            by_id = self.catalog_map()
            for m in moves:
                if m.is_return:
                    self.logs.stock(by_id[m.product_id], m.change, stock.RETURN_RESTOCK, m.new_stock)
            skipped = {pid for pid, _, _ in stock.bill_movements(bill)} - set(by_id)
            for pid in sorted(skipped):
                _log.warning("Bill %s references missing product %s; stock unchanged", bill.id, pid)
            self.store.notify("inventory")
        return moves

    # ---------------------------- Inventory file ----------------------------

    def export_inventory(self) -> list[dict]:
        return [p.to_dict() for p in self.store.state.inventory]

    def import_inventory(self, rows: object) -> int:
        """Replace the whole catalog with a bare JSON array of products."""
        if not isinstance(rows, list):
            raise ImportFormatError("Inventory file must contain a JSON array of products.")
        try:
            products = [Product.from_dict(r) for r in rows]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ImportFormatError(f"Inventory file has an invalid product record: {e}") from e
        with self.store.transaction() as st:
            st.inventory = products
            self.store.notify("inventory")
        _log.info("Inventory imported: %d products", len(products))
        return len(products)
