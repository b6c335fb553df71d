# khata_pos/database/models.py
"""
Record types held by the AppStore.

Each record serialises with the camelCase keys used by the backup file so
that exports written here can be re-imported by older builds and the other
way around. `from_dict` is tolerant of missing optional keys.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

from ..constants import DEFAULT_CREDIT_LIMIT, DEFAULT_LOW_STOCK_THRESHOLD


def _f(value, default: float = 0.0) -> float:
    """Missing values take the default; anything else must be a finite number."""
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise ValueError(f"expected a number, got {value!r}")
    try:
        out = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"expected a number, got {value!r}") from None
    if not math.isfinite(out):
        raise ValueError(f"expected a finite number, got {value!r}")
    return out


def _i(value, default: int = 0) -> int:
    if value is None or value == "":
        return default
    return int(_f(value))


def _opt(value) -> Optional[str]:
    return None if value in (None, "") else str(value)


# ------------------------------- Catalog -------------------------------

@dataclass
class TrackingInfo:
    batch_number: Optional[str] = None
    supplier_invoice: Optional[str] = None
    purchase_date: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "batchNumber": self.batch_number,
            "supplierInvoice": self.supplier_invoice,
            "purchaseDate": self.purchase_date,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "TrackingInfo":
        return cls(
            batch_number=d.get("batchNumber"),
            supplier_invoice=d.get("supplierInvoice"),
            purchase_date=d.get("purchaseDate"),
        )


@dataclass
class Product:
    id: str
    barcode: str
    machine_type: str
    brand: str
    part_type: str
    part_name: str
    compatible_models: list[str] = field(default_factory=list)
    rack_location: str = ""
    stock_quantity: int = 0
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD
    supplier_name: str = ""
    purchase_price: float = 0.0
    technician_price: float = 0.0
    customer_price: float = 0.0
    images: list[str] = field(default_factory=list)
    is_fast_moving: bool = False
    notes: Optional[str] = None
    last_sold_date: Optional[str] = None
    owner_notes: Optional[str] = None
    tracking_info: Optional[TrackingInfo] = None

    @property
    def is_low_stock(self) -> bool:
        return self.stock_quantity <= self.low_stock_threshold

    def to_dict(self) -> dict:
        d = {
            "id": self.id,
            "barcode": self.barcode,
            "machineType": self.machine_type,
            "brand": self.brand,
            "partType": self.part_type,
            "partName": self.part_name,
            "compatibleModels": list(self.compatible_models),
            "rackLocation": self.rack_location,
            "stockQuantity": self.stock_quantity,
            "lowStockThreshold": self.low_stock_threshold,
            "supplierName": self.supplier_name,
            "purchasePrice": self.purchase_price,
            "technicianPrice": self.technician_price,
            "customerPrice": self.customer_price,
            "images": list(self.images),
            "isFastMoving": self.is_fast_moving,
            "notes": self.notes,
            "lastSoldDate": self.last_sold_date,
            "ownerNotes": self.owner_notes,
        }
        if self.tracking_info is not None:
            d["trackingInfo"] = self.tracking_info.to_dict()
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "Product":
        tracking = d.get("trackingInfo")
        return cls(
            id=str(d["id"]),
            barcode=str(d.get("barcode") or ""),
            machine_type=str(d.get("machineType") or ""),
            brand=str(d.get("brand") or ""),
            part_type=str(d.get("partType") or ""),
            part_name=str(d.get("partName") or ""),
            compatible_models=[str(m) for m in (d.get("compatibleModels") or [])],
            rack_location=str(d.get("rackLocation") or ""),
            stock_quantity=_i(d.get("stockQuantity")),
            low_stock_threshold=_i(d.get("lowStockThreshold"), DEFAULT_LOW_STOCK_THRESHOLD),
            supplier_name=str(d.get("supplierName") or ""),
            purchase_price=_f(d.get("purchasePrice")),
            technician_price=_f(d.get("technicianPrice")),
            customer_price=_f(d.get("customerPrice")),
            images=[str(i) for i in (d.get("images") or [])],
            is_fast_moving=bool(d.get("isFastMoving", False)),
            notes=d.get("notes"),
            last_sold_date=d.get("lastSoldDate"),
            owner_notes=d.get("ownerNotes"),
            tracking_info=TrackingInfo.from_dict(tracking) if isinstance(tracking, dict) else None,
        )


# ------------------------------- Billing -------------------------------

@dataclass(frozen=True)
class CartLine:
    """One cart row. `price` and `total` are negative for returned items."""
    product_id: str
    part_name: str
    quantity: int
    price: float
    total: float

    def to_dict(self) -> dict:
        return {
            "productId": self.product_id,
            "partName": self.part_name,
            "quantity": self.quantity,
            "price": self.price,
            "total": self.total,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "CartLine":
        return cls(
            product_id=str(d.get("productId") or ""),
            part_name=str(d.get("partName") or ""),
            quantity=_i(d.get("quantity")),
            price=_f(d.get("price")),
            total=_f(d.get("total")),
        )


@dataclass(frozen=True)
class SplitPayment:
    method: str
    amount: float

    def to_dict(self) -> dict:
        return {"method": self.method, "amount": self.amount}

    @classmethod
    def from_dict(cls, d: dict) -> "SplitPayment":
        return cls(method=str(d.get("method") or ""), amount=_f(d.get("amount")))


@dataclass(frozen=True)
class Bill:
    id: str
    date: str
    items: tuple[CartLine, ...]
    subtotal: float
    gst: float
    total: float
    type: str
    customer_name: str
    payment_method: str
    payments: tuple[SplitPayment, ...] = ()
    is_paid: bool = True
    customer_mobile: Optional[str] = None
    notes: Optional[str] = None

    @property
    def is_return(self) -> bool:
        return any(line.quantity > 0 and line.price < 0 for line in self.items)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "items": [line.to_dict() for line in self.items],
            "subtotal": self.subtotal,
            "gst": self.gst,
            "total": self.total,
            "type": self.type,
            "customerName": self.customer_name,
            "customerMobile": self.customer_mobile,
            "paymentMethod": self.payment_method,
            "payments": [p.to_dict() for p in self.payments],
            "isPaid": self.is_paid,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Bill":
        return cls(
            id=str(d["id"]),
            date=str(d.get("date") or ""),
            items=tuple(CartLine.from_dict(x) for x in (d.get("items") or [])),
            subtotal=_f(d.get("subtotal")),
            gst=_f(d.get("gst")),
            total=_f(d.get("total")),
            type=str(d.get("type") or "Final"),
            customer_name=str(d.get("customerName") or ""),
            customer_mobile=_opt(d.get("customerMobile")),
            payment_method=str(d.get("paymentMethod") or "Cash"),
            payments=tuple(SplitPayment.from_dict(p) for p in (d.get("payments") or [])),
            is_paid=bool(d.get("isPaid", True)),
            notes=d.get("notes"),
        )


# ------------------------------- Khata -------------------------------

@dataclass
class Technician:
    """
    Balance is not stored: it is opening_balance plus the fold of the
    technician's ledger entries (see modules/khata/trust.py).
    """
    id: str
    name: str
    mobile: str
    company: str = ""
    address: str = ""
    limit: float = DEFAULT_CREDIT_LIMIT
    opening_balance: float = 0.0

    def to_dict(self, *, balance: float, trust_score: int, trust_level: str) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "mobile": self.mobile,
            "company": self.company,
            "address": self.address,
            "limit": self.limit,
            "openingBalance": self.opening_balance,
            "balance": balance,
            "trustScore": trust_score,
            "trustLevel": trust_level,
        }

    @classmethod
    def from_dict(cls, d: dict, ledger_total: float = 0.0) -> "Technician":
        """
        Files from older builds only carry the running `balance`; the
        opening balance is whatever the ledger does not explain.
        """
        if "openingBalance" in d:
            opening = _f(d.get("openingBalance"))
        else:
            opening = round(_f(d.get("balance")) - ledger_total, 2)
        return cls(
            id=str(d["id"]),
            name=str(d.get("name") or ""),
            mobile=str(d.get("mobile") or ""),
            company=str(d.get("company") or ""),
            address=str(d.get("address") or ""),
            limit=_f(d.get("limit"), DEFAULT_CREDIT_LIMIT),
            opening_balance=opening,
        )


@dataclass(frozen=True)
class LedgerEntry:
    id: str
    technician_id: str
    date: str
    description: str
    amount: float
    type: str  # Debit | Credit

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "technicianId": self.technician_id,
            "date": self.date,
            "description": self.description,
            "amount": self.amount,
            "type": self.type,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "LedgerEntry":
        return cls(
            id=str(d["id"]),
            technician_id=str(d.get("technicianId") or ""),
            date=str(d.get("date") or ""),
            description=str(d.get("description") or ""),
            amount=_f(d.get("amount")),
            type=str(d.get("type") or "Debit"),
        )


# ------------------------------- Audit logs -------------------------------

@dataclass(frozen=True)
class StockLog:
    id: str
    date: str
    product_id: str
    product_name: str
    change: int
    reason: str
    new_stock: int

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "productId": self.product_id,
            "productName": self.product_name,
            "change": self.change,
            "reason": self.reason,
            "newStock": self.new_stock,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "StockLog":
        return cls(
            id=str(d["id"]),
            date=str(d.get("date") or ""),
            product_id=str(d.get("productId") or ""),
            product_name=str(d.get("productName") or ""),
            change=_i(d.get("change")),
            reason=str(d.get("reason") or ""),
            new_stock=_i(d.get("newStock")),
        )


@dataclass(frozen=True)
class PriceLog:
    id: str
    date: str
    product_id: str
    product_name: str
    field: str  # Purchase | Technician | Customer
    old_val: float
    new_val: float
    user: str = "Admin"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "productId": self.product_id,
            "productName": self.product_name,
            "field": self.field,
            "oldVal": self.old_val,
            "newVal": self.new_val,
            "user": self.user,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "PriceLog":
        return cls(
            id=str(d["id"]),
            date=str(d.get("date") or ""),
            product_id=str(d.get("productId") or ""),
            product_name=str(d.get("productName") or ""),
            field=str(d.get("field") or ""),
            old_val=_f(d.get("oldVal")),
            new_val=_f(d.get("newVal")),
            user=str(d.get("user") or "Admin"),
        )


@dataclass(frozen=True)
class SecurityLog:
    id: str
    type: str
    details: str
    timestamp: str
    severity: str = "low"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "details": self.details,
            "timestamp": self.timestamp,
            "severity": self.severity,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "SecurityLog":
        return cls(
            id=str(d["id"]),
            type=str(d.get("type") or ""),
            details=str(d.get("details") or ""),
            timestamp=str(d.get("timestamp") or ""),
            severity=str(d.get("severity") or "low"),
        )


__all__ = [
    "TrackingInfo",
    "Product",
    "CartLine",
    "SplitPayment",
    "Bill",
    "Technician",
    "LedgerEntry",
    "StockLog",
    "PriceLog",
    "SecurityLog",
]
