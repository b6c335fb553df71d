from __future__ import annotations

from dataclasses import replace
from typing import Optional

from PySide6.QtCore import QDate
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDateEdit,
    QDialog,
    QDialogButtonBox,
    QDoubleSpinBox,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPlainTextEdit,
    QSpinBox,
    QVBoxLayout,
)

from ...constants import DEFAULT_LOW_STOCK_THRESHOLD, MACHINE_TYPES
from ...database.models import Product, TrackingInfo
from ...utils.validators import non_empty


def _money_spin() -> QDoubleSpinBox:
    sb = QDoubleSpinBox()
    sb.setDecimals(2)
    sb.setRange(0.0, 10_000_000.0)
    sb.setPrefix("₹ ")
    return sb


class ProductForm(QDialog):
    """
    Product create/edit form.

    Args:
        parent: Qt parent
        initial: the product being edited, or None for a new one. Its id,
                 images and last sale date are carried over unchanged.

    get_payload() returns the edited Product, or None (and focuses the
    offending field) when a required field is empty.
    """

    def __init__(self, parent=None, initial: Optional[Product] = None):
        super().__init__(parent)
        self.setWindowTitle("Edit Product" if initial else "Add Product")
        self.setModal(True)
        self._initial = initial

        self.machine_type = QComboBox()
        self.machine_type.addItems(MACHINE_TYPES)
        self.brand = QLineEdit()
        self.part_type = QLineEdit()
        self.part_name = QLineEdit()
        self.barcode = QLineEdit()
        self.barcode.setPlaceholderText("Leave empty to generate")
        self.models = QLineEdit()
        self.models.setPlaceholderText("Comma separated, e.g. LS-Q18, LS-Q24")
        self.rack = QLineEdit()
        self.stock = QSpinBox()
        self.stock.setRange(0, 1_000_000)
        self.threshold = QSpinBox()
        self.threshold.setRange(0, 1_000_000)
        self.threshold.setValue(DEFAULT_LOW_STOCK_THRESHOLD)
        self.supplier = QLineEdit()
        self.purchase_price = _money_spin()
        self.technician_price = _money_spin()
        self.customer_price = _money_spin()
        self.fast_moving = QCheckBox("Fast moving")
        self.notes = QPlainTextEdit()
        self.notes.setFixedHeight(54)
        self.owner_notes = QPlainTextEdit()
        self.owner_notes.setFixedHeight(54)

        self.batch = QLineEdit()
        self.invoice = QLineEdit()
        self.purchase_date = QDateEdit()
        self.purchase_date.setCalendarPopup(True)
        self.purchase_date.setDisplayFormat("yyyy-MM-dd")
        self.purchase_date.setDate(QDate.currentDate())
        self.has_purchase_date = QCheckBox("Set")

        form = QFormLayout()
        form.addRow("Machine Type*", self.machine_type)
        form.addRow("Brand*", self.brand)
        form.addRow("Part Type*", self.part_type)
        form.addRow("Part Name*", self.part_name)
        form.addRow("Barcode", self.barcode)
        form.addRow("Compatible Models", self.models)
        form.addRow("Rack Location", self.rack)
        form.addRow("Stock Quantity", self.stock)
        form.addRow("Low Stock Alert At", self.threshold)
        form.addRow("Supplier", self.supplier)
        form.addRow("Purchase Price", self.purchase_price)
        form.addRow("Technician Price", self.technician_price)
        form.addRow("Customer Price", self.customer_price)
        form.addRow("", self.fast_moving)
        form.addRow("Notes", self.notes)
        form.addRow("Owner Notes", self.owner_notes)

        tracking = QGroupBox("Tracking")
        tform = QFormLayout(tracking)
        tform.addRow("Batch Number", self.batch)
        tform.addRow("Supplier Invoice", self.invoice)
        date_row = QHBoxLayout()
        date_row.addWidget(self.purchase_date, 1)
        date_row.addWidget(self.has_purchase_date)
        tform.addRow("Purchase Date", date_row)

        root = QVBoxLayout(self)
        root.addLayout(form)
        root.addWidget(tracking)
        self.lbl_error = QLabel("")
        self.lbl_error.setStyleSheet("color: #dc2626;")
        root.addWidget(self.lbl_error)

        self.buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)
        root.addWidget(self.buttons)
        self._payload = None

        if initial is not None:
            self._load(initial)

    def _load(self, p: Product) -> None:
        idx = self.machine_type.findText(p.machine_type)
        if idx >= 0:
            self.machine_type.setCurrentIndex(idx)
        self.brand.setText(p.brand)
        self.part_type.setText(p.part_type)
        self.part_name.setText(p.part_name)
        self.barcode.setText(p.barcode)
        self.models.setText(", ".join(p.compatible_models))
        self.rack.setText(p.rack_location)
        self.stock.setValue(p.stock_quantity)
        self.threshold.setValue(p.low_stock_threshold)
        self.supplier.setText(p.supplier_name)
        self.purchase_price.setValue(p.purchase_price)
        self.technician_price.setValue(p.technician_price)
        self.customer_price.setValue(p.customer_price)
        self.fast_moving.setChecked(p.is_fast_moving)
        self.notes.setPlainText(p.notes or "")
        self.owner_notes.setPlainText(p.owner_notes or "")
        t = p.tracking_info
        if t is not None:
            self.batch.setText(t.batch_number or "")
            self.invoice.setText(t.supplier_invoice or "")
            if t.purchase_date:
                d = QDate.fromString(t.purchase_date[:10], "yyyy-MM-dd")
                if d.isValid():
                    self.purchase_date.setDate(d)
                    self.has_purchase_date.setChecked(True)

    def _tracking(self) -> Optional[TrackingInfo]:
        batch = self.batch.text().strip() or None
        invoice = self.invoice.text().strip() or None
        when = self.purchase_date.date().toString("yyyy-MM-dd") if self.has_purchase_date.isChecked() else None
        if not (batch or invoice or when):
            return None
        return TrackingInfo(batch_number=batch, supplier_invoice=invoice, purchase_date=when)

    def get_payload(self) -> Product | None:
        for widget, label in (
            (self.brand, "Brand"),
            (self.part_type, "Part type"),
            (self.part_name, "Part name"),
        ):
            if not non_empty(widget.text()):
                self.lbl_error.setText(f"{label} is required.")
                widget.setFocus()
                return None

        fields = dict(
            barcode=self.barcode.text().strip(),
            machine_type=self.machine_type.currentText(),
            brand=self.brand.text().strip(),
            part_type=self.part_type.text().strip(),
            part_name=self.part_name.text().strip(),
            compatible_models=[m.strip() for m in self.models.text().split(",") if m.strip()],
            rack_location=self.rack.text().strip(),
            stock_quantity=self.stock.value(),
            low_stock_threshold=self.threshold.value(),
            supplier_name=self.supplier.text().strip(),
            purchase_price=round(self.purchase_price.value(), 2),
            technician_price=round(self.technician_price.value(), 2),
            customer_price=round(self.customer_price.value(), 2),
            is_fast_moving=self.fast_moving.isChecked(),
            notes=self.notes.toPlainText().strip() or None,
            owner_notes=self.owner_notes.toPlainText().strip() or None,
            tracking_info=self._tracking(),
        )
        if self._initial is not None:
            return replace(self._initial, **fields)
        return Product(id="", **fields)

    def accept(self):
        p = self.get_payload()
        if p is None:
            return
        self._payload = p
        super().accept()

    def payload(self):
        return self._payload
