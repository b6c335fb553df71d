from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtWidgets import (
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
)

from ...constants import STOCK_REASONS
from ...database.errors import AuthorizationError
from ...database.models import Product
from ...utils.helpers import fmt_rupees
from .price_revealer import MASK, PriceReveal

# Manual edits default to an audit correction
_REASON_ORDER = ("Audit Correction",) + tuple(r for r in STOCK_REASONS if r != "Audit Correction")


class StockReasonDialog(QDialog):
    """Asked when a product edit changes the stock quantity."""

    def __init__(self, product_name: str, change: int, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Stock Adjustment")
        self.setModal(True)

        msg = QLabel(
            f"Stock of <b>{product_name}</b> changed by <b>{change:+d}</b>.<br/>"
            "Please select a mandatory reason for this adjustment."
        )
        msg.setWordWrap(True)
        self.reason = QComboBox()
        self.reason.addItems(_REASON_ORDER)

        root = QVBoxLayout(self)
        root.addWidget(msg)
        form = QFormLayout()
        form.addRow("Reason Code", self.reason)
        root.addLayout(form)
        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.button(QDialogButtonBox.Ok).setText("Confirm Adjustment")
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        root.addWidget(buttons)

    def selected_reason(self) -> str:
        return self.reason.currentText()


class PriceRevealDialog(QDialog):
    """
    Shows the three price tiers masked; entering a code reveals the tiers
    its holder may see.
    """

    def __init__(
        self,
        product: Product,
        reveal: Callable[[Product, str], PriceReveal],
        parent=None,
    ):
        super().__init__(parent)
        self.setWindowTitle(f"Prices: {product.part_name}")
        self.setModal(True)
        self._product = product
        self._reveal = reveal
        self.result_reveal: Optional[PriceReveal] = None

        self.lbl_customer = QLabel(MASK)
        self.lbl_technician = QLabel(MASK)
        self.lbl_purchase = QLabel(MASK)
        form = QFormLayout()
        form.addRow("Customer Price", self.lbl_customer)
        form.addRow("Technician Price", self.lbl_technician)
        form.addRow("Purchase Price", self.lbl_purchase)

        self.code = QLineEdit()
        self.code.setEchoMode(QLineEdit.Password)
        self.code.setPlaceholderText("Enter code or PIN")
        self.btn_reveal = QPushButton("Reveal")
        row = QHBoxLayout()
        row.addWidget(self.code, 1)
        row.addWidget(self.btn_reveal)
        self.lbl_error = QLabel("")
        self.lbl_error.setStyleSheet("color: #dc2626;")

        root = QVBoxLayout(self)
        root.addLayout(form)
        root.addLayout(row)
        root.addWidget(self.lbl_error)
        close = QDialogButtonBox(QDialogButtonBox.Close)
        close.rejected.connect(self.reject)
        root.addWidget(close)

        self.btn_reveal.clicked.connect(self.try_reveal)
        self.code.returnPressed.connect(self.try_reveal)

    def try_reveal(self) -> bool:
        try:
            r = self._reveal(self._product, self.code.text())
        except AuthorizationError as e:
            self.lbl_error.setText(str(e))
            return False
        self.lbl_error.clear()
        self.result_reveal = r
        for lbl, value in (
            (self.lbl_customer, r.customer_price),
            (self.lbl_technician, r.technician_price),
            (self.lbl_purchase, r.purchase_price),
        ):
            lbl.setText(MASK if value is None else fmt_rupees(value))
        self.code.clear()
        return True
