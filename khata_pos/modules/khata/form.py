from __future__ import annotations

from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QLabel,
    QLineEdit,
    QVBoxLayout,
)

from ...constants import DEFAULT_CREDIT_LIMIT
from ...database.errors import ValidationError
from ...utils.validators import looks_like_mobile, non_empty, parse_amount


class TechnicianForm(QDialog):
    """
    New technician form.

    Required fields: name, mobile. Credit limit defaults to 5000 and the
    opening balance to 0 (positive = the technician already owes the shop).

    get_payload() returns the keyword arguments for
    TechniciansRepo.add_technician, or None with the problem shown in
    lbl_error.
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Add Technician")
        self.setModal(True)

        self.name = QLineEdit()
        self.name.setPlaceholderText("e.g. Rajesh Kumar")
        self.company = QLineEdit()
        self.company.setPlaceholderText("e.g. RK Cool Services")
        self.mobile = QLineEdit()
        self.mobile.setPlaceholderText("10 digit mobile")
        self.address = QLineEdit()
        self.address.setPlaceholderText("Area, City")
        self.limit = QLineEdit(f"{DEFAULT_CREDIT_LIMIT:g}")
        self.opening = QLineEdit()
        self.opening.setPlaceholderText("Optional")

        form = QFormLayout()
        form.addRow("Full Name*", self.name)
        form.addRow("Company / Shop", self.company)
        form.addRow("Mobile Number*", self.mobile)
        form.addRow("Address", self.address)
        form.addRow("Credit Limit", self.limit)
        form.addRow("Opening Balance", self.opening)

        root = QVBoxLayout(self)
        root.addLayout(form)
        self.lbl_error = QLabel("")
        self.lbl_error.setStyleSheet("color: #dc2626;")
        root.addWidget(self.lbl_error)

        self.buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        self.buttons.button(QDialogButtonBox.Ok).setText("Add Technician")
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)
        root.addWidget(self.buttons)
        self._payload = None

    def _fail(self, widget, message: str) -> None:
        self.lbl_error.setText(message)
        widget.setFocus()

    def get_payload(self) -> dict | None:
        if not non_empty(self.name.text()):
            self._fail(self.name, "Name is required.")
            return None
        if not looks_like_mobile(self.mobile.text()):
            self._fail(self.mobile, "Enter a valid mobile number.")
            return None
        try:
            limit = parse_amount(self.limit.text() or DEFAULT_CREDIT_LIMIT, "Credit limit")
            opening = parse_amount(self.opening.text() or 0, "Opening balance")
        except ValidationError as e:
            self._fail(self.limit, str(e))
            return None
        if limit < 0:
            self._fail(self.limit, "Credit limit cannot be negative.")
            return None
        return {
            "name": self.name.text().strip(),
            "mobile": self.mobile.text().strip(),
            "company": self.company.text().strip(),
            "address": self.address.text().strip(),
            "limit": limit,
            "opening_balance": opening,
        }

    def accept(self):
        p = self.get_payload()
        if p is None:
            return
        self._payload = p
        super().accept()

    def payload(self):
        return self._payload
