from __future__ import annotations

from PySide6.QtWidgets import (
    QButtonGroup,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QRadioButton,
    QVBoxLayout,
)

from ...database.errors import ValidationError
from ...utils.validators import parse_positive_amount
from .trust import CREDIT, DEBIT, default_description


class LedgerEntryDialog(QDialog):
    """
    Manual Khata entry for one technician.

    Debit  = a charge (the technician owes more).
    Credit = a payment received.
    """

    def __init__(self, technician_name: str, parent=None):
        super().__init__(parent)
        self.setWindowTitle(f"New Entry: {technician_name}")
        self.setModal(True)

        self.rb_debit = QRadioButton("Debit (-)")
        self.rb_credit = QRadioButton("Credit (+)")
        self.rb_debit.setChecked(True)
        self._kind = QButtonGroup(self)
        self._kind.addButton(self.rb_debit)
        self._kind.addButton(self.rb_credit)
        kind_row = QHBoxLayout()
        kind_row.addWidget(self.rb_debit)
        kind_row.addWidget(self.rb_credit)
        kind_row.addStretch(1)

        self.amount = QLineEdit()
        self.amount.setPlaceholderText("0.00")
        self.description = QLineEdit()
        self.description.setPlaceholderText("e.g. Received Cash Payment")

        form = QFormLayout()
        form.addRow("Type", kind_row)
        form.addRow("Amount*", self.amount)
        form.addRow("Description", self.description)

        root = QVBoxLayout(self)
        root.addLayout(form)
        self.lbl_error = QLabel("")
        self.lbl_error.setStyleSheet("color: #dc2626;")
        root.addWidget(self.lbl_error)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.button(QDialogButtonBox.Ok).setText("Save Transaction")
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        root.addWidget(buttons)
        self._payload = None

        self.rb_debit.toggled.connect(self._update_placeholder)
        self._update_placeholder()

    def kind(self) -> str:
        return DEBIT if self.rb_debit.isChecked() else CREDIT

    def _update_placeholder(self, *_):
        self.description.setPlaceholderText(default_description(self.kind()))

    def get_payload(self) -> dict | None:
        try:
            amount = parse_positive_amount(self.amount.text())
        except ValidationError as e:
            self.lbl_error.setText(str(e))
            self.amount.setFocus()
            return None
        return {
            "amount": amount,
            "kind": self.kind(),
            "description": self.description.text().strip() or None,
        }

    def accept(self):
        p = self.get_payload()
        if p is None:
            return
        self._payload = p
        super().accept()

    def payload(self):
        return self._payload
