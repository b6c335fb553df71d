from __future__ import annotations

from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QDoubleSpinBox,
    QFormLayout,
    QLabel,
    QVBoxLayout,
)

from ...constants import PAYMENT_METHODS, SPLIT_TOLERANCE
from ...utils.helpers import fmt_rupees


class SplitPaymentDialog(QDialog):
    """
    Allocate the bill total across Cash, Online and Khata. OK stays
    disabled until the allocations add up to the total (within ₹1).
    Amounts may be negative for return bills.
    """

    def __init__(self, total: float, splits: dict[str, float], parent=None):
        super().__init__(parent)
        self.setWindowTitle("Split Payment")
        self.setModal(True)
        self._total = round(float(total), 2)

        self.spins: dict[str, QDoubleSpinBox] = {}
        form = QFormLayout()
        form.addRow("Bill Total", QLabel(fmt_rupees(self._total)))
        for method in PAYMENT_METHODS:
            sb = QDoubleSpinBox()
            sb.setDecimals(2)
            sb.setRange(-10_000_000.0, 10_000_000.0)
            sb.setValue(float(splits.get(method, 0.0)))
            sb.valueChanged.connect(self._update)
            self.spins[method] = sb
            form.addRow(method, sb)
        self.lbl_remaining = QLabel()
        form.addRow("Remaining", self.lbl_remaining)

        root = QVBoxLayout(self)
        root.addLayout(form)
        self.buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)
        root.addWidget(self.buttons)
        self._update()

    def remaining(self) -> float:
        return round(self._total - sum(sb.value() for sb in self.spins.values()), 2)

    def _update(self) -> None:
        rem = self.remaining()
        ok = abs(rem) <= SPLIT_TOLERANCE
        self.lbl_remaining.setText(fmt_rupees(rem))
        self.lbl_remaining.setStyleSheet("" if ok else "color: #dc2626; font-weight: bold;")
        self.buttons.button(QDialogButtonBox.Ok).setEnabled(ok)

    def get_splits(self) -> dict[str, float]:
        return {m: round(sb.value(), 2) for m, sb in self.spins.items()}
