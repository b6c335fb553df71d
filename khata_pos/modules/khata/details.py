from PySide6.QtWidgets import QFormLayout, QGroupBox, QLabel, QVBoxLayout, QWidget

from ...constants import TRUST_AVERAGE, TRUST_RISKY
from ...database.repositories.technicians_repo import TechnicianSummary
from ...utils.helpers import fmt_rupees
from .trust import balance_label, remaining_limit

_TRUST_STYLE = {
    TRUST_RISKY: "color: #dc2626; font-weight: bold;",
    TRUST_AVERAGE: "color: #ca8a04; font-weight: bold;",
}
_RELIABLE_STYLE = "color: #16a34a; font-weight: bold;"


class TechnicianDetails(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)

        # --- Profile ---
        box_basic = QGroupBox("Technician")
        f_basic = QFormLayout(box_basic)
        self.lab_id = QLabel("-")
        self.lab_name = QLabel("-")
        self.lab_company = QLabel("-")
        self.lab_mobile = QLabel("-")
        self.lab_address = QLabel("-")
        self.lab_address.setWordWrap(True)
        f_basic.addRow("Code:", self.lab_id)
        f_basic.addRow("Name:", self.lab_name)
        f_basic.addRow("Company:", self.lab_company)
        f_basic.addRow("Mobile:", self.lab_mobile)
        f_basic.addRow("Address:", self.lab_address)

        # --- Khata snapshot ---
        box_fin = QGroupBox("Khata")
        f_fin = QFormLayout(box_fin)
        self.lab_balance_caption = QLabel("Net Balance:")
        self.lab_balance = QLabel("-")
        self.lab_limit = QLabel("-")
        self.lab_remaining = QLabel("-")
        self.lab_trust = QLabel("-")
        f_fin.addRow(self.lab_balance_caption, self.lab_balance)
        f_fin.addRow("Credit Limit:", self.lab_limit)
        f_fin.addRow("Remaining Limit:", self.lab_remaining)
        f_fin.addRow("Trust:", self.lab_trust)

        root = QVBoxLayout(self)
        root.addWidget(box_basic)
        root.addWidget(box_fin)
        root.addStretch(1)

    def clear(self):
        for lab in (
            self.lab_id, self.lab_name, self.lab_company, self.lab_mobile, self.lab_address,
            self.lab_balance, self.lab_limit, self.lab_remaining, self.lab_trust,
        ):
            lab.setText("-")
        self.lab_balance_caption.setText("Net Balance:")
        self.lab_trust.setStyleSheet("")

    def set_data(self, s: TechnicianSummary | None):
        if s is None:
            self.clear()
            return
        t = s.technician
        self.lab_id.setText(f"TECH-{t.id}")
        self.lab_name.setText(t.name)
        self.lab_company.setText(t.company or "-")
        self.lab_mobile.setText(t.mobile)
        self.lab_address.setText(t.address or "-")

        self.lab_balance_caption.setText(f"{balance_label(s.balance)}:")
        self.lab_balance.setText(fmt_rupees(abs(s.balance)))
        self.lab_balance.setStyleSheet("color: #16a34a;" if s.balance >= 0 else "color: #dc2626;")
        self.lab_limit.setText(fmt_rupees(t.limit))
        self.lab_remaining.setText(fmt_rupees(remaining_limit(s.balance, t.limit)))
        self.lab_trust.setText(f"{s.trust_score}% {s.trust_level}")
        self.lab_trust.setStyleSheet(_TRUST_STYLE.get(s.trust_level, _RELIABLE_STYLE))
