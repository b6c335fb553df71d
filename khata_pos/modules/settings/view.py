from PySide6.QtWidgets import (
    QCheckBox,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from ...widgets.table_view import TableView


class SettingsView(QWidget):
    """
    Settings:
      - General: admin PIN, technician code, No Bill No Exit
      - Security Logs: voids, price checks, stock edits, safe mode events
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        root = QVBoxLayout(self)
        self.tabs = QTabWidget()
        root.addWidget(self.tabs)

        general = QWidget()
        g = QVBoxLayout(general)

        pin_box = QGroupBox("Admin PIN")
        pf = QFormLayout(pin_box)
        self.current_pin = QLineEdit()
        self.new_pin = QLineEdit()
        self.confirm_pin = QLineEdit()
        for w in (self.current_pin, self.new_pin, self.confirm_pin):
            w.setEchoMode(QLineEdit.Password)
        self.btn_change_pin = QPushButton("Change PIN")
        pf.addRow("Current PIN", self.current_pin)
        pf.addRow("New PIN", self.new_pin)
        pf.addRow("Confirm PIN", self.confirm_pin)
        pf.addRow("", self.btn_change_pin)
        g.addWidget(pin_box)

        code_box = QGroupBox("Technician Code")
        cl = QHBoxLayout(code_box)
        self.tech_code = QLineEdit()
        self.tech_code.setPlaceholderText("e.g. TECH")
        self.btn_save_code = QPushButton("Save Code")
        cl.addWidget(QLabel("Code:"))
        cl.addWidget(self.tech_code, 1)
        cl.addWidget(self.btn_save_code)
        g.addWidget(code_box)

        policy_box = QGroupBox("Shop Policy")
        pl = QVBoxLayout(policy_box)
        self.chk_no_bill_no_exit = QCheckBox("No Bill No Exit (warn before closing with items in the cart)")
        pl.addWidget(self.chk_no_bill_no_exit)
        g.addWidget(policy_box)
        g.addStretch(1)
        self.tabs.addTab(general, "General")

        logs = QWidget()
        lv = QVBoxLayout(logs)
        self.lbl_alerts = QLabel("")
        lv.addWidget(self.lbl_alerts)
        self.security_logs = TableView()
        lv.addWidget(self.security_logs, 1)
        self.tabs.addTab(logs, "Security Logs")
