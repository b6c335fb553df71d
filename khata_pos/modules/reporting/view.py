from PySide6.QtCore import QDate, Qt
from PySide6.QtWidgets import (
    QComboBox,
    QDateEdit,
    QFormLayout,
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSplitter,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from ...widgets.table_view import TableView

RANGE_CHOICES = [("Today", "today"), ("Custom Range", "custom"), ("All Time", "all")]


def _date_edit() -> QDateEdit:
    d = QDateEdit()
    d.setCalendarPopup(True)
    d.setDisplayFormat("yyyy-MM-dd")
    d.setDate(QDate.currentDate())
    return d


class ReportsView(QWidget):
    """
    Reports:
      - Range bar: Today | Custom Range (from/to) | All Time + exports
      - Summary numbers for the range
      - Tabs: Bills (register + selected bill) | Dead Stock
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        root = QVBoxLayout(self)

        bar = QHBoxLayout()
        bar.addWidget(QLabel("Range:"))
        self.cmb_range = QComboBox()
        for text, key in RANGE_CHOICES:
            self.cmb_range.addItem(text, key)
        bar.addWidget(self.cmb_range)
        self.date_from = _date_edit()
        self.date_to = _date_edit()
        bar.addWidget(QLabel("From"))
        bar.addWidget(self.date_from)
        bar.addWidget(QLabel("To"))
        bar.addWidget(self.date_to)
        self.btn_apply = QPushButton("Apply")
        bar.addWidget(self.btn_apply)
        bar.addStretch(1)
        self.btn_csv = QPushButton("Export CSV…")
        self.btn_report_pdf = QPushButton("Summary PDF…")
        bar.addWidget(self.btn_csv)
        bar.addWidget(self.btn_report_pdf)
        root.addLayout(bar)

        # Summary
        summary = QGridLayout()
        self.lbl_sales = QLabel("-")
        self.lbl_items = QLabel("-")
        self.lbl_stock = QLabel("-")
        self.lbl_khata = QLabel("-")
        for col, (caption, lbl) in enumerate([
            ("Total Sales", self.lbl_sales),
            ("Items Sold", self.lbl_items),
            ("Stock Value", self.lbl_stock),
            ("Khata Outstanding", self.lbl_khata),
        ]):
            cap = QLabel(caption)
            cap.setStyleSheet("color: palette(mid);")
            f = lbl.font()
            f.setPointSize(f.pointSize() + 4)
            f.setBold(True)
            lbl.setFont(f)
            summary.addWidget(cap, 0, col)
            summary.addWidget(lbl, 1, col)
        root.addLayout(summary)

        self.tabs = QTabWidget()

        bills = QSplitter(Qt.Horizontal)
        self.bills = TableView()
        bills.addWidget(self.bills)

        detail = QGroupBox("Bill")
        dv = QVBoxLayout(detail)
        head = QFormLayout()
        self.lab_bill_id = QLabel("-")
        self.lab_customer = QLabel("-")
        self.lab_payment = QLabel("-")
        self.lab_totals = QLabel("-")
        self.lab_totals.setWordWrap(True)
        head.addRow("Bill No:", self.lab_bill_id)
        head.addRow("Customer:", self.lab_customer)
        head.addRow("Payment:", self.lab_payment)
        head.addRow("Totals:", self.lab_totals)
        dv.addLayout(head)
        self.items = TableView(sortable=False)
        dv.addWidget(self.items, 1)
        actions = QHBoxLayout()
        self.btn_bill_pdf = QPushButton("Download PDF…")
        self.btn_share = QPushButton("Share")
        self.btn_bill_pdf.setEnabled(False)
        self.btn_share.setEnabled(False)
        actions.addStretch(1)
        actions.addWidget(self.btn_bill_pdf)
        actions.addWidget(self.btn_share)
        dv.addLayout(actions)
        bills.addWidget(detail)
        bills.setStretchFactor(0, 3)
        bills.setStretchFactor(1, 2)
        self.tabs.addTab(bills, "Bills")

        self.dead_stock = TableView()
        self.tabs.addTab(self.dead_stock, "Dead Stock")

        root.addWidget(self.tabs, 1)
        self.set_custom_enabled(False)

    def set_custom_enabled(self, on: bool) -> None:
        self.date_from.setEnabled(on)
        self.date_to.setEnabled(on)
        self.btn_apply.setEnabled(on)
