from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from ...widgets.table_view import TableView
from .details import TechnicianDetails


class KhataView(QWidget):
    """
    Khata book:
      - Toolbar: New Technician, New Entry + search + outstanding total
      - Split: technicians table (left) | details + transaction history (right)
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        root = QVBoxLayout(self)

        bar = QHBoxLayout()
        self.btn_add = QPushButton("New Technician")
        self.btn_entry = QPushButton("New Entry")
        bar.addWidget(self.btn_add)
        bar.addWidget(self.btn_entry)
        bar.addStretch(1)
        bar.addWidget(QLabel("Search:"))
        self.search = QLineEdit()
        self.search.setPlaceholderText("Search technician (name or mobile)…")
        bar.addWidget(self.search, 2)
        root.addLayout(bar)

        split = QSplitter(Qt.Horizontal)
        self.table = TableView(sortable=False)
        split.addWidget(self.table)

        right = QWidget()
        rv = QVBoxLayout(right)
        rv.setContentsMargins(0, 0, 0, 0)
        self.details = TechnicianDetails()
        rv.addWidget(self.details)
        rv.addWidget(QLabel("Transaction History"))
        self.history = TableView(sortable=False)
        rv.addWidget(self.history, 1)
        self.lbl_empty = QLabel("No transactions yet")
        self.lbl_empty.setAlignment(Qt.AlignCenter)
        self.lbl_empty.setStyleSheet("color: palette(mid);")
        rv.addWidget(self.lbl_empty)
        split.addWidget(right)

        split.setStretchFactor(0, 3)
        split.setStretchFactor(1, 2)
        root.addWidget(split, 1)

        self.lbl_total = QLabel("")
        self.lbl_total.setAlignment(Qt.AlignRight)
        root.addWidget(self.lbl_total)
