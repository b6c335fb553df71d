from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from ...constants import MACHINE_TYPES
from ...widgets.table_view import TableView


class InventoryView(QWidget):
    """
    Inventory view:
      - Toolbar: Add, Edit, Prices, Search by Photo
      - Search box + machine filter + 'Low stock only'
      - Tabs: Products | Stock Log | Price Log
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        root = QVBoxLayout(self)

        bar = QHBoxLayout()
        self.btn_add = QPushButton("Add")
        self.btn_edit = QPushButton("Edit")
        self.btn_prices = QPushButton("Prices…")
        self.btn_photo = QPushButton("Search by Photo…")
        for b in (self.btn_add, self.btn_edit, self.btn_prices, self.btn_photo):
            bar.addWidget(b)
        bar.addStretch(1)
        bar.addWidget(QLabel("Search:"))
        self.search = QLineEdit()
        self.search.setPlaceholderText("Part name, barcode or model (scanners type here)…")
        bar.addWidget(self.search, 2)
        self.cmb_machine = QComboBox()
        self.cmb_machine.addItems(["All", *MACHINE_TYPES])
        bar.addWidget(self.cmb_machine)
        self.chk_low = QCheckBox("Low stock only")
        bar.addWidget(self.chk_low)
        root.addLayout(bar)

        self.lbl_status = QLabel("")
        root.addWidget(self.lbl_status)

        self.tabs = QTabWidget()
        self.table = TableView()
        self.stock_log = TableView()
        self.price_log = TableView()
        self.tabs.addTab(self.table, "Products")
        self.tabs.addTab(self.stock_log, "Stock Log")
        self.tabs.addTab(self.price_log, "Price Log")
        root.addWidget(self.tabs, 1)
