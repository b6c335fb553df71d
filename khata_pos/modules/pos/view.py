from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QButtonGroup,
    QCheckBox,
    QComboBox,
    QFormLayout,
    QFrame,
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QRadioButton,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from ...constants import BILL_TYPES, MACHINE_TYPES, PAYMENT_METHODS, RETURN_REASONS
from ...widgets.table_view import TableView


class PosView(QWidget):
    """
    Billing screen:
      - Left: search + machine filter, catalog table, scanner input
      - Right: cart, code box, customer/technician, payment, totals, actions
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        root = QVBoxLayout(self)
        split = QSplitter(Qt.Horizontal)
        split.addWidget(self._build_catalog())
        split.addWidget(self._build_cart())
        split.setStretchFactor(0, 3)
        split.setStretchFactor(1, 2)
        root.addWidget(split, 1)

    # ---- Left: catalog -----------------------------------------------------

    def _build_catalog(self) -> QWidget:
        w = QWidget()
        v = QVBoxLayout(w)
        v.setContentsMargins(0, 0, 0, 0)

        bar = QHBoxLayout()
        self.search = QLineEdit()
        self.search.setPlaceholderText("Search part name, barcode or model…")
        self.cmb_machine = QComboBox()
        self.cmb_machine.addItems(["All", *MACHINE_TYPES])
        bar.addWidget(self.search, 2)
        bar.addWidget(self.cmb_machine)
        v.addLayout(bar)

        self.catalog = TableView()
        v.addWidget(self.catalog, 1)

        scan = QHBoxLayout()
        self.btn_scanner = QPushButton("Start Scanner")
        self.btn_scanner.setCheckable(True)
        self.scan_input = QLineEdit()
        self.scan_input.setPlaceholderText("Scan barcode here (or type + Enter)")
        self.scan_input.setEnabled(False)
        self.lbl_scan = QLabel("")
        scan.addWidget(self.btn_scanner)
        scan.addWidget(self.scan_input, 1)
        scan.addWidget(self.lbl_scan)
        v.addLayout(scan)

        self.btn_add = QPushButton("Add to Cart")
        v.addWidget(self.btn_add, alignment=Qt.AlignRight)
        return w

    # ---- Right: cart + checkout ------------------------------------------

    def _build_cart(self) -> QWidget:
        w = QWidget()
        v = QVBoxLayout(w)
        v.setContentsMargins(0, 0, 0, 0)

        mode = QHBoxLayout()
        self.chk_return = QCheckBox("Return Mode")
        self.cmb_return_reason = QComboBox()
        self.cmb_return_reason.addItems(RETURN_REASONS)
        self.cmb_return_reason.setVisible(False)
        self.cmb_bill_type = QComboBox()
        self.cmb_bill_type.addItems(BILL_TYPES)
        mode.addWidget(self.chk_return)
        mode.addWidget(self.cmb_return_reason, 1)
        mode.addStretch(1)
        mode.addWidget(QLabel("Bill:"))
        mode.addWidget(self.cmb_bill_type)
        v.addLayout(mode)

        self.cart = TableView(sortable=False)
        v.addWidget(self.cart, 1)

        row = QHBoxLayout()
        self.btn_remove = QPushButton("Remove Item")
        self.lbl_items = QLabel("0 items")
        row.addWidget(self.btn_remove)
        row.addStretch(1)
        row.addWidget(self.lbl_items)
        v.addLayout(row)

        # Code box
        codes = QHBoxLayout()
        self.code_input = QLineEdit()
        self.code_input.setPlaceholderText("Code (technician / promo / A)")
        self.btn_apply_code = QPushButton("Apply")
        self.btn_remove_code = QPushButton("Remove")
        self.lbl_code = QLabel("")
        codes.addWidget(self.code_input, 1)
        codes.addWidget(self.btn_apply_code)
        codes.addWidget(self.btn_remove_code)
        v.addLayout(codes)
        v.addWidget(self.lbl_code)

        self.manual_box = QFrame()
        mform = QFormLayout(self.manual_box)
        mform.setContentsMargins(0, 0, 0, 0)
        self.manual_total = QLineEdit()
        self.manual_total.setPlaceholderText("Final amount")
        self.manual_desc = QLineEdit()
        self.manual_desc.setPlaceholderText("Reason for adjustment (optional)")
        mform.addRow("Manual Total", self.manual_total)
        mform.addRow("Adjustment", self.manual_desc)
        self.manual_box.setVisible(False)
        v.addWidget(self.manual_box)

        # Customer
        cust = QGroupBox("Customer")
        cform = QFormLayout(cust)
        self.cmb_technician = QComboBox()
        self.customer_name = QLineEdit()
        self.customer_name.setPlaceholderText("Walk-in Customer")
        self.customer_mobile = QLineEdit()
        cform.addRow("Technician", self.cmb_technician)
        cform.addRow("Name", self.customer_name)
        cform.addRow("Mobile", self.customer_mobile)
        v.addWidget(cust)

        # Payment
        pay = QGroupBox("Payment")
        pl = QHBoxLayout(pay)
        self.rb_single = QRadioButton("Single")
        self.rb_split = QRadioButton("Split")
        self.rb_single.setChecked(True)
        self.pay_mode = QButtonGroup(self)
        self.pay_mode.addButton(self.rb_single)
        self.pay_mode.addButton(self.rb_split)
        self.cmb_method = QComboBox()
        self.cmb_method.addItems(PAYMENT_METHODS)
        self.btn_split = QPushButton("Edit Split…")
        self.btn_split.setEnabled(False)
        self.chk_gst = QCheckBox("GST 18%")
        pl.addWidget(self.rb_single)
        pl.addWidget(self.cmb_method)
        pl.addWidget(self.rb_split)
        pl.addWidget(self.btn_split)
        pl.addStretch(1)
        pl.addWidget(self.chk_gst)
        v.addWidget(pay)

        # Totals
        totals = QGridLayout()
        self.lbl_subtotal = QLabel()
        self.lbl_discount = QLabel()
        self.lbl_tax = QLabel()
        self.lbl_total = QLabel()
        f = self.lbl_total.font()
        f.setPointSize(f.pointSize() + 6)
        f.setBold(True)
        self.lbl_total.setFont(f)
        for i, (caption, lbl) in enumerate([
            ("Subtotal", self.lbl_subtotal),
            ("Discount", self.lbl_discount),
            ("GST", self.lbl_tax),
            ("Total", self.lbl_total),
        ]):
            totals.addWidget(QLabel(caption), i, 0)
            lbl.setAlignment(Qt.AlignRight | Qt.AlignVCenter)
            totals.addWidget(lbl, i, 1)
        v.addLayout(totals)

        actions = QHBoxLayout()
        self.btn_clear = QPushButton("Clear")
        self.btn_print = QPushButton("Print Last Bill")
        self.btn_share = QPushButton("Share Last Bill")
        self.btn_checkout = QPushButton("Confirm Bill")
        self.btn_checkout.setDefault(True)
        self.btn_print.setEnabled(False)
        self.btn_share.setEnabled(False)
        actions.addWidget(self.btn_clear)
        actions.addWidget(self.btn_print)
        actions.addWidget(self.btn_share)
        actions.addStretch(1)
        actions.addWidget(self.btn_checkout)
        v.addLayout(actions)
        return w
