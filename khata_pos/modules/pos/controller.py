from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from PySide6.QtCore import QTimer, Signal
from PySide6.QtGui import QGuiApplication
from PySide6.QtWidgets import QFileDialog, QWidget

from ..base_module import BaseModule
from ...app_context import AppContext
from ...constants import SCAN_POLL_INTERVAL_MS, SPLIT, SPLIT_TOLERANCE
from ...database.errors import (
    AuthorizationError,
    DomainError,
    InvalidCodeError,
    NotFoundError,
    OutOfStockError,
)
from ...database.models import Bill, Product
from ...database.repositories.technicians_repo import TechniciansRepo
from ...utils.barcode import ScanDebouncer, ScannerUnavailable
from ...utils.helpers import fmt_rupees
from ...utils.ui_helpers import ask_secret, error, info
from ..reporting.exports import share_text
from ..reporting.pdf import default_bill_filename, export_bill_pdf
from .codes import MANUAL
from .model import CartTableModel, CatalogTableModel
from .payments import SINGLE
from .split_dialog import SplitPaymentDialog
from .view import PosView

_log = logging.getLogger(__name__)

SecretPrompt = Callable[[str, str], Optional[str]]


class PosController(BaseModule):
    """
    Billing screen. Every user action is forwarded to the shared PosSession;
    this class only keeps the widgets in step with it.

    Signals:
      - bill_completed(bill_id)
      - cart_changed(item_count): for the status bar
    """

    bill_completed = Signal(str)
    cart_changed = Signal(int)

    def __init__(self, ctx: AppContext, prompt_secret: Optional[SecretPrompt] = None):
        super().__init__()
        self.ctx = ctx
        self.session = ctx.session
        self.technicians = TechniciansRepo(ctx.store)
        self.view = PosView()
        self._prompt_secret = prompt_secret or (lambda title, label: ask_secret(self.view, title, label))

        self.last_bill: Optional[Bill] = None
        self._source = None
        self._debouncer = ScanDebouncer()
        self._timer = QTimer(self)
        self._timer.setInterval(SCAN_POLL_INTERVAL_MS)
        self._timer.timeout.connect(self._poll_scanner)

        self.cart_model = CartTableModel(self.session.cart.lines)
        self.view.cart.setModel(self.cart_model)
        self.catalog_model = CatalogTableModel([])
        self.view.catalog.setModel(self.catalog_model)

        self._wire()
        self._reload_catalog()
        self._reload_technicians()
        self._refresh_cart()
        ctx.store.subscribe(self._on_store_changed)

    # ------------------------------------------------------------------ #
    # BaseModule API
    # ------------------------------------------------------------------ #

    def get_widget(self) -> QWidget:
        return self.view

    def refresh(self) -> None:
        self._reload_catalog()
        self._reload_technicians()
        self._refresh_cart()

    def _on_store_changed(self, topic: str) -> None:
        if topic in ("inventory", "all"):
            self._reload_catalog()
        if topic in ("khata", "all"):
            self._reload_technicians()

    # ------------------------------------------------------------------ #
    # Wiring
    # ------------------------------------------------------------------ #

    def _wire(self):
        v = self.view
        v.search.textChanged.connect(lambda *_: self._reload_catalog())
        v.cmb_machine.currentTextChanged.connect(lambda *_: self._reload_catalog())
        v.catalog.doubleClicked.connect(lambda idx: self.add_product(self.catalog_model.at(idx.row())))
        v.btn_add.clicked.connect(self._add_selected)

        v.btn_scanner.toggled.connect(self._toggle_scanner)
        v.scan_input.returnPressed.connect(self._on_scan_entered)

        v.chk_return.toggled.connect(self.set_return_mode)
        v.cmb_return_reason.currentTextChanged.connect(self._on_return_reason)
        v.cmb_bill_type.currentTextChanged.connect(self.session.set_bill_type)
        v.btn_remove.clicked.connect(self.remove_selected)

        v.btn_apply_code.clicked.connect(lambda: self.apply_code(v.code_input.text()))
        v.code_input.returnPressed.connect(lambda: self.apply_code(v.code_input.text()))
        v.btn_remove_code.clicked.connect(self.remove_code)
        v.manual_total.textEdited.connect(self._on_manual_total)
        v.manual_desc.textEdited.connect(self._on_manual_desc)

        v.cmb_technician.currentIndexChanged.connect(self._on_technician)
        v.customer_name.textEdited.connect(self._on_customer_name)
        v.customer_mobile.textEdited.connect(self._on_customer_mobile)

        v.rb_split.toggled.connect(self._on_split_toggled)
        v.cmb_method.currentTextChanged.connect(self._on_single_method)
        v.btn_split.clicked.connect(self.edit_split)
        v.chk_gst.toggled.connect(self._on_gst)

        v.btn_clear.clicked.connect(self.clear_cart)
        v.btn_checkout.clicked.connect(self.checkout)
        v.btn_print.clicked.connect(lambda: self.print_last_bill())
        v.btn_share.clicked.connect(self.share_last_bill)

    # ------------------------------------------------------------------ #
    # Catalog / technicians
    # ------------------------------------------------------------------ #

    def _reload_catalog(self):
        machine = self.view.cmb_machine.currentText()
        rows = self.ctx.products.search(self.view.search.text(), machine)
        self.catalog_model.replace(rows)

    def _reload_technicians(self):
        cmb = self.view.cmb_technician
        current = self.session.technician_id
        cmb.blockSignals(True)
        cmb.clear()
        cmb.addItem("— Walk-in / none —", None)
        for s in self.technicians.summaries():
            t = s.technician
            cmb.addItem(f"{t.name} ({t.mobile}) · {fmt_rupees(s.balance)}", t.id)
        idx = cmb.findData(current) if current else 0
        if idx < 0:
            self.session.technician_id = None
            idx = 0
        cmb.setCurrentIndex(idx)
        cmb.blockSignals(False)
        self._sync_customer_fields()

    def _add_selected(self):
        row = self.view.catalog.selected_row()
        if row is not None:
            self.add_product(self.catalog_model.at(row))

    # ------------------------------------------------------------------ #
    # Cart
    # ------------------------------------------------------------------ #

    def add_product(self, product: Product) -> bool:
        try:
            self.session.add_product(product)
        except OutOfStockError as e:
            self.ctx.sound.play("scan-error")
            error(self.view, "Out of Stock", str(e))
            return False
        self.ctx.sound.play("add-to-cart")
        self._refresh_cart()
        return True

    def remove_selected(self) -> bool:
        row = self.view.cart.selected_row()
        if row is None:
            return False
        line = self.cart_model.at(row)
        self.session.remove(line.product_id)
        self.ctx.sound.play("delete")
        self._refresh_cart()
        return True

    def set_return_mode(self, enabled: bool) -> None:
        self.session.set_return_mode(enabled)
        self.view.cmb_return_reason.setVisible(enabled)
        if self.view.chk_return.isChecked() != enabled:
            self.view.chk_return.blockSignals(True)
            self.view.chk_return.setChecked(enabled)
            self.view.chk_return.blockSignals(False)

    def _on_return_reason(self, text: str) -> None:
        self.session.return_reason = text

    def clear_cart(self) -> bool:
        """
        Void the cart. Under no-bill-no-exit the admin PIN is asked for;
        cancelling or a wrong PIN keeps the cart.
        """
        secret = None
        if self.session.needs_clear_authorization():
            secret = self._prompt_secret(
                "Admin PIN Required",
                "Bills cannot be discarded without approval. Enter the admin PIN:",
            )
            if secret is None:
                return False
        try:
            self.session.clear(secret)
        except AuthorizationError as e:
            self.ctx.sound.play("scan-error")
            error(self.view, "Not Allowed", str(e))
            return False
        self.ctx.sound.play("delete")
        self._reset_code_widgets()
        self.set_return_mode(False)
        self._refresh_cart()
        return True

    # ------------------------------------------------------------------ #
    # Codes
    # ------------------------------------------------------------------ #

    def apply_code(self, text: str) -> bool:
        try:
            code = self.session.apply_code(text)
        except InvalidCodeError as e:
            self.ctx.sound.play("scan-error")
            self.view.lbl_code.setText(str(e))
            self.view.lbl_code.setStyleSheet("color: #dc2626;")
            return False
        if code is None:
            return False
        self.ctx.sound.play("click")
        self.view.code_input.clear()
        self.view.lbl_code.setText(f"{code.code}: {code.label}")
        self.view.lbl_code.setStyleSheet("color: #059669;")
        self.view.manual_box.setVisible(code.kind == MANUAL)
        self.view.manual_total.setText(self.session.manual_total)
        self.view.manual_desc.setText(self.session.manual_description)
        self._refresh_cart()
        return True

    def remove_code(self) -> None:
        self.session.remove_code()
        self._reset_code_widgets()
        self._refresh_cart()

    def _reset_code_widgets(self) -> None:
        self.view.lbl_code.clear()
        self.view.manual_total.clear()
        self.view.manual_desc.clear()
        self.view.manual_box.setVisible(False)

    def _on_manual_total(self, text: str) -> None:
        self.session.manual_total = text
        self._refresh_totals()

    def _on_manual_desc(self, text: str) -> None:
        self.session.manual_description = text

    # ------------------------------------------------------------------ #
    # Customer / payment
    # ------------------------------------------------------------------ #

    def _on_technician(self, index: int) -> None:
        self.session.technician_id = self.view.cmb_technician.itemData(index)
        self._sync_customer_fields()

    def _sync_customer_fields(self) -> None:
        has_tech = self.session.technician_id is not None
        self.view.customer_name.setEnabled(not has_tech)
        self.view.customer_mobile.setEnabled(not has_tech)

    def _on_customer_name(self, text: str) -> None:
        self.session.customer_name = text

    def _on_customer_mobile(self, text: str) -> None:
        self.session.customer_mobile = text

    def _on_single_method(self, method: str) -> None:
        self.session.single_method = method

    def _on_gst(self, on: bool) -> None:
        self.session.tax_enabled = on
        self._refresh_totals()

    def _on_split_toggled(self, on: bool) -> None:
        self.session.payment_mode = SPLIT if on else SINGLE
        self.view.btn_split.setEnabled(on)
        self.view.cmb_method.setEnabled(not on)
        if on:
            self.session.start_split()

    def edit_split(self) -> None:
        total = self.session.totals().total
        if abs(sum(self.session.splits.values()) - total) > SPLIT_TOLERANCE:
            self.session.start_split()
        dlg = SplitPaymentDialog(total, self.session.splits, self.view)
        if dlg.exec():
            self.session.splits = dlg.get_splits()

    # ------------------------------------------------------------------ #
    # Checkout / print / share
    # ------------------------------------------------------------------ #

    def checkout(self) -> Optional[Bill]:
        try:
            bill = self.ctx.checkout.checkout_session(self.session)
        except DomainError as e:
            self.ctx.sound.play("scan-error")
            error(self.view, "Cannot Save Bill", str(e))
            return None
        self.last_bill = bill
        self.ctx.sound.play("payment-success")
        self._reset_inputs()
        self.view.btn_print.setEnabled(True)
        self.view.btn_share.setEnabled(True)
        self.bill_completed.emit(bill.id)
        return bill

    def _reset_inputs(self) -> None:
        v = self.view
        self._reset_code_widgets()
        self.set_return_mode(False)
        for w in (v.customer_name, v.customer_mobile, v.code_input):
            w.clear()
        v.chk_gst.setChecked(False)
        v.rb_single.setChecked(True)
        v.cmb_method.setCurrentIndex(0)
        v.cmb_bill_type.setCurrentIndex(0)
        v.cmb_technician.setCurrentIndex(0)
        self._refresh_cart()

    def print_last_bill(self, path: Optional[str] = None) -> Optional[Path]:
        bill = self.last_bill
        if bill is None:
            return None
        if path is None:
            path, _ = QFileDialog.getSaveFileName(
                self.view, "Save Bill PDF", str(Path.home() / default_bill_filename(bill)), "PDF files (*.pdf)"
            )
            if not path:
                return None
        try:
            return export_bill_pdf(bill, path)
        except (OSError, ValueError) as e:
            _log.error("Bill PDF failed: %s", e)
            error(self.view, "Print Failed", str(e))
            return None

    def share_last_bill(self) -> Optional[str]:
        if self.last_bill is None:
            return None
        text = share_text(self.last_bill)
        QGuiApplication.clipboard().setText(text)
        info(self.view, "Share Bill", "Copied!")
        return text

    # ------------------------------------------------------------------ #
    # Scanner
    # ------------------------------------------------------------------ #

    def _toggle_scanner(self, on: bool) -> None:
        if on:
            self.start_scanner()
        else:
            self.stop_scanner()

    def start_scanner(self) -> bool:
        src = self.ctx.barcode_factory()
        try:
            src.open()
        except ScannerUnavailable as e:
            self.view.lbl_scan.setText(f"Scanner unavailable: {e}")
            self.view.btn_scanner.blockSignals(True)
            self.view.btn_scanner.setChecked(False)
            self.view.btn_scanner.blockSignals(False)
            return False
        self._source = src
        self._debouncer.reset()
        self._timer.start()
        self.view.scan_input.setEnabled(True)
        self.view.scan_input.setFocus()
        self.view.btn_scanner.setText("Stop Scanner")
        self.view.lbl_scan.setText("Scanning…")
        return True

    def stop_scanner(self) -> None:
        self._timer.stop()
        if self._source is not None:
            self._source.close()
            self._source = None
        self.view.scan_input.setEnabled(False)
        self.view.btn_scanner.setText("Start Scanner")
        self.view.lbl_scan.clear()

    def _on_scan_entered(self) -> None:
        text = self.view.scan_input.text()
        self.view.scan_input.clear()
        feed = getattr(self._source, "feed", None)
        if feed is not None:
            feed(text)
        else:
            self.scan(text)

    def _poll_scanner(self) -> None:
        if self._source is None:
            return
        code = self._source.poll()
        if code:
            self.scan(code)

    def scan(self, code: str) -> bool:
        """Add the product with this barcode; repeats within 2 s are ignored."""
        code = (code or "").strip()
        if not code or not self._debouncer.accept(code):
            return False
        try:
            line = self.session.add_by_barcode(code)
        except (NotFoundError, OutOfStockError) as e:
            self.ctx.sound.play("scan-error")
            self.view.lbl_scan.setText(str(e))
            return False
        self.ctx.sound.play("scan-success")
        self.view.lbl_scan.setText(f"Added {line.part_name}")
        self._refresh_cart()
        return True

    # ------------------------------------------------------------------ #
    # Refresh
    # ------------------------------------------------------------------ #

    def _refresh_cart(self) -> None:
        self.cart_model.replace(self.session.cart.lines)
        count = self.session.cart.item_count()
        self.view.lbl_items.setText(f"{count} items")
        self._refresh_totals()
        self.cart_changed.emit(count)

    def _refresh_totals(self) -> None:
        t = self.session.totals()
        v = self.view
        v.lbl_subtotal.setText(fmt_rupees(t.subtotal))
        v.lbl_discount.setText(f"- {fmt_rupees(t.discount)}" if t.discount else fmt_rupees(0))
        v.lbl_tax.setText(fmt_rupees(t.tax))
        v.lbl_total.setText(fmt_rupees(t.total))
        v.lbl_total.setStyleSheet("color: #dc2626;" if t.total < 0 else "")
