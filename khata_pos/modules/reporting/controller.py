from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QSortFilterProxyModel
from PySide6.QtGui import QGuiApplication
from PySide6.QtWidgets import QFileDialog, QWidget

from ..base_module import BaseModule
from ...app_context import AppContext
from ...database.errors import DomainError
from ...database.models import Bill
from ...database.repositories.reporting_repo import (
    RANGE_CUSTOM,
    RANGE_TODAY,
    ReportData,
    ReportingRepo,
)
from ...utils.helpers import fmt_rupees, today_str
from ...utils.ui_helpers import error, info
from .exports import payment_details, share_text, write_bills_csv
from .model import BillItemsTableModel, BillsTableModel, DeadStockTableModel
from .pdf import default_bill_filename, default_report_filename, export_bill_pdf, export_report_pdf
from .view import ReportsView

_log = logging.getLogger(__name__)


class ReportsController(BaseModule):
    """
    Sales register over a date range with CSV / PDF exports, and the
    invoice PDF / share text of any past bill.
    """

    def __init__(self, ctx: AppContext):
        super().__init__()
        self.ctx = ctx
        self.repo = ReportingRepo(ctx.store)
        self.view = ReportsView()

        self._range = RANGE_TODAY
        self._start: Optional[date] = None
        self._end: Optional[date] = None
        self.report: Optional[ReportData] = None

        self.base = BillsTableModel([])
        self.proxy = QSortFilterProxyModel(self.view)
        self.proxy.setSourceModel(self.base)
        self.view.bills.setModel(self.proxy)
        self.items_model = BillItemsTableModel([])
        self.view.items.setModel(self.items_model)
        self.dead_model = DeadStockTableModel([])
        self.view.dead_stock.setModel(self.dead_model)

        self._wire()
        self.refresh()
        ctx.store.subscribe(self._on_store_changed)

    # ------------------------------------------------------------------ #
    # BaseModule API
    # ------------------------------------------------------------------ #

    def get_widget(self) -> QWidget:
        return self.view

    def _on_store_changed(self, topic: str) -> None:
        if topic in ("bills", "inventory", "khata", "all"):
            self.refresh()

    def _wire(self):
        v = self.view
        v.cmb_range.currentIndexChanged.connect(self._on_range_changed)
        v.btn_apply.clicked.connect(self._apply_custom)
        v.btn_csv.clicked.connect(lambda: self.export_csv())
        v.btn_report_pdf.clicked.connect(lambda: self.export_report_pdf())
        v.btn_bill_pdf.clicked.connect(lambda: self.export_selected_bill_pdf())
        v.btn_share.clicked.connect(self.share_selected_bill)
        v.bills.selectionModel().selectionChanged.connect(self._show_selected)

    # ------------------------------------------------------------------ #
    # Range
    # ------------------------------------------------------------------ #

    def _on_range_changed(self, *_):
        key = self.view.cmb_range.currentData()
        self.view.set_custom_enabled(key == RANGE_CUSTOM)
        if key != RANGE_CUSTOM:
            self.set_range(key)

    def _apply_custom(self):
        self.set_range(
            RANGE_CUSTOM,
            self.view.date_from.date().toPython(),
            self.view.date_to.date().toPython(),
        )

    def set_range(self, key: str, start: Optional[date] = None, end: Optional[date] = None) -> bool:
        """Switch the report range; an invalid custom range keeps the previous one."""
        prev = (self._range, self._start, self._end)
        self._range, self._start, self._end = key, start, end
        try:
            self.refresh()
        except DomainError as e:
            self._range, self._start, self._end = prev
            error(self.view, "Reports", str(e))
            return False
        return True

    def refresh(self, today: Optional[date] = None) -> None:
        report = self.repo.build(self._range, self._start, self._end, today)
        self.report = report
        v = self.view
        self.base.replace(report.bills)
        self.dead_model.replace(report.dead_stock)
        v.lbl_sales.setText(fmt_rupees(report.total_sales))
        v.lbl_items.setText(str(report.total_items))
        v.lbl_stock.setText(fmt_rupees(report.stock_value))
        v.lbl_khata.setText(fmt_rupees(report.khata_total))
        self._show_selected()

    # ------------------------------------------------------------------ #
    # Selected bill
    # ------------------------------------------------------------------ #

    def selected_bill(self) -> Optional[Bill]:
        idxs = self.view.bills.selectionModel().selectedRows()
        if not idxs:
            return None
        return self.base.at(self.proxy.mapToSource(idxs[0]).row())

    def select_bill(self, bill_id: str) -> bool:
        for row in range(self.proxy.rowCount()):
            b = self.base.at(self.proxy.mapToSource(self.proxy.index(row, 0)).row())
            if b.id == bill_id:
                self.view.bills.selectRow(row)
                return True
        return False

    def _show_selected(self, *_):
        v = self.view
        b = self.selected_bill()
        v.btn_bill_pdf.setEnabled(b is not None)
        v.btn_share.setEnabled(b is not None)
        if b is None:
            for lab in (v.lab_bill_id, v.lab_customer, v.lab_payment, v.lab_totals):
                lab.setText("-")
            self.items_model.replace([])
            return
        v.lab_bill_id.setText(f"{b.id} ({b.type})")
        customer = b.customer_name + (f" · {b.customer_mobile}" if b.customer_mobile else "")
        v.lab_customer.setText(customer)
        v.lab_payment.setText(payment_details(b).replace("\n", ", "))
        v.lab_totals.setText(
            f"Subtotal {fmt_rupees(b.subtotal)} · GST {fmt_rupees(b.gst)} · Total {fmt_rupees(b.total)}"
        )
        self.items_model.replace(list(b.items))

    # ------------------------------------------------------------------ #
    # Exports
    # ------------------------------------------------------------------ #

    def _ask_save(self, title: str, file_name: str, filt: str) -> Optional[str]:
        path, _ = QFileDialog.getSaveFileName(self.view, title, str(Path.home() / file_name), filt)
        return path or None

    def export_csv(self, path: Optional[str] = None) -> Optional[int]:
        if self.report is None:
            return None
        path = path or self._ask_save(
            "Export Bills", f"Sangli_Bills_{today_str()}.csv", "CSV files (*.csv)"
        )
        if not path:
            return None
        try:
            n = write_bills_csv(self.report.bills, path)
        except OSError as e:
            _log.error("CSV export failed: %s", e)
            error(self.view, "Export Failed", str(e))
            return None
        info(self.view, "Export Bills", f"{n} bills exported.")
        return n

    def export_report_pdf(self, path: Optional[str] = None) -> Optional[Path]:
        if self.report is None:
            return None
        path = path or self._ask_save("Summary Report", default_report_filename(), "PDF files (*.pdf)")
        if not path:
            return None
        try:
            return export_report_pdf(self.report, path)
        except (OSError, ValueError) as e:
            _log.error("Report PDF failed: %s", e)
            error(self.view, "Report Failed", str(e))
            return None

    def export_selected_bill_pdf(self, path: Optional[str] = None) -> Optional[Path]:
        b = self.selected_bill()
        if b is None:
            return None
        path = path or self._ask_save("Save Bill PDF", default_bill_filename(b), "PDF files (*.pdf)")
        if not path:
            return None
        try:
            return export_bill_pdf(b, path)
        except (OSError, ValueError) as e:
            _log.error("Bill PDF failed: %s", e)
            error(self.view, "Print Failed", str(e))
            return None

    def share_selected_bill(self) -> Optional[str]:
        b = self.selected_bill()
        if b is None:
            return None
        text = share_text(b)
        QGuiApplication.clipboard().setText(text)
        self.ctx.sound.play("click")
        info(self.view, "Share Bill", "Copied!")
        return text
