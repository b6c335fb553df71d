from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtWidgets import QWidget

from ..base_module import BaseModule
from ...app_context import AppContext
from ...database.errors import DomainError
from ...database.models import LedgerEntry, Technician
from ...database.repositories.technicians_repo import TechniciansRepo
from ...utils.helpers import fmt_rupees
from ...utils.ui_helpers import error, info
from .entry_dialog import LedgerEntryDialog
from .form import TechnicianForm
from .model import LedgerTableModel, TechniciansTableModel
from .view import KhataView

_log = logging.getLogger(__name__)


class KhataController(BaseModule):
    """
    Technician credit book.

    Balances and trust scores are read from TechniciansRepo every refresh,
    so Khata bills from the POS screen show up here immediately.
    """

    def __init__(self, ctx: AppContext):
        super().__init__()
        self.ctx = ctx
        self.repo = TechniciansRepo(ctx.store)
        self.view = KhataView()

        self.base = TechniciansTableModel([])
        self.view.table.setModel(self.base)
        self.ledger_model = LedgerTableModel([])
        self.view.history.setModel(self.ledger_model)
        self._active_id: Optional[str] = None

        self._wire()
        self.refresh()
        ctx.store.subscribe(self._on_store_changed)

    # ------------------------------------------------------------------ #
    # BaseModule API
    # ------------------------------------------------------------------ #

    def get_widget(self) -> QWidget:
        return self.view

    def _on_store_changed(self, topic: str) -> None:
        if topic in ("khata", "bills", "all"):
            self.refresh()

    def _wire(self):
        self.view.btn_add.clicked.connect(self.add_technician)
        self.view.btn_entry.clicked.connect(self.new_entry)
        self.view.search.textChanged.connect(lambda *_: self.refresh())
        self.view.table.selectionModel().selectionChanged.connect(self._on_selection)

    # ------------------------------------------------------------------ #
    # Loading
    # ------------------------------------------------------------------ #

    def refresh(self) -> None:
        matching = {t.id for t in self.repo.search(self.view.search.text())}
        rows = [s for s in self.repo.summaries() if s.technician.id in matching]
        self.base.replace(rows)
        self.view.lbl_total.setText(f"Total outstanding: {fmt_rupees(self.repo.total_outstanding())}")

        ids = [s.technician.id for s in rows]
        if self._active_id not in ids:
            self._active_id = ids[0] if ids else None
        if self._active_id is not None:
            self.view.table.selectRow(ids.index(self._active_id))
        self._show_active()

    def _on_selection(self, *_):
        row = self.view.table.selected_row()
        if row is not None:
            self._active_id = self.base.at(row).technician.id
            self._show_active()

    def _show_active(self) -> None:
        if self._active_id is None:
            self.view.details.set_data(None)
            self.ledger_model.replace([])
            self.view.lbl_empty.setVisible(True)
            self.view.btn_entry.setEnabled(False)
            return
        entries = self.repo.entries_for(self._active_id)
        self.view.details.set_data(self.repo.summary(self._active_id))
        self.ledger_model.replace(entries)
        self.view.lbl_empty.setVisible(not entries)
        self.view.btn_entry.setEnabled(True)

    def select_technician(self, technician_id: str) -> None:
        self._active_id = technician_id
        self.refresh()

    @property
    def active_id(self) -> Optional[str]:
        return self._active_id

    # ------------------------------------------------------------------ #
    # Commands
    # ------------------------------------------------------------------ #

    def add_technician(self) -> None:
        form = TechnicianForm(self.view)
        if form.exec():
            self.create_technician(**form.payload())

    def create_technician(self, **fields) -> Optional[Technician]:
        try:
            t = self.repo.add_technician(**fields)
        except DomainError as e:
            error(self.view, "Add Technician", str(e))
            return None
        _log.info("Technician %s added", t.id)
        self.ctx.sound.play("click")
        self.select_technician(t.id)
        info(self.view, "Add Technician", "New Technician Added!")
        return t

    def new_entry(self) -> None:
        if self._active_id is None:
            return
        t = self.repo.get(self._active_id)
        dlg = LedgerEntryDialog(t.name if t else self._active_id, self.view)
        if dlg.exec():
            self.post_entry(**dlg.payload())

    def post_entry(self, amount: float, kind: str, description: Optional[str] = None) -> Optional[LedgerEntry]:
        if self._active_id is None:
            return None
        try:
            entry = self.repo.post(self._active_id, amount, kind, description)
        except DomainError as e:
            error(self.view, "New Entry", str(e))
            return None
        self.ctx.sound.play("payment-success")
        info(self.view, "New Entry", "Transaction recorded successfully!")
        return entry
