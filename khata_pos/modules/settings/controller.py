from __future__ import annotations

import logging

from PySide6.QtCore import QSortFilterProxyModel
from PySide6.QtWidgets import QWidget

from ..base_module import BaseModule
from ...app_context import AppContext
from ...database.errors import DomainError, ValidationError
from ...utils.ui_helpers import error, info
from .model import SecurityLogTableModel
from .view import SettingsView

_log = logging.getLogger(__name__)


class SettingsController(BaseModule):
    def __init__(self, ctx: AppContext):
        super().__init__()
        self.ctx = ctx
        self.settings = ctx.settings
        self.view = SettingsView()

        self.base = SecurityLogTableModel([])
        self.proxy = QSortFilterProxyModel(self.view)
        self.proxy.setSourceModel(self.base)
        self.view.security_logs.setModel(self.proxy)

        self._wire()
        self.refresh()
        ctx.store.subscribe(self._on_store_changed)

    def get_widget(self) -> QWidget:
        return self.view

    def _on_store_changed(self, topic: str) -> None:
        if topic in ("settings", "logs", "all"):
            self.refresh()

    def _wire(self):
        v = self.view
        v.btn_change_pin.clicked.connect(
            lambda: self.change_pin(v.current_pin.text(), v.new_pin.text(), v.confirm_pin.text())
        )
        v.btn_save_code.clicked.connect(lambda: self.save_tech_code(v.tech_code.text()))
        v.chk_no_bill_no_exit.toggled.connect(self._on_policy_toggled)

    def refresh(self) -> None:
        v = self.view
        v.tech_code.setText(self.settings.tech_code)
        v.chk_no_bill_no_exit.blockSignals(True)
        v.chk_no_bill_no_exit.setChecked(self.settings.no_bill_no_exit)
        v.chk_no_bill_no_exit.blockSignals(False)
        rows = self.ctx.logs.list_security()
        self.base.replace(rows)
        v.lbl_alerts.setText(f"{self.ctx.logs.alert_count()} security events logged")

    # ------------------------------------------------------------------ #
    # Commands
    # ------------------------------------------------------------------ #

    def change_pin(self, current: str, new: str, confirm: str) -> bool:
        try:
            if new != confirm:
                raise ValidationError("New PIN and confirmation do not match.")
            self.settings.change_admin_pin(current, new)
        except DomainError as e:
            error(self.view, "Change PIN", str(e))
            return False
        for w in (self.view.current_pin, self.view.new_pin, self.view.confirm_pin):
            w.clear()
        self.ctx.sound.play("payment-success")
        info(self.view, "Change PIN", "Admin PIN updated.")
        return True

    def save_tech_code(self, code: str) -> bool:
        try:
            self.settings.set_tech_code(code)
        except DomainError as e:
            error(self.view, "Technician Code", str(e))
            return False
        self.ctx.sound.play("click")
        info(self.view, "Technician Code", f"Technician code set to {self.settings.tech_code}.")
        return True

    def _on_policy_toggled(self, on: bool) -> None:
        self.settings.set_no_bill_no_exit(on)
        _log.info("No Bill No Exit %s", "enabled" if on else "disabled")
