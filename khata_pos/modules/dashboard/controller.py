# khata_pos/modules/dashboard/controller.py
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from PySide6.QtCore import Signal
from PySide6.QtWidgets import QWidget

from ..base_module import BaseModule
from ...database.repositories.technicians_repo import TechniciansRepo
from ...database.store import AppStore
from ...utils.helpers import fmt_compact_rupees, fmt_rupees
from .model import DashboardModel
from .view import DashboardView


class DashboardController(BaseModule):
    """
    Coordinates DashboardModel <-> view and re-reads the aggregates whenever
    the store reports a change.

    Signals for the shell:
      - open_pos(): the "New Bill" shortcut
      - open_inventory(): the low-stock card
    """

    open_pos = Signal()
    open_inventory = Signal()

    def __init__(self, store: AppStore) -> None:
        super().__init__()
        self.store = store
        self.model = DashboardModel(store)
        self.view = DashboardView()
        self.view.new_bill_requested.connect(self.open_pos)
        self.view.low_stock_view_requested.connect(self.open_inventory)
        store.subscribe(self._on_store_changed)
        self.refresh()

    def get_widget(self) -> QWidget:
        return self.view

    def _on_store_changed(self, topic: str) -> None:
        if topic in ("bills", "inventory", "khata", "logs", "all"):
            self.refresh()

    def refresh(self, today: Optional[date] = None, now: Optional[datetime] = None) -> None:
        m = self.model
        m.refresh(today, now)
        v = self.view
        v.set_kpi_value("daily_sales", fmt_rupees(m.daily_sales),
                        f"{m.bills_today} bills today, {m.total_bills} total")
        v.set_kpi_value("stock_value", fmt_compact_rupees(m.stock_value))
        v.set_kpi_value("khata", fmt_rupees(TechniciansRepo(self.store).total_outstanding()))
        v.set_kpi_value("low_stock", str(m.low_stock))
        v.set_kpi_value("dead_stock", str(m.dead_stock))
        v.set_kpi_value("alerts", str(m.alerts))
        v.set_sales_trend(m.sales_trend)
        v.set_top_selling(m.top_selling)
        v.set_low_stock(m.low_stock_rows)
