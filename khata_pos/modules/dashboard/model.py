# khata_pos/modules/dashboard/model.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from ...database.repositories.dashboard_repo import DashboardRepo
from ...database.repositories.logs_repo import LogsRepo
from ...database.repositories.products_repo import ProductsRepo
from ...database.store import AppStore


@dataclass
class DashboardModel:
    """
    Pulls the aggregates from DashboardRepo and keeps them as plain
    attributes for the view.

    Usage:
        model = DashboardModel(store)
        model.refresh()
        print(model.daily_sales, model.stock_value, ...)
    """

    store: AppStore
    repo: DashboardRepo = field(init=False)

    daily_sales: float = field(init=False, default=0.0)
    bills_today: int = field(init=False, default=0)
    total_bills: int = field(init=False, default=0)
    stock_value: float = field(init=False, default=0.0)
    dead_stock: int = field(init=False, default=0)
    low_stock: int = field(init=False, default=0)
    alerts: int = field(init=False, default=0)
    sales_trend: List[Dict[str, Any]] = field(init=False, default_factory=list)
    top_selling: List[Dict[str, Any]] = field(init=False, default_factory=list)
    low_stock_rows: List[Dict[str, Any]] = field(init=False, default_factory=list)

    def __post_init__(self) -> None:
        self.repo = DashboardRepo(self.store)

    def refresh(self, today: Optional[date] = None, now: Optional[datetime] = None) -> None:
        today = today or date.today()
        now = now or datetime.now()
        self.daily_sales = self.repo.daily_total(today)
        self.bills_today = self.repo.bills_count(today)
        self.total_bills = self.repo.bills_count()
        self.stock_value = self.repo.stock_value()
        self.dead_stock = self.repo.dead_stock_count(now)
        self.low_stock = self.repo.low_stock_count()
        self.alerts = LogsRepo(self.store).alert_count()
        self.sales_trend = self.repo.last_7_days(today)
        self.top_selling = self.repo.top_selling()
        self.low_stock_rows = [
            {
                "name": p.part_name,
                "stock": p.stock_quantity,
                "threshold": p.low_stock_threshold,
                "rack": p.rack_location,
            }
            for p in ProductsRepo(self.store).low_stock()
        ]
