# khata_pos/database/repositories/dashboard_repo.py
from __future__ import annotations

from collections import Counter, OrderedDict
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from ...constants import DEAD_STOCK_WARNING_DAYS
from ...utils.helpers import date_key, parse_iso
from ..store import AppStore


class DashboardRepo:
    """
    Read-only aggregates for the Dashboard, computed from the current
    collections on every call.

    Dates are compared on the 'YYYY-MM-DD' prefix of the stored ISO
    timestamps. Callers may pass `today`/`now` to pin the clock.
    """

    def __init__(self, store: AppStore) -> None:
        self.store = store

    # ----------------------------- Sales -----------------------------

    def daily_total(self, today: Optional[date] = None) -> float:
        key = (today or date.today()).isoformat()
        return round(sum(b.total for b in self.store.state.bills if date_key(b.date) == key), 2)

    def bills_count(self, today: Optional[date] = None) -> int:
        if today is None:
            return len(self.store.state.bills)
        key = today.isoformat()
        return sum(1 for b in self.store.state.bills if date_key(b.date) == key)

    def last_7_days(self, today: Optional[date] = None) -> List[Dict[str, Any]]:
        """
        One row per day for the last seven days (oldest first):
        {"date": "YYYY-MM-DD", "day": "Mon", "sales": float}.
        """
        today = today or date.today()
        days: "OrderedDict[str, float]" = OrderedDict()
        for i in range(6, -1, -1):
            days[(today - timedelta(days=i)).isoformat()] = 0.0
        for b in self.store.state.bills:
            k = date_key(b.date)
            if k in days:
                days[k] += b.total
        return [
            {"date": k, "day": date.fromisoformat(k).strftime("%a"), "sales": round(v, 2)}
            for k, v in days.items()
        ]

    def top_selling(self, limit: int = 4) -> List[Dict[str, Any]]:
        """Part names by total quantity across all bills, highest first."""
        qty: Counter = Counter()
        for b in self.store.state.bills:
            for line in b.items:
                qty[line.part_name] += line.quantity
        return [{"name": name, "quantity": q} for name, q in qty.most_common(limit)]

    # ----------------------------- Stock -----------------------------

    def stock_value(self) -> float:
        """Σ stock × purchase price."""
        return round(
            sum(p.stock_quantity * p.purchase_price for p in self.store.state.inventory), 2
        )

    def dead_stock_count(self, now: Optional[datetime] = None) -> int:
        """In-stock products whose last sale is older than 90 days."""
        cutoff = (now or datetime.now()) - timedelta(days=DEAD_STOCK_WARNING_DAYS)
        n = 0
        for p in self.store.state.inventory:
            sold = parse_iso(p.last_sold_date)
            if sold is not None and sold < cutoff and p.stock_quantity > 0:
                n += 1
        return n

    def low_stock_count(self) -> int:
        return sum(1 for p in self.store.state.inventory if p.is_low_stock)
