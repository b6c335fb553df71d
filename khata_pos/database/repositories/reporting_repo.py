# khata_pos/database/repositories/reporting_repo.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import List, Optional

from ...constants import DEAD_STOCK_WARNING_DAYS
from ...utils.helpers import date_key, parse_iso
from ..errors import ValidationError
from ..models import Bill, Product
from ..store import AppStore
from .technicians_repo import TechniciansRepo, TechnicianSummary

RANGE_TODAY = "today"
RANGE_CUSTOM = "custom"
RANGE_ALL = "all"


@dataclass
class ReportData:
    range_label: str
    bills: List[Bill] = field(default_factory=list)
    total_sales: float = 0.0
    total_items: int = 0
    stock_value: float = 0.0
    total_stock_items: int = 0
    khata_total: float = 0.0
    dead_stock: List[Product] = field(default_factory=list)
    technicians: List[TechnicianSummary] = field(default_factory=list)


class ReportingRepo:
    """Summary report over a date range: sales register, dead stock, Khata."""

    def __init__(self, store: AppStore) -> None:
        self.store = store
        self.technicians = TechniciansRepo(store)

    def bills_for_range(
        self,
        range_key: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
        today: Optional[date] = None,
    ) -> List[Bill]:
        """
        'today', 'all', or 'custom' with inclusive start/end days.
        Newest first.
        """
        bills = list(reversed(self.store.state.bills))
        if range_key == RANGE_ALL:
            return bills
        if range_key == RANGE_TODAY:
            key = (today or date.today()).isoformat()
            return [b for b in bills if date_key(b.date) == key]
        if range_key == RANGE_CUSTOM:
            if start is None or end is None:
                raise ValidationError("Choose a start and end date.")
            if end < start:
                raise ValidationError("End date is before start date.")
            lo, hi = start.isoformat(), end.isoformat()
            return [b for b in bills if lo <= date_key(b.date) <= hi]
        raise ValidationError(f"Unknown report range: {range_key}")

    def dead_stock(self, now: Optional[datetime] = None) -> List[Product]:
        """In-stock products never sold or unsold for more than 90 days."""
        cutoff = (now or datetime.now()) - timedelta(days=DEAD_STOCK_WARNING_DAYS)
        out = []
        for p in self.store.state.inventory:
            if p.stock_quantity <= 0:
                continue
            sold = parse_iso(p.last_sold_date)
            if sold is None or sold < cutoff:
                out.append(p)
        return out

    def build(
        self,
        range_key: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
        today: Optional[date] = None,
    ) -> ReportData:
        bills = self.bills_for_range(range_key, start, end, today)
        inv = self.store.state.inventory
        if range_key == RANGE_TODAY:
            label = f"Date: {(today or date.today()).isoformat()}"
        elif range_key == RANGE_ALL:
            label = "All Time History"
        else:
            label = f"From {start.isoformat()} To {end.isoformat()}"
        techs = self.technicians.summaries()
        return ReportData(
            range_label=label,
            bills=bills,
            total_sales=round(sum(b.total for b in bills), 2),
            total_items=sum(line.quantity for b in bills for line in b.items),
            stock_value=round(sum(p.purchase_price * p.stock_quantity for p in inv), 2),
            total_stock_items=sum(p.stock_quantity for p in inv),
            khata_total=round(sum(t.balance for t in techs), 2),
            dead_stock=self.dead_stock(),
            technicians=techs,
        )
