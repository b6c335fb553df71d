# khata_pos/database/repositories/bills_repo.py
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ...utils.helpers import date_key, new_sequence_id, parse_iso
from ..errors import ValidationError
from ..models import Bill
from ..store import AppStore


class BillsRepo:
    """Finalized bills. Bills are immutable once appended."""

    def __init__(self, store: AppStore):
        self.store = store

    def new_bill_id(self, when: Optional[date] = None) -> str:
        """BLyyyymmdd-NNNN, sequential per day."""
        return new_sequence_id("BL", (b.id for b in self.store.state.bills), when)

    def list_bills(self) -> list[Bill]:
        """Newest first."""
        return list(reversed(self.store.state.bills))

    def get(self, bill_id: str) -> Bill | None:
        for b in self.store.state.bills:
            if b.id == bill_id:
                return b
        return None

    def last_bill(self) -> Bill | None:
        return self.store.state.bills[-1] if self.store.state.bills else None

    def in_range(self, start: Optional[date], end: Optional[date]) -> list[Bill]:
        """Bills dated within [start, end] inclusive (either bound optional), newest first."""
        out = []
        for b in self.list_bills():
            d = parse_iso(b.date)
            if d is None:
                continue
            day = d.date()
            if start and day < start:
                continue
            if end and day > end:
                continue
            out.append(b)
        return out

    def on_day(self, day: date) -> list[Bill]:
        key = day.isoformat()
        return [b for b in self.list_bills() if date_key(b.date) == key]

    def add(self, bill: Bill) -> Bill:
        if not bill.items:
            raise ValidationError("A bill needs at least one item.")
        with self.store.transaction() as st:
            if any(b.id == bill.id for b in st.bills):
                raise ValidationError(f"Bill {bill.id} already exists.")
            st.bills.append(bill)
            self.store.notify("bills")
        return bill

    @staticmethod
    def bill_datetime(bill: Bill) -> Optional[datetime]:
        return parse_iso(bill.date)
