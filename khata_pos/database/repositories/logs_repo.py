# khata_pos/database/repositories/logs_repo.py
"""
Append-only audit trails: security events, stock movements, price changes.
Lists come back newest first, the way the screens show them.
"""
from __future__ import annotations

import logging
from typing import Optional

from ...constants import PRICE_FIELDS, SECURITY_EVENT_TYPES, SEVERITIES, STOCK_REASONS
from ...utils.helpers import new_sequence_id, now_iso
from ..errors import ValidationError
from ..models import PriceLog, Product, SecurityLog, StockLog
from ..store import AppStore

_log = logging.getLogger(__name__)


class LogsRepo:
    def __init__(self, store: AppStore):
        self.store = store

    # ---------------------------- security ----------------------------

    def security(self, event_type: str, details: str, severity: str = "low") -> SecurityLog:
        if event_type not in SECURITY_EVENT_TYPES:
            raise ValidationError(f"Unknown security event type: {event_type}")
        if severity not in SEVERITIES:
            raise ValidationError(f"Unknown severity: {severity}")
        with self.store.transaction() as st:
            entry = SecurityLog(
                id=new_sequence_id("SEC", (s.id for s in st.security_logs)),
                type=event_type,
                details=details,
                timestamp=now_iso(),
                severity=severity,
            )
            st.security_logs.append(entry)
            self.store.notify("logs")
        log_fn = _log.warning if severity == "high" else _log.info
        log_fn("Security event %s (%s): %s", event_type, severity, details)
        return entry

    def list_security(self, limit: Optional[int] = None) -> list[SecurityLog]:
        rows = list(reversed(self.store.state.security_logs))
        return rows[:limit] if limit else rows

    def alert_count(self) -> int:
        return len(self.store.state.security_logs)

    # ---------------------------- stock ----------------------------

    def stock(self, product: Product, change: int, reason: str, new_stock: int) -> StockLog:
        if reason not in STOCK_REASONS:
            raise ValidationError(f"Unknown stock adjustment reason: {reason}")
        with self.store.transaction() as st:
            entry = StockLog(
                id=new_sequence_id("ST", (s.id for s in st.stock_logs)),
                date=now_iso(),
                product_id=product.id,
                product_name=product.part_name,
                change=int(change),
                reason=reason,
                new_stock=int(new_stock),
            )
            st.stock_logs.append(entry)
            self.store.notify("logs")
        return entry

    def list_stock(self, product_id: Optional[str] = None) -> list[StockLog]:
        rows = self.store.state.stock_logs
        if product_id is not None:
            rows = [r for r in rows if r.product_id == product_id]
        return list(reversed(rows))

    # ---------------------------- price ----------------------------

    def price(
        self,
        product: Product,
        field: str,
        old_val: float,
        new_val: float,
        user: str = "Admin",
    ) -> PriceLog:
        if field not in PRICE_FIELDS:
            raise ValidationError(f"Unknown price field: {field}")
        with self.store.transaction() as st:
            entry = PriceLog(
                id=new_sequence_id("PR", (p.id for p in st.price_logs)),
                date=now_iso(),
                product_id=product.id,
                product_name=product.part_name,
                field=field,
                old_val=float(old_val),
                new_val=float(new_val),
                user=user,
            )
            st.price_logs.append(entry)
            self.store.notify("logs")
        return entry

    def list_price(self, product_id: Optional[str] = None) -> list[PriceLog]:
        rows = self.store.state.price_logs
        if product_id is not None:
            rows = [r for r in rows if r.product_id == product_id]
        return list(reversed(rows))
