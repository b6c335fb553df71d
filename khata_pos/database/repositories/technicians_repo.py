# khata_pos/database/repositories/technicians_repo.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from ...constants import DEFAULT_CREDIT_LIMIT
from ...modules.khata import trust
from ...utils.helpers import new_sequence_id, now_iso
from ..errors import NotFoundError, ValidationError
from ..models import LedgerEntry, Technician
from ..store import AppStore


@dataclass(frozen=True)
class TechnicianSummary:
    technician: Technician
    balance: float
    trust_score: int
    trust_level: str


class TechniciansRepo:
    """
    Technicians and their Khata ledger. Balances and trust are never stored;
    they are folded from the ledger on every read, so a post is visible
    immediately everywhere.
    """

    def __init__(self, store: AppStore):
        self.store = store

    # ---- Internal helpers -------------------------------------------------

    @staticmethod
    def _ensure_non_empty(value: str | None, field_label: str) -> str:
        if value is None or value.strip() == "":
            raise ValidationError(f"{field_label} cannot be empty.")
        return value.strip()

    def _require(self, technician_id: str) -> Technician:
        t = self.get(technician_id)
        if t is None:
            raise NotFoundError(f"Technician {technician_id} not found.")
        return t

    # ---- Queries ----------------------------------------------------------

    def list_technicians(self) -> list[Technician]:
        return list(self.store.state.technicians)

    def get(self, technician_id: str) -> Technician | None:
        for t in self.store.state.technicians:
            if t.id == technician_id:
                return t
        return None

    def entries_for(self, technician_id: str) -> list[LedgerEntry]:
        """Ledger history for one technician, newest first."""
        rows = [e for e in self.store.state.ledger if e.technician_id == technician_id]
        return list(reversed(rows))

    def balance(self, technician_id: str) -> float:
        t = self._require(technician_id)
        entries = (e for e in self.store.state.ledger if e.technician_id == technician_id)
        return trust.fold_balance(t.opening_balance, entries)

    def summary(self, technician_id: str) -> TechnicianSummary:
        t = self._require(technician_id)
        bal = self.balance(technician_id)
        a = trust.assess(bal, t.limit)
        return TechnicianSummary(t, bal, a.score, a.level)

    def summaries(self) -> list[TechnicianSummary]:
        return [self.summary(t.id) for t in self.store.state.technicians]

    def total_outstanding(self) -> float:
        """Sum of all technician balances (the Khata total on reports)."""
        return round(sum(s.balance for s in self.summaries()), 2)

    def search(self, term: str) -> list[Technician]:
        q = (term or "").strip().lower()
        if not q:
            return self.list_technicians()
        return [t for t in self.store.state.technicians if q in t.name.lower() or q in t.mobile]

    # ---- Commands ---------------------------------------------------------

    def add_technician(
        self,
        name: str,
        mobile: str,
        company: str = "",
        address: str = "",
        limit: float = DEFAULT_CREDIT_LIMIT,
        opening_balance: float = 0.0,
    ) -> Technician:
        name = self._ensure_non_empty(name, "Name")
        mobile = self._ensure_non_empty(mobile, "Mobile")
        try:
            limit = float(limit)
            opening_balance = float(opening_balance or 0.0)
        except (TypeError, ValueError):
            raise ValidationError("Limit and opening balance must be numbers.")
        if not (math.isfinite(limit) and math.isfinite(opening_balance)):
            raise ValidationError("Limit and opening balance must be finite numbers.")
        if limit < 0:
            raise ValidationError("Credit limit cannot be negative.")
        with self.store.transaction() as st:
            t = Technician(
                id=new_sequence_id("T", (x.id for x in st.technicians)),
                name=name,
                mobile=mobile,
                company=(company or "").strip(),
                address=(address or "").strip(),
                limit=limit,
                opening_balance=opening_balance,
            )
            st.technicians.append(t)
            self.store.notify("khata")
        return t

    def post(
        self,
        technician_id: str,
        amount: float,
        kind: str,
        description: Optional[str] = None,
    ) -> LedgerEntry:
        """Append one ledger entry. Amount must be positive; kind is Debit or Credit."""
        self._require(technician_id)
        if kind not in (trust.DEBIT, trust.CREDIT):
            raise ValidationError(f"Entry type must be Debit or Credit, not {kind!r}.")
        try:
            amount = float(amount)
        except (TypeError, ValueError):
            raise ValidationError("Amount must be a number.")
        if not math.isfinite(amount):
            raise ValidationError("Amount must be a finite number.")
        if amount <= 0:
            raise ValidationError("Amount must be greater than zero.")
        desc = (description or "").strip() or trust.default_description(kind)
        with self.store.transaction() as st:
            entry = LedgerEntry(
                id=new_sequence_id("LG", (e.id for e in st.ledger)),
                technician_id=technician_id,
                date=now_iso(),
                description=desc,
                amount=round(amount, 2),
                type=kind,
            )
            st.ledger.append(entry)
            self.store.notify("khata")
        return entry
