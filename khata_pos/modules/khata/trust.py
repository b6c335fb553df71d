"""
khata/trust.py

Pure helpers for the Khata (technician credit) book: signed ledger
amounts, the balance fold, and the trust score shown next to each
technician.

Sign convention: a Debit is money the technician owes the shop (balance
goes up, "To Collect"); a Credit is a payment received or a refund owed
to the technician (balance goes down, "To Give").

Do not import repositories or the store here. Only compute numbers.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ...constants import TRUST_AVERAGE, TRUST_RELIABLE, TRUST_RISKY
from ...database.models import LedgerEntry

__all__ = [
    "DEBIT",
    "CREDIT",
    "TrustAssessment",
    "signed_amount",
    "fold_balance",
    "trust_score",
    "trust_level",
    "assess",
    "default_description",
    "balance_label",
    "remaining_limit",
]

DEBIT = "Debit"
CREDIT = "Credit"


@dataclass(frozen=True)
class TrustAssessment:
    score: int
    level: str


# -----------------------------
# Balance
# -----------------------------

def signed_amount(entry: LedgerEntry) -> float:
    return entry.amount if entry.type == DEBIT else -entry.amount


def fold_balance(opening_balance: float, entries: Iterable[LedgerEntry]) -> float:
    """opening_balance + Σ(Debit) − Σ(Credit), rounded to paise."""
    total = float(opening_balance)
    for e in entries:
        total += signed_amount(e)
    return round(total, 2)


# -----------------------------
# Trust
# -----------------------------

def trust_score(balance: float, limit: float) -> int:
    """
    Starts at 100 and loses points only when the balance is negative past a
    fraction of the credit limit. Only the first matching band applies:
      balance < -limit       → -30
      balance < -0.8·limit   → -20
      balance < -0.5·limit   → -10
    Clamped to [0, 100].
    """
    score = 100
    if balance < -limit:
        score -= 30
    elif balance < -0.8 * limit:
        score -= 20
    elif balance < -0.5 * limit:
        score -= 10
    return max(0, min(100, score))


def trust_level(score: int) -> str:
    if score >= 80:
        return TRUST_RELIABLE
    if score >= 50:
        return TRUST_AVERAGE
    return TRUST_RISKY


def assess(balance: float, limit: float) -> TrustAssessment:
    score = trust_score(balance, limit)
    return TrustAssessment(score=score, level=trust_level(score))


# -----------------------------
# Display helpers
# -----------------------------

def default_description(kind: str) -> str:
    return "Manual Charge" if kind == DEBIT else "Payment Received"


def balance_label(balance: float) -> str:
    """'To Collect' when the technician owes the shop, 'To Give' otherwise."""
    return "To Collect" if balance >= 0 else "To Give"


def remaining_limit(balance: float, limit: float) -> float:
    """Credit still available to the technician: limit + balance."""
    return round(limit + balance, 2)
