# tests/test_khata_ledger.py

import pytest

from khata_pos.database.errors import NotFoundError, ValidationError
from khata_pos.database.models import LedgerEntry
from khata_pos.database.repositories.technicians_repo import TechniciansRepo
from khata_pos.modules.khata.trust import (
    assess,
    balance_label,
    default_description,
    fold_balance,
    remaining_limit,
    trust_level,
    trust_score,
)
from khata_pos.utils.validators import parse_positive_amount, try_parse_amount


def _entry(amount, kind):
    return LedgerEntry(id="x", technician_id="T1", date="2024-01-01T00:00:00", description="", amount=amount, type=kind)


def test_fold_balance_debits_up_credits_down():
    entries = [_entry(1000, "Debit"), _entry(250.5, "Credit"), _entry(10, "Debit")]
    assert fold_balance(-400.0, entries) == 359.5


@pytest.mark.parametrize(
    "balance, limit, score",
    [
        (1250.0, 5000.0, 100),
        (-2500.0, 5000.0, 100),   # exactly half the limit is not past it
        (-2600.0, 5000.0, 90),
        (-3250.0, 5000.0, 90),
        (-4100.0, 5000.0, 80),
        (-5001.0, 5000.0, 70),
    ],
)
def test_trust_score_bands(balance, limit, score):
    assert trust_score(balance, limit) == score


def test_trust_levels():
    assert trust_level(100) == "Reliable"
    assert trust_level(80) == "Reliable"
    assert trust_level(70) == "Average"
    assert trust_level(49) == "Risky"
    assert assess(-5001.0, 5000.0).level == "Average"


def test_display_helpers():
    assert balance_label(0) == "To Collect"
    assert balance_label(-1) == "To Give"
    assert default_description("Debit") == "Manual Charge"
    assert default_description("Credit") == "Payment Received"
    assert remaining_limit(-400.0, 10000.0) == 9600.0


# ---------------------------- repository ----------------------------

def test_seeded_balances(store):
    repo = TechniciansRepo(store)
    assert repo.balance("T1") == 1250.0
    assert repo.balance("T2") == -400.0
    assert repo.total_outstanding() == 850.0


def test_payment_received_lowers_balance_and_trust(store):
    repo = TechniciansRepo(store)
    entry = repo.post("T1", 4500, "Credit")
    assert entry.description == "Payment Received"
    s = repo.summary("T1")
    assert s.balance == -3250.0
    assert s.trust_score == 90
    assert s.trust_level == "Reliable"
    assert repo.entries_for("T1")[0].id == entry.id


def test_post_validation(store):
    repo = TechniciansRepo(store)
    with pytest.raises(ValidationError):
        repo.post("T1", 0, "Debit")
    with pytest.raises(ValidationError):
        repo.post("T1", "abc", "Debit")
    with pytest.raises(ValidationError):
        repo.post("T1", 10, "Refund")
    with pytest.raises(NotFoundError):
        repo.post("T9", 10, "Debit")
    assert len(store.state.ledger) == 1


@pytest.mark.parametrize("amount", [float("nan"), float("inf"), "nan", "-inf"])
def test_post_rejects_non_finite_amounts(store, amount):
    repo = TechniciansRepo(store)
    with pytest.raises(ValidationError):
        repo.post("T1", amount, "Debit")
    assert repo.balance("T1") == 1250.0
    assert repo.summary("T1").trust_score == 100


@pytest.mark.parametrize("text", ["nan", "inf", "-Infinity", "₹ 1e999"])
def test_amount_parsing_rejects_non_finite(text):
    assert try_parse_amount(text) == (False, None)
    with pytest.raises(ValidationError, match="must be a number"):
        parse_positive_amount(text)


def test_add_technician(store):
    repo = TechniciansRepo(store)
    seen = []
    store.subscribe(seen.append)
    t = repo.add_technician("  Mahesh ", "9000000001", company="Cool Care", opening_balance=200)
    assert t.id.startswith("T") and t.id not in ("T1", "T2")
    assert t.name == "Mahesh"
    assert t.limit == 5000.0
    assert repo.balance(t.id) == 200.0
    assert seen == ["khata"]

    with pytest.raises(ValidationError):
        repo.add_technician("", "9000000002")
    with pytest.raises(ValidationError):
        repo.add_technician("X", "9000000002", limit=-1)
    with pytest.raises(ValidationError):
        repo.add_technician("X", "9000000002", limit=float("inf"))
    with pytest.raises(ValidationError):
        repo.add_technician("X", "9000000002", opening_balance=float("nan"))


def test_search_by_name_or_mobile(store):
    repo = TechniciansRepo(store)
    assert [t.id for t in repo.search("sunil")] == ["T2"]
    assert [t.id for t in repo.search("98765")] == ["T1"]
    assert len(repo.search("")) == 2


def test_over_extended_by_more_than_eighty_percent(store):
    """Fresh technician, limit 5000: 4500 credited past zero costs 20 points."""
    repo = TechniciansRepo(store)
    t = repo.add_technician("Prakash", "9000000003", limit=5000)
    repo.post(t.id, 4500, "Credit", "Advance for compressor job")
    s = repo.summary(t.id)
    assert s.balance == -4500.0
    assert s.trust_score == 80
    assert s.trust_level == "Reliable"

    repo.post(t.id, 4500, "Debit")
    assert repo.summary(t.id).trust_score == 100
