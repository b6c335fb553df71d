# tests/test_payments_and_checkout.py

import pytest

from khata_pos.database.errors import NotFoundError, SplitMismatchError, ValidationError
from khata_pos.database.models import SplitPayment
from khata_pos.database.repositories.technicians_repo import TechniciansRepo
from khata_pos.modules.pos.cart import Cart
from khata_pos.modules.pos.checkout import CheckoutRequest, CheckoutService, khata_description
from khata_pos.modules.pos.codes import resolve_code
from khata_pos.modules.pos.payments import (
    SINGLE,
    SPLIT,
    build_payments,
    default_split,
    is_paid,
    khata_postings,
    payment_method_label,
)


# ---------------------------- payments ----------------------------

def test_single_payment_takes_whole_total():
    pays = build_payments(SINGLE, 1234.5, single_method="Online")
    assert pays == (SplitPayment("Online", 1234.5),)
    assert payment_method_label(SINGLE, pays) == "Online"


def test_split_within_one_rupee_is_accepted():
    pays = build_payments(SPLIT, 1000.0, splits={"Cash": 600.0, "Online": 399.5, "Khata": 0.0})
    assert [p.method for p in pays] == ["Cash", "Online"]
    assert payment_method_label(SPLIT, pays) == "Split"


def test_split_mismatch_rejected():
    with pytest.raises(SplitMismatchError) as exc:
        build_payments(SPLIT, 1000.0, splits={"Cash": 500.0, "Online": 400.0})
    assert exc.value.split_total == 900.0
    assert exc.value.bill_total == 1000.0


def test_khata_requires_technician():
    with pytest.raises(ValidationError, match="Technician"):
        build_payments(SINGLE, 500.0, single_method="Khata")
    with pytest.raises(ValidationError, match="Technician"):
        build_payments(SPLIT, 500.0, splits={"Cash": 200.0, "Khata": 300.0})


def test_unknown_method_rejected():
    with pytest.raises(ValidationError):
        build_payments(SINGLE, 10.0, single_method="Cheque")


def test_khata_postings_debit_and_refund_credit():
    postings = khata_postings([SplitPayment("Khata", 300.0), SplitPayment("Cash", 200.0)], "T1")
    assert [(p.kind, p.amount) for p in postings] == [("Debit", 300.0)]
    refund = khata_postings([SplitPayment("Khata", -450.0)], "T1")
    assert [(p.kind, p.amount) for p in refund] == [("Credit", 450.0)]


def test_is_paid_only_false_when_everything_on_khata():
    assert is_paid([SplitPayment("Khata", 10.0)]) is False
    assert is_paid([SplitPayment("Khata", 10.0), SplitPayment("Cash", 5.0)]) is True
    assert is_paid([]) is True


def test_default_split_is_all_cash():
    assert default_split(250) == {"Cash": 250.0, "Online": 0.0, "Khata": 0.0}


# ---------------------------- checkout ----------------------------

def _cart_for(store, *product_ids, return_mode=False):
    cart = Cart()
    cart.return_mode = return_mode
    by_id = {p.id: p for p in store.state.inventory}
    for pid in product_ids:
        cart.add_line(by_id[pid])
    return cart.lines


def test_checkout_cash_bill_moves_stock(store):
    svc = CheckoutService(store)
    bill = svc.checkout(CheckoutRequest(lines=_cart_for(store, "1", "1")))

    assert bill.total == 7000.0
    assert bill.customer_name == "Walk-in Customer"
    assert bill.payment_method == "Cash"
    assert bill.is_paid
    assert bill.id.startswith("BL")
    p1 = next(p for p in store.state.inventory if p.id == "1")
    assert p1.stock_quantity == 13
    assert p1.last_sold_date == bill.date
    assert store.state.bills[-1] is bill


def test_checkout_on_khata_debits_technician(store):
    techs = TechniciansRepo(store)
    assert techs.balance("T1") == 1250.0

    bill = CheckoutService(store).checkout(CheckoutRequest(
        lines=_cart_for(store, "1"),
        code=resolve_code("TECH", "TECH"),
        technician_id="T1",
        single_method="Khata",
    ))

    assert bill.customer_name == "Ramesh Kumar"
    assert bill.customer_mobile == "9876543210"
    assert bill.is_paid is False
    assert techs.balance("T1") == 1250.0 + 3500.0
    entry = techs.entries_for("T1")[0]
    assert entry.type == "Debit"
    assert entry.description.startswith(f"Bill #{bill.id[-4:]} (Partial): ")


def test_checkout_return_restocks_and_credits_khata(store):
    lines = _cart_for(store, "2", return_mode=True)
    bill = CheckoutService(store).checkout(CheckoutRequest(
        lines=lines,
        technician_id="T1",
        single_method="Khata",
        return_mode=True,
        return_reason="Defective Part",
    ))

    assert bill.total == -6500.0
    assert bill.notes == "RETURN: Defective Part"
    p2 = next(p for p in store.state.inventory if p.id == "2")
    assert p2.stock_quantity == 5
    assert store.state.stock_logs[-1].reason == "Return Restock"
    assert TechniciansRepo(store).balance("T1") == 1250.0 - 6500.0


def test_checkout_rolls_back_when_saving_fails(store, monkeypatch):
    svc = CheckoutService(store)

    def boom(bill):
        raise ValidationError("disk full")

    monkeypatch.setattr(svc.bills, "add", boom)
    with pytest.raises(ValidationError):
        svc.checkout(CheckoutRequest(lines=_cart_for(store, "1"), technician_id="T1", single_method="Khata"))

    assert TechniciansRepo(store).balance("T1") == 1250.0
    assert next(p for p in store.state.inventory if p.id == "1").stock_quantity == 15
    assert store.state.bills == []


def test_checkout_validation(store):
    svc = CheckoutService(store)
    with pytest.raises(ValidationError, match="Cart is empty"):
        svc.checkout(CheckoutRequest(lines=()))
    with pytest.raises(ValidationError):
        svc.checkout(CheckoutRequest(lines=_cart_for(store, "1"), code=resolve_code("A", "TECH"), manual_total="abc"))
    with pytest.raises(NotFoundError):
        svc.checkout(CheckoutRequest(lines=_cart_for(store, "1"), technician_id="T99"))
    assert store.state.bills == []


def _snapshot(store):
    return (
        list(store.state.bills),
        list(store.state.ledger),
        {p.id: p.stock_quantity for p in store.state.inventory},
    )


def test_split_mismatch_checkout_changes_nothing(store):
    svc = CheckoutService(store)
    before = _snapshot(store)
    with pytest.raises(SplitMismatchError):
        svc.checkout(CheckoutRequest(
            lines=_cart_for(store, "1"),
            technician_id="T1",
            payment_mode=SPLIT,
            splits={"Cash": 1000.0, "Khata": 2000.0},
        ))
    assert _snapshot(store) == before
    assert TechniciansRepo(store).balance("T1") == 1250.0


@pytest.mark.parametrize("mode, extra", [
    (SINGLE, {"single_method": "Khata"}),
    (SPLIT, {"splits": {"Cash": 1500.0, "Khata": 2000.0}}),
])
def test_khata_without_technician_changes_nothing(store, mode, extra):
    svc = CheckoutService(store)
    before = _snapshot(store)
    with pytest.raises(ValidationError, match="Select a Technician"):
        svc.checkout(CheckoutRequest(lines=_cart_for(store, "1"), payment_mode=mode, **extra))
    assert _snapshot(store) == before


def test_manual_total_bill_notes(store):
    bill = CheckoutService(store).checkout(CheckoutRequest(
        lines=_cart_for(store, "1"),
        code=resolve_code("A", "TECH"),
        manual_total="3000",
        manual_description="Old customer",
    ))
    assert bill.total == 3000.0
    assert bill.notes == "Manual Adj: Old customer"


def test_estimate_skips_effects_when_disabled(store):
    svc = CheckoutService(store, estimates_affect_stock=False)
    svc.checkout(CheckoutRequest(lines=_cart_for(store, "1"), bill_type="Estimate"))
    assert next(p for p in store.state.inventory if p.id == "1").stock_quantity == 15
    assert len(store.state.bills) == 1


def test_estimate_moves_stock_by_default(store):
    svc = CheckoutService(store, estimates_affect_stock=True)
    svc.checkout(CheckoutRequest(lines=_cart_for(store, "1"), bill_type="Estimate"))
    assert next(p for p in store.state.inventory if p.id == "1").stock_quantity == 14


def test_khata_description_truncates_summary():
    class Line:
        part_name = "Very Long Compressor Name For Testing"
        quantity = 3

    desc = khata_description("BL20240101-0007", [Line(), Line()], "")
    assert desc.startswith("Bill #0007 (Partial): ")
    assert desc.endswith("...")
    assert len(desc) == len("Bill #0007 (Partial): ") + 50 + 3


def test_checkout_session_resets_session(ctx):
    s = ctx.session
    s.add_product(ctx.products.get("1"))
    s.customer_name = "Anil"
    bill = ctx.checkout.checkout_session(s)
    assert bill.customer_name == "Anil"
    assert s.cart.is_empty()
    assert s.customer_name == ""
