# tests/test_cart_and_billing.py

import pytest

from khata_pos.database.errors import InvalidCodeError, OutOfStockError, ValidationError
from khata_pos.database.models import Product
from khata_pos.modules.pos.billing import compile_bill, discount_for, parse_manual_total
from khata_pos.modules.pos.cart import CUSTOMER_TIER, TECHNICIAN_TIER, Cart, unit_price
from khata_pos.modules.pos.codes import FIXED, MANUAL, PERCENT, TECH, resolve_code, tier_for


def make_product(pid="P1", price=100.0, tech=80.0, stock=10, name=None):
    return Product(
        id=pid,
        barcode=f"BC-{pid}",
        machine_type="AC",
        brand="LG",
        part_type="PCB",
        part_name=name or f"Part {pid}",
        stock_quantity=stock,
        purchase_price=50.0,
        technician_price=tech,
        customer_price=price,
    )


# ---------------------------- cart ----------------------------

def test_adding_same_product_merges_into_one_line():
    cart = Cart()
    p = make_product()
    cart.add_line(p)
    line = cart.add_line(p, 2)
    assert len(cart) == 1
    assert line.quantity == 3
    assert line.total == 300.0
    assert cart.item_count() == 3


def test_out_of_stock_sale_refused_but_return_allowed():
    cart = Cart()
    p = make_product(stock=0)
    with pytest.raises(OutOfStockError):
        cart.add_line(p)
    assert cart.is_empty()

    cart.return_mode = True
    line = cart.add_line(p)
    assert line.price == -100.0
    assert line.total == -100.0


def test_quantity_must_be_positive():
    with pytest.raises(ValidationError):
        Cart().add_line(make_product(), 0)


def test_reprice_switches_tier_and_keeps_return_sign():
    cart = Cart()
    sale = make_product("P1")
    ret = make_product("P2", price=200.0, tech=150.0)
    cart.add_line(sale)
    cart.return_mode = True
    cart.add_line(ret)

    cart.reprice(TECHNICIAN_TIER, {"P1": sale, "P2": ret})
    by_id = {line.product_id: line for line in cart.lines}
    assert by_id["P1"].price == 80.0
    assert by_id["P2"].price == -150.0

    cart.reprice(CUSTOMER_TIER, {"P1": sale, "P2": ret})
    by_id = {line.product_id: line for line in cart.lines}
    assert by_id["P1"].total == 100.0
    assert by_id["P2"].total == -200.0


def test_remove_and_clear():
    cart = Cart()
    cart.add_line(make_product("P1"))
    cart.add_line(make_product("P2"))
    assert cart.remove_line("P1") is True
    assert cart.remove_line("P1") is False
    cart.return_mode = True
    cart.tier = TECHNICIAN_TIER
    cart.clear()
    assert cart.is_empty()
    assert cart.return_mode is False
    assert cart.tier == CUSTOMER_TIER


def test_unit_price_tiers():
    p = make_product(price=3500.0, tech=2800.0)
    assert unit_price(p) == 3500.0
    assert unit_price(p, TECHNICIAN_TIER) == 2800.0
    assert unit_price(p, TECHNICIAN_TIER, return_mode=True) == -2800.0


# ---------------------------- codes ----------------------------

def test_resolve_code_kinds():
    assert resolve_code("  tech ", "TECH").kind == TECH
    assert resolve_code("a", "TECH").kind == MANUAL
    promo = resolve_code("sangli10", "TECH")
    assert promo.kind == PERCENT and promo.value == 10.0
    flat = resolve_code("DISCOUNT50", "TECH")
    assert flat.kind == FIXED and flat.value == 50.0
    assert resolve_code("   ", "TECH") is None


def test_unknown_code_raises():
    with pytest.raises(InvalidCodeError, match="Invalid Code"):
        resolve_code("FREEBIE", "TECH")


def test_changed_tech_code_is_honoured():
    assert resolve_code("GURU", "GURU").kind == TECH
    with pytest.raises(InvalidCodeError):
        resolve_code("TECH", "GURU")


def test_tier_for():
    assert tier_for(resolve_code("TECH", "TECH")) == TECHNICIAN_TIER
    assert tier_for(resolve_code("SANGLI10", "TECH")) == CUSTOMER_TIER
    assert tier_for(None) == CUSTOMER_TIER


# ---------------------------- totals ----------------------------

def _lines(*pairs):
    cart = Cart()
    for i, (price, qty) in enumerate(pairs):
        cart.add_line(make_product(f"P{i}", price=price), qty)
    return cart.lines


def test_percent_and_flat_promos():
    lines = _lines((100.0, 2))
    t = compile_bill(lines, resolve_code("SANGLI10", "TECH"))
    assert (t.subtotal, t.discount, t.total) == (200.0, 20.0, 180.0)

    t = compile_bill(lines, resolve_code("DISCOUNT50", "TECH"), tax_enabled=True)
    assert t.discount == 50.0
    assert t.taxable == 150.0
    assert t.tax == 27.0
    assert t.total == 177.0


def test_flat_discount_capped_at_subtotal():
    lines = _lines((30.0, 1))
    t = compile_bill(lines, resolve_code("DISCOUNT50", "TECH"))
    assert t.discount == 30.0
    assert t.total == 0.0


def test_no_promo_discount_on_net_return():
    assert discount_for(-100.0, resolve_code("SANGLI10", "TECH")) == 0.0
    assert discount_for(0.0, resolve_code("DISCOUNT50", "TECH")) == 0.0


def test_manual_override_wins_and_bad_text_falls_back():
    lines = _lines((100.0, 1))
    t = compile_bill(lines, resolve_code("A", "TECH"), tax_enabled=True, manual_total="90")
    assert t.total == 90.0
    assert t.calculated_total == 118.0
    assert t.is_overridden

    t = compile_bill(lines, resolve_code("A", "TECH"), manual_total="ninety")
    assert t.total == 100.0
    assert not t.is_overridden


def test_parse_manual_total():
    assert parse_manual_total("₹ 1,250.50") == 1250.5
    assert parse_manual_total("-200") == -200.0
    with pytest.raises(ValidationError):
        parse_manual_total("")
    with pytest.raises(ValidationError):
        parse_manual_total("abc")
    with pytest.raises(ValidationError):
        parse_manual_total("inf")
