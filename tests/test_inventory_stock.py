# tests/test_inventory_stock.py

from dataclasses import replace
from datetime import datetime, timedelta

import pytest

from khata_pos.app_context import make_authorizer
from khata_pos.database.errors import (
    AuthorizationError,
    ImportFormatError,
    NotFoundError,
    PendingReasonRequired,
    ValidationError,
)
from khata_pos.database.models import Product
from khata_pos.database.repositories.logs_repo import LogsRepo
from khata_pos.database.repositories.products_repo import ProductsRepo, next_generated_barcode
from khata_pos.database.repositories.settings_repo import SettingsRepo
from khata_pos.modules.inventory.price_revealer import reveal_prices
from khata_pos.modules.inventory.stock import dead_stock_status, search_catalog
from khata_pos.utils.auth import Role


def _new_product(**kw):
    fields = dict(
        id="", barcode="", machine_type="Washing Machine", brand="IFB",
        part_type="Drain Pump", part_name="IFB Drain Pump", stock_quantity=6,
        purchase_price=300.0, technician_price=450.0, customer_price=600.0,
    )
    fields.update(kw)
    return Product(**fields)


# ---------------------------- manual edits ----------------------------

def test_stock_edit_without_reason_is_held(store):
    repo = ProductsRepo(store)
    edited = replace(repo.get("1"), stock_quantity=12)
    with pytest.raises(PendingReasonRequired) as exc:
        repo.update(edited)
    assert exc.value.change == -3
    assert repo.get("1").stock_quantity == 15
    assert store.state.stock_logs == []


def test_stock_edit_with_reason_logs_exactly_once(store):
    repo = ProductsRepo(store)
    repo.update(replace(repo.get("1"), stock_quantity=12), reason="Breakage")
    assert repo.get("1").stock_quantity == 12
    (log,) = store.state.stock_logs
    assert (log.change, log.new_stock, log.reason) == (-3, 12, "Breakage")


def test_unknown_reason_rejected(store):
    repo = ProductsRepo(store)
    with pytest.raises(ValidationError):
        repo.update(replace(repo.get("1"), stock_quantity=20), reason="Stolen")
    assert repo.get("1").stock_quantity == 15


def test_price_change_logs_each_tier(store):
    repo = ProductsRepo(store)
    repo.update(replace(repo.get("2"), customer_price=6800.0, purchase_price=4600.0))
    fields = sorted(p.field for p in LogsRepo(store).list_price())
    assert fields == ["Customer", "Purchase"]
    assert store.state.stock_logs == []


def test_update_unknown_product(store):
    with pytest.raises(NotFoundError):
        ProductsRepo(store).update(_new_product(id="nope"))


# ---------------------------- create ----------------------------

def test_create_generates_barcode_and_logs_new_stock(store):
    repo = ProductsRepo(store)
    p = repo.create(_new_product())
    assert p.id
    assert p.barcode == "BR-1001"
    assert repo.list_products()[0].id == p.id
    assert store.state.stock_logs[-1].reason == "New Stock"
    assert store.state.stock_logs[-1].change == 6
    assert store.state.security_logs[-1].type == "STOCK_EDIT"

    second = repo.create(_new_product(part_name="IFB Door Lock"))
    assert second.barcode == "BR-1002"


def test_create_rejects_duplicate_barcode_and_bad_fields(store):
    repo = ProductsRepo(store)
    with pytest.raises(ValidationError):
        repo.create(_new_product(barcode="lg-pcb-001"))
    with pytest.raises(ValidationError):
        repo.create(_new_product(part_name="  "))
    with pytest.raises(ValidationError):
        repo.create(_new_product(machine_type="Microwave"))
    with pytest.raises(ValidationError):
        repo.create(_new_product(customer_price=-1.0))
    assert len(repo.list_products()) == 2


def test_next_generated_barcode_ignores_other_codes():
    assert next_generated_barcode(["LG-PCB-001", "BR-1009", "BR-x"]) == "BR-1010"
    assert next_generated_barcode([]) == "BR-1001"


# ---------------------------- search / low stock / dead stock ----------------------------

def test_search_and_filters(store):
    repo = ProductsRepo(store)
    assert [p.id for p in repo.search("compressor")] == ["2"]
    assert [p.id for p in repo.search("lg-pcb")] == ["1"]
    assert [p.id for p in repo.search("whirlpool")] == ["2"]
    assert [p.id for p in repo.search("", "AC")] == ["1"]
    assert len(repo.search("", "All")) == 2
    assert search_catalog(repo.list_products(), "nothing-like-this") == []


def test_low_stock(store):
    assert [p.id for p in ProductsRepo(store).low_stock()] == ["2"]


def test_dead_stock_status():
    now = datetime(2024, 6, 1)
    p = _new_product(last_sold_date=(now - timedelta(days=10)).isoformat())
    assert dead_stock_status(p, now) != dead_stock_status(
        replace(p, last_sold_date=(now - timedelta(days=200)).isoformat()), now
    )


# ---------------------------- inventory file ----------------------------

def test_inventory_export_import_round_trip(store):
    repo = ProductsRepo(store)
    before = repo.list_products()
    rows = repo.export_inventory()
    assert repo.import_inventory(rows) == 2
    assert repo.list_products() == before


def test_inventory_import_rejects_non_array(store):
    repo = ProductsRepo(store)
    with pytest.raises(ImportFormatError):
        repo.import_inventory({"inventory": []})
    assert len(repo.list_products()) == 2


@pytest.mark.parametrize("field, value", [
    ("customerPrice", "abc"),
    ("stockQuantity", "lots"),
    ("purchasePrice", "nan"),
    ("lowStockThreshold", True),
])
def test_inventory_import_rejects_malformed_numbers(store, field, value):
    repo = ProductsRepo(store)
    before = repo.list_products()
    rows = repo.export_inventory()
    rows[0][field] = value
    with pytest.raises(ImportFormatError):
        repo.import_inventory(rows)
    assert repo.list_products() == before


def test_inventory_import_defaults_missing_numbers(store):
    repo = ProductsRepo(store)
    rows = repo.export_inventory()
    del rows[0]["lowStockThreshold"]
    rows[1]["purchasePrice"] = None
    assert repo.import_inventory(rows) == 2
    assert repo.list_products()[1].purchase_price == 0.0


# ---------------------------- price reveal ----------------------------

def test_price_reveal_by_role(store):
    auth = make_authorizer(SettingsRepo(store))
    logs = LogsRepo(store)
    p = ProductsRepo(store).get("1")

    tech = reveal_prices(p, "tech", auth, logs)
    assert tech.role is Role.TECHNICIAN
    assert tech.technician_price == 2800.0 and tech.purchase_price is None

    cust = reveal_prices(p, "CUST", auth, logs)
    assert cust.role is Role.CUSTOMER
    assert cust.customer_price == 3500.0 and cust.technician_price is None
    assert logs.list_security() == []

    admin = reveal_prices(p, "1234", auth, logs)
    assert admin.role is Role.ADMIN
    assert admin.purchase_price == 2200.0
    assert logs.list_security()[0].type == "PRICE_CHECK"

    with pytest.raises(AuthorizationError):
        reveal_prices(p, "9999", auth, logs)
