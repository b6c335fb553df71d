# tests/test_settings_and_auth.py

import pytest

from khata_pos.app_context import make_authorizer
from khata_pos.database import get_store, integrity_problems
from khata_pos.database.errors import AuthorizationError, InvalidCodeError, ValidationError
from khata_pos.database.repositories.settings_repo import SettingsRepo
from khata_pos.database.seeders.default_data import seed
from khata_pos.modules.pos.codes import MANUAL, TECH
from khata_pos.utils.auth import Role, codes_match, ensure_hashed, hash_pin, is_hashed, verify_pin


# ---------------------------- hashing ----------------------------

def test_hash_and_verify_pin():
    h = hash_pin("4321", rounds=4)
    assert is_hashed(h)
    assert verify_pin("4321", h)
    assert not verify_pin("1234", h)
    assert not verify_pin("4321", "not-a-hash")
    assert not verify_pin("4321", None)


def test_ensure_hashed_only_hashes_plaintext():
    h = hash_pin("1111", rounds=4)
    assert ensure_hashed(h) == h
    converted = ensure_hashed("2222")
    assert is_hashed(converted) and verify_pin("2222", converted)


def test_codes_match_ignores_case_and_spaces():
    assert codes_match(" tech ", "TECH")
    assert not codes_match("TEC", "TECH")


# ---------------------------- authorizer ----------------------------

def test_authorizer_roles(store):
    auth = make_authorizer(SettingsRepo(store))
    assert auth.authorize("1234") is Role.ADMIN
    assert auth.authorize("tech") is Role.TECHNICIAN
    assert auth.authorize("CUST") is Role.CUSTOMER
    assert auth.authorize("") is Role.CUSTOMER
    assert auth.authorize("0000") is None
    assert auth.is_admin("1234")
    assert not auth.is_admin("")


# ---------------------------- settings repo ----------------------------

def test_change_admin_pin(store):
    repo = SettingsRepo(store)
    with pytest.raises(AuthorizationError):
        repo.change_admin_pin("9999", "5678")
    with pytest.raises(ValidationError):
        repo.change_admin_pin("1234", "12")
    with pytest.raises(ValidationError):
        repo.change_admin_pin("1234", "12ab")
    repo.change_admin_pin("1234", "5678")
    auth = make_authorizer(repo)
    assert auth.is_admin("5678")
    assert not auth.is_admin("1234")


def test_tech_code_reserved_values(store):
    repo = SettingsRepo(store)
    for reserved in ("A", "cust", "SANGLI10", "  "):
        with pytest.raises(ValidationError):
            repo.set_tech_code(reserved)
    repo.set_tech_code(" guru ")
    assert repo.tech_code == "GURU"


def test_no_bill_no_exit_toggle_notifies(store):
    seen = []
    store.subscribe(seen.append)
    SettingsRepo(store).set_no_bill_no_exit(True)
    assert store.state.settings.no_bill_no_exit is True
    assert seen == ["settings"]


# ---------------------------- boot ----------------------------

def test_corrupt_boot_state_enters_safe_mode():
    state = seed()
    state.inventory = None
    assert integrity_problems(state)
    s = get_store(state)
    assert s.state.safe_mode is True
    assert s.state.inventory == []
    (log,) = s.state.security_logs
    assert log.type == "SAFE_MODE" and log.severity == "high"
    # settings survive so the admin can still authorise
    assert verify_pin("1234", s.state.settings.admin_pin_hash)


def test_seeded_store_is_healthy(store):
    assert store.state.safe_mode is False
    assert integrity_problems(store.state) == []


# ---------------------------- POS session ----------------------------

def test_session_codes(ctx):
    s = ctx.session
    s.add_product(ctx.products.get("1"))
    s.add_product(ctx.products.get("1"))
    assert s.totals().total == 7000.0

    code = s.apply_code("TECH")
    assert code.kind == TECH
    assert s.cart.lines[0].total == 5600.0

    with pytest.raises(InvalidCodeError):
        s.apply_code("BOGUS")
    assert s.code.kind == TECH
    s.remove_code()

    manual = s.apply_code("A")
    assert manual.kind == MANUAL
    assert s.manual_total == "7000"
    s.manual_total = "6500"
    assert s.totals().total == 6500.0

    s.remove_code()
    assert s.code is None
    assert s.totals().total == 7000.0


def test_manual_code_seeds_from_repriced_lines(ctx):
    s = ctx.session
    s.add_product(ctx.products.get("1"))
    s.add_product(ctx.products.get("1"))
    s.apply_code("TECH")
    assert s.totals().total == 5600.0

    s.apply_code("A")
    assert s.cart.lines[0].total == 7000.0
    assert s.manual_total == "7000"
    assert s.totals().subtotal == 7000.0


def test_clear_large_cart_logs_void(ctx):
    s = ctx.session
    s.add_product(ctx.products.get("1"))
    s.clear()
    assert s.cart.is_empty()
    (log,) = ctx.logs.list_security()
    assert log.type == "VOID_BILL"
    assert "3500" in log.details


def test_clear_small_cart_is_silent(ctx):
    s = ctx.session
    s.cart.return_mode = True
    s.add_product(ctx.products.get("1"))
    s.clear()
    assert ctx.logs.list_security() == []


def test_clear_requires_pin_under_policy(ctx):
    ctx.settings.set_no_bill_no_exit(True)
    s = ctx.session
    s.add_product(ctx.products.get("2"))
    assert s.needs_clear_authorization()
    with pytest.raises(AuthorizationError, match="Incorrect PIN"):
        s.clear("0000")
    assert len(s.cart) == 1
    s.clear("1234")
    assert s.cart.is_empty()
