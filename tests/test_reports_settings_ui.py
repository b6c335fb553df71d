# tests/test_reports_settings_ui.py

import csv
from datetime import date

import pytest

pytest.importorskip("PySide6")

from PySide6.QtGui import QGuiApplication

from khata_pos.database.repositories.reporting_repo import RANGE_ALL, RANGE_CUSTOM
from khata_pos.modules.dashboard.controller import DashboardController
from khata_pos.modules.reporting import controller as reporting_controller
from khata_pos.modules.reporting.controller import ReportsController
from khata_pos.modules.settings import controller as settings_controller
from khata_pos.modules.settings.controller import SettingsController
from khata_pos.utils.auth import verify_pin


def _sell(ctx, product_id="1"):
    ctx.session.add_product(ctx.products.get(product_id))
    return ctx.checkout.checkout_session(ctx.session)


# ---------------------------- reports ----------------------------

def test_reports_pick_up_new_bills(qtbot, ctx):
    c = ReportsController(ctx)
    qtbot.addWidget(c.view)
    assert c.base.rowCount() == 0
    assert c.view.lbl_khata.text() == "₹ 850.00"

    bill = _sell(ctx)
    assert c.base.rowCount() == 1
    assert c.view.lbl_sales.text() == "₹ 3,500.00"
    assert c.select_bill(bill.id)
    assert c.selected_bill().id == bill.id
    assert c.view.lab_payment.text() == "Cash"
    assert c.items_model.rowCount() == 1
    assert c.view.btn_share.isEnabled()


def test_invalid_custom_range_keeps_previous(qtbot, ctx, capture_messages):
    c = ReportsController(ctx)
    qtbot.addWidget(c.view)
    messages = capture_messages(reporting_controller)
    _sell(ctx)

    assert not c.set_range(RANGE_CUSTOM, date(2024, 1, 10), date(2024, 1, 5))
    assert messages[0][:2] == ("error", "Reports")
    assert c.base.rowCount() == 1

    assert c.set_range(RANGE_CUSTOM, date(2000, 1, 1), date(2000, 1, 2))
    assert c.base.rowCount() == 0
    assert c.set_range(RANGE_ALL)
    assert c.base.rowCount() == 1


def test_export_csv_and_share(qtbot, ctx, capture_messages, tmp_path):
    c = ReportsController(ctx)
    qtbot.addWidget(c.view)
    messages = capture_messages(reporting_controller)
    bill = _sell(ctx)

    out = tmp_path / "bills.csv"
    assert c.export_csv(str(out)) == 1
    with open(out, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[1][0] == bill.id
    assert messages[-1] == ("info", "Export Bills", "1 bills exported.")

    assert c.share_selected_bill() is None
    c.select_bill(bill.id)
    text = c.share_selected_bill()
    assert f"Bill ID: {bill.id}" in text
    assert QGuiApplication.clipboard().text() == text


# ---------------------------- settings ----------------------------

def test_change_pin(qtbot, ctx, capture_messages):
    c = SettingsController(ctx)
    qtbot.addWidget(c.view)
    messages = capture_messages(settings_controller)

    assert not c.change_pin("1234", "5678", "5679")
    assert messages[-1] == ("error", "Change PIN", "New PIN and confirmation do not match.")
    assert not c.change_pin("0000", "5678", "5678")

    c.view.new_pin.setText("5678")
    assert c.change_pin("1234", "5678", "5678")
    assert messages[-1] == ("info", "Change PIN", "Admin PIN updated.")
    assert c.view.new_pin.text() == ""
    assert verify_pin("5678", ctx.store.state.settings.admin_pin_hash)


def test_save_tech_code(qtbot, ctx, capture_messages):
    c = SettingsController(ctx)
    qtbot.addWidget(c.view)
    messages = capture_messages(settings_controller)
    assert c.view.tech_code.text() == "TECH"

    assert c.save_tech_code("guru")
    assert messages[-1] == ("info", "Technician Code", "Technician code set to GURU.")
    assert c.view.tech_code.text() == "GURU"

    assert not c.save_tech_code("A")
    assert messages[-1][0] == "error"


def test_policy_checkbox_and_alerts(qtbot, ctx):
    c = SettingsController(ctx)
    qtbot.addWidget(c.view)
    assert c.view.lbl_alerts.text() == "0 security events logged"
    c.view.chk_no_bill_no_exit.setChecked(True)
    assert ctx.settings.no_bill_no_exit is True

    ctx.logs.security("VOID_BILL", "Cart cleared", "medium")
    assert c.view.lbl_alerts.text() == "1 security events logged"
    assert c.base.rowCount() == 1


# ---------------------------- dashboard ----------------------------

def test_dashboard_cards_and_shortcuts(qtbot, ctx):
    c = DashboardController(ctx.store)
    qtbot.addWidget(c.view)
    assert c.view.kpi_text("khata") == "₹ 850.00"
    assert c.view.kpi_text("low_stock") == "1"

    _sell(ctx)
    assert c.view.kpi_text("daily_sales") == "₹ 3,500.00"

    with qtbot.waitSignal(c.open_inventory, timeout=1000):
        c.view.low_stock_view_requested.emit()
    with qtbot.waitSignal(c.open_pos, timeout=1000):
        c.view.btn_new_bill.click()
