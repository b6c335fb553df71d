# tests/test_khata_ui.py

import pytest

pytest.importorskip("PySide6")

from khata_pos.modules.khata import controller as khata_controller
from khata_pos.modules.khata.controller import KhataController
from khata_pos.modules.khata.entry_dialog import LedgerEntryDialog
from khata_pos.modules.khata.form import TechnicianForm


def test_technician_form_validation(qtbot):
    form = TechnicianForm()
    qtbot.addWidget(form)
    assert form.get_payload() is None
    assert form.lbl_error.text() == "Name is required."

    form.name.setText("Vijay Cooling")
    form.mobile.setText("98-12")
    assert form.get_payload() is None
    assert form.lbl_error.text() == "Enter a valid mobile number."

    form.mobile.setText("98220 11223")
    form.limit.setText("abc")
    assert form.get_payload() is None

    form.limit.setText("8000")
    form.opening.setText("250")
    p = form.get_payload()
    assert p["name"] == "Vijay Cooling"
    assert p["limit"] == 8000.0
    assert p["opening_balance"] == 250.0


def test_ledger_entry_dialog(qtbot):
    dlg = LedgerEntryDialog("Ramesh Kumar")
    qtbot.addWidget(dlg)
    dlg.amount.setText("0")
    assert dlg.get_payload() is None
    assert dlg.lbl_error.text()

    dlg.rb_credit.setChecked(True)
    dlg.amount.setText("750")
    assert dlg.description.placeholderText() == "Payment Received"
    assert dlg.get_payload() == {"amount": 750.0, "kind": "Credit", "description": None}


def test_first_technician_is_selected(qtbot, ctx):
    c = KhataController(ctx)
    qtbot.addWidget(c.view)
    assert c.active_id == "T1"
    d = c.view.details
    assert d.lab_id.text() == "TECH-T1"
    assert d.lab_balance_caption.text() == "To Collect:"
    assert d.lab_balance.text() == "₹ 1,250.00"
    assert d.lab_remaining.text() == "₹ 6,250.00"
    assert d.lab_trust.text() == "100% Reliable"
    assert c.view.lbl_total.text() == "Total outstanding: ₹ 850.00"
    assert c.ledger_model.rowCount() == 1


def test_select_technician_with_credit_balance(qtbot, ctx):
    c = KhataController(ctx)
    qtbot.addWidget(c.view)
    c.select_technician("T2")
    d = c.view.details
    assert d.lab_name.text() == "Sunil Refrigeration"
    assert d.lab_balance_caption.text() == "To Give:"
    assert d.lab_balance.text() == "₹ 400.00"
    assert c.view.lbl_empty.isVisibleTo(c.view)


def test_post_entry_updates_details(qtbot, ctx, capture_messages):
    c = KhataController(ctx)
    qtbot.addWidget(c.view)
    messages = capture_messages(khata_controller)

    entry = c.post_entry(500, "Credit")
    assert entry.description == "Payment Received"
    assert c.view.details.lab_balance.text() == "₹ 750.00"
    assert c.ledger_model.rowCount() == 2
    assert messages == [("info", "New Entry", "Transaction recorded successfully!")]
    assert ctx.sound.played == ["payment-success"]


def test_post_entry_rejects_zero(qtbot, ctx, capture_messages):
    c = KhataController(ctx)
    qtbot.addWidget(c.view)
    messages = capture_messages(khata_controller)
    assert c.post_entry(0, "Debit") is None
    assert messages[0][:2] == ("error", "New Entry")
    assert c.ledger_model.rowCount() == 1


def test_create_technician_selects_it(qtbot, ctx, capture_messages):
    c = KhataController(ctx)
    qtbot.addWidget(c.view)
    messages = capture_messages(khata_controller)

    t = c.create_technician(name="Vijay Cooling", mobile="9822011223", limit=3000.0)
    assert t is not None
    assert c.active_id == t.id
    assert c.base.rowCount() == 3
    assert c.view.details.lab_name.text() == "Vijay Cooling"
    assert messages == [("info", "Add Technician", "New Technician Added!")]

    assert c.create_technician(name="", mobile="9822011223") is None
    assert messages[-1][0] == "error"


def test_search_filters_rows(qtbot, ctx):
    c = KhataController(ctx)
    qtbot.addWidget(c.view)
    c.view.search.setText("sunil")
    assert c.base.rowCount() == 1
    assert c.active_id == "T2"
    c.view.search.setText("nobody")
    assert c.base.rowCount() == 0
    assert c.active_id is None
    assert not c.view.btn_entry.isEnabled()
