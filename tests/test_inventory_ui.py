# tests/test_inventory_ui.py

from dataclasses import replace

import httpx
import pytest

pytest.importorskip("PySide6")

from khata_pos.modules.inventory import controller as inventory_controller
from khata_pos.modules.inventory.controller import InventoryController
from khata_pos.modules.inventory.dialogs import PriceRevealDialog, StockReasonDialog
from khata_pos.modules.inventory.form import ProductForm
from khata_pos.modules.inventory.price_revealer import MASK
from khata_pos.utils.vision import VisionClient


def test_product_form_requires_names(qtbot):
    form = ProductForm()
    qtbot.addWidget(form)
    form.brand.setText("LG")
    form.part_type.setText("PCB")
    assert form.get_payload() is None
    assert "Part name" in form.lbl_error.text()

    form.part_name.setText("  Outdoor PCB ")
    form.models.setText("LS-Q18, , LS-Q24")
    form.batch.setText("B-7")
    p = form.get_payload()
    assert p.part_name == "Outdoor PCB"
    assert p.compatible_models == ["LS-Q18", "LS-Q24"]
    assert p.tracking_info.batch_number == "B-7"
    assert p.tracking_info.purchase_date is None
    assert p.id == ""


def test_product_form_edit_keeps_identity(qtbot, store):
    current = store.state.inventory[0]
    form = ProductForm(initial=current)
    qtbot.addWidget(form)
    assert form.stock.value() == 15
    form.stock.setValue(10)
    p = form.get_payload()
    assert p.id == current.id
    assert p.images == current.images
    assert p.stock_quantity == 10


def test_stock_reason_dialog_defaults_to_audit(qtbot):
    dlg = StockReasonDialog("PCB", -2)
    qtbot.addWidget(dlg)
    assert dlg.selected_reason() == "Audit Correction"


def test_filters_and_status(qtbot, ctx):
    c = InventoryController(ctx)
    qtbot.addWidget(c.view)
    assert c.base.rowCount() == 2
    c.view.chk_low.setChecked(True)
    assert c.base.rowCount() == 1
    assert c.base.at(0).id == "2"
    assert c.view.lbl_status.text().startswith("1 of 2 products")
    c.view.chk_low.setChecked(False)
    c.view.cmb_machine.setCurrentText("AC")
    assert [c.base.at(i).id for i in range(c.base.rowCount())] == ["1"]


def test_stock_edit_prompts_for_reason(qtbot, ctx, capture_messages):
    asked = []

    def choose(name, change):
        asked.append((name, change))
        return "New Stock"

    c = InventoryController(ctx, choose_reason=choose)
    qtbot.addWidget(c.view)
    capture_messages(inventory_controller)
    edited = replace(ctx.products.get("2"), stock_quantity=10)

    saved = c.save_product(edited, is_new=False)
    assert saved.stock_quantity == 10
    assert asked == [("Samsung 190L Inverter Compressor", 6)]
    assert c.stock_model.rowCount() == 1
    assert ctx.sound.played == ["click"]


def test_cancelled_reason_discards_edit(qtbot, ctx):
    c = InventoryController(ctx, choose_reason=lambda name, change: None)
    qtbot.addWidget(c.view)
    edited = replace(ctx.products.get("1"), stock_quantity=1)
    assert c.save_product(edited, is_new=False) is None
    assert ctx.products.get("1").stock_quantity == 15
    assert ctx.logs.list_stock() == []


def test_invalid_product_shows_error(qtbot, ctx, capture_messages):
    c = InventoryController(ctx)
    qtbot.addWidget(c.view)
    messages = capture_messages(inventory_controller)
    bad = replace(ctx.products.get("1"), id="", barcode="", part_name="")
    assert c.save_product(bad, is_new=True) is None
    assert messages and messages[0][0] == "error"


def test_price_reveal_dialog(qtbot, ctx):
    c = InventoryController(ctx)
    qtbot.addWidget(c.view)
    dlg = PriceRevealDialog(ctx.products.get("1"), c.reveal)
    qtbot.addWidget(dlg)
    assert dlg.lbl_purchase.text() == MASK

    dlg.code.setText("nope")
    assert dlg.try_reveal() is False
    assert dlg.lbl_error.text() == "Invalid Code"

    dlg.code.setText("TECH")
    assert dlg.try_reveal() is True
    assert dlg.lbl_technician.text() == "₹ 2,800.00"
    assert dlg.lbl_purchase.text() == MASK

    dlg.code.setText("1234")
    dlg.try_reveal()
    assert dlg.lbl_purchase.text() == "₹ 2,200.00"
    assert ctx.logs.list_security()[0].type == "PRICE_CHECK"


def test_identify_image_fills_search(qtbot, ctx, tmp_path):
    photo = tmp_path / "part.jpg"
    photo.write_bytes(b"\xff\xd8fake")
    ctx.vision = VisionClient(
        url="https://vision.test",
        transport=httpx.MockTransport(
            lambda r: httpx.Response(200, json={"partType": "Compressor", "brand": "Samsung"})
        ),
    )
    c = InventoryController(ctx)
    qtbot.addWidget(c.view)
    assert c.identify_image(photo) == {"partType": "Compressor", "brand": "Samsung"}
    assert c.view.search.text() == "Samsung Compressor"
    assert c.view.lbl_status.text() == "Detected: Samsung Compressor"
    assert ctx.sound.played == ["scan-success"]


def test_identify_image_missing_file(qtbot, ctx, tmp_path):
    c = InventoryController(ctx)
    qtbot.addWidget(c.view)
    assert c.identify_image(tmp_path / "missing.jpg") is None
    assert ctx.sound.played == ["scan-error"]


def test_select_tab(qtbot, ctx):
    c = InventoryController(ctx)
    qtbot.addWidget(c.view)
    c.select_tab("price_log")
    assert c.view.tabs.currentIndex() == 2
