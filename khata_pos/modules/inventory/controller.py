from __future__ import annotations

import base64
import logging
from pathlib import Path
from typing import Callable, Optional

from PySide6.QtCore import QSortFilterProxyModel
from PySide6.QtWidgets import QFileDialog, QWidget

from ..base_module import BaseModule
from ...app_context import AppContext
from ...database.errors import DomainError, PendingReasonRequired
from ...database.models import Product
from ...utils.ui_helpers import error
from .dialogs import PriceRevealDialog, StockReasonDialog
from .form import ProductForm
from .model import PriceLogTableModel, ProductsTableModel, StockLogTableModel
from .price_revealer import PriceReveal, reveal_prices
from .view import InventoryView

_log = logging.getLogger(__name__)

ReasonPrompt = Callable[[str, int], Optional[str]]


class InventoryController(BaseModule):
    """
    Catalog maintenance.

    Key behavior:
      - A stock change made through the edit form is held until a reason
        is chosen; cancelling the reason dialog discards the edit.
      - Prices are masked in the table and revealed per code.
      - "Search by Photo" asks the vision service for brand + part type
        and searches for them.
    """

    TABS = {"products": 0, "stock_log": 1, "price_log": 2}

    def __init__(self, ctx: AppContext, choose_reason: Optional[ReasonPrompt] = None):
        super().__init__()
        self.ctx = ctx
        self.repo = ctx.products
        self.view = InventoryView()
        self._choose_reason = choose_reason or self._ask_reason

        self.base = ProductsTableModel([])
        self.proxy = QSortFilterProxyModel(self.view)
        self.proxy.setSourceModel(self.base)
        self.view.table.setModel(self.proxy)
        self.stock_model = StockLogTableModel([])
        self.view.stock_log.setModel(self.stock_model)
        self.price_model = PriceLogTableModel([])
        self.view.price_log.setModel(self.price_model)

        self._wire()
        self.refresh()
        ctx.store.subscribe(self._on_store_changed)

    # ------------------------------------------------------------------ #
    # BaseModule API
    # ------------------------------------------------------------------ #

    def get_widget(self) -> QWidget:
        return self.view

    def select_tab(self, name: str) -> None:
        self.view.tabs.setCurrentIndex(self.TABS.get(name, 0))

    def _on_store_changed(self, topic: str) -> None:
        if topic in ("inventory", "logs", "all"):
            self.refresh()

    def _wire(self):
        v = self.view
        v.btn_add.clicked.connect(self.add_product)
        v.btn_edit.clicked.connect(self.edit_product)
        v.btn_prices.clicked.connect(self.show_prices)
        v.btn_photo.clicked.connect(self._pick_photo)
        v.table.doubleClicked.connect(lambda *_: self.edit_product())
        v.search.textChanged.connect(lambda *_: self._reload_products())
        v.cmb_machine.currentTextChanged.connect(lambda *_: self._reload_products())
        v.chk_low.toggled.connect(lambda *_: self._reload_products())

    # ------------------------------------------------------------------ #
    # Loading
    # ------------------------------------------------------------------ #

    def refresh(self) -> None:
        self._reload_products()
        self.stock_model.replace(self.ctx.logs.list_stock())
        self.price_model.replace(self.ctx.logs.list_price())

    def _reload_products(self) -> None:
        v = self.view
        rows = self.repo.search(v.search.text(), v.cmb_machine.currentText())
        if v.chk_low.isChecked():
            rows = [p for p in rows if p.is_low_stock]
        self.base.replace(rows)
        total = len(self.repo.list_products())
        v.lbl_status.setText(f"{len(rows)} of {total} products · {len(self.repo.low_stock())} low on stock")

    def _selected(self) -> Product | None:
        idxs = self.view.table.selectionModel().selectedRows()
        if not idxs:
            return None
        return self.base.at(self.proxy.mapToSource(idxs[0]).row())

    # ------------------------------------------------------------------ #
    # Add / edit
    # ------------------------------------------------------------------ #

    def add_product(self) -> None:
        form = ProductForm(self.view)
        if form.exec():
            self.save_product(form.payload(), is_new=True)

    def edit_product(self) -> None:
        current = self._selected()
        if current is None:
            return
        form = ProductForm(self.view, initial=current)
        if form.exec():
            self.save_product(form.payload(), is_new=False)

    def _ask_reason(self, product_name: str, change: int) -> Optional[str]:
        dlg = StockReasonDialog(product_name, change, self.view)
        return dlg.selected_reason() if dlg.exec() else None

    def save_product(self, product: Product, is_new: bool) -> Optional[Product]:
        """
        Create or update. An update that moves stock asks for the reason;
        without one nothing is saved.
        """
        try:
            if is_new:
                saved = self.repo.create(product)
            else:
                try:
                    saved = self.repo.update(product)
                except PendingReasonRequired as held:
                    reason = self._choose_reason(product.part_name, held.change)
                    if not reason:
                        _log.info("Stock edit of %s discarded: no reason given", product.id)
                        return None
                    saved = self.repo.update(product, reason)
        except DomainError as e:
            error(self.view, "Cannot Save Product", str(e))
            return None
        self.ctx.sound.play("click")
        return saved

    # ------------------------------------------------------------------ #
    # Prices
    # ------------------------------------------------------------------ #

    def reveal(self, product: Product, secret: str) -> PriceReveal:
        return reveal_prices(product, secret, self.ctx.authorizer, self.ctx.logs)

    def show_prices(self) -> None:
        p = self._selected()
        if p is None:
            return
        PriceRevealDialog(p, self.reveal, self.view).exec()

    # ------------------------------------------------------------------ #
    # Visual search
    # ------------------------------------------------------------------ #

    def _pick_photo(self) -> None:
        if not self.ctx.vision.available:
            error(self.view, "Search by Photo", "Image recognition is not configured.")
            return
        fname, _ = QFileDialog.getOpenFileName(
            self.view, "Choose Photo", str(Path.home()), "Images (*.jpg *.jpeg *.png)"
        )
        if fname:
            self.identify_image(fname)

    def identify_image(self, path: str | Path) -> Optional[dict]:
        """Search the catalog for what the photo shows; None if nothing was recognised."""
        self.view.lbl_status.setText("Analyzing photo…")
        try:
            image_b64 = base64.b64encode(Path(path).read_bytes()).decode("ascii")
        except OSError as e:
            _log.error("Could not read photo %s: %s", path, e)
            self.ctx.sound.play("scan-error")
            self.view.lbl_status.setText("Could not read the photo.")
            return None
        result = self.ctx.vision.analyze(image_b64)
        if result is None:
            self.ctx.sound.play("scan-error")
            self.view.lbl_status.setText("Could not identify the part.")
            return None
        self.ctx.sound.play("scan-success")
        self.view.search.setText(f"{result['brand']} {result['partType']}".strip())
        self.view.lbl_status.setText(f"Detected: {result['brand']} {result['partType']}")
        return result


