import logging
import sys
from importlib import import_module
from pathlib import Path

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QApplication,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QSizePolicy,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from .app_context import AppContext, build_context
from .constants import APP_NAME, STYLE_FILE
from .modules.base_module import BaseModule
from .utils.loggers import get_logger
from .utils.ui_helpers import wrap_center

_log = logging.getLogger(__name__)

# (title, module path, class name); None marks the Backup & Restore factory
MODULES = [
    ("Dashboard", "khata_pos.modules.dashboard.controller", "DashboardController"),
    ("Inventory", "khata_pos.modules.inventory.controller", "InventoryController"),
    ("POS Billing", "khata_pos.modules.pos.controller", "PosController"),
    ("Khata Book", "khata_pos.modules.khata.controller", "KhataController"),
    ("Reports", "khata_pos.modules.reporting.controller", "ReportsController"),
    ("Settings", "khata_pos.modules.settings.controller", "SettingsController"),
    ("Backup & Restore", "khata_pos.modules.backup_restore", None),
]


def load_qss() -> str:
    f = Path(__file__).resolve().parent / STYLE_FILE
    if f.exists():
        return f.read_text(encoding="utf-8")
    return ""


def _lazy_get(name: str, attr: str):
    """Import a module by name and fetch an attribute from it, with a clear error if missing."""
    try:
        mod = import_module(name)
    except Exception as e:
        raise ImportError(f"Failed to import module '{name}': {e}") from e
    try:
        return getattr(mod, attr)
    except AttributeError as e:
        raise ImportError(f"'{attr}' not found in module '{name}'.") from e


class MainWindow(QMainWindow):
    def __init__(self, ctx: AppContext):
        super().__init__()
        self.ctx = ctx
        self.setWindowFlag(Qt.WindowMinimizeButtonHint, True)
        self.setWindowFlag(Qt.WindowMaximizeButtonHint, True)
        self.setMinimumSize(980, 620)

        # ---- Central layout: left nav + stacked pages ----
        central = QWidget(self)
        layout = QVBoxLayout(central)
        self.setCentralWidget(central)

        self.nav = QListWidget()
        self.nav.setFixedWidth(150)
        self.nav.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Expanding)
        self.stack = QStackedWidget()

        row = QWidget()
        row_lay = QHBoxLayout(row)
        row_lay.addWidget(self.nav)
        row_lay.addWidget(self.stack, 1)
        layout.addWidget(row, 1)

        self.lbl_alerts = QLabel()
        self.lbl_cart = QLabel("Cart: 0 items")
        self.statusBar().addWidget(self.lbl_alerts)
        self.statusBar().addPermanentWidget(self.lbl_cart)
        self.menuBar().addMenu("&File")

        # Loaded controllers by nav index; None until first visit
        self.modules: dict[int, BaseModule] = {}
        self.module_info: list[tuple[str, str, str | None]] = []

        self.nav.currentRowChanged.connect(self._on_nav_item_changed)
        for title, path, cls in MODULES:
            self._add_module_deferred(title, path, cls)

        # The File menu actions live on the backup module, so it loads eagerly
        self._load_module(self._find_module_index("Backup & Restore"))

        ctx.store.subscribe(self._on_store_changed)
        self._update_chrome()

        if self.nav.count():
            self.nav.setCurrentRow(0)

    # ---------- module loading ----------

    def _add_module_deferred(self, title: str, module_path: str, class_name: str | None) -> None:
        self.nav.addItem(QListWidgetItem(title))
        self.stack.addWidget(wrap_center(QLabel(f"Loading {title}...")))
        self.module_info.append((title, module_path, class_name))

    def _on_nav_item_changed(self, index: int) -> None:
        if 0 <= index < len(self.module_info):
            self._load_module_at_index(index)

    def _load_module_at_index(self, index: int) -> None:
        if index not in self.modules:
            self._load_module(index)
        self.stack.setCurrentIndex(index)

    def _create_controller(self, index: int):
        title, path, cls = self.module_info[index]
        if cls is None:
            create_module = _lazy_get(path, "create_module")
            controller = create_module(self.ctx.store)
            controller.register_menu_actions(self.menuBar())
            return controller
        Controller = _lazy_get(path, cls)
        if title == "Dashboard":
            controller = Controller(self.ctx.store)
            controller.open_pos.connect(lambda: self.open_module("POS Billing"))
            controller.open_inventory.connect(self.open_low_stock)
            return controller
        controller = Controller(self.ctx)
        if title == "POS Billing":
            controller.cart_changed.connect(self._on_cart_changed)
        return controller

    def _load_module(self, index: int | None) -> None:
        if index is None or index in self.modules:
            return
        title = self.module_info[index][0]
        QApplication.setOverrideCursor(Qt.WaitCursor)
        try:
            controller = self._create_controller(index)
            self._swap_page(index, controller.get_widget())
            self.modules[index] = controller
        except Exception:
            _log.exception("[%s] failed to load", title)
            self._swap_page(index, wrap_center(QLabel(f"{title}\n\nLoading failed")))
        finally:
            QApplication.restoreOverrideCursor()

    def _swap_page(self, index: int, widget: QWidget) -> None:
        current = self.stack.widget(index)
        self.stack.removeWidget(current)
        current.deleteLater()
        self.stack.insertWidget(index, widget)

    def _find_module_index(self, title: str) -> int | None:
        for i, (t, _p, _c) in enumerate(self.module_info):
            if t == title:
                return i
        return None

    def controller(self, title: str):
        """Loaded controller for a nav title (loads it on demand)."""
        idx = self._find_module_index(title)
        if idx is None:
            return None
        self._load_module(idx)
        return self.modules.get(idx)

    # ---------- navigation shortcuts ----------

    def open_module(self, title: str):
        idx = self._find_module_index(title)
        if idx is None:
            QMessageBox.warning(self, "Missing", f"{title} is not available.")
            return None
        self.nav.setCurrentRow(idx)
        return self.modules.get(idx)

    def open_low_stock(self) -> None:
        ctrl = self.open_module("Inventory")
        if ctrl is not None:
            ctrl.select_tab("products")
            ctrl.view.chk_low.setChecked(True)

    # ---------- window chrome ----------

    def _on_store_changed(self, topic: str) -> None:
        if topic in ("logs", "all"):
            self._update_chrome()

    def _update_chrome(self) -> None:
        title = APP_NAME
        if self.ctx.store.state.safe_mode:
            title += " [SAFE MODE]"
        self.setWindowTitle(title)
        self.lbl_alerts.setText(f"Security alerts: {self.ctx.logs.alert_count()}")

    def _on_cart_changed(self, count: int) -> None:
        self.lbl_cart.setText(f"Cart: {count} items")

    def closeEvent(self, event) -> None:
        items = self.ctx.session.cart.item_count()
        if self.ctx.settings.no_bill_no_exit and items > 0:
            ret = QMessageBox.question(
                self,
                "No Bill No Exit",
                f"The cart still has {items} item(s) that were not billed.\n\nExit anyway?",
                QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
                QMessageBox.StandardButton.No,
            )
            if ret != QMessageBox.StandardButton.Yes:
                event.ignore()
                return
        self.ctx.vision.close()
        event.accept()


def main():
    get_logger("khata_pos")

    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)

    qss = load_qss()
    if qss:
        app.setStyleSheet(qss)

    ctx = build_context()
    if ctx.store.state.safe_mode:
        _log.warning("Starting in safe mode; restore a backup to continue")

    win = MainWindow(ctx)
    win.resize(1200, 760)
    win.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
