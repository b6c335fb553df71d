"""
modules/backup_restore/controller.py

Glue between the app shell and the backup/restore jobs; owns the top-level
widget.

Public Interface (called by app shell)
--------------------------------------
- get_widget() -> QWidget
- get_title() -> str
- register_menu_actions(menu_bar) -> None
- refresh() -> None
- teardown() -> None
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

from PySide6.QtCore import QObject, QSettings, Qt, Signal, Slot
from PySide6.QtGui import QAction
from PySide6.QtWidgets import (
    QFileDialog,
    QFrame,
    QHBoxLayout,
    QLabel,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ...database.errors import DomainError
from ...database.store import AppStore
from .service import (
    BackupJob,
    RestoreJob,
    RestorePlan,
    _Callbacks,
    export_inventory_file,
    import_inventory_file,
)
from .views import (
    BackupDialog,
    ProgressDialog,
    RestoreDialog,
    default_inventory_filename,
)


class BackupRestoreController(QObject):
    """
    Main controller for the Backup & Restore module.

    `confirm_restore` may be injected (tests) to answer the
    "replace current data?" question without a message box.
    """

    backup_completed = Signal(str)
    restore_completed = Signal(str)

    TITLE = "Backup & Restore"
    SETTINGS_SCOPE = ("SangliRefrigeration", "KhataPOS")
    SETTINGS_KEY_LAST_BACKUP = "backup_restore/last_backup_path"

    def __init__(
        self,
        store: AppStore,
        settings_org: Optional[str] = None,
        settings_app: Optional[str] = None,
        confirm_restore: Optional[Callable[[RestorePlan], bool]] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self.store = store
        org, app = (settings_org, settings_app) if settings_org and settings_app else self.SETTINGS_SCOPE
        self._settings = QSettings(org, app)
        self._confirm_restore = confirm_restore

        self._widget: Optional[QWidget] = None
        self._last_backup_path: Optional[Path] = self._load_last_backup_path()

        self._act_backup: Optional[QAction] = None
        self._act_restore: Optional[QAction] = None

    # -------- Public API expected by the shell --------

    def get_widget(self) -> QWidget:
        if self._widget is None:
            self._widget = self._build_widget()
        return self._widget

    def get_title(self) -> str:
        return self.TITLE

    def register_menu_actions(self, menu_bar) -> None:
        """Add "File → Full Backup…" and "File → Restore Data…"."""
        if self._act_backup is None:
            self._act_backup = QAction("Full Backup…", self._widget)
            self._act_backup.triggered.connect(self._open_backup_dialog)
        if self._act_restore is None:
            self._act_restore = QAction("Restore Data…", self._widget)
            self._act_restore.triggered.connect(self._open_restore_dialog)

        file_menu = None
        for action in menu_bar.actions():
            menu = action.menu()
            if menu is not None and menu.title().replace("&", "").lower() == "file":
                file_menu = menu
                break
        if file_menu is None:
            file_menu = menu_bar.addMenu("&File")

        file_menu.addSeparator()
        file_menu.addAction(self._act_backup)
        file_menu.addAction(self._act_restore)

    def refresh(self) -> None:
        if self._widget is not None:
            self._safe_label.setVisible(self.store.state.safe_mode)
            self._last_label.setText(self._format_last_backup_label())

    def teardown(self) -> None:
        self._widget = None

    # -------- UI construction --------

    def _build_widget(self) -> QWidget:
        w = QWidget()
        root = QVBoxLayout(w)
        root.setContentsMargins(24, 24, 24, 24)
        root.setSpacing(16)

        title = QLabel(self.TITLE)
        title.setProperty("class", "h2")
        root.addWidget(title)

        self._safe_label = QLabel(
            "SAFE MODE: the saved data could not be loaded. Restore a backup to continue."
        )
        self._safe_label.setWordWrap(True)
        self._safe_label.setStyleSheet("color: white; background: #b91c1c; padding: 8px; border-radius: 6px;")
        self._safe_label.setVisible(self.store.state.safe_mode)
        root.addWidget(self._safe_label)

        subtitle = QLabel("Save everything to a single file, or restore from a previous backup.")
        subtitle.setWordWrap(True)
        subtitle.setStyleSheet("color: palette(mid);")
        root.addWidget(subtitle)

        cards = QHBoxLayout()
        cards.setSpacing(16)
        root.addLayout(cards)
        cards.addWidget(self._make_card(
            "Full Backup",
            "Products, bills, technicians, Khata ledger, settings and audit logs (*.json).",
            "Backup…", True, self._open_backup_dialog,
        ))
        cards.addWidget(self._make_card(
            "Restore Data",
            "Replace the current data with a previously saved backup (*.json).",
            "Restore…", False, self._open_restore_dialog,
        ))

        cards2 = QHBoxLayout()
        cards2.setSpacing(16)
        root.addLayout(cards2)
        cards2.addWidget(self._make_card(
            "Export Inventory",
            "Save only the product catalog as a JSON array.",
            "Export…", False, self._export_inventory,
        ))
        cards2.addWidget(self._make_card(
            "Import Inventory",
            "Replace the product catalog from an exported inventory file.",
            "Import…", False, self._import_inventory,
        ))

        self._last_label = QLabel(self._format_last_backup_label())
        self._last_label.setWordWrap(True)
        self._last_label.setStyleSheet("color: palette(dark);")
        root.addWidget(self._last_label)

        root.addStretch(1)
        return w

    def _make_card(
        self, title: str, text: str, button: str, primary: bool, on_click: Callable[[], None]
    ) -> QFrame:
        card = QFrame()
        card.setFrameShape(QFrame.StyledPanel)
        card.setProperty("card", True)
        card.setStyleSheet("QFrame[card='true'] { border: 1px solid palette(midlight); border-radius: 12px; }")

        v = QVBoxLayout(card)
        v.setContentsMargins(16, 16, 16, 16)
        v.setSpacing(8)

        lbl_t = QLabel(title)
        lbl_t.setProperty("class", "h3")
        v.addWidget(lbl_t)

        lbl = QLabel(text)
        lbl.setWordWrap(True)
        v.addWidget(lbl)
        v.addStretch(1)

        btn = QPushButton(button)
        if primary:
            btn.setDefault(True)
        btn.clicked.connect(on_click)
        v.addWidget(btn, alignment=Qt.AlignRight)
        return card

    def _format_last_backup_label(self) -> str:
        if self._last_backup_path and self._last_backup_path.exists():
            return f"Last backup: {self._last_backup_path}"
        return "No backups created yet."

    def _save_last_backup_path(self, path: Path) -> None:
        self._settings.setValue(self.SETTINGS_KEY_LAST_BACKUP, str(path))
        self._last_backup_path = path
        if self._widget is not None:
            self._last_label.setText(self._format_last_backup_label())

    def _load_last_backup_path(self) -> Optional[Path]:
        val = self._settings.value(self.SETTINGS_KEY_LAST_BACKUP, "", str)
        return Path(val) if val and str(val).strip() else None

    # -------- Dialog launchers --------

    @Slot()
    def _open_backup_dialog(self) -> None:
        start = self._last_backup_path.parent if self._last_backup_path else None
        dlg = BackupDialog(parent=self._widget, start_dir=start)
        prog = ProgressDialog(parent=self._widget)
        dlg.start_backup.connect(lambda dest: self.start_backup(dest, prog))
        dlg.show()

    @Slot()
    def _open_restore_dialog(self) -> None:
        dlg = RestoreDialog(parent=self._widget)
        prog = ProgressDialog(parent=self._widget)
        dlg.start_restore.connect(lambda src: self.start_restore(src, prog))
        dlg.show()

    # -------- Orchestration with service layer --------

    def start_backup(self, dest_path: str, prog_dialog: Optional[ProgressDialog] = None) -> Optional[str]:
        prog = prog_dialog or ProgressDialog(parent=self._widget)
        cb = _Callbacks(
            phase=prog.on_phase,
            progress=prog.on_progress,
            log=prog.on_log,
            finished=lambda ok, msg, out: self._on_backup_finished(ok, msg, out, prog),
        )
        prog.on_phase("Starting backup…")
        prog.on_progress(0)
        prog.show()
        return BackupJob(self.store).run(dest_path, callbacks=cb)

    def _on_backup_finished(self, ok: bool, message: str, out_path: Optional[str], prog) -> None:
        prog.on_finished(ok, message, out_path)
        if ok and out_path:
            p = Path(out_path)
            self._save_last_backup_path(p)
            self.backup_completed.emit(str(p))
        elif self._widget is not None:
            QMessageBox.critical(self._widget, "Backup Failed", message)

    def _ask_confirm_restore(self, plan: RestorePlan) -> bool:
        if self._confirm_restore is not None:
            return self._confirm_restore(plan)
        when = plan.timestamp or "an unknown date"
        ret = QMessageBox.question(
            self._widget,
            "Replace Current Data?",
            f"Backup from {when}\n{plan.summary()}\n\n"
            "The current data will be replaced. Continue?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        return ret == QMessageBox.StandardButton.Yes

    def start_restore(self, src_file: str, prog_dialog: Optional[ProgressDialog] = None) -> bool:
        prog = prog_dialog or ProgressDialog(parent=self._widget)
        cb = _Callbacks(
            phase=prog.on_phase,
            progress=prog.on_progress,
            log=prog.on_log,
            finished=lambda ok, msg, used: self._on_restore_finished(ok, msg, used, prog),
        )
        prog.on_phase("Starting restore…")
        prog.on_progress(0)
        prog.show()
        return RestoreJob(self.store).run(src_file, callbacks=cb, confirm=self._ask_confirm_restore)

    def _on_restore_finished(self, ok: bool, message: str, used_path: Optional[str], prog) -> None:
        prog.on_finished(ok, message, used_path)
        if ok:
            self.refresh()
            self.restore_completed.emit(used_path or "")
            if self._widget is not None and self._confirm_restore is None:
                QMessageBox.information(self._widget, "Restore Completed", message)
        elif self._widget is not None and self._confirm_restore is None and "cancelled" not in message:
            QMessageBox.critical(self._widget, "Restore Failed", message)

    # -------- Inventory only --------

    @Slot()
    def _export_inventory(self) -> None:
        start = str(Path.home() / default_inventory_filename())
        fname, _ = QFileDialog.getSaveFileName(
            self._widget, "Export Inventory", start, "JSON files (*.json)"
        )
        if not fname:
            return
        try:
            out = export_inventory_file(self.store, fname)
        except (OSError, DomainError) as e:
            QMessageBox.critical(self._widget, "Export Failed", str(e))
            return
        QMessageBox.information(self._widget, "Export Inventory", f"Inventory saved to:\n{out}")

    @Slot()
    def _import_inventory(self) -> None:
        fname, _ = QFileDialog.getOpenFileName(
            self._widget, "Import Inventory", str(Path.home()), "JSON files (*.json)"
        )
        if not fname:
            return
        ret = QMessageBox.question(
            self._widget, "Import Inventory",
            "This replaces every product in the catalog. Continue?",
        )
        if ret != QMessageBox.StandardButton.Yes:
            return
        try:
            n = import_inventory_file(self.store, fname)
        except (OSError, DomainError) as e:
            QMessageBox.critical(self._widget, "Import Failed", str(e))
            return
        QMessageBox.information(self._widget, "Import Inventory", f"{n} products imported.")
