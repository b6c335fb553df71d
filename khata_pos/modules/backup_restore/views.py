"""
modules/backup_restore/views.py

PySide6 dialogs for the Backup & Restore screen. No business logic here.

Dialogs
-------
1) BackupDialog
   - Inputs: destination folder + file name (default Sangli_FULL_DB_YYYY-MM-DD.json)
   - Computed label: free space in the chosen folder
   - Signals: start_backup(dest_path: str), closed()

2) RestoreDialog
   - Inputs: backup file picker (*.json)
   - Warning text: current data will be replaced
   - Signals: start_restore(backup_file: str), closed()

3) ProgressDialog
   - UI: phase label + progress bar + rolling log area
   - Slots: on_phase, on_progress, on_log, on_finished
"""

from __future__ import annotations

import os
import shutil
from datetime import date
from pathlib import Path
from typing import Optional

from PySide6.QtCore import Signal, Slot
from PySide6.QtWidgets import (
    QDialog,
    QFileDialog,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMessageBox,
    QProgressBar,
    QPushButton,
    QSizePolicy,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)


def default_backup_filename(day: Optional[date] = None) -> str:
    return f"Sangli_FULL_DB_{(day or date.today()).isoformat()}.json"


def default_inventory_filename(day: Optional[date] = None) -> str:
    return f"Sangli_Inventory_{(day or date.today()).isoformat()}.json"


def _human_size(num_bytes: int) -> str:
    units = ["B", "KB", "MB", "GB", "TB"]
    size = float(num_bytes)
    for u in units:
        if size < 1024.0 or u == units[-1]:
            return f"{size:.1f} {u}"
        size /= 1024.0
    return f"{size:.1f} TB"


def _is_json_file(path: Path) -> bool:
    return path.exists() and path.is_file() and path.suffix.lower() == ".json"


# ----------------------------
# Backup Dialog
# ----------------------------

class BackupDialog(QDialog):
    """
    Lets the user choose where to write the backup file.
    Emits start_backup(dest_path: str) when confirmed.
    """

    start_backup = Signal(str)
    closed = Signal()

    def __init__(
        self,
        parent: Optional[QWidget] = None,
        start_dir: Optional[Path] = None,
        file_name: Optional[str] = None,
        title: str = "Full Backup",
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle(title)
        self.setModal(True)
        self.setMinimumWidth(520)

        self._chosen_dir = start_dir or Path.home()
        self._file_name = file_name or default_backup_filename()
        self._build_ui()
        self._wire_events()
        self._recompute_labels()

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(16, 16, 16, 16)
        root.setSpacing(12)

        intro = QLabel("Save products, bills, Khata, settings and logs into a single JSON file.")
        intro.setWordWrap(True)
        root.addWidget(intro)

        grid = QGridLayout()
        grid.setHorizontalSpacing(8)
        grid.setVerticalSpacing(8)

        self._dir_edit = QLineEdit(str(self._chosen_dir))
        self._browse_btn = QPushButton("Browse…")
        grid.addWidget(QLabel("Destination folder:"), 0, 0)
        grid.addWidget(self._dir_edit, 0, 1)
        grid.addWidget(self._browse_btn, 0, 2)

        self._name_edit = QLineEdit(self._file_name)
        grid.addWidget(QLabel("File name:"), 1, 0)
        grid.addWidget(self._name_edit, 1, 1, 1, 2)

        self._free_label = QLabel("Free space: —")
        grid.addWidget(self._free_label, 2, 0, 1, 3)
        root.addLayout(grid)

        btns = QHBoxLayout()
        btns.addStretch(1)
        self._cancel_btn = QPushButton("Cancel")
        self._create_btn = QPushButton("Save Backup")
        self._create_btn.setDefault(True)
        btns.addWidget(self._cancel_btn)
        btns.addWidget(self._create_btn)
        root.addLayout(btns)

    def _wire_events(self) -> None:
        self._browse_btn.clicked.connect(self._choose_dir)
        self._dir_edit.textChanged.connect(self._recompute_labels)
        self._name_edit.textChanged.connect(self._recompute_labels)
        self._cancel_btn.clicked.connect(self.reject)
        self._create_btn.clicked.connect(self._try_emit)

    def _choose_dir(self) -> None:
        start = self._dir_edit.text().strip() or str(Path.home())
        directory = QFileDialog.getExistingDirectory(self, "Choose Destination Folder", start)
        if directory:
            self._dir_edit.setText(directory)

    def dest_path(self) -> Path:
        folder = Path(self._dir_edit.text().strip())
        name = self._name_edit.text().strip() or self._file_name
        dest = folder / name
        if dest.suffix.lower() != ".json":
            dest = dest.with_suffix(".json")
        return dest

    def _check_writable_dir(self, p: Path) -> bool:
        try:
            return p.exists() and p.is_dir() and os.access(str(p), os.W_OK | os.X_OK)
        except OSError:
            return False

    def _recompute_labels(self) -> None:
        folder = Path(self._dir_edit.text().strip() or Path.home())
        probe = folder if folder.exists() else folder.parent
        try:
            usage = shutil.disk_usage(probe)
            self._free_label.setText(f"Free space: {_human_size(usage.free)}")
        except OSError:
            self._free_label.setText("Free space: —")

        dest = self.dest_path()
        self._create_btn.setEnabled(self._check_writable_dir(dest.parent) and bool(dest.stem.strip()))

    def _try_emit(self) -> None:
        dest = self.dest_path()
        if not self._check_writable_dir(dest.parent):
            QMessageBox.critical(self, "Destination Not Writable",
                                 "Please choose a folder that exists and is writable.")
            return
        self.start_backup.emit(str(dest))
        self.accept()

    def reject(self) -> None:
        super().reject()
        self.closed.emit()

    def accept(self) -> None:
        super().accept()
        self.closed.emit()


# ----------------------------
# Restore Dialog
# ----------------------------

class RestoreDialog(QDialog):
    """
    Lets the user pick a *.json backup file.
    Emits start_restore(backup_file: str) when confirmed.
    """

    start_restore = Signal(str)
    closed = Signal()

    def __init__(
        self,
        parent: Optional[QWidget] = None,
        title: str = "Restore Data",
        warning: str = "This will replace the current products, bills and Khata with the backup contents.",
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle(title)
        self.setModal(True)
        self.setMinimumWidth(520)

        self._warning = warning
        self._build_ui()
        self._wire_events()
        self._update_info()

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(16, 16, 16, 16)
        root.setSpacing(12)

        warn = QLabel(self._warning)
        warn.setWordWrap(True)
        warn.setStyleSheet("color: #a15c00;")
        root.addWidget(warn)

        grid = QGridLayout()
        grid.setHorizontalSpacing(8)
        grid.setVerticalSpacing(8)

        self._file_edit = QLineEdit()
        self._browse_btn = QPushButton("Browse…")
        grid.addWidget(QLabel("Backup file:"), 0, 0)
        grid.addWidget(self._file_edit, 0, 1)
        grid.addWidget(self._browse_btn, 0, 2)

        self._size_label = QLabel("File size: —")
        self._status_label = QLabel("Status: —")
        grid.addWidget(self._size_label, 1, 0, 1, 2)
        grid.addWidget(self._status_label, 1, 2)
        root.addLayout(grid)

        btns = QHBoxLayout()
        btns.addStretch(1)
        self._cancel_btn = QPushButton("Cancel")
        self._restore_btn = QPushButton("Restore")
        self._restore_btn.setDefault(True)
        btns.addWidget(self._cancel_btn)
        btns.addWidget(self._restore_btn)
        root.addLayout(btns)

    def _wire_events(self) -> None:
        self._browse_btn.clicked.connect(self._choose_file)
        self._file_edit.textChanged.connect(self._update_info)
        self._cancel_btn.clicked.connect(self.reject)
        self._restore_btn.clicked.connect(self._try_emit)

    def _choose_file(self) -> None:
        start = self._file_edit.text().strip() or str(Path.home())
        fname, _ = QFileDialog.getOpenFileName(
            self, "Choose Backup File", start, "Backup files (*.json);;All files (*.*)"
        )
        if fname:
            self._file_edit.setText(fname)

    def _update_info(self) -> None:
        path = Path(self._file_edit.text().strip())
        ok = _is_json_file(path)
        self._restore_btn.setEnabled(ok)
        if not ok:
            self._size_label.setText("File size: —")
            self._status_label.setText("Status: —")
            return
        try:
            self._size_label.setText(f"File size: {_human_size(path.stat().st_size)}")
            readable = os.access(str(path), os.R_OK)
            self._status_label.setText("Status: Ready" if readable else "Status: Not readable")
        except OSError:
            self._size_label.setText("File size: —")
            self._status_label.setText("Status: —")

    def _try_emit(self) -> None:
        path = Path(self._file_edit.text().strip())
        if not _is_json_file(path):
            QMessageBox.critical(self, "Invalid File", "Please choose a valid *.json backup file.")
            return
        if not os.access(str(path), os.R_OK):
            QMessageBox.critical(self, "Unreadable File", "The selected file is not readable.")
            return
        self.start_restore.emit(str(path))
        self.accept()

    def reject(self) -> None:
        super().reject()
        self.closed.emit()

    def accept(self) -> None:
        super().accept()
        self.closed.emit()


# ----------------------------
# Progress Dialog
# ----------------------------

class ProgressDialog(QDialog):
    """Progress UI fed by the job callbacks."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Working…")
        self.setModal(True)
        self.setMinimumWidth(560)

        self._build_ui()
        self._set_running(True)

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(16, 16, 16, 16)
        root.setSpacing(10)

        self._phase_label = QLabel("Starting…")
        self._phase_label.setWordWrap(True)
        root.addWidget(self._phase_label)

        self._bar = QProgressBar()
        self._bar.setRange(0, 100)
        root.addWidget(self._bar)

        self._log = QTextEdit()
        self._log.setReadOnly(True)
        self._log.setMinimumHeight(140)
        self._log.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        root.addWidget(self._log)

        btns = QHBoxLayout()
        btns.addStretch(1)
        self._close_btn = QPushButton("Close")
        btns.addWidget(self._close_btn)
        root.addLayout(btns)

        self._close_btn.clicked.connect(self.close)

    def _set_running(self, running: bool) -> None:
        self._close_btn.setEnabled(not running)

    # ---- slots fed by BackupJob / RestoreJob callbacks ----

    @Slot(str)
    def on_phase(self, text: str) -> None:
        self._phase_label.setText(text)

    @Slot(int)
    def on_progress(self, pct: int) -> None:
        self._bar.setValue(max(0, min(100, pct)))

    @Slot(str)
    def on_log(self, line: str) -> None:
        self._log.append(line.rstrip())

    @Slot(bool, str, object)
    def on_finished(self, success: bool, message: str, path: Optional[str]) -> None:
        self._set_running(False)
        self.on_log("")
        self.on_log("Completed successfully." if success else "Failed.")
        if message:
            self.on_log(message)
        if path:
            self.on_log(f"Path: {path}")
        if success:
            self.on_phase("Done")
            self.on_progress(100)
        else:
            self.on_phase("Finished with errors")

    @property
    def log_text(self) -> str:
        return self._log.toPlainText()
