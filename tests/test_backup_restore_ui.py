# tests/test_backup_restore_ui.py

import uuid

import pytest

pytest.importorskip("PySide6")

from khata_pos.database import get_store
from khata_pos.database.repositories.technicians_repo import TechniciansRepo
from khata_pos.modules.backup_restore.controller import BackupRestoreController
from khata_pos.modules.backup_restore.views import BackupDialog, ProgressDialog, RestoreDialog


@pytest.fixture
def make_controller(qtbot):
    """Controller with a throwaway QSettings scope so the last-backup path never leaks between tests."""
    def _make(store, confirm=lambda plan: True):
        c = BackupRestoreController(
            store,
            settings_org="KhataPOSTests",
            settings_app=f"backup-{uuid.uuid4().hex[:8]}",
            confirm_restore=confirm,
        )
        qtbot.addWidget(c.get_widget())
        return c

    return _make


def test_backup_remembers_last_path(make_controller, store, tmp_path, qtbot):
    c = make_controller(store)
    assert c._last_label.text() == "No backups created yet."

    with qtbot.waitSignal(c.backup_completed, timeout=1000) as sig:
        out = c.start_backup(str(tmp_path / "shop"))
    assert out.endswith("shop.json")
    assert sig.args == [out]
    assert c._last_label.text() == f"Last backup: {out}"


def test_restore_replaces_data(make_controller, store, tmp_path, qtbot):
    TechniciansRepo(store).post("T1", 250, "Debit", "Capacitor")
    out = make_controller(store).start_backup(str(tmp_path / "b.json"))

    other = get_store()
    c = make_controller(other)
    with qtbot.waitSignal(c.restore_completed, timeout=1000):
        assert c.start_restore(out)
    assert TechniciansRepo(other).balance("T1") == 1500.0


def test_restore_declined_keeps_data(make_controller, store, tmp_path):
    out = make_controller(store).start_backup(str(tmp_path / "b.json"))
    other = get_store()
    other.state.inventory = []
    c = make_controller(other, confirm=lambda plan: False)
    assert c.start_restore(out) is False
    assert other.state.inventory == []


def test_safe_mode_banner_clears_after_restore(make_controller, store, tmp_path):
    out = make_controller(store).start_backup(str(tmp_path / "b.json"))
    state = get_store().state
    state.technicians = None
    safe = get_store(state)
    c = make_controller(safe)
    assert not c._safe_label.isHidden()
    assert c.start_restore(out)
    assert c._safe_label.isHidden()


def test_backup_dialog_forces_json_suffix(qtbot, tmp_path):
    dlg = BackupDialog(start_dir=tmp_path, file_name="shop.bak")
    qtbot.addWidget(dlg)
    assert dlg.dest_path() == tmp_path / "shop.json"
    with qtbot.waitSignal(dlg.start_backup, timeout=1000) as sig:
        dlg._try_emit()
    assert sig.args == [str(tmp_path / "shop.json")]


def test_restore_dialog_only_accepts_json(qtbot, tmp_path):
    dlg = RestoreDialog()
    qtbot.addWidget(dlg)
    txt = tmp_path / "notes.txt"
    txt.write_text("x", encoding="utf-8")
    dlg._file_edit.setText(str(txt))
    assert not dlg._restore_btn.isEnabled()

    backup = tmp_path / "b.json"
    backup.write_text("{}", encoding="utf-8")
    dlg._file_edit.setText(str(backup))
    assert dlg._restore_btn.isEnabled()
    assert dlg._status_label.text() == "Status: Ready"


def test_progress_dialog_reports_outcome(qtbot):
    prog = ProgressDialog()
    qtbot.addWidget(prog)
    prog.on_progress(140)
    prog.on_finished(False, "Invalid format", None)
    assert "Failed." in prog.log_text
    assert "Invalid format" in prog.log_text
