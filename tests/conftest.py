# khata_pos/tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - pytest-qt owns QApplication (use qapp/qtbot fixtures)
# - Every test gets a freshly seeded in-memory store (no shared files)
# - Logs and data paths point at a temp dir before khata_pos is imported
# - Cheap bcrypt cost so PIN checks stay fast
# - Silence benign Qt signal warnings
# ---------------------------------------------------------------------

from __future__ import annotations

import os
import re
import tempfile

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
os.environ.setdefault("KHATA_POS_BCRYPT_ROUNDS", "4")
_TMP = tempfile.mkdtemp(prefix="khata_pos_tests_")
os.environ.setdefault("KHATA_POS_LOG_DIR", os.path.join(_TMP, "logs"))
os.environ.setdefault("KHATA_POS_DATA_DIR", os.path.join(_TMP, "data"))
os.environ.setdefault("KHATA_POS_VISION_URL", "")

import pytest
from PySide6 import QtCore

from khata_pos.app_context import build_context
from khata_pos.database import get_store
from khata_pos.utils.barcode import ScriptedBarcodeSource
from khata_pos.utils.vision import VisionClient


# ---------- Qt: let pytest-qt own the app ----------
@pytest.fixture(scope="session")
def app(qapp):  # alias to match code that expects an `app` fixture
    return qapp


# ---------- Silence benign Qt warnings ----------
_BENIGN_QT_PATTERNS = [
    r"^QObject::connect: .* already connected",
    r"^QObject::disconnect: Unexpected null parameter",
    r"^QBasicTimer::stop: Failed\. Platform timer not running\.",
    r"^This plugin does not support propagateSizeHints",
]

@pytest.fixture(autouse=True, scope="session")
def _silence_benign_qt():
    """Filter common harmless Qt messages during tests."""
    original = QtCore.qInstallMessageHandler(None)
    rx = [re.compile(p) for p in _BENIGN_QT_PATTERNS]

    def handler(msg_type, context, message):
        text = str(message)
        for r in rx:
            if r.search(text):
                return  # swallow benign messages
        QtCore.qInstallMessageHandler(None)
        try:
            QtCore.qDebug(message)
        finally:
            QtCore.qInstallMessageHandler(handler)

    QtCore.qInstallMessageHandler(handler)
    try:
        yield
    finally:
        QtCore.qInstallMessageHandler(original)


# ---------- Store / context ----------
@pytest.fixture()
def store():
    """Demo data: parts 1 (AC PCB, 15 in stock) and 2 (compressor, 4), technicians T1/T2."""
    return get_store()


@pytest.fixture()
def scanned_codes():
    """Barcodes the scripted scanner will hand out; tests append before starting it."""
    return []


@pytest.fixture()
def ctx(store, scanned_codes):
    return build_context(
        store,
        play_sounds=False,
        vision=VisionClient(url=""),
        barcode_factory=lambda: ScriptedBarcodeSource(scanned_codes),
    )


# ---------- UI message capture ----------
@pytest.fixture()
def capture_messages(monkeypatch):
    """
    Patch a controller module's error()/info() helpers and return the list
    they append (kind, title, text) to, so no message box ever blocks.
    """
    def _capture(module):
        messages = []
        for kind in ("error", "info"):
            if hasattr(module, kind):
                monkeypatch.setattr(
                    module, kind,
                    lambda parent, title, text, _k=kind: messages.append((_k, title, text)),
                )
        return messages
    return _capture
