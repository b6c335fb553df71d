"""
modules/backup_restore/validators.py

Preflight checks with operator-friendly messages.

Public API
---------
- validate_backup_destination(dest_file) -> None
- validate_backup_source(src_file) -> None
- validate_backup_payload(data) -> None
- validate_inventory_payload(data) -> None
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Iterable

from ...database.errors import ImportFormatError

COLLECTION_KEYS = (
    "inventory",
    "bills",
    "technicians",
    "ledger",
    "securityLogs",
    "stockLogs",
    "priceLogs",
)


def _is_writable_dir(p: Path) -> bool:
    try:
        return p.exists() and p.is_dir() and os.access(str(p), os.W_OK | os.X_OK)
    except OSError:
        return False


def _windows_reserved_names() -> Iterable[str]:
    return {
        "con", "prn", "aux", "nul",
        *(f"com{i}" for i in range(1, 10)),
        *(f"lpt{i}" for i in range(1, 10)),
    }


def validate_backup_destination(dest_file: str) -> None:
    """
    Parent folder must exist and be writable; the name must be a usable
    file name and must not point at a directory.
    """
    path = Path(dest_file)
    parent = path.parent if path.parent != Path("") else Path.cwd()

    if not parent.exists():
        raise RuntimeError(f"Destination folder does not exist: {parent}")
    if not _is_writable_dir(parent):
        raise RuntimeError(f"Destination folder is not writable: {parent}")

    name = path.name.strip()
    if not name:
        raise RuntimeError("Please provide a file name for the backup.")
    if sys.platform.startswith("win"):
        stem = path.stem.lower().rstrip(".")
        if stem in _windows_reserved_names():
            raise RuntimeError(f"The backup filename '{path.stem}' is reserved on Windows.")
        if path.name.endswith((" ", ".")):
            raise RuntimeError("Windows filenames cannot end with a space or dot.")

    if path.exists() and path.is_dir():
        raise RuntimeError("Destination path points to a directory, not a file.")


def validate_backup_source(src_file: str) -> None:
    p = Path(src_file)
    if not p.exists():
        raise ImportFormatError(f"Backup file not found: {p}")
    if not p.is_file():
        raise ImportFormatError(f"Backup path is not a file: {p}")
    if not os.access(str(p), os.R_OK):
        raise ImportFormatError(f"Backup file is not readable: {p}")
    if p.stat().st_size <= 0:
        raise ImportFormatError("The backup file is empty.")


def validate_backup_payload(data: object) -> None:
    """
    A full backup is a JSON object carrying at least `inventory` or
    `bills`. Every collection present must be a list of objects.
    """
    if not isinstance(data, dict):
        raise ImportFormatError("Invalid backup file format: expected a JSON object.")
    if data.get("inventory") is None and data.get("bills") is None:
        raise ImportFormatError("Invalid backup file format: no inventory or bills found.")
    for key in COLLECTION_KEYS:
        if key not in data or data[key] is None:
            continue
        rows = data[key]
        if not isinstance(rows, list):
            raise ImportFormatError(f"Invalid backup file format: '{key}' must be a list.")
        if not all(isinstance(r, dict) for r in rows):
            raise ImportFormatError(f"Invalid backup file format: '{key}' contains non-object entries.")
    for key in ("adminPin", "techCode"):
        if key in data and data[key] is not None and not isinstance(data[key], (str, int)):
            raise ImportFormatError(f"Invalid backup file format: '{key}' must be text.")


def validate_inventory_payload(data: object) -> None:
    if not isinstance(data, list):
        raise ImportFormatError("Inventory file must contain a JSON array of products.")
    for i, row in enumerate(data):
        if not isinstance(row, dict) or not row.get("id"):
            raise ImportFormatError(f"Inventory record {i + 1} is missing an id.")
