"""
modules/backup_restore/service.py

Full backup and restore of the shop data as one JSON file, plus the
inventory-only export/import.

Public interface
----------------
- build_backup_payload(store) -> dict
- parse_backup_payload(data, current_ledger) -> RestorePlan
- apply_restore(store, plan) -> None
- BackupJob(store).run(dest_file, callbacks) -> Optional[str]
- RestoreJob(store).run(src_file, callbacks, confirm=None) -> bool
- export_inventory_file(store, dest_file) -> Path
- import_inventory_file(store, src_file) -> int

Callbacks is any object exposing (all optional):
- phase(text: str)
- progress(pct: int)
- log(line: str)
- finished(success: bool, message: str, path: Optional[str])

Both jobs run to completion on the calling (GUI) thread: the files are
small, and the store must only be replaced from that thread. A restore
reads, parses and validates the whole file before anything is replaced.
"""

from __future__ import annotations

import json
import logging
import traceback
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, cast

from ...constants import BACKUP_NOTE, BACKUP_VERSION
from ...database.errors import DomainError, ImportFormatError
from ...database.models import (
    Bill,
    LedgerEntry,
    PriceLog,
    Product,
    SecurityLog,
    StockLog,
    Technician,
)
from ...database.repositories.products_repo import ProductsRepo
from ...database.repositories.technicians_repo import TechniciansRepo
from ...database.store import AppStore
from ..khata.trust import fold_balance
from ...utils.auth import ensure_hashed
from ...utils.helpers import now_iso
from . import fsops
from .logging_utils import get_logger, log_event
from .validators import (
    validate_backup_destination,
    validate_backup_payload,
    validate_backup_source,
    validate_inventory_payload,
)

_log = logging.getLogger(__name__)


# ----------------------------
# Utilities
# ----------------------------

def _safe_call(fn: Optional[Callable], *args, **kwargs) -> None:
    """Call a UI callback if present; a failing callback must not abort the job."""
    if fn is None:
        return
    try:
        fn(*args, **kwargs)
    except Exception:
        _log.exception("Backup/restore UI callback failed")


def _fmt_err(msg: str, exc: BaseException | None = None) -> str:
    if exc is None:
        return msg
    if isinstance(exc, (DomainError, RuntimeError)):
        return f"{msg}\n\n{exc}"
    return f"{msg}\n\n{exc.__class__.__name__}: {exc}"


@dataclass
class _Callbacks:
    phase: Optional[Callable[[str], None]] = None
    progress: Optional[Callable[[int], None]] = None
    log: Optional[Callable[[str], None]] = None
    finished: Optional[Callable[[bool, str, Optional[str]], None]] = None

    @classmethod
    def wrap(cls, callbacks) -> "_Callbacks":
        return cls(
            phase=getattr(callbacks, "phase", None),
            progress=getattr(callbacks, "progress", None),
            log=getattr(callbacks, "log", None),
            finished=getattr(callbacks, "finished", None),
        )


# ----------------------------
# Payload
# ----------------------------

def build_backup_payload(store: AppStore) -> dict:
    st = store.state
    techs = TechniciansRepo(store)
    technicians = []
    for t in st.technicians:
        s = techs.summary(t.id)
        technicians.append(
            t.to_dict(balance=s.balance, trust_score=s.trust_score, trust_level=s.trust_level)
        )
    return {
        "version": BACKUP_VERSION,
        "timestamp": now_iso(),
        "inventory": [p.to_dict() for p in st.inventory],
        "bills": [b.to_dict() for b in st.bills],
        "technicians": technicians,
        "ledger": [e.to_dict() for e in st.ledger],
        "adminPin": st.settings.admin_pin_hash,
        "techCode": st.settings.tech_code,
        "noBillNoExit": st.settings.no_bill_no_exit,
        "securityLogs": [s.to_dict() for s in st.security_logs],
        "stockLogs": [s.to_dict() for s in st.stock_logs],
        "priceLogs": [p.to_dict() for p in st.price_logs],
        "note": BACKUP_NOTE,
    }


@dataclass
class RestorePlan:
    """Parsed, validated backup contents. Absent keys stay None."""
    timestamp: str = ""
    inventory: Optional[List[Product]] = None
    bills: Optional[List[Bill]] = None
    technicians: Optional[List[Technician]] = None
    ledger: Optional[List[LedgerEntry]] = None
    security_logs: Optional[List[SecurityLog]] = None
    stock_logs: Optional[List[StockLog]] = None
    price_logs: Optional[List[PriceLog]] = None
    admin_pin_hash: Optional[str] = None
    tech_code: Optional[str] = None
    no_bill_no_exit: Optional[bool] = None
    counts: Dict[str, int] = field(default_factory=dict)

    def summary(self) -> str:
        parts = [f"{k}: {v}" for k, v in self.counts.items()]
        return ", ".join(parts) if parts else "settings only"


def _parse_rows(data: dict, key: str, parse: Callable[[dict], object]) -> Optional[list]:
    rows = data.get(key)
    if rows is None:
        return None
    try:
        return [parse(r) for r in rows]
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise ImportFormatError(f"Invalid record in '{key}': {e}") from e


def parse_backup_payload(data: object, current_ledger: Iterable[LedgerEntry] = ()) -> RestorePlan:
    """
    Validate and parse a backup object. Technicians written without an
    opening balance get one derived from their stored balance and the
    ledger that will be in effect after the restore.
    """
    validate_backup_payload(data)
    data = cast(dict, data)

    plan = RestorePlan(timestamp=str(data.get("timestamp") or ""))
    plan.inventory = _parse_rows(data, "inventory", Product.from_dict)
    plan.bills = _parse_rows(data, "bills", Bill.from_dict)
    plan.ledger = _parse_rows(data, "ledger", LedgerEntry.from_dict)
    plan.security_logs = _parse_rows(data, "securityLogs", SecurityLog.from_dict)
    plan.stock_logs = _parse_rows(data, "stockLogs", StockLog.from_dict)
    plan.price_logs = _parse_rows(data, "priceLogs", PriceLog.from_dict)

    ledger = plan.ledger if plan.ledger is not None else list(current_ledger)

    def _tech(d: dict) -> Technician:
        tid = str(d["id"])
        folded = fold_balance(0.0, (e for e in ledger if e.technician_id == tid))
        return Technician.from_dict(d, ledger_total=folded)

    plan.technicians = _parse_rows(data, "technicians", _tech)

    pin = data.get("adminPin")
    if pin not in (None, ""):
        plan.admin_pin_hash = ensure_hashed(str(pin))
    code = data.get("techCode")
    if code not in (None, ""):
        plan.tech_code = str(code).strip().upper()
    if isinstance(data.get("noBillNoExit"), bool):
        plan.no_bill_no_exit = data["noBillNoExit"]

    for label, rows in (
        ("products", plan.inventory),
        ("bills", plan.bills),
        ("technicians", plan.technicians),
        ("ledger entries", plan.ledger),
    ):
        if rows is not None:
            plan.counts[label] = len(rows)
    return plan


def apply_restore(store: AppStore, plan: RestorePlan) -> None:
    """Replace every collection the backup carried, in one step; leaves safe mode."""
    with store.transaction() as st:
        if plan.inventory is not None:
            st.inventory = plan.inventory
        if plan.bills is not None:
            st.bills = plan.bills
        if plan.technicians is not None:
            st.technicians = plan.technicians
        if plan.ledger is not None:
            st.ledger = plan.ledger
        if plan.security_logs is not None:
            st.security_logs = plan.security_logs
        if plan.stock_logs is not None:
            st.stock_logs = plan.stock_logs
        if plan.price_logs is not None:
            st.price_logs = plan.price_logs
        if plan.admin_pin_hash is not None:
            st.settings.admin_pin_hash = plan.admin_pin_hash
        if plan.tech_code is not None:
            st.settings.tech_code = plan.tech_code
        if plan.no_bill_no_exit is not None:
            st.settings.no_bill_no_exit = plan.no_bill_no_exit
        st.safe_mode = False
        store.notify("all")


def read_json_file(src_file: str | Path) -> object:
    try:
        return json.loads(fsops.read_text(src_file))
    except json.JSONDecodeError as e:
        raise ImportFormatError(f"File is not valid JSON: {e.msg} (line {e.lineno})") from e
    except UnicodeDecodeError as e:
        raise ImportFormatError("File is not a text backup.") from e


# ----------------------------
# Backup Job
# ----------------------------

class BackupJob:
    def __init__(self, store: AppStore, logger: Optional[logging.Logger] = None) -> None:
        self._store = store
        self._events = logger or get_logger()

    def run(self, dest_file: str, callbacks=None) -> Optional[str]:
        cb = _Callbacks.wrap(callbacks)
        try:
            dest = Path(dest_file)
            if dest.suffix.lower() != ".json":
                dest = dest.with_suffix(".json")

            _safe_call(cb.phase, "Preflight")
            _safe_call(cb.progress, 5)
            validate_backup_destination(str(dest))
            log_event(self._events, "backup", "preflight", "Destination ok", {"dest": str(dest)})

            _safe_call(cb.phase, "Serializing")
            payload = build_backup_payload(self._store)
            text = json.dumps(payload, indent=2, ensure_ascii=False)
            _safe_call(cb.progress, 60)

            _safe_call(cb.phase, "Saving")
            out = fsops.atomic_write_text(dest, text)
            _safe_call(cb.progress, 100)
            _safe_call(cb.log, f"Backup written to: {out}")
            log_event(
                self._events, "backup", "done", "Backup written",
                {"dest": str(out), "bytes": len(text.encode("utf-8")),
                 "products": len(payload["inventory"]), "bills": len(payload["bills"])},
            )
            _safe_call(cb.finished, True, "Backup completed successfully.", str(out))
            return str(out)

        except (OSError, RuntimeError, DomainError) as exc:
            _log.debug("Backup failed:\n%s", traceback.format_exc())
            log_event(self._events, "backup", "failed", str(exc), level=logging.ERROR)
            _safe_call(cb.finished, False, _fmt_err("Backup failed.", exc), None)
            return None


# ----------------------------
# Restore Job
# ----------------------------

class RestoreJob:
    def __init__(self, store: AppStore, logger: Optional[logging.Logger] = None) -> None:
        self._store = store
        self._events = logger or get_logger()

    def run(
        self,
        src_file: str,
        callbacks=None,
        confirm: Optional[Callable[[RestorePlan], bool]] = None,
    ) -> bool:
        """
        `confirm` sees the parsed plan (backup timestamp, counts) and may
        cancel; nothing is replaced before it returns True.
        """
        cb = _Callbacks.wrap(callbacks)
        try:
            _safe_call(cb.phase, "Reading backup")
            _safe_call(cb.progress, 5)
            validate_backup_source(src_file)
            data = read_json_file(src_file)
            log_event(self._events, "restore", "read", "Backup read", {"src": str(src_file)})

            _safe_call(cb.phase, "Validating backup")
            _safe_call(cb.progress, 30)
            plan = parse_backup_payload(data, self._store.state.ledger)
            _safe_call(cb.log, f"Backup from {plan.timestamp or 'unknown date'}: {plan.summary()}")

            if confirm is not None and not confirm(plan):
                log_event(self._events, "restore", "cancelled", "Restore cancelled by operator")
                _safe_call(cb.finished, False, "Restore cancelled.", None)
                return False

            _safe_call(cb.phase, "Applying")
            _safe_call(cb.progress, 70)
            apply_restore(self._store, plan)
            _safe_call(cb.progress, 100)
            log_event(
                self._events, "restore", "done", "Database restored",
                {"src": str(src_file), **plan.counts},
            )
            _safe_call(cb.finished, True, "Database Restored Successfully!", str(src_file))
            return True

        except (OSError, DomainError) as exc:
            _log.debug("Restore failed:\n%s", traceback.format_exc())
            log_event(self._events, "restore", "failed", str(exc), level=logging.ERROR)
            _safe_call(cb.finished, False, _fmt_err("Error importing file. Invalid format.", exc), None)
            return False


# ----------------------------
# Inventory file
# ----------------------------

def export_inventory_file(store: AppStore, dest_file: str | Path) -> Path:
    validate_backup_destination(str(dest_file))
    rows = ProductsRepo(store).export_inventory()
    out = fsops.atomic_write_text(dest_file, json.dumps(rows, indent=2, ensure_ascii=False))
    log_event(get_logger(), "inventory_export", "done", "Inventory exported",
              {"dest": str(out), "products": len(rows)})
    return out


def import_inventory_file(store: AppStore, src_file: str | Path) -> int:
    validate_backup_source(str(src_file))
    data = read_json_file(src_file)
    validate_inventory_payload(data)
    n = ProductsRepo(store).import_inventory(data)
    log_event(get_logger(), "inventory_import", "done", "Inventory imported",
              {"src": str(src_file), "products": n})
    return n
