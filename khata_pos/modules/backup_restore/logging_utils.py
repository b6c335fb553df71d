"""
modules/backup_restore/logging_utils.py

Append-only JSON-lines log for backup, restore and inventory file
operations, written to <LOG_PATH>/backup_restore.log.

Public API
----------
- get_logger() -> logging.Logger
- log_event(logger, op, phase, message, extra: dict = {})
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

from ... import config

__all__ = ["get_logger", "log_event"]

_LOGGER_NAME = "khata_pos.backup_restore"
_LOG_FILE_NAME = "backup_restore.log"


class _JsonLineFormatter(logging.Formatter):
    """
    {"ts":"...Z","level":"INFO","name":"...","msg":"...","op":"backup","phase":"done","extra":{...}}
    """
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        event = getattr(record, "event", None)
        if isinstance(event, dict):
            event = dict(event)
            payload.update(op=event.pop("op", None), phase=event.pop("phase", None))
            if event:
                payload["extra"] = event
        return json.dumps(payload, ensure_ascii=False)


def get_logger(file_path: Optional[str] = None, level: int = logging.INFO) -> logging.Logger:
    """
    Return the backup/restore logger. Handlers are attached once; later
    calls reuse them. WARNING and above are mirrored to stderr.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    if logger.handlers:
        return logger

    log_file = Path(file_path) if file_path else Path(config.LOG_PATH) / _LOG_FILE_NAME
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_file), mode="a", encoding="utf-8", delay=True)
    except OSError:
        sh = logging.StreamHandler()
        sh.setLevel(level)
        sh.setFormatter(_JsonLineFormatter())
        logger.addHandler(sh)
        return logger

    fh.setLevel(level)
    fh.setFormatter(_JsonLineFormatter())
    logger.addHandler(fh)

    sh = logging.StreamHandler()
    sh.setLevel(logging.WARNING)
    sh.setFormatter(_JsonLineFormatter())
    logger.addHandler(sh)
    return logger


def log_event(
    logger: logging.Logger,
    op: str,
    phase: str,
    message: str,
    extra: Dict[str, object] | None = None,
    level: int = logging.INFO,
) -> None:
    """
    Log one structured event.

    op:    "backup", "restore", "inventory_export", "inventory_import"
    phase: "preflight", "read", "done", "cancelled", "failed"
    """
    event = {k: v for k, v in (extra or {}).items() if k not in ("op", "phase")}
    event.update(op=op, phase=phase)
    logger.log(level, message, extra={"event": event})
