# khata_pos/database/__init__.py
from __future__ import annotations

import logging
from typing import Optional

from ..constants import DEFAULT_ADMIN_PIN, DEFAULT_TECH_CODE
from ..utils.auth import hash_pin
from ..utils.helpers import new_sequence_id, now_iso
from .models import Product, SecurityLog, Technician
from .seeders.default_data import seed as seed_default_data
from .store import AppState, AppStore, Settings

_log = logging.getLogger(__name__)


def integrity_problems(state: AppState) -> list[str]:
    """
    Boot-time sanity check of the collections nothing can run without:
    the catalog and the technician list.
    """
    problems = []
    if not isinstance(state.inventory, list) or not all(
        isinstance(p, Product) and p.id for p in state.inventory
    ):
        problems.append("catalog is missing or corrupt")
    if not isinstance(state.technicians, list) or not all(
        isinstance(t, Technician) and t.id for t in state.technicians
    ):
        problems.append("technician list is missing or corrupt")
    return problems


def _safe_mode_state(state: Optional[AppState], problems: list[str]) -> AppState:
    settings = getattr(state, "settings", None)
    if not isinstance(settings, Settings):
        settings = Settings(admin_pin_hash=hash_pin(DEFAULT_ADMIN_PIN), tech_code=DEFAULT_TECH_CODE)
    safe = AppState(settings=settings, safe_mode=True)
    safe.security_logs.append(
        SecurityLog(
            id=new_sequence_id("SEC", ()),
            type="SAFE_MODE",
            details="System booted in Safe Mode due to data error: " + "; ".join(problems),
            timestamp=now_iso(),
            severity="high",
        )
    )
    return safe


def get_store(state: Optional[AppState] = None) -> AppStore:
    """
    Returns the AppStore used by the whole app, seeded with demo data unless
    a state is given. If the catalog or technicians fail the integrity
    check the app starts empty in safe mode; a successful backup import
    clears it.
    """
    if state is None:
        state = seed_default_data()
    problems = integrity_problems(state)
    if problems:
        _log.error("Boot data failed integrity check: %s", "; ".join(problems))
        state = _safe_mode_state(state, problems)
    return AppStore(state)


__all__ = [
    "get_store",
    "integrity_problems",
]
