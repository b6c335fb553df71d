# khata_pos/database/repositories/settings_repo.py
from __future__ import annotations

import logging

from ...constants import CUST_CODE, MANUAL_CODE, PROMO_CODES
from ...utils.auth import hash_pin, verify_pin
from ..errors import AuthorizationError, ValidationError
from ..store import AppStore

_log = logging.getLogger(__name__)


class SettingsRepo:
    """Operator-changeable settings: admin PIN, technician code, exit policy."""

    def __init__(self, store: AppStore):
        self.store = store

    @property
    def tech_code(self) -> str:
        return self.store.state.settings.tech_code

    @property
    def admin_pin_hash(self) -> str:
        return self.store.state.settings.admin_pin_hash

    @property
    def no_bill_no_exit(self) -> bool:
        return self.store.state.settings.no_bill_no_exit

    def change_admin_pin(self, current_pin: str, new_pin: str) -> None:
        if not verify_pin(current_pin, self.admin_pin_hash):
            raise AuthorizationError("Current PIN is incorrect.")
        new_pin = (new_pin or "").strip()
        if len(new_pin) < 4 or not new_pin.isdigit():
            raise ValidationError("New PIN must be at least 4 digits.")
        with self.store.transaction() as st:
            st.settings.admin_pin_hash = hash_pin(new_pin)
            self.store.notify("settings")
        _log.info("Admin PIN changed")

    def set_tech_code(self, code: str) -> None:
        code = (code or "").strip().upper()
        if not code:
            raise ValidationError("Technician code cannot be empty.")
        if code == MANUAL_CODE or code == CUST_CODE or code in PROMO_CODES:
            raise ValidationError(f"'{code}' is a reserved code.")
        with self.store.transaction() as st:
            st.settings.tech_code = code
            self.store.notify("settings")

    def set_no_bill_no_exit(self, enabled: bool) -> None:
        with self.store.transaction() as st:
            st.settings.no_bill_no_exit = bool(enabled)
            self.store.notify("settings")
