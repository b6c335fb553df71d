# khata_pos/utils/auth.py
from __future__ import annotations

import hmac
import logging
import os
from enum import Enum
from typing import Callable, Optional

import bcrypt

_log = logging.getLogger(__name__)

# ---- bcrypt defaults / policy ----
_BCRYPT_DEFAULT_ROUNDS = int(os.environ.get("KHATA_POS_BCRYPT_ROUNDS", "12"))
_BCRYPT_MIN_ROUNDS = 4  # library minimum
_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


class Role(str, Enum):
    ADMIN = "admin"
    TECHNICIAN = "technician"
    CUSTOMER = "customer"


# ------------------------------- PIN hashing -------------------------------

def is_hashed(value: Optional[str]) -> bool:
    return bool(value) and str(value).startswith(_BCRYPT_PREFIXES)


def hash_pin(pin: str, rounds: int = _BCRYPT_DEFAULT_ROUNDS) -> str:
    """
    Hash a supervisor PIN with bcrypt. The cost is clamped to the library
    minimum so a bad environment value cannot break hashing.
    """
    if pin is None:
        raise ValueError("PIN must not be None")
    try:
        rounds = int(rounds)
    except Exception:
        rounds = _BCRYPT_DEFAULT_ROUNDS
    rounds = max(_BCRYPT_MIN_ROUNDS, rounds)
    return bcrypt.hashpw(str(pin).encode("utf-8"), bcrypt.gensalt(rounds)).decode("utf-8")


def verify_pin(pin: str, encoded: Optional[str]) -> bool:
    if pin is None or not encoded:
        return False
    try:
        return bcrypt.checkpw(str(pin).encode("utf-8"), str(encoded).encode("utf-8"))
    except ValueError:
        _log.warning("Stored PIN hash is malformed")
        return False


def ensure_hashed(value: str) -> str:
    """
    Backups written by older builds carry the PIN in clear text; hash those,
    pass through values that are already bcrypt hashes.
    """
    return value if is_hashed(value) else hash_pin(value)


def codes_match(entered: str, expected: str) -> bool:
    """Case-insensitive, whitespace-trimmed, constant-time code comparison."""
    a = (entered or "").strip().upper().encode("utf-8")
    b = (expected or "").strip().upper().encode("utf-8")
    return hmac.compare_digest(a, b)


# ------------------------------- Authorizer -------------------------------

class Authorizer:
    """
    Single place that turns an entered secret into a role.

    The secrets themselves are read through callables so the settings can
    change (Settings screen, backup import) without rebuilding call sites.
    """

    def __init__(
        self,
        admin_pin_hash: Callable[[], str],
        tech_code: Callable[[], str],
        customer_code: Callable[[], str],
    ):
        self._admin_pin_hash = admin_pin_hash
        self._tech_code = tech_code
        self._customer_code = customer_code

    def authorize(self, secret: str) -> Optional[Role]:
        secret = (secret or "").strip()
        if secret and verify_pin(secret, self._admin_pin_hash()):
            return Role.ADMIN
        if secret and codes_match(secret, self._tech_code()):
            return Role.TECHNICIAN
        if not secret or codes_match(secret, self._customer_code()):
            return Role.CUSTOMER
        return None

    def is_admin(self, secret: str) -> bool:
        secret = (secret or "").strip()
        return bool(secret) and verify_pin(secret, self._admin_pin_hash())
