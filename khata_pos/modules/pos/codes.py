"""
pos/codes.py

Bill codes typed into the POS code box: the technician price code, the
manual price override, and the promo codes.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ...constants import MANUAL_CODE, PROMO_CODES
from ...database.errors import InvalidCodeError
from ...utils.auth import codes_match
from .cart import CUSTOMER_TIER, TECHNICIAN_TIER

__all__ = ["TECH", "MANUAL", "PERCENT", "FIXED", "ActiveCode", "resolve_code", "tier_for"]

TECH = "tech"
MANUAL = "manual"
PERCENT = "percent"
FIXED = "fixed"


@dataclass(frozen=True)
class ActiveCode:
    code: str
    kind: str
    value: float = 0.0
    label: str = ""


def resolve_code(text: str, tech_code: str) -> Optional[ActiveCode]:
    """
    Match a typed code, case-insensitively and ignoring surrounding
    spaces, in this order: the configured technician code, the manual
    override code, then the promo table. Empty input returns None.
    Anything else raises InvalidCodeError.
    """
    code = (text or "").strip().upper()
    if not code:
        return None
    if tech_code and codes_match(code, tech_code):
        return ActiveCode(code, TECH, 0.0, "Technician Pricing Applied")
    if code == MANUAL_CODE:
        return ActiveCode(code, MANUAL, 0.0, "Manual Price Override")
    promo = PROMO_CODES.get(code)
    if promo is not None:
        kind, value, label = promo
        return ActiveCode(code, kind, float(value), label)
    raise InvalidCodeError("Invalid Code")


def tier_for(code: Optional[ActiveCode]) -> str:
    return TECHNICIAN_TIER if code is not None and code.kind == TECH else CUSTOMER_TIER
