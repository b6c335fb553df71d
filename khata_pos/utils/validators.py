# utils/validators.py
import math
import re

from ..database.errors import ValidationError

_MOBILE_RE = re.compile(r"^\+?[0-9][0-9 \-]{8,15}$")


def non_empty(text: str) -> bool:
    """
    True if `text` is not None/empty after stripping whitespace.
    """
    return bool(text and str(text).strip())


def looks_like_mobile(text: str) -> bool:
    """Ten to thirteen digits, optionally with a leading + and spaces/dashes."""
    t = (text or "").strip()
    if not _MOBILE_RE.match(t):
        return False
    digits = sum(ch.isdigit() for ch in t)
    return 10 <= digits <= 13


# ---- Amounts ----

def try_parse_amount(x):
    """
    Best-effort parse of a rupee amount; accepts a leading ₹ and
    thousands separators.

    Returns:
        (ok: bool, value: float|None)
    """
    text = str(x if x is not None else "").strip().replace("₹", "").replace(",", "").strip()
    if not text:
        return False, None
    try:
        val = float(text)
    except ValueError:
        return False, None
    if not math.isfinite(val):
        return False, None
    return True, val


def parse_amount(x, label: str = "Amount") -> float:
    """
    Strict parse; raises ValidationError with a message fit for a dialog.
    """
    ok, val = try_parse_amount(x)
    if not ok:
        raise ValidationError(f"{label} must be a number.")
    return round(val, 2)  # type: ignore[arg-type]


def parse_positive_amount(x, label: str = "Amount") -> float:
    val = parse_amount(x, label)
    if val <= 0:
        raise ValidationError(f"{label} must be greater than zero.")
    return val
