# utils/helpers.py
from datetime import date, datetime
import logging
from typing import Iterable, Union, Optional

NumberLike = Union[float, int, str]

_log = logging.getLogger(__name__)


def today_str() -> str:
    """Return today's date as ISO string (YYYY-MM-DD)."""
    return date.today().isoformat()


def now_iso() -> str:
    """Current local timestamp, ISO 8601 with seconds."""
    return datetime.now().isoformat(timespec="seconds")


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO timestamp as written by this app or by the browser build
    (trailing 'Z', milliseconds). Returns None for empty/unparseable input.
    Timezone info is dropped so values compare against naive local times.
    """
    if not value:
        return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1]
    try:
        return datetime.fromisoformat(text).replace(tzinfo=None)
    except ValueError:
        _log.debug("parse_iso: could not parse %r", value)
        return None


def date_key(value: Optional[str]) -> str:
    """'YYYY-MM-DD' part of an ISO timestamp ('' if missing)."""
    return (value or "")[:10]


def new_sequence_id(prefix: str, existing: Iterable[str], when: Optional[date] = None) -> str:
    """
    Ids look like PREFIXyyyymmdd-NNNN, numbered per day from the highest
    id already present with the same day prefix.
    """
    d = (when or date.today()).strftime("%Y%m%d")
    head = f"{prefix}{d}-"
    last = 0
    for eid in existing:
        if eid and eid.startswith(head):
            try:
                last = max(last, int(eid.split("-")[-1]))
            except ValueError:
                continue
    return f"{head}{last + 1:04d}"


def fmt_money(
    v: NumberLike,
    places: int = 2,
    *,
    strict: bool = False,
    sentinel: Optional[str] = None,
) -> str:
    """
    Format a number as money with thousands separators and a fixed number of decimals.

    Behavior on parse failure:
      - By default (strict=False, sentinel=None), returns str(v).
      - If `sentinel` is provided (e.g., "N/A"), returns that sentinel instead.
      - If `strict=True`, raises ValueError on parse failures.
    """
    try:
        x = float(v)
    except Exception as e:
        _log.debug("fmt_money: failed to parse %r as float: %s", v, e)
        if strict:
            raise ValueError(f"Could not parse {v!r} as a number.") from e
        return str(sentinel) if sentinel is not None else str(v)
    return f"{x:,.{places}f}"


def fmt_rupees(v: NumberLike) -> str:
    return f"₹ {fmt_money(v)}"


def fmt_compact_rupees(v: float) -> str:
    """Dashboard style: lakhs as 'L', thousands as 'k'."""
    x = float(v or 0.0)
    if x >= 100000:
        return f"₹ {x / 100000:.2f}L"
    if x >= 1000:
        return f"₹ {x / 1000:.1f}k"
    return f"₹ {x:,.0f}"
