# khata_pos/utils/barcode.py
"""
Barcode sources for the POS and inventory scanners.

A source is polled on a timer while the scanner panel is open; each poll
returns at most one recognised code. Two implementations:

- KeyboardWedgeSource: USB/Bluetooth scanners that "type" the code followed
  by Enter. The view feeds completed lines in; poll() hands them out.
- ScriptedBarcodeSource: replays a fixed list of codes, used for demos and
  tests so scanning paths stay deterministic.
"""
from __future__ import annotations

import time
from collections import deque
from typing import Callable, Deque, Dict, Iterable, Optional, Protocol

from ..constants import SCAN_DEBOUNCE_SECONDS


class ScannerUnavailable(Exception):
    """Raised by open() when the source cannot start."""


class BarcodeSource(Protocol):
    def open(self) -> None: ...
    def poll(self) -> Optional[str]: ...
    def close(self) -> None: ...


class KeyboardWedgeSource:
    def __init__(self) -> None:
        self._queue: Deque[str] = deque()
        self._open = False

    def open(self) -> None:
        self._queue.clear()
        self._open = True

    def feed(self, text: str) -> None:
        code = (text or "").strip()
        if self._open and code:
            self._queue.append(code)

    def poll(self) -> Optional[str]:
        return self._queue.popleft() if self._queue else None

    def close(self) -> None:
        self._open = False
        self._queue.clear()


class ScriptedBarcodeSource:
    def __init__(self, codes: Iterable[str], *, loop: bool = False):
        self._codes = list(codes)
        self._loop = loop
        self._pos = 0
        self._open = False

    def open(self) -> None:
        self._open = True

    def poll(self) -> Optional[str]:
        if not self._open or not self._codes:
            return None
        if self._pos >= len(self._codes):
            if not self._loop:
                return None
            self._pos = 0
        code = self._codes[self._pos]
        self._pos += 1
        return code

    def close(self) -> None:
        self._open = False


class ScanDebouncer:
    """Drops repeats of the same code inside the debounce window."""

    def __init__(
        self,
        window: float = SCAN_DEBOUNCE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._window = window
        self._clock = clock
        self._seen: Dict[str, float] = {}

    def accept(self, code: str) -> bool:
        now = self._clock()
        last = self._seen.get(code)
        if last is not None and now - last < self._window:
            return False
        self._seen[code] = now
        return True

    def reset(self) -> None:
        self._seen.clear()
