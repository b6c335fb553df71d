# khata_pos/database/store.py
"""
In-memory application state.

`AppStore` owns a single `AppState`. Repositories are the only writers;
every multi-step write runs inside `store.transaction()`, which snapshots the
state and puts it back if anything raises, so callers never observe a half
applied checkout or import.

Screens register listeners with `subscribe()` and are told which area
changed ("inventory", "bills", "khata", "logs", "settings", "all").
"""
from __future__ import annotations

import copy
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Iterator

from ..constants import DEFAULT_TECH_CODE
from .models import (
    Bill,
    LedgerEntry,
    PriceLog,
    Product,
    SecurityLog,
    StockLog,
    Technician,
)

_log = logging.getLogger(__name__)

Listener = Callable[[str], None]


@dataclass
class Settings:
    admin_pin_hash: str
    tech_code: str = DEFAULT_TECH_CODE
    no_bill_no_exit: bool = False


@dataclass
class AppState:
    settings: Settings
    inventory: list[Product] = field(default_factory=list)
    bills: list[Bill] = field(default_factory=list)
    technicians: list[Technician] = field(default_factory=list)
    ledger: list[LedgerEntry] = field(default_factory=list)
    security_logs: list[SecurityLog] = field(default_factory=list)
    stock_logs: list[StockLog] = field(default_factory=list)
    price_logs: list[PriceLog] = field(default_factory=list)
    safe_mode: bool = False


class AppStore:
    def __init__(self, state: AppState):
        self.state = state
        self._listeners: list[Listener] = []
        self._depth = 0
        self._pending: set[str] = set()

    # ---------------------------- TX helper ----------------------------

    @contextmanager
    def transaction(self) -> Iterator[AppState]:
        """
        Snapshot the state, yield it for mutation, restore the snapshot on
        error. Nested transactions join the outermost one. Change
        notifications are held until the outermost block commits.
        """
        if self._depth:
            self._depth += 1
            try:
                yield self.state
            finally:
                self._depth -= 1
            return

        snapshot = copy.deepcopy(self.state)
        self._depth = 1
        try:
            yield self.state
        except Exception:
            self.state = snapshot
            self._pending.clear()
            raise
        finally:
            self._depth = 0
        topics, self._pending = self._pending, set()
        for topic in sorted(topics):
            self._emit(topic)

    # ---------------------------- listeners ----------------------------

    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def notify(self, topic: str) -> None:
        if self._depth:
            self._pending.add(topic)
        else:
            self._emit(topic)

    def _emit(self, topic: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(topic)
            except Exception:
                _log.exception("Store listener failed for topic %r", topic)

    # ---------------------------- whole-state ----------------------------

    def replace(self, state: AppState) -> None:
        self.state = state
        self.notify("all")
