"""
Backup & Restore module package.

- Keeps imports light by deferring controller import until create_module() is called.
- Exposes MODULE_TITLE and create_module() for the app shell.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

MODULE_TITLE: str = "Backup & Restore"
__all__ = ["MODULE_TITLE", "create_module"]


class _BaseModuleLike(Protocol):
    """Minimal contract expected by the app shell."""
    def get_widget(self): ...
    def get_title(self) -> str: ...
    def refresh(self) -> None: ...
    def teardown(self) -> None: ...


if TYPE_CHECKING:
    from ...database.store import AppStore  # pragma: no cover


def create_module(store: "AppStore") -> _BaseModuleLike:
    """Factory: returns the module controller bound to the app store."""
    from .controller import BackupRestoreController
    return BackupRestoreController(store)
