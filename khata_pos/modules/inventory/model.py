from __future__ import annotations

from datetime import datetime
from typing import Optional

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt
from PySide6.QtGui import QBrush, QColor

from ...database.models import PriceLog, Product, StockLog
from ...utils.helpers import date_key, fmt_money
from .price_revealer import MASK
from .stock import days_since_sale, dead_stock_status

_DEAD_BG = {
    "critical": QBrush(QColor("#fee2e2")),
    "warning": QBrush(QColor("#fef3c7")),
}
_LOW_FG = QBrush(QColor("#dc2626"))


class ProductsTableModel(QAbstractTableModel):
    """
    Catalog table. Prices stay masked; they are only shown through the
    price reveal dialog. Rows are tinted by dead-stock status.
    """

    HEADERS = ["Barcode", "Part", "Machine", "Brand", "Type", "Rack", "Stock", "Price", "Last Sold"]
    STATUS_ROLE = Qt.UserRole + 1

    def __init__(self, rows: list[Product], now: Optional[datetime] = None):
        super().__init__()
        self._rows = rows
        self._now = now

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def _last_sold_text(self, p: Product) -> str:
        days = days_since_sale(p, self._now)
        if days is None:
            return "Never"
        return f"{days}d ago"

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        p = self._rows[index.row()]
        c = index.column()
        if role in (Qt.DisplayRole, Qt.EditRole):
            return [
                p.barcode,
                p.part_name,
                p.machine_type,
                p.brand,
                p.part_type,
                p.rack_location,
                str(p.stock_quantity),
                MASK,
                self._last_sold_text(p),
            ][c]
        if role == Qt.BackgroundRole:
            return _DEAD_BG.get(dead_stock_status(p, self._now))
        if role == Qt.ForegroundRole and c == 6 and p.is_low_stock:
            return _LOW_FG
        if role == self.STATUS_ROLE:
            return dead_stock_status(p, self._now)
        if role == Qt.ToolTipRole and p.notes:
            return p.notes
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def at(self, row: int) -> Product:
        return self._rows[row]

    def replace(self, rows: list[Product], now: Optional[datetime] = None):
        self.beginResetModel()
        self._rows = rows
        self._now = now
        self.endResetModel()


class StockLogTableModel(QAbstractTableModel):
    HEADERS = ["Date", "Product", "Change", "Reason", "New Stock"]

    def __init__(self, rows: list[StockLog]):
        super().__init__()
        self._rows = rows

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        r = self._rows[index.row()]
        if role in (Qt.DisplayRole, Qt.EditRole):
            return [
                date_key(r.date),
                r.product_name,
                f"{r.change:+d}",
                r.reason,
                str(r.new_stock),
            ][index.column()]
        if role == Qt.ForegroundRole and index.column() == 2 and r.change < 0:
            return _LOW_FG
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def replace(self, rows: list[StockLog]):
        self.beginResetModel()
        self._rows = rows
        self.endResetModel()


class PriceLogTableModel(QAbstractTableModel):
    HEADERS = ["Date", "Product", "Field", "Old", "New", "User"]

    def __init__(self, rows: list[PriceLog]):
        super().__init__()
        self._rows = rows

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        r = self._rows[index.row()]
        if role in (Qt.DisplayRole, Qt.EditRole):
            return [
                date_key(r.date),
                r.product_name,
                r.field,
                fmt_money(r.old_val),
                fmt_money(r.new_val),
                r.user,
            ][index.column()]
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def replace(self, rows: list[PriceLog]):
        self.beginResetModel()
        self._rows = rows
        self.endResetModel()
