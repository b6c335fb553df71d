from PySide6.QtCore import QAbstractTableModel, Qt, QModelIndex
from PySide6.QtGui import QBrush, QColor

from ...database.models import Bill, CartLine, Product
from ...utils.helpers import date_key, fmt_money
from .exports import payment_details

_RED = QBrush(QColor("#dc2626"))


class _RowsModel(QAbstractTableModel):
    HEADERS: list[str] = []

    def __init__(self, rows: list):
        super().__init__()
        self._rows = rows

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def at(self, row: int):
        return self._rows[row]

    def replace(self, rows: list):
        self.beginResetModel()
        self._rows = rows
        self.endResetModel()


class BillsTableModel(_RowsModel):
    """Sales register; estimates and returns are shown but flagged."""

    HEADERS = ["Bill No", "Date", "Customer", "Type", "Payment", "Items", "Total"]

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        b: Bill = self._rows[index.row()]
        c = index.column()
        if role in (Qt.DisplayRole, Qt.EditRole):
            return [
                b.id,
                date_key(b.date),
                b.customer_name,
                b.type,
                payment_details(b),
                str(sum(i.quantity for i in b.items)),
                fmt_money(b.total),
            ][c]
        if role == Qt.ForegroundRole and b.total < 0:
            return _RED
        if role == Qt.TextAlignmentRole and c in (5, 6):
            return int(Qt.AlignRight | Qt.AlignVCenter)
        return None


class BillItemsTableModel(_RowsModel):
    HEADERS = ["Part", "Qty", "Rate", "Amount"]

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        it: CartLine = self._rows[index.row()]
        c = index.column()
        if role in (Qt.DisplayRole, Qt.EditRole):
            return [it.part_name, str(it.quantity), fmt_money(it.price), fmt_money(it.total)][c]
        if role == Qt.TextAlignmentRole and c > 0:
            return int(Qt.AlignRight | Qt.AlignVCenter)
        return None


class DeadStockTableModel(_RowsModel):
    HEADERS = ["Part", "Brand", "Rack", "Stock", "Last Sold"]

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        p: Product = self._rows[index.row()]
        if role in (Qt.DisplayRole, Qt.EditRole):
            return [
                p.part_name,
                p.brand,
                p.rack_location,
                str(p.stock_quantity),
                date_key(p.last_sold_date) if p.last_sold_date else "Never",
            ][index.column()]
        return None
