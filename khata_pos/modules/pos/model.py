from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt
from PySide6.QtGui import QBrush, QColor

from ...database.models import CartLine, Product
from ...utils.helpers import fmt_money

_RETURN_FG = QBrush(QColor("#dc2626"))


class CartTableModel(QAbstractTableModel):
    HEADERS = ["Part", "Qty", "Price", "Total"]

    def __init__(self, rows: list[CartLine] | tuple[CartLine, ...] = ()):
        super().__init__()
        self._rows = list(rows)

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        r = self._rows[index.row()]
        c = index.column()
        if role in (Qt.DisplayRole, Qt.EditRole):
            return [r.part_name, str(r.quantity), fmt_money(r.price), fmt_money(r.total)][c]
        if role == Qt.ForegroundRole and r.total < 0:
            return _RETURN_FG
        if role == Qt.TextAlignmentRole and c > 0:
            return int(Qt.AlignRight | Qt.AlignVCenter)
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def at(self, row: int) -> CartLine:
        return self._rows[row]

    def replace(self, rows):
        self.beginResetModel()
        self._rows = list(rows)
        self.endResetModel()


class CatalogTableModel(QAbstractTableModel):
    """Products the cashier can pick, with the customer price."""

    HEADERS = ["Part", "Machine", "Brand", "Rack", "Stock", "Price"]

    def __init__(self, rows: list[Product]):
        super().__init__()
        self._rows = rows

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        p = self._rows[index.row()]
        c = index.column()
        if role in (Qt.DisplayRole, Qt.EditRole):
            return [
                p.part_name,
                p.machine_type,
                p.brand,
                p.rack_location,
                str(p.stock_quantity),
                fmt_money(p.customer_price),
            ][c]
        if role == Qt.ForegroundRole and p.stock_quantity <= 0:
            return QBrush(QColor("#9ca3af"))
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def at(self, row: int) -> Product:
        return self._rows[row]

    def replace(self, rows: list[Product]):
        self.beginResetModel()
        self._rows = rows
        self.endResetModel()
