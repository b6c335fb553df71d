from PySide6.QtCore import QAbstractTableModel, Qt, QModelIndex
from PySide6.QtGui import QBrush, QColor

from ...constants import TRUST_AVERAGE, TRUST_RISKY
from ...database.models import LedgerEntry
from ...database.repositories.technicians_repo import TechnicianSummary
from ...utils.helpers import date_key, fmt_money
from .trust import CREDIT

_TRUST_FG = {
    TRUST_RISKY: QBrush(QColor("#dc2626")),
    TRUST_AVERAGE: QBrush(QColor("#ca8a04")),
}
_GREEN = QBrush(QColor("#16a34a"))
_RED = QBrush(QColor("#e11d48"))


class TechniciansTableModel(QAbstractTableModel):
    """
    One row per technician with the derived balance and trust columns.
    Balance is shown unsigned with a Collect/Give label, like the Khata book.
    """

    HEADERS = ["ID", "Name", "Mobile", "Company", "Balance", "Limit", "Trust"]

    def __init__(self, rows: list[TechnicianSummary]):
        super().__init__()
        self._rows = rows

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        s = self._rows[index.row()]
        t = s.technician
        c = index.column()
        if role in (Qt.DisplayRole, Qt.EditRole):
            return [
                t.id,
                t.name,
                t.mobile,
                t.company,
                f"{'Collect' if s.balance >= 0 else 'Give'} {fmt_money(abs(s.balance))}",
                fmt_money(t.limit),
                f"{s.trust_score}% {s.trust_level}",
            ][c]
        if role == Qt.ForegroundRole:
            if c == 4:
                return _GREEN if s.balance >= 0 else _RED
            if c == 6:
                return _TRUST_FG.get(s.trust_level)
        if role == Qt.TextAlignmentRole and c in (4, 5):
            return int(Qt.AlignRight | Qt.AlignVCenter)
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def at(self, row: int) -> TechnicianSummary:
        return self._rows[row]

    def replace(self, rows: list[TechnicianSummary]):
        self.beginResetModel()
        self._rows = rows
        self.endResetModel()


class LedgerTableModel(QAbstractTableModel):
    """Transaction history for one technician (newest first)."""

    HEADERS = ["Date", "Details", "Type", "Amount"]

    def __init__(self, rows: list[LedgerEntry]):
        super().__init__()
        self._rows = rows

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        e = self._rows[index.row()]
        c = index.column()
        if role in (Qt.DisplayRole, Qt.EditRole):
            sign = "+" if e.type == CREDIT else "-"
            return [date_key(e.date), e.description, e.type, f"{sign} {fmt_money(e.amount)}"][c]
        if role == Qt.ForegroundRole and c in (2, 3):
            return _GREEN if e.type == CREDIT else _RED
        if role == Qt.TextAlignmentRole and c == 3:
            return int(Qt.AlignRight | Qt.AlignVCenter)
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def at(self, row: int) -> LedgerEntry:
        return self._rows[row]

    def replace(self, rows: list[LedgerEntry]):
        self.beginResetModel()
        self._rows = rows
        self.endResetModel()
