from PySide6.QtCore import QAbstractTableModel, Qt, QModelIndex
from PySide6.QtGui import QBrush, QColor

from ...database.models import SecurityLog
from ...utils.helpers import parse_iso

_SEVERITY_FG = {
    "high": QBrush(QColor("#dc2626")),
    "medium": QBrush(QColor("#ca8a04")),
}


class SecurityLogTableModel(QAbstractTableModel):
    HEADERS = ["Time", "Event", "Details", "Severity"]

    def __init__(self, rows: list[SecurityLog]):
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
        c = index.column()
        if role in (Qt.DisplayRole, Qt.EditRole):
            when = parse_iso(r.timestamp)
            return [
                when.strftime("%Y-%m-%d %H:%M") if when else r.timestamp,
                r.type,
                r.details,
                r.severity.upper(),
            ][c]
        if role == Qt.ForegroundRole and c == 3:
            return _SEVERITY_FG.get(r.severity)
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def at(self, row: int) -> SecurityLog:
        return self._rows[row]

    def replace(self, rows: list[SecurityLog]):
        self.beginResetModel()
        self._rows = rows
        self.endResetModel()
