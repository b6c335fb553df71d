from __future__ import annotations

from typing import Dict, List

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QBrush, QColor, QFont, QStandardItem, QStandardItemModel
from PySide6.QtWidgets import (
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QProgressBar,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ...utils.helpers import fmt_compact_rupees
from ...widgets.table_view import TableView


class DashboardView(QWidget):
    """
    Pure-UI dashboard surface. The controller drives it through the setters.

    Signals:
        new_bill_requested()
        low_stock_view_requested()
    """

    new_bill_requested = Signal()
    low_stock_view_requested = Signal()

    KPI_KEYS = ("daily_sales", "stock_value", "khata", "low_stock", "dead_stock", "alerts")

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self._kpi_cards: Dict[str, KPICard] = {}
        self._build_ui()

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(8, 8, 8, 8)
        root.setSpacing(10)

        top = QHBoxLayout()
        title = QLabel("<h2>Dashboard</h2>")
        title.setTextFormat(Qt.RichText)
        top.addWidget(title)
        top.addStretch(1)
        self.btn_new_bill = QPushButton("New Bill")
        self.btn_new_bill.clicked.connect(self.new_bill_requested)
        top.addWidget(self.btn_new_bill)
        root.addLayout(top)

        gridwrap = QWidget()
        grid = QGridLayout(gridwrap)
        grid.setContentsMargins(0, 0, 0, 0)
        grid.setSpacing(10)
        for i, (key, t, caption) in enumerate([
            ("daily_sales", "Today's Sales", "bills today"),
            ("stock_value", "Stock Value", "at purchase price"),
            ("khata", "Khata Outstanding", "all technicians"),
            ("low_stock", "Low Stock", "at or below threshold"),
            ("dead_stock", "Dead Stock", "unsold > 90 days"),
            ("alerts", "Security Alerts", "logged events"),
        ]):
            card = KPICard(t, caption)
            self._kpi_cards[key] = card
            grid.addWidget(card, i // 3, i % 3)
        self._kpi_cards["low_stock"].clicked.connect(self.low_stock_view_requested)
        root.addWidget(gridwrap)

        body = QHBoxLayout()
        body.setSpacing(10)

        trend = QWidget()
        self._trend_layout = QGridLayout(trend)
        self._trend_layout.setContentsMargins(0, 0, 0, 0)
        self._trend_bars: List[tuple[QLabel, QProgressBar, QLabel]] = []
        for row in range(7):
            day, bar, amount = QLabel(), QProgressBar(), QLabel()
            bar.setTextVisible(False)
            bar.setRange(0, 100)
            amount.setAlignment(Qt.AlignRight | Qt.AlignVCenter)
            self._trend_layout.addWidget(day, row, 0)
            self._trend_layout.addWidget(bar, row, 1)
            self._trend_layout.addWidget(amount, row, 2)
            self._trend_bars.append((day, bar, amount))
        body.addWidget(_Card(trend, "Sales, Last 7 Days"), 2)

        self.tbl_top = TableView(sortable=False)
        self.model_top = QStandardItemModel(0, 2)
        self.model_top.setHorizontalHeaderLabels(["Part", "Qty Sold"])
        self.tbl_top.setModel(self.model_top)
        body.addWidget(_Card(self.tbl_top, "Top Selling"), 1)

        root.addLayout(body, 1)

        self.tbl_low = TableView(sortable=False)
        self.model_low = QStandardItemModel(0, 4)
        self.model_low.setHorizontalHeaderLabels(["Part", "Stock", "Threshold", "Rack"])
        self.tbl_low.setModel(self.model_low)
        root.addWidget(_Card(self.tbl_low, "Low Stock Items"), 1)

    # ---------------- Public setters for controller ----------------

    def set_kpi_value(self, key: str, value: str, caption: str | None = None) -> None:
        card = self._kpi_cards.get(key)
        if card is None:
            return
        card.set_value(value)
        if caption is not None:
            card.set_caption(caption)

    def kpi_text(self, key: str) -> str:
        return self._kpi_cards[key].lbl_value.text()

    def set_sales_trend(self, rows: List[Dict[str, object]]) -> None:
        peak = max((float(r["sales"]) for r in rows), default=0.0)
        for (day, bar, amount), r in zip(self._trend_bars, rows):
            sales = float(r["sales"])
            day.setText(str(r["day"]))
            bar.setValue(int(round(100 * sales / peak)) if peak > 0 else 0)
            amount.setText(fmt_compact_rupees(sales))

    def set_top_selling(self, rows: List[Dict[str, object]]) -> None:
        self.model_top.removeRows(0, self.model_top.rowCount())
        for r in rows:
            self.model_top.appendRow([
                QStandardItem(str(r.get("name", ""))),
                QStandardItem(str(r.get("quantity", 0))),
            ])

    def set_low_stock(self, rows: List[Dict[str, object]]) -> None:
        self.model_low.removeRows(0, self.model_low.rowCount())
        for r in rows:
            stock = QStandardItem(str(r.get("stock", 0)))
            stock.setForeground(QBrush(QColor("#b91c1c")))
            self.model_low.appendRow([
                QStandardItem(str(r.get("name", ""))),
                stock,
                QStandardItem(str(r.get("threshold", 0))),
                QStandardItem(str(r.get("rack", ""))),
            ])


# ======================= Visual building blocks =======================

class KPICard(QFrame):
    clicked = Signal()

    def __init__(self, title: str, caption: str) -> None:
        super().__init__()
        self.setObjectName("kpi_card")
        self.setStyleSheet("""
            QFrame#kpi_card {
                border: 1px solid #e1e1e1;
                border-radius: 10px;
                background: #fff;
            }
        """)
        self.setCursor(Qt.PointingHandCursor)

        v = QVBoxLayout(self)
        v.setContentsMargins(12, 10, 12, 12)
        v.setSpacing(2)

        self.lbl_title = QLabel(title)
        f = self.lbl_title.font()
        f.setBold(True)
        self.lbl_title.setFont(f)

        self.lbl_value = QLabel("—")
        fv = QFont(self.lbl_value.font())
        fv.setPointSize(fv.pointSize() + 6)
        fv.setBold(True)
        self.lbl_value.setFont(fv)

        self.lbl_caption = QLabel(caption)
        self.lbl_caption.setStyleSheet("color: #777;")

        v.addWidget(self.lbl_title)
        v.addWidget(self.lbl_value)
        v.addWidget(self.lbl_caption)

    def mousePressEvent(self, e) -> None:  # type: ignore[override]
        if e.button() == Qt.LeftButton:
            self.clicked.emit()
        super().mousePressEvent(e)

    def set_value(self, s: str) -> None:
        self.lbl_value.setText(s)

    def set_caption(self, s: str) -> None:
        self.lbl_caption.setText(s)


class _Card(QWidget):
    """Wrap any widget in a titled card frame."""
    def __init__(self, inner: QWidget, title: str) -> None:
        super().__init__()
        v = QVBoxLayout(self)
        v.setContentsMargins(0, 0, 0, 0)
        frame = QFrame()
        frame.setFrameShape(QFrame.StyledPanel)
        frame.setStyleSheet("QFrame { border:1px solid #dcdcdc; border-radius:8px; }")
        fl = QVBoxLayout(frame)
        fl.setContentsMargins(12, 10, 12, 12)
        fl.setSpacing(6)
        fl.addWidget(QLabel(f"<b>{title}</b>"))
        fl.addWidget(inner)
        v.addWidget(frame)


