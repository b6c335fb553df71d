# tests/test_reporting.py

import csv
from datetime import date, datetime, timedelta

import pytest

from khata_pos.database.errors import ValidationError
from khata_pos.database.models import Bill, CartLine, SplitPayment
from khata_pos.database.repositories.dashboard_repo import DashboardRepo
from khata_pos.database.repositories.reporting_repo import (
    RANGE_ALL,
    RANGE_CUSTOM,
    RANGE_TODAY,
    ReportingRepo,
)
from khata_pos.modules.dashboard.model import DashboardModel
from khata_pos.modules.reporting.exports import (
    CSV_HEADERS,
    item_details,
    payment_details,
    share_text,
    write_bills_csv,
)
from khata_pos.modules.reporting.pdf import (
    default_bill_filename,
    render_bill_html,
    render_report_html,
    sanitize_filename,
)


def make_bill(bill_id="BL20240105-0001", when="2024-01-05T11:30:00", split=False, items=None):
    items = items or (
        CartLine("1", "LG Dual Inverter Universal PCB", 1, 3500.0, 3500.0),
        CartLine("2", "Samsung 190L Inverter Compressor", 1, -6500.0, -6500.0),
    )
    total = sum(i.total for i in items)
    payments = (
        (SplitPayment("Cash", 1000.0), SplitPayment("Khata", total - 1000.0))
        if split else (SplitPayment("Cash", total),)
    )
    return Bill(
        id=bill_id,
        date=when,
        items=tuple(items),
        subtotal=total,
        gst=0.0,
        total=total,
        type="Final",
        customer_name="Anil",
        payment_method="Split" if split else "Cash",
        payments=payments,
    )


# ---------------------------- exports ----------------------------

def test_payment_and_item_details():
    bill = make_bill(split=True)
    assert payment_details(bill) == "Cash: 1000\nKhata: -4000"
    assert payment_details(make_bill()) == "Cash"
    assert item_details(bill) == (
        "LG Dual Inverter Universal PCB x1\n(RETURN) Samsung 190L Inverter Compressor x1"
    )


def test_share_text():
    text = share_text(make_bill())
    lines = text.split("\n")
    assert lines[0] == "*Sangli Refrigeration & Spares*"
    assert "Bill ID: BL20240105-0001" in lines
    assert "Date: 05/01/2024, 11:30:00" in lines
    assert "LG Dual Inverter Universal PCB x 1 = Rs.3500" in lines
    assert lines[-1] == "*Total: Rs.-3000*"


def test_write_bills_csv(tmp_path):
    path = tmp_path / "bills.csv"
    n = write_bills_csv([make_bill(), make_bill("BL20240105-0002", split=True)], path)
    assert n == 2
    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert tuple(rows[0]) == CSV_HEADERS
    assert rows[1][0] == "BL20240105-0001"
    assert rows[2][9] == "Cash: 1000; Khata: -4000"
    assert rows[1][8] == "-3000.00"


def test_bill_and_report_html(store):
    html = render_bill_html(make_bill())
    assert "Sangli Refrigeration" in html
    assert "LG Dual Inverter Universal PCB" in html

    store.state.bills.append(make_bill())
    report = ReportingRepo(store).build(RANGE_ALL)
    html = render_report_html(report, now=datetime(2024, 1, 6, 9, 0))
    assert "All Time History" in html
    assert "Ramesh Kumar" in html


def test_filenames():
    assert default_bill_filename(make_bill()) == "Sangli_Invoice_BL20240105-0001.pdf"
    assert sanitize_filename("a b/c") == "a_b_c"
    assert sanitize_filename("///") == "document"


# ---------------------------- report ranges ----------------------------

def test_report_ranges(store):
    store.state.bills.extend([
        make_bill("BL20240105-0001", "2024-01-05T10:00:00"),
        make_bill("BL20240110-0001", "2024-01-10T10:00:00"),
        make_bill("BL20240112-0001", "2024-01-12T18:00:00"),
    ])
    repo = ReportingRepo(store)
    assert [b.id for b in repo.bills_for_range(RANGE_ALL)][0] == "BL20240112-0001"
    custom = repo.bills_for_range(RANGE_CUSTOM, date(2024, 1, 5), date(2024, 1, 10))
    assert [b.id for b in custom] == ["BL20240110-0001", "BL20240105-0001"]
    today = repo.bills_for_range(RANGE_TODAY, today=date(2024, 1, 12))
    assert [b.id for b in today] == ["BL20240112-0001"]

    with pytest.raises(ValidationError):
        repo.bills_for_range(RANGE_CUSTOM, date(2024, 1, 10), date(2024, 1, 5))
    with pytest.raises(ValidationError):
        repo.bills_for_range(RANGE_CUSTOM)


def test_report_totals(store):
    store.state.bills.append(make_bill())
    r = ReportingRepo(store).build(RANGE_ALL)
    assert r.total_sales == -3000.0
    assert r.total_items == 2
    assert r.stock_value == 51000.0
    assert r.total_stock_items == 19
    assert r.khata_total == 850.0
    # seeded parts were never sold
    assert {p.id for p in r.dead_stock} == {"1", "2"}


# ---------------------------- dashboard ----------------------------

def test_dashboard_aggregates(store):
    today = date(2024, 1, 12)
    store.state.bills.extend([
        make_bill("BL20240112-0001", "2024-01-12T10:00:00",
                  items=(CartLine("1", "LG Dual Inverter Universal PCB", 2, 3500.0, 7000.0),)),
        make_bill("BL20240110-0001", "2024-01-10T10:00:00"),
        make_bill("BL20231201-0001", "2023-12-01T10:00:00"),
    ])
    repo = DashboardRepo(store)
    assert repo.daily_total(today) == 7000.0
    assert repo.bills_count(today) == 1
    assert repo.bills_count() == 3
    trend = repo.last_7_days(today)
    assert len(trend) == 7
    assert trend[-1] == {"date": "2024-01-12", "day": "Fri", "sales": 7000.0}
    assert trend[-3]["sales"] == -3000.0
    assert repo.top_selling()[0] == {"name": "LG Dual Inverter Universal PCB", "quantity": 4}
    assert repo.low_stock_count() == 1

    store.state.inventory[0].last_sold_date = (datetime.now() - timedelta(days=120)).isoformat()
    assert repo.dead_stock_count() == 1

    model = DashboardModel(store)
    model.refresh(today=today)
    assert model.daily_sales == 7000.0
    assert model.stock_value == 51000.0
    assert [r["name"] for r in model.low_stock_rows] == ["Samsung 190L Inverter Compressor"]
