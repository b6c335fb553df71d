# khata_pos/modules/reporting/exports.py
from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable

from ...constants import SHOP_NAME, SPLIT, WALK_IN_CUSTOMER
from ...database.models import Bill
from ...utils.helpers import parse_iso

CSV_HEADERS = (
    "Bill ID", "Date", "Type", "Customer", "Mobile", "Items",
    "Subtotal", "GST", "Total", "Payment", "Paid", "Notes",
)


def _fmt_amount(x: float) -> str:
    return f"{x:g}" if float(x).is_integer() else f"{x:.2f}"


def _display_date(iso: str) -> str:
    d = parse_iso(iso)
    return d.strftime("%d/%m/%Y, %H:%M:%S") if d else iso


def payment_details(bill: Bill) -> str:
    """'Cash', or one 'Method: amount' per line for split bills."""
    if bill.payment_method == SPLIT and bill.payments:
        return "\n".join(f"{p.method}: {_fmt_amount(p.amount)}" for p in bill.payments if p.amount != 0)
    return bill.payment_method


def item_details(bill: Bill) -> str:
    return "\n".join(
        f"{'(RETURN) ' if line.price < 0 else ''}{line.part_name} x{line.quantity}"
        for line in bill.items
    )


def share_text(bill: Bill) -> str:
    """Plain-text bill for WhatsApp/SMS or the clipboard."""
    rule = "-" * 30
    items = "\n".join(
        f"{line.part_name} x {line.quantity} = Rs.{_fmt_amount(line.total)}" for line in bill.items
    )
    return "\n".join([
        f"*{SHOP_NAME}*",
        f"Bill ID: {bill.id}",
        f"Date: {_display_date(bill.date)}",
        rule,
        items,
        rule,
        f"Subtotal: Rs.{_fmt_amount(bill.subtotal)}",
        f"GST: Rs.{_fmt_amount(bill.gst)}",
        f"*Total: Rs.{_fmt_amount(bill.total)}*",
    ])


def bill_rows(bills: Iterable[Bill]) -> list[list[str]]:
    rows = []
    for b in bills:
        rows.append([
            b.id,
            b.date,
            b.type,
            b.customer_name or WALK_IN_CUSTOMER,
            b.customer_mobile or "",
            "; ".join(f"{line.part_name} x{line.quantity}" for line in b.items),
            f"{b.subtotal:.2f}",
            f"{b.gst:.2f}",
            f"{b.total:.2f}",
            payment_details(b).replace("\n", "; "),
            "Yes" if b.is_paid else "No",
            b.notes or "",
        ])
    return rows


def write_bills_csv(bills: Iterable[Bill], path: str | Path) -> int:
    """Write the bills register; returns the number of bills written."""
    rows = bill_rows(bills)
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(CSV_HEADERS)
        w.writerows(rows)
    return len(rows)
