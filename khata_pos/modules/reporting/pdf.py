# khata_pos/modules/reporting/pdf.py
"""
Printable documents: the tax invoice for one bill and the summary report.
Both are rendered from Jinja2 templates in resources/templates and turned
into PDF with WeasyPrint.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ... import config
from ...constants import SHOP_GSTIN, SHOP_MOBILE, SHOP_NAME, SHOP_TAGLINE, TAX_RATE
from ...database.models import Bill
from ...database.repositories.reporting_repo import ReportData
from ...utils.helpers import fmt_money, parse_iso
from ..inventory.stock import dead_stock_status
from .exports import item_details, payment_details

_log = logging.getLogger(__name__)

BILL_TEMPLATE = "bill_invoice.html"
REPORT_TEMPLATE = "summary_report.html"

_PDF_CSS = """
    @page {
        margin: 10mm;
        size: A4;
    }
    body {
        margin: 0 !important;
        padding: 0 !important;
    }
"""


def _env() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(config.TEMPLATES_PATH)),
        autoescape=select_autoescape(["html"]),
    )
    env.filters["money"] = fmt_money
    return env


def _shop() -> dict:
    return {
        "name": SHOP_NAME,
        "tagline": SHOP_TAGLINE,
        "gstin": SHOP_GSTIN,
        "mobile": SHOP_MOBILE,
    }


def _display_day(iso: str) -> str:
    d = parse_iso(iso)
    return d.strftime("%d/%m/%Y") if d else (iso or "")


def sanitize_filename(name: str, max_length: int = 80) -> str:
    cleaned = re.sub(r"[^A-Za-z0-9._-]+", "_", name or "").strip("._")
    return (cleaned or "document")[:max_length]


# ---------------------------- HTML ----------------------------

def render_bill_html(bill: Bill) -> str:
    items = [
        {
            "name": line.part_name,
            "quantity": line.quantity,
            "price": abs(line.price),
            "total": line.total,
            "is_return": line.price < 0,
        }
        for line in bill.items
    ]
    return _env().get_template(BILL_TEMPLATE).render(
        shop=_shop(),
        bill=bill,
        invoice_no=bill.id[-8:],
        bill_date=_display_day(bill.date),
        items=items,
        tax_percent=int(TAX_RATE * 100),
    )


def render_report_html(report: ReportData, now: datetime | None = None) -> str:
    now = now or datetime.now()
    bills = [
        {
            "id": b.id[-6:],
            "date": _display_day(b.date),
            "customer": b.customer_name or "Walk-in",
            "items": item_details(b).split("\n"),
            "payment": payment_details(b).split("\n"),
            "notes": b.notes or ("Return Processed" if b.total < 0 else "-"),
            "total": b.total,
        }
        for b in report.bills
    ]
    dead = [
        {
            "name": p.part_name,
            "brand": p.brand,
            "quantity": p.stock_quantity,
            "cost": p.purchase_price,
            "value": p.purchase_price * p.stock_quantity,
            "last_sold": _display_day(p.last_sold_date) if p.last_sold_date else "Never",
            "status": dead_stock_status(p, now),
        }
        for p in report.dead_stock
    ]
    techs = [
        {
            "name": s.technician.name,
            "mobile": s.technician.mobile,
            "trust_level": s.trust_level,
            "balance": s.balance,
        }
        for s in report.technicians
    ]
    return _env().get_template(REPORT_TEMPLATE).render(
        shop=_shop(),
        report=report,
        generated_at=now.strftime("%d/%m/%Y %H:%M"),
        bills=bills,
        dead_stock=dead,
        technicians=techs,
    )


# ---------------------------- PDF ----------------------------

def write_pdf(html_content: str, path: str | Path) -> Path:
    from weasyprint import CSS, HTML

    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    HTML(string=html_content, base_url=str(config.TEMPLATES_PATH)).write_pdf(
        str(out), stylesheets=[CSS(string=_PDF_CSS)]
    )
    _log.info("PDF written: %s", out)
    return out


def export_bill_pdf(bill: Bill, path: str | Path) -> Path:
    return write_pdf(render_bill_html(bill), path)


def export_report_pdf(report: ReportData, path: str | Path) -> Path:
    return write_pdf(render_report_html(report), path)


def default_bill_filename(bill: Bill) -> str:
    return f"Sangli_Invoice_{sanitize_filename(bill.id)}.pdf"


def default_report_filename(now: datetime | None = None) -> str:
    return f"Sangli_Report_{(now or datetime.now()).strftime('%Y-%m-%d')}.pdf"
