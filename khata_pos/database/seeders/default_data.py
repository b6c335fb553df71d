# khata_pos/database/seeders/default_data.py
"""
Demo data loaded at boot: two catalog parts, two technicians and the
opening ledger entry that explains Ramesh's balance.
"""
from ...constants import DEFAULT_ADMIN_PIN, DEFAULT_TECH_CODE
from ...utils.auth import hash_pin
from ...utils.helpers import now_iso
from ..models import LedgerEntry, Product, Technician
from ..store import AppState, Settings


def demo_products() -> list[Product]:
    return [
        Product(
            id="1",
            barcode="LG-PCB-001",
            machine_type="AC",
            brand="LG",
            part_type="PCB",
            part_name="LG Dual Inverter Universal PCB",
            compatible_models=["LG 1.5 Ton", "LG 2 Ton Inverter"],
            rack_location="A-12",
            stock_quantity=15,
            low_stock_threshold=5,
            supplier_name="Reliable Spares",
            purchase_price=2200.0,
            technician_price=2800.0,
            customer_price=3500.0,
            images=["https://picsum.photos/seed/pcb/400/300"],
            is_fast_moving=True,
        ),
        Product(
            id="2",
            barcode="SAM-CMP-002",
            machine_type="Fridge",
            brand="Samsung",
            part_type="Compressor",
            part_name="Samsung 190L Inverter Compressor",
            compatible_models=["Samsung Single Door", "Whirlpool Pro"],
            rack_location="B-04",
            stock_quantity=4,
            low_stock_threshold=5,
            supplier_name="Metro Refrigeration",
            purchase_price=4500.0,
            technician_price=5200.0,
            customer_price=6500.0,
            images=["https://picsum.photos/seed/comp/400/300"],
            is_fast_moving=False,
        ),
    ]


def demo_technicians() -> list[Technician]:
    return [
        Technician(id="T1", name="Ramesh Kumar", mobile="9876543210", limit=5000.0),
        Technician(
            id="T2",
            name="Sunil Refrigeration",
            mobile="9123456780",
            limit=10000.0,
            opening_balance=-400.0,
        ),
    ]


def demo_ledger() -> list[LedgerEntry]:
    return [
        LedgerEntry(
            id="L1",
            technician_id="T1",
            date=now_iso(),
            description="Opening Balance",
            amount=1250.0,
            type="Debit",
        )
    ]


def seed(admin_pin: str = DEFAULT_ADMIN_PIN, tech_code: str = DEFAULT_TECH_CODE) -> AppState:
    return AppState(
        settings=Settings(admin_pin_hash=hash_pin(admin_pin), tech_code=tech_code),
        inventory=demo_products(),
        technicians=demo_technicians(),
        ledger=demo_ledger(),
    )
