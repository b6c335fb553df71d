"""
inventory/price_revealer.py

Hidden price tiers on the product card. A code unlocks what its holder
may see: technicians see the technician price, customers the selling
price, the admin PIN everything including cost.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ...database.errors import AuthorizationError
from ...database.models import Product
from ...database.repositories.logs_repo import LogsRepo
from ...utils.auth import Authorizer, Role

MASK = "₹ ****"


@dataclass(frozen=True)
class PriceReveal:
    role: Role
    customer_price: Optional[float] = None
    technician_price: Optional[float] = None
    purchase_price: Optional[float] = None


def reveal_prices(
    product: Product,
    secret: str,
    authorizer: Authorizer,
    logs: Optional[LogsRepo] = None,
) -> PriceReveal:
    role = authorizer.authorize(secret)
    if role is None:
        raise AuthorizationError("Invalid Code")
    if role is Role.TECHNICIAN:
        return PriceReveal(role, technician_price=product.technician_price)
    if role is Role.CUSTOMER:
        return PriceReveal(role, customer_price=product.customer_price)
    if logs is not None:
        logs.security("PRICE_CHECK", f"Cost price viewed: {product.part_name}", "low")
    return PriceReveal(
        role,
        customer_price=product.customer_price,
        technician_price=product.technician_price,
        purchase_price=product.purchase_price,
    )
