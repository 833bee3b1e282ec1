"""Cart and order pricing.

All arithmetic happens in integer minor units (hundredths of the currency
unit) and results are reported back as two-decimal amounts:

    subtotal = sum(price * quantity)
    shipping = 200, or 0 while a shipping-waiving coupon is active
    tax      = 0
    discount = subtotal * rate while a percentage coupon is active, else 0
    total    = subtotal + shipping - discount

Coupons come from a fixed in-memory table and are matched case-insensitively.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from protean.exceptions import ValidationError

SHIPPING_FEE = 200
TAX = 0


@dataclass(frozen=True)
class Coupon:
    code: str
    discount_rate: Decimal = Decimal("0")
    waives_shipping: bool = False


COUPONS = {
    "SAVE10": Coupon(code="SAVE10", discount_rate=Decimal("0.10")),
    "FREESHIP": Coupon(code="FREESHIP", waives_shipping=True),
}


@dataclass(frozen=True)
class Totals:
    subtotal: float
    tax: float
    shipping: float
    discount: float
    total: float


def to_minor_units(amount) -> int:
    """Convert a currency amount to integer minor units, rounding half up."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(minor: int) -> float:
    return float(Decimal(minor) / 100)


def normalize_coupon_code(code: str | None) -> str:
    return (code or "").strip().upper()


def resolve_coupon(code: str | None) -> Coupon:
    """Look up a coupon by code, raising a field-level error for unknown codes."""
    coupon = COUPONS.get(normalize_coupon_code(code))
    if coupon is None:
        raise ValidationError({"coupon_code": ["Invalid coupon code"]})
    return coupon


def calculate_totals(lines: Iterable[tuple[float, int]], coupon_code: str | None = None) -> Totals:
    """Price a set of ``(unit_price, quantity)`` lines with an optional coupon."""
    coupon = resolve_coupon(coupon_code) if coupon_code else None

    subtotal = sum(to_minor_units(price) * quantity for price, quantity in lines)
    shipping = 0 if coupon and coupon.waives_shipping else to_minor_units(SHIPPING_FEE)
    tax = to_minor_units(TAX)
    discount = 0
    if coupon and coupon.discount_rate:
        discount = int((subtotal * coupon.discount_rate).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    return Totals(
        subtotal=from_minor_units(subtotal),
        tax=from_minor_units(tax),
        shipping=from_minor_units(shipping),
        discount=from_minor_units(discount),
        total=from_minor_units(subtotal + tax + shipping - discount),
    )


def zero_totals() -> Totals:
    return Totals(subtotal=0.0, tax=0.0, shipping=0.0, discount=0.0, total=0.0)
