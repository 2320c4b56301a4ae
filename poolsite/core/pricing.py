# =========================================================
# SALE TOTALS
#
# Pure arithmetic for sale line items:
# - per-line subtotal / tax / total kept at full precision
# - order subtotal and tax rounded to the cent once, at the end
# - order total is the sum of the rounded subtotal and tax
#
# Input sanitising (tax rate, price, quantity, cost) lives here too,
# but runs in the form layer before calculate_totals is called.
# =========================================================

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, List, Optional

FALLBACK_TAX_RATE = Decimal("0.0625")

CENT = Decimal("0.01")
ZERO = Decimal("0")
ONE = Decimal("1")

# Scales of the stored money and rate columns
PRICE_PLACES = Decimal("0.0001")
RATE_PLACES = Decimal("0.000001")


@dataclass(frozen=True)
class LineItemInput:
    unit_price: Decimal
    quantity: int
    taxable: bool = True


@dataclass(frozen=True)
class LineTotals:
    line_subtotal: Decimal
    line_tax: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class SaleTotals:
    subtotal: Decimal
    tax_total: Decimal
    total: Decimal
    lines: List[LineTotals] = field(default_factory=list)


def round2(value: Decimal) -> Decimal:
    """Round to the cent, halves away from zero."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_totals(tax_rate: Decimal, line_items: Iterable[LineItemInput]) -> SaleTotals:
    """
    Compute per-line and order-level totals.

    Inputs are assumed sanitised: 0 <= tax_rate <= 1, unit_price >= 0,
    quantity >= 1. Per-line values are returned unrounded.
    """
    rate = Decimal(tax_rate)
    subtotal_acc = ZERO
    tax_acc = ZERO
    lines = []

    for item in line_items:
        line_subtotal = Decimal(item.unit_price) * item.quantity
        line_tax = line_subtotal * rate if item.taxable else ZERO
        line_total = line_subtotal + line_tax

        subtotal_acc += line_subtotal
        tax_acc += line_tax

        lines.append(
            LineTotals(
                line_subtotal=line_subtotal,
                line_tax=line_tax,
                line_total=line_total,
            )
        )

    subtotal = round2(subtotal_acc)
    tax_total = round2(tax_acc)

    return SaleTotals(
        subtotal=subtotal,
        tax_total=tax_total,
        total=subtotal + tax_total,
        lines=lines,
    )


# =========================================================
# INPUT SANITISING
# =========================================================
def _to_decimal(raw) -> Optional[Decimal]:
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return None

    try:
        value = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        return None

    if not value.is_finite():
        return None

    return value


def _quantize(value: Optional[Decimal], places: Decimal) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        return value.quantize(places, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return None


def resolve_tax_rate(raw, default: Decimal = FALLBACK_TAX_RATE) -> Decimal:
    """
    Missing, non-numeric or negative rates fall back to ``default``;
    rates above 1 are clamped to 1. The result has six decimal places,
    the precision a sale stores.
    """
    value = _to_decimal(raw)

    if value is None or value < 0:
        return _quantize(Decimal(default), RATE_PLACES)

    if value > ONE:
        return ONE

    return _quantize(value, RATE_PLACES)


def sanitize_unit_price(raw) -> Decimal:
    value = _quantize(_to_decimal(raw), PRICE_PLACES)
    if value is None or value < 0:
        return ZERO
    return value


def sanitize_unit_cost(raw, fallback=None) -> Decimal:
    value = _quantize(_to_decimal(raw), PRICE_PLACES)
    if value is None:
        value = _quantize(_to_decimal(fallback), PRICE_PLACES)
    if value is None or value < 0:
        return ZERO
    return value


def sanitize_quantity(raw) -> int:
    value = _to_decimal(raw)
    if value is None:
        return 1
    # "2.7" -> 2, like an integer parse of the form value
    quantity = int(value)
    return quantity if quantity >= 1 else 1

