from decimal import Decimal

import pytest

from poolsite.core.pricing import (
    FALLBACK_TAX_RATE,
    LineItemInput,
    calculate_totals,
    resolve_tax_rate,
    round2,
    sanitize_quantity,
    sanitize_unit_cost,
    sanitize_unit_price,
)


def _line(price, quantity=1, taxable=True):
    return LineItemInput(unit_price=Decimal(price), quantity=quantity, taxable=taxable)


# =========================================================
# SCENARIOS
# =========================================================
def test_single_taxable_line():
    totals = calculate_totals(Decimal("0.0625"), [_line("10.00", 2)])

    assert totals.subtotal == Decimal("20.00")
    assert totals.tax_total == Decimal("1.25")
    assert totals.total == Decimal("21.25")


def test_mixed_taxable_and_non_taxable_lines():
    totals = calculate_totals(
        Decimal("0.08"),
        [_line("5.00", 3, taxable=True), _line("2.50", 1, taxable=False)],
    )

    assert totals.subtotal == Decimal("17.50")
    assert totals.tax_total == Decimal("1.20")
    assert totals.total == Decimal("18.70")


def test_no_line_items_gives_zero_totals():
    totals = calculate_totals(Decimal("0.0625"), [])

    assert totals.subtotal == Decimal("0.00")
    assert totals.tax_total == Decimal("0.00")
    assert totals.total == Decimal("0.00")
    assert totals.lines == []


# =========================================================
# LINE PROPERTIES
# =========================================================
def test_non_taxable_line_has_no_tax():
    totals = calculate_totals(Decimal("0.5"), [_line("99.99", 4, taxable=False)])

    assert totals.lines[0].line_tax == 0
    assert totals.tax_total == Decimal("0.00")


def test_line_total_is_exact_sum_of_subtotal_and_tax():
    items = [_line("3.333", 7), _line("0.015", 3), _line("12.49", 1, taxable=False)]
    totals = calculate_totals(Decimal("0.0725"), items)

    for line in totals.lines:
        assert line.line_total == line.line_subtotal + line.line_tax


def test_line_values_are_not_rounded():
    totals = calculate_totals(Decimal("0.0625"), [_line("0.333", 1)])

    assert totals.lines[0].line_tax == Decimal("0.333") * Decimal("0.0625")


def test_zero_tax_rate():
    totals = calculate_totals(Decimal("0"), [_line("10.00", 3)])

    assert totals.tax_total == Decimal("0.00")
    assert totals.total == Decimal("30.00")


# =========================================================
# ORDER PROPERTIES
# =========================================================
def test_calculation_is_idempotent():
    items = [_line("5.00", 3), _line("2.50", 1, taxable=False)]

    first = calculate_totals(Decimal("0.08"), items)
    second = calculate_totals(Decimal("0.08"), items)

    assert first == second


def test_total_is_sum_of_rounded_subtotal_and_tax():
    items = [_line("0.335", 1), _line("0.335", 1), _line("0.335", 1)]
    totals = calculate_totals(Decimal("0.0625"), items)

    assert totals.total == totals.subtotal + totals.tax_total


def test_order_rounding_within_a_cent_of_per_line_rounding():
    items = [_line("0.333", 1), _line("0.333", 1), _line("0.333", 1), _line("1.115", 2)]
    totals = calculate_totals(Decimal("0.0625"), items)

    per_line_subtotal = sum(round2(line.line_subtotal) for line in totals.lines)
    per_line_tax = sum(round2(line.line_tax) for line in totals.lines)

    assert abs(totals.subtotal - per_line_subtotal) <= Decimal("0.01")
    assert abs(totals.tax_total - per_line_tax) <= Decimal("0.01")


def test_round2_rounds_half_up():
    assert round2(Decimal("0.125")) == Decimal("0.13")
    assert round2(Decimal("1.005")) == Decimal("1.01")
    assert round2(Decimal("2.004")) == Decimal("2.00")


# =========================================================
# INPUT SANITISING
# =========================================================
@pytest.mark.parametrize(
    "raw, expected",
    [
        ("-0.1", FALLBACK_TAX_RATE),
        (None, FALLBACK_TAX_RATE),
        ("", FALLBACK_TAX_RATE),
        ("abc", FALLBACK_TAX_RATE),
        ("1.5", Decimal("1")),
        ("0", Decimal("0")),
        ("0.08", Decimal("0.08")),
        (0.0625, Decimal("0.0625")),
    ],
)
def test_resolve_tax_rate(raw, expected):
    assert resolve_tax_rate(raw) == expected


def test_resolve_tax_rate_uses_supplied_default():
    assert resolve_tax_rate("nope", default=Decimal("0.07")) == Decimal("0.07")
    assert resolve_tax_rate("-1", default=Decimal("0.07")) == Decimal("0.07")


@pytest.mark.parametrize(
    "raw, expected",
    [(None, 1), ("", 1), ("0", 1), ("-3", 1), ("5", 5), ("2.7", 2), ("x", 1)],
)
def test_sanitize_quantity(raw, expected):
    assert sanitize_quantity(raw) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [(None, Decimal("0")), ("-1", Decimal("0")), ("junk", Decimal("0")), ("12.50", Decimal("12.50"))],
)
def test_sanitize_unit_price(raw, expected):
    assert sanitize_unit_price(raw) == expected


def test_sanitize_unit_cost_falls_back_to_catalog_cost():
    assert sanitize_unit_cost("", fallback=Decimal("320.00")) == Decimal("320.00")
    assert sanitize_unit_cost("15", fallback=Decimal("320.00")) == Decimal("15")
    assert sanitize_unit_cost(None) == Decimal("0")
    assert sanitize_unit_cost("-4", fallback=Decimal("3")) == Decimal("0")


def test_sanitised_values_match_stored_precision():
    assert resolve_tax_rate("0.0712345678") == Decimal("0.071235")
    assert resolve_tax_rate("", default=Decimal("0.07123456")) == Decimal("0.071235")
    assert sanitize_unit_price("10.123456") == Decimal("10.1235")
    assert sanitize_unit_price("0.00005") == Decimal("0.0001")
    assert sanitize_unit_cost("", fallback=Decimal("2.00004")) == Decimal("2.0000")


@pytest.mark.parametrize("raw", ["1e400", "Infinity", "NaN", "-1e400"])
def test_out_of_range_prices_become_zero(raw):
    assert sanitize_unit_price(raw) == Decimal("0")
    assert sanitize_unit_cost(raw) == Decimal("0")
