from decimal import Decimal

from shared.money import format_money, to_money


def test_rounds_half_up_to_cents():
    assert to_money("2.345") == Decimal("2.35")
    assert to_money(Decimal("2.344")) == Decimal("2.34")


def test_accepts_ints_and_floats():
    assert to_money(10) == Decimal("10.00")
    assert to_money(0.1) == Decimal("0.10")


def test_formats_with_symbol_and_grouping():
    assert format_money(Decimal("1234.5")) == "€1,234.50"
    assert format_money(5, "$") == "$5.00"
