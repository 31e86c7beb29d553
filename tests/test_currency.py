import logging

from pocketbook.currency import format_inr, format_inr_compact, parse_inr, try_parse_inr
from pocketbook.functional import OK, MISSING, CORRUPT


def test_format_inr_two_decimals_and_indian_grouping():
    assert format_inr(0) == "₹0.00"
    assert format_inr(500) == "₹500.00"
    assert format_inr(1234.5) == "₹1,234.50"
    assert format_inr(123456) == "₹1,23,456.00"
    assert format_inr(12345678.9) == "₹1,23,45,678.90"


def test_format_inr_negative_sign_outside_symbol():
    assert format_inr(-200) == "-₹200.00"
    assert format_inr(-100000) == "-₹1,00,000.00"


def test_format_inr_nan_renders_zero():
    assert format_inr(float("nan")) == "₹0.00"


def test_format_inr_rounds_half_up():
    assert format_inr(1.005) == "₹1.01"
    assert format_inr(0.125) == "₹0.13"


def test_format_compact_tiers():
    assert format_inr_compact(12500000) == "₹1.3Cr"
    assert format_inr_compact(500) == "₹500"
    assert format_inr_compact(150000) == "₹1.5L"
    assert format_inr_compact(2500) == "₹2.5K"
    assert format_inr_compact(1000) == "₹1.0K"
    assert format_inr_compact(999) == "₹999"


def test_format_compact_negative_and_nan():
    assert format_inr_compact(-45000) == "-₹45.0K"
    assert format_inr_compact(float("nan")) == "₹0"


def test_parse_inr_strips_symbol_and_separators():
    assert parse_inr("₹1,23,456.78") == 123456.78
    assert parse_inr(" 2 500 ") == 2500
    assert parse_inr("-₹200.00") == -200


def test_parse_inr_unparseable_is_zero():
    assert parse_inr("abc") == 0
    assert parse_inr("") == 0
    assert parse_inr(None) == 0


def test_round_trip_format_then_parse():
    for x in (0.0, 1.5, 99.99, 1234.56, 100000.0, 12345678.91, -250.75, 0.1 + 0.2):
        assert parse_inr(format_inr(x)) == round(x, 2)


def test_try_parse_distinguishes_missing_from_corrupt(caplog):
    assert try_parse_inr("₹1,000").status == OK
    assert try_parse_inr("").status == MISSING
    assert try_parse_inr(None).status == MISSING

    with caplog.at_level(logging.WARNING, logger="pocketbook.currency"):
        result = try_parse_inr("not money")
    assert result.status == CORRUPT
    assert result.value == 0
    assert "not money" in caplog.text


def test_try_parse_trailing_garbage_keeps_leading_number():
    result = try_parse_inr("12abc")
    assert result.value == 12
    assert result.status == CORRUPT
