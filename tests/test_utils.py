import logging
from decimal import Decimal

import pytest

from utils import app_dir, format_money, parse_money, parse_percentage, round_cents


@pytest.mark.parametrize("raw, expected", [
    ("12.5", "12.50"),
    ("$7.25", "7.25"),
    (" $ 3 ", "3.00"),
    (4, "4.00"),
    (0.1, "0.10"),
    (Decimal("2.345"), "2.35"),
    (None, "0.00"),
])
def test_parse_money(raw, expected):
    assert parse_money(raw) == Decimal(expected)


@pytest.mark.parametrize("raw", ["abc", "", "-1", "NaN", "inf", True])
def test_malformed_money_is_zero_and_logged(raw, caplog):
    with caplog.at_level(logging.WARNING, logger="utils"):
        assert parse_money(raw, "tip") == Decimal("0.00")
    assert "Malformed tip" in caplog.text


def test_real_zero_is_not_logged(caplog):
    with caplog.at_level(logging.WARNING, logger="utils"):
        assert parse_money("0.00") == Decimal("0.00")
        assert parse_money(None) == Decimal("0.00")
    assert caplog.text == ""


def test_percentage_keeps_precision():
    assert parse_percentage("33.333") == Decimal("33.333")


def test_round_cents_half_up():
    assert round_cents(Decimal("0.125")) == Decimal("0.13")
    assert round_cents(Decimal("-0.125")) == Decimal("-0.13")


def test_format_money():
    assert format_money(Decimal("5")) == "$5.00"
    assert format_money(Decimal("-0.5")) == "-$0.50"
    assert format_money("$1.2") == "$1.20"


def test_app_dir_override(tmp_path, monkeypatch):
    target = tmp_path / "home"
    monkeypatch.setenv("BILL_SPLITTER_HOME", str(target))
    assert app_dir() == str(target)
    assert target.is_dir()


@pytest.mark.parametrize("raw", ["1e30", 1e300, Decimal("1e13")])
def test_out_of_range_money_is_zero_and_logged(raw, caplog):
    with caplog.at_level(logging.WARNING, logger="utils"):
        assert parse_money(raw, "price") == Decimal("0.00")
    assert "Out of range price" in caplog.text


def test_round_cents_too_large_to_quantize(caplog):
    with caplog.at_level(logging.WARNING, logger="utils"):
        assert round_cents(Decimal("1e40")) == Decimal("0.00")
    assert "too large" in caplog.text


def test_percentage_over_100_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="utils"):
        assert parse_percentage(150, "share of 'p1'") == Decimal(150)
    assert "share of 'p1' 150 is above 100" in caplog.text


def test_percentage_of_exactly_100_is_quiet(caplog):
    with caplog.at_level(logging.WARNING, logger="utils"):
        parse_percentage("100")
    assert caplog.text == ""
