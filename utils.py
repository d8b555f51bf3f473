"""
Utility functions for Bill Splitter
"""
from __future__ import annotations
import logging
import os
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
# largest accepted input; keeps sums and products quantizable to cents
MAX_INPUT = Decimal("1e12")

Numeric = Union[Decimal, int, float, str, None]


def round_cents(value: Union[Decimal, int]) -> Decimal:
    """Round to the nearest cent, half-up; 0 if the value is too large to quantize"""
    try:
        return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        logger.warning("Amount %s too large to round to cents, treated as 0", value)
        return ZERO


def parse_number(value: Numeric, field_name: str = "value") -> Decimal:
    """
    Parse-or-default: turn user input into a non-negative Decimal.
    Anything that is not a finite non-negative number becomes 0 and is
    logged at WARNING so it can be told apart from a real zero.
    A missing value (None) is a plain zero and is not logged.
    """
    if value is None:
        return Decimal(0)
    if isinstance(value, bool):
        logger.warning("Malformed %s %r treated as 0", field_name, value)
        return Decimal(0)
    if isinstance(value, Decimal):
        d = value
    elif isinstance(value, int):
        d = Decimal(value)
    elif isinstance(value, float):
        d = Decimal(str(value))
    else:
        text = str(value).strip()
        if text.startswith("$"):
            text = text[1:].strip()
        try:
            d = Decimal(text)
        except InvalidOperation:
            logger.warning("Malformed %s %r treated as 0", field_name, value)
            return Decimal(0)
    if not d.is_finite() or d < 0:
        logger.warning("Malformed %s %r treated as 0", field_name, value)
        return Decimal(0)
    if d > MAX_INPUT:
        logger.warning("Out of range %s %r treated as 0", field_name, value)
        return Decimal(0)
    return d


def parse_money(value: Numeric, field_name: str = "amount") -> Decimal:
    """Parse an amount (optionally written as "$12.50") to whole cents"""
    return round_cents(parse_number(value, field_name))


def parse_percentage(value: Numeric, field_name: str = "percentage") -> Decimal:
    """Parse a share percentage; sums across an item are not checked"""
    pct = parse_number(value, field_name)
    if pct > 100:
        # kept as given, like an over-assigned item
        logger.warning("%s %r is above 100", field_name, value)
    return pct


def parse_rate(value: Numeric, field_name: str = "tax rate") -> Decimal:
    """Parse a fractional rate such as 0.08"""
    return parse_number(value, field_name)


def format_money(value: Numeric) -> str:
    """Render an amount as $12.34 (or -$12.34)"""
    if isinstance(value, (Decimal, int)) and not isinstance(value, bool):
        amount = round_cents(value)
    else:
        amount = parse_money(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):.2f}"


def app_dir() -> str:
    """
    Get application data directory: ~/Library/Application Support/BillSplitter
    BILL_SPLITTER_HOME overrides it. Creates directory if it doesn't exist.
    """
    path = os.environ.get("BILL_SPLITTER_HOME")
    if not path:
        base = os.path.expanduser("~/Library/Application Support")
        path = os.path.join(base, "BillSplitter")
    os.makedirs(path, exist_ok=True)
    return path
