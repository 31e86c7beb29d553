"""Indian rupee formatting and parsing."""
import logging
import math
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from pocketbook.functional import Loaded, OK, MISSING, CORRUPT

logger = logging.getLogger(__name__)

SYMBOL = "₹"

CRORE = 10_000_000
LAKH = 100_000
THOUSAND = 1_000

_STRIP = re.compile(r"[₹,\s]")
_LEADING_FLOAT = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _round(value: float, places: str) -> Decimal:
    return Decimal(str(value)).quantize(Decimal(places), rounding=ROUND_HALF_UP)


def _group_indian(digits: str) -> str:
    # 1234567 -> 12,34,567
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def _is_number(amount) -> bool:
    return isinstance(amount, (int, float)) and math.isfinite(amount)


def format_inr(amount: float) -> str:
    if not _is_number(amount):
        return f"{SYMBOL}0.00"

    rounded = _round(abs(amount), "0.01")
    whole, _, fraction = f"{rounded:f}".partition(".")
    formatted = f"{SYMBOL}{_group_indian(whole)}.{fraction or '00'}"
    return f"-{formatted}" if amount < 0 and rounded != 0 else formatted


def format_inr_compact(amount: float) -> str:
    if not _is_number(amount):
        return f"{SYMBOL}0"

    abs_amount = abs(amount)
    if abs_amount >= CRORE:
        formatted = f"{SYMBOL}{_round(abs_amount / CRORE, '0.1')}Cr"
    elif abs_amount >= LAKH:
        formatted = f"{SYMBOL}{_round(abs_amount / LAKH, '0.1')}L"
    elif abs_amount >= THOUSAND:
        formatted = f"{SYMBOL}{_round(abs_amount / THOUSAND, '0.1')}K"
    else:
        formatted = f"{SYMBOL}{_round(abs_amount, '1')}"

    return f"-{formatted}" if amount < 0 else formatted


def try_parse_inr(text: Optional[str]) -> Loaded[float]:
    """Parse a rupee string, reporting whether the 0 default was used and why.

    Trailing characters after a valid number are ignored ("12abc" -> 12.0) but
    mark the result CORRUPT.
    """
    if text is None or not str(text).strip():
        return Loaded(0.0, MISSING)

    cleaned = _STRIP.sub("", str(text))
    match = _LEADING_FLOAT.match(cleaned)
    if match is None:
        logger.warning("Could not parse amount %r, using 0", text)
        return Loaded(0.0, CORRUPT, f"unparseable amount {text!r}")

    value = float(match.group(0))
    if not math.isfinite(value):
        logger.warning("Amount %r is out of range, using 0", text)
        return Loaded(0.0, CORRUPT, f"out of range amount {text!r}")

    value = value or 0.0  # drop -0.0
    if match.end() != len(cleaned):
        logger.warning("Ignoring trailing characters in amount %r", text)
        return Loaded(value, CORRUPT, f"trailing characters in {text!r}")
    return Loaded(value, OK)


def parse_inr(text: Optional[str]) -> float:
    return try_parse_inr(text).value
