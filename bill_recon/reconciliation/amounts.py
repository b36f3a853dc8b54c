"""
Amount parsing, resolution and formatting

Monetary text is normalized by stripping commas and dollar signs, then
reading the longest leading decimal literal. Anything unparsable is 0.
"""

import math
import re
from decimal import Context, Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from .models import Record

DEFAULT_EXACT_HEADERS = ('total', 'amount')

_STRIP_CHARS = re.compile(r'[,$]')
_LEADING_NUMBER = re.compile(r'\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?')
_CENT = Decimal('0.01')
# wide enough for any finite float quantized to cents
_QUANTIZE_CONTEXT = Context(prec=400)


def parse_amount(text) -> float:
    """
    Parse monetary text into a float

    Args:
        text: Raw cell value, e.g. "$1,234.56"

    Returns:
        Parsed value, or 0.0 when no number can be read
    """
    if text is None:
        return 0.0

    cleaned = _STRIP_CHARS.sub('', str(text))
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return 0.0

    value = float(match.group(0))
    if math.isnan(value) or math.isinf(value):
        return 0.0
    return value


def find_amount_header(headers: Iterable[str],
                       exact_headers: Iterable[str] = DEFAULT_EXACT_HEADERS) -> Optional[str]:
    """First header whose lowercase form is exactly one of exact_headers"""
    wanted = {name.lower() for name in exact_headers}
    for header in headers:
        if header.lower() in wanted:
            return header
    return None


def resolve_amount(record: Record, exact_headers: Iterable[str] = DEFAULT_EXACT_HEADERS) -> float:
    """
    Resolve the monetary value used for all summary math

    A header literally named total/amount wins over the column the parser
    resolved by substring; without one, the parse-time total is used.
    """
    header = find_amount_header(record.headers, exact_headers)
    if header is not None:
        return parse_amount(record.row_data.get(header) or '0')
    return record.total or 0.0


def format_fixed(value: float) -> str:
    """
    Format with two decimals, rendering negatives as '-' plus the absolute value

    Rounds half-up on the exact binary value of the float, so 1.005
    renders as 1.00 and 0.125 as 0.13.
    """
    sign = '-' if value < 0 else ''
    return f"{sign}{_to_cents(value)}"


def format_currency(value: float) -> str:
    """Dollar display of the absolute value, e.g. $1,234.56"""
    return f"${_to_cents(value):,.2f}"


def _to_cents(value: float) -> Decimal:
    return Decimal(abs(value)).quantize(_CENT, rounding=ROUND_HALF_UP,
                                        context=_QUANTIZE_CONTEXT)
