"""Raw value helpers shared by validation, coercion and calculation."""

import math
import re
from datetime import datetime
from typing import Any

from dateutil import parser as date_parser

# Decimal or exponent notation; no digit separators, no nan/inf words
NUMBER_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def is_empty(value: Any) -> bool:
    """Whether a raw value counts as absent.

    Only None, the empty string, and empty collections are empty.
    The number 0 and False are values.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def to_number(value: Any) -> float | None:
    """Parse a raw value as a finite number.

    Strings must be plain decimal or exponent notation. Returns None for
    booleans, other strings, values too large for a float, NaN and
    infinities.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not NUMBER_PATTERN.match(value):
            return None
    elif not isinstance(value, (int, float)):
        return None

    try:
        number = float(value)
    except OverflowError:
        return None

    if not math.isfinite(number):
        return None
    return number


def is_numeric(value: Any) -> bool:
    return to_number(value) is not None


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a raw value as a date or date-time.

    Returns None when the value cannot be parsed.
    """
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return date_parser.parse(value)
    except (ValueError, OverflowError):
        return None
