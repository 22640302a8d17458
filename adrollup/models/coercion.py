"""Scalar coercion of loosely typed backend values."""

import math
from datetime import date, datetime
from typing import Any


def coerce_number(value: Any) -> float:
    """Convert a backend value to a finite float.

    None, empty strings, NaN, infinities and anything unparseable become 0.0.
    Strings may carry a currency symbol, a percent sign, and either decimal
    notation ("1.234,50" or "1,234.50").
    """
    if value is None:
        return 0.0
    if isinstance(value, str):
        text = (
            value.replace("R$", "")
            .replace("$", "")
            .replace("%", "")
            .replace("\xa0", "")
            .replace(" ", "")
            .strip()
        )
        if not text:
            return 0.0
        if "," in text and "." in text:
            if text.rfind(",") > text.rfind("."):
                text = text.replace(".", "").replace(",", ".")
            else:
                text = text.replace(",", "")
        elif "," in text:
            text = text.replace(",", ".")
        try:
            number = float(text)
        except ValueError:
            return 0.0
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return 0.0
    return number if math.isfinite(number) else 0.0


def coerce_text(value: Any) -> str:
    """Strip a backend value to text; None becomes ""."""
    if value is None:
        return ""
    if isinstance(value, float) and not math.isfinite(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        # Numeric ids that arrive as floats ("123.0") keep their integer form
        return str(int(value))
    return str(value).strip()


def coerce_date(value: Any) -> date | None:
    """Read a calendar day from a date, datetime or ISO string.

    Only the day part is kept; timestamps are not shifted between timezones.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()[:10]
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None
