"""Lenient value coercion for historical record data."""

import math
import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

_TRUE_FLAGS = {"true", "t", "yes", "y", "1", "on"}

# Postgres emits 1-6 fractional digits; older fromisoformat only takes 3 or 6.
_FRACTIONAL_SECONDS = re.compile(r"(\d{2}:\d{2}:\d{2})\.(\d+)")


def coerce_number(value: Any) -> Optional[float]:
    """
    Coerce a raw column value into a float.
    Missing, empty, non-numeric and non-finite values become None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip().replace(",", "").lstrip("$")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def coerce_flag(value: Any) -> bool:
    """
    Coerce a raw flag column into a bool.
    Recognizes the usual string and numeric spellings; anything else is False.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_FLAGS
    return False


def coerce_text(value: Any) -> Optional[str]:
    """Render scalar values (numeric phone numbers, codes) as text; drop anything else."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    return None


def _six_digit_fraction(match: "re.Match") -> str:
    return f"{match.group(1)}.{match.group(2)[:6].ljust(6, '0')}"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a date, datetime or ISO-8601 string into a naive local datetime.

    A plain date is taken at local midnight. Timezone-aware values are
    converted to local time and stripped of tzinfo so they compare against
    the naive bounds produced by the date range resolver.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        text = _FRACTIONAL_SECONDS.sub(_six_digit_fraction, text, count=1)
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed
