"""Display formatting helpers.

Total accessor functions for rendering optional record fields: each returns
a defined string (NOT_AVAILABLE for missing data) and never raises.
"""

import math
import re
from datetime import datetime
from typing import Any

from healthgest.constants import NOT_AVAILABLE

_CAMEL_BOUNDARY_RE = re.compile(r"([A-Z])")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return math.floor(value + 0.5)


def percent(probability: float) -> int:
    """0-1 probability as a rounded whole percentage."""
    return round_half_up(probability * 100)


def format_number(value: Any) -> str:
    """Render a number without a trailing '.0' for integral values."""
    if value is None or isinstance(value, bool):
        return NOT_AVAILABLE
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, int):
        return str(value)
    return NOT_AVAILABLE


def display_value(value: Any) -> str:
    """Render any optional field; empty and missing values become 'N/A'."""
    if value is None or value == "":
        return NOT_AVAILABLE
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return format_number(value)
    return str(value)


def format_one_decimal(value: Any) -> str:
    """Fixed one-decimal rendering; zero and missing values become 'N/A'."""
    if not value or isinstance(value, bool) or not isinstance(value, (int, float)):
        return NOT_AVAILABLE
    return f"{value:.1f}"


def format_camel_label(key: str) -> str:
    """'gestationalDiabetes' -> 'Gestational Diabetes'."""
    spaced = _CAMEL_BOUNDARY_RE.sub(r" \1", key)
    return spaced[:1].upper() + spaced[1:]


def _parse_date(value: str) -> datetime | None:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, TypeError):
        try:
            return datetime.strptime(value[:10], "%Y-%m-%d")
        except (ValueError, TypeError):
            return None


def format_date(value: str | None) -> str:
    """Format an ISO date/datetime string as 'Mon D, YYYY'.

    Only the date part is used, so timestamps never shift across midnight.
    Returns 'N/A' when missing and the original string when unparseable.
    """
    if not value:
        return NOT_AVAILABLE
    dt = _parse_date(value.split("T")[0])
    if dt is None:
        return value
    return dt.strftime("%b %d, %Y").replace(" 0", " ")


def iso_date(value: str | None) -> str | None:
    """Date part ('YYYY-MM-DD') of an ISO timestamp, or None."""
    if not value:
        return None
    dt = _parse_date(value)
    if dt is None:
        return None
    return dt.date().isoformat()


def sortable_date(value: str | None) -> datetime:
    """Naive datetime for ordering; missing/unparseable dates sort first."""
    dt = _parse_date(value) if value else None
    if dt is None:
        return datetime.min
    return dt.replace(tzinfo=None)


def format_delivery_mode(mode: str | None) -> str:
    """Recorded delivery modes are shown with 'Vaginal' as 'Normal'."""
    if mode == "Vaginal":
        return "Normal"
    return display_value(mode)


def format_birth_weight(weight: Any, *, is_ongoing: bool) -> str:
    """Birth weight in kg with one decimal.

    Recorded (historical) weights above 100 are grams and are converted;
    predicted weights are already in kg.
    """
    if weight is None or isinstance(weight, bool) or not isinstance(weight, (int, float)):
        return NOT_AVAILABLE
    if not is_ongoing and weight > 100:
        weight = weight / 1000
    return f"{weight:.1f} kg"
