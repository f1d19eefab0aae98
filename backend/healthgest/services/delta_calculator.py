"""Delta calculator for KPI badges.

Compares the last two real measurements of a merged chart series. Rows
whose target field is missing (predicted-only rows, skipped measurements)
are ignored, so a delta never involves a predicted value.
"""

from typing import Any

from healthgest.constants import CHANGE_DEAD_BAND, SYSTOLIC_KEY
from healthgest.schemas.dashboard import ChangeResult


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _last_two(rows: list[dict[str, Any]], key: str) -> tuple[float, float] | None:
    """Return (previous, current) real values of `key`, or None."""
    real = [row[key] for row in rows if row.get(key) is not None]
    if len(real) < 2:
        return None
    previous, current = real[-2], real[-1]
    if not (_is_number(previous) and _is_number(current)):
        return None
    return previous, current


def calculate_change(
    rows: list[dict[str, Any]],
    key: str,
    unit: str,
    *,
    dead_band: float = CHANGE_DEAD_BAND,
) -> ChangeResult:
    """Signed one-decimal change between the last two real values.

    Differences within the dead band are reported as stable.

    >>> calculate_change([{"W": 70}, {"W": 72}], "W", "kg").change
    '+2.0 kg'
    """
    pair = _last_two(rows, key)
    if pair is None:
        return ChangeResult()
    previous, current = pair
    diff = current - previous
    if abs(diff) <= dead_band:
        return ChangeResult()
    return ChangeResult(
        change=f"{diff:+.1f} {unit}",
        change_type="increase" if diff > 0 else "decrease",
    )


def calculate_bp_change(
    rows: list[dict[str, Any]], key: str = SYSTOLIC_KEY
) -> ChangeResult:
    """Change in systolic pressure between the last two real readings."""
    pair = _last_two(rows, key)
    if pair is None:
        return ChangeResult()
    previous, current = pair
    diff = current - previous
    if diff == 0:
        return ChangeResult()
    if isinstance(diff, float) and diff.is_integer():
        diff = int(diff)
    sign = "+" if diff > 0 else ""
    return ChangeResult(
        change=f"{sign}{diff} (sys)",
        change_type="increase" if diff > 0 else "decrease",
    )
