"""Series merger: historical visits + predicted progression → chart rows.

Each vital sign gets one chronological list of rows keyed by gestational
week. Historical rows carry the measured field (e.g. MATERNAL_WEIGHT) and
predicted rows carry a distinct predicted field (e.g. PREDICTED_WEIGHT), so
the chart layer can draw a solid and a dashed series from a single array
without per-row type tags. Neither kind of row ever carries the other's
field.

Rows are concatenated historical-then-predicted and never re-sorted: the
backend supplies non-decreasing weeks within each sub-series.
"""

import logging
from typing import Any, NamedTuple

from healthgest.constants import (
    AVERAGE_BP_KEY,
    AVERAGE_FUNDAL_KEY,
    AVERAGE_HEMOGLOBIN_KEY,
    AVERAGE_WEIGHT_KEY,
    DIASTOLIC_KEY,
    FUNDAL_KEY,
    HEMOGLOBIN_KEY,
    PREDICTED_DIASTOLIC_KEY,
    PREDICTED_FUNDAL_KEY,
    PREDICTED_HEMOGLOBIN_KEY,
    PREDICTED_SYSTOLIC_KEY,
    PREDICTED_WEIGHT_KEY,
    SYSTOLIC_KEY,
    WEEK_KEY,
    WEIGHT_KEY,
)
from healthgest.schemas.dashboard import ChartSeries
from healthgest.schemas.patient import Number, Visit, lenient_number
from healthgest.schemas.prediction import ProgressionPoint, PredictionResult

logger = logging.getLogger(__name__)

Row = dict[str, Any]


class BloodPressure(NamedTuple):
    systolic: Number | None
    diastolic: Number | None


# =============================================================================
# Blood pressure parsing
# =============================================================================


def parse_blood_pressure(raw: str | None) -> BloodPressure:
    """Split a 'systolic/diastolic' string into numbers.

    Missing or unparsable segments become None; nothing is raised.

    >>> parse_blood_pressure("120/80")
    BloodPressure(systolic=120, diastolic=80)
    >>> parse_blood_pressure("120")
    BloodPressure(systolic=120, diastolic=None)
    """
    if not raw:
        return BloodPressure(None, None)
    parts = str(raw).split("/")
    systolic = _parse_segment(parts[0])
    diastolic = _parse_segment(parts[1]) if len(parts) > 1 else None
    return BloodPressure(systolic, diastolic)


def _parse_segment(segment: str) -> Number | None:
    if not segment.strip():
        return None
    return lenient_number(segment)


# =============================================================================
# Historical sub-series (one row per visit, in visit order)
# =============================================================================


def historical_rows(visits: list[Visit], key: str, attribute: str) -> list[Row]:
    """Project {week, <key>: value} from each visit."""
    return [
        {WEEK_KEY: visit.gestational_age_weeks, key: getattr(visit, attribute)}
        for visit in visits
    ]


def historical_bp_rows(visits: list[Visit]) -> list[Row]:
    rows = []
    for visit in visits:
        bp = parse_blood_pressure(visit.blood_pressure)
        rows.append({
            WEEK_KEY: visit.gestational_age_weeks,
            SYSTOLIC_KEY: bp.systolic,
            DIASTOLIC_KEY: bp.diastolic,
        })
    return rows


# =============================================================================
# Predicted sub-series
# =============================================================================


def predicted_rows(points: list[ProgressionPoint], key: str) -> list[Row]:
    """Project {week, <predicted key>: value} from progression points."""
    return [{WEEK_KEY: point.week, key: point.value} for point in points]


def predicted_bp_rows(
    systolic: list[ProgressionPoint], diastolic: list[ProgressionPoint]
) -> list[Row]:
    """Pair predicted systolic and diastolic points by index.

    Systolic drives the week axis; a missing diastolic index yields None.
    """
    rows = []
    for index, point in enumerate(systolic):
        dia = diastolic[index].value if index < len(diastolic) else None
        rows.append({
            WEEK_KEY: point.week,
            PREDICTED_SYSTOLIC_KEY: point.value,
            PREDICTED_DIASTOLIC_KEY: dia,
        })
    return rows


def merge_series(historical: list[Row], predicted: list[Row]) -> list[Row]:
    """Concatenate historical then predicted rows, preserving order."""
    return [*historical, *predicted]


# =============================================================================
# Chart series builder
# =============================================================================


def build_chart_series(
    visits: list[Visit], predictions: PredictionResult | None = None
) -> ChartSeries:
    """Build the merged per-vital series and the population average curves.

    Args:
        visits: Visit records in backend order (most recent last).
        predictions: Prediction payload; None or empty defaults yield
            historical-only series and empty averages.
    """
    predictions = predictions or PredictionResult.empty()
    progression = predictions.progression
    averages = predictions.averages

    series = ChartSeries(
        maternal_weight=merge_series(
            historical_rows(visits, WEIGHT_KEY, "maternal_weight"),
            predicted_rows(progression.weight, PREDICTED_WEIGHT_KEY),
        ),
        fundal_height=merge_series(
            historical_rows(visits, FUNDAL_KEY, "fundal_height"),
            predicted_rows(progression.fundal, PREDICTED_FUNDAL_KEY),
        ),
        hemoglobin=merge_series(
            historical_rows(visits, HEMOGLOBIN_KEY, "hemoglobin_level"),
            predicted_rows(progression.hb, PREDICTED_HEMOGLOBIN_KEY),
        ),
        blood_pressure=merge_series(
            historical_bp_rows(visits),
            predicted_bp_rows(progression.systolic, progression.diastolic),
        ),
        average_weight=averages.get(AVERAGE_WEIGHT_KEY, []),
        average_fundal=averages.get(AVERAGE_FUNDAL_KEY, []),
        average_hemoglobin=averages.get(AVERAGE_HEMOGLOBIN_KEY, []),
        average_blood_pressure=averages.get(AVERAGE_BP_KEY, []),
    )
    logger.debug(
        "Merged series: %d visits, %d predicted weight points",
        len(visits),
        len(progression.weight),
    )
    return series
