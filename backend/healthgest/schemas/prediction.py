"""Prediction service response schemas.

A probability map missing from a successful payload stays None, which the
dashboard renders as "not available". PredictionResult.empty() is the
defaults value used whenever predictions could not be fetched: empty maps,
empty arrays, None scalars.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from healthgest.schemas.patient import Number, lenient_number


class ProgressionPoint(BaseModel):
    """One predicted value at a gestational week."""

    week: Number | None = None
    value: Number | None = None

    @field_validator("week", "value", mode="before")
    @classmethod
    def parse_numbers(cls, value: Any) -> Number | None:
        return lenient_number(value)


class Progression(BaseModel):
    """Predicted progression curves per vital sign."""

    weight: list[ProgressionPoint] = Field(default_factory=list)
    fundal: list[ProgressionPoint] = Field(default_factory=list)
    hb: list[ProgressionPoint] = Field(default_factory=list)
    systolic: list[ProgressionPoint] = Field(default_factory=list)
    diastolic: list[ProgressionPoint] = Field(default_factory=list)

    @field_validator("weight", "fundal", "hb", "systolic", "diastolic", mode="before")
    @classmethod
    def none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


def _probability_map(value: Any) -> dict[str, float] | None:
    """Keep only numeric entries of a label -> probability mapping."""
    if not isinstance(value, dict):
        return None
    result: dict[str, float] = {}
    for label, probability in value.items():
        number = lenient_number(probability)
        if number is not None:
            result[str(label)] = number
    return result


class PredictionResult(BaseModel):
    """Payload of the ongoing-progression prediction endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    success: bool = False
    progression: Progression = Field(default_factory=Progression)
    delivery_type: dict[str, float] | None = Field(default=None, alias="deliveryType")
    delivery_mode: dict[str, float] | None = Field(default=None, alias="deliveryMode")
    risk_scores: dict[str, float] | None = Field(default=None, alias="riskScores")
    expected_gestational_age: Number | None = Field(default=None, alias="expectedGestationalAge")
    expected_birth_weight: Number | None = Field(default=None, alias="expectedBirthWeight")
    # Population reference curves, passed through to the chart layer untouched
    averages: dict[str, list[dict[str, Any]]] = Field(default_factory=dict)

    @field_validator("progression", mode="before")
    @classmethod
    def none_as_progression(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("delivery_type", "delivery_mode", "risk_scores", mode="before")
    @classmethod
    def parse_probability_maps(cls, value: Any) -> dict[str, float] | None:
        return _probability_map(value)

    @field_validator("expected_gestational_age", "expected_birth_weight", mode="before")
    @classmethod
    def parse_numbers(cls, value: Any) -> Number | None:
        return lenient_number(value)

    @field_validator("averages", mode="before")
    @classmethod
    def parse_averages(cls, value: Any) -> dict[str, list[dict[str, Any]]]:
        if not isinstance(value, dict):
            return {}
        return {
            str(key): [row for row in rows if isinstance(row, dict)]
            for key, rows in value.items()
            if isinstance(rows, list)
        }

    @classmethod
    def empty(cls) -> "PredictionResult":
        """Defaults for a failed or unsuccessful prediction request."""
        return cls(delivery_type={}, delivery_mode={}, risk_scores={})
