"""Patient, visit and outcome record schemas.

Records arrive from the remote backend with upper-case keys. Each model maps
those keys onto snake_case attributes via aliases and keeps any extra keys so
the record can be posted back to the prediction and insight endpoints as-is.

Numeric fields are lenient: a value that cannot be read as a number becomes
None instead of failing validation, since malformed measurements are treated
as missing data.
"""

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

Number = int | float


def lenient_number(value: Any) -> Number | None:
    """Coerce a backend value to a number, or None if it is not one."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        if not math.isfinite(parsed):
            return None
        return int(parsed) if parsed.is_integer() else parsed
    return None


def optional_str(value: Any) -> str | None:
    """Coerce a backend value to a string, keeping None."""
    if value is None:
        return None
    return str(value)


class BackendRecord(BaseModel):
    """Base for records keyed by the backend's upper-case field names."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def to_backend(self) -> dict[str, Any]:
        """Serialize back to the backend's key format."""
        return self.model_dump(by_alias=True, mode="json")


class PatientSummary(BackendRecord):
    """Entry of a patient list endpoint."""

    id: str = Field(..., alias="PATIENT_ID")
    name: str = Field(default="", alias="PATIENT_NAME")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        # Backends disagree on numeric vs string IDs
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, value: Any) -> str:
        return "" if value is None else str(value)


class Patient(PatientSummary):
    """Full patient record as returned by the details endpoint."""

    age: Number | None = Field(default=None, alias="AGE")
    date_of_birth: str | None = Field(default=None, alias="DATE_OF_BIRTH")
    blood_type: str | None = Field(default=None, alias="BLOOD_TYPE")
    medical_history: str | None = Field(default=None, alias="MEDICAL_HISTORY")
    bmi_status: str | None = Field(default=None, alias="BMI_STATUS")
    bmi_value: Number | None = Field(default=None, alias="BMI_VALUE")
    gravida: Number | None = Field(default=None, alias="GRAVIDA")
    parity: Number | None = Field(default=None, alias="PARITY")
    first_name: str | None = Field(default=None, alias="FIRST_NAME")
    last_name: str | None = Field(default=None, alias="LAST_NAME")
    diet_type: str | None = Field(default=None, alias="DIET_TYPE")
    activity_level: str | None = Field(default=None, alias="ACTIVITY_LEVEL")

    @field_validator("age", "bmi_value", "gravida", "parity", mode="before")
    @classmethod
    def parse_numbers(cls, value: Any) -> Number | None:
        return lenient_number(value)

    @field_validator(
        "date_of_birth",
        "blood_type",
        "medical_history",
        "bmi_status",
        "first_name",
        "last_name",
        "diet_type",
        "activity_level",
        mode="before",
    )
    @classmethod
    def parse_strings(cls, value: Any) -> str | None:
        return optional_str(value)


class Visit(BackendRecord):
    """One antenatal clinical encounter."""

    gestational_age_weeks: Number | None = Field(default=None, alias="GESTATIONAL_AGE_WEEKS")
    maternal_weight: Number | None = Field(default=None, alias="MATERNAL_WEIGHT")
    fundal_height: Number | None = Field(default=None, alias="FUNDAL_HEIGHT")
    hemoglobin_level: Number | None = Field(default=None, alias="HEMOGLOBIN_LEVEL")
    blood_pressure: str | None = Field(default=None, alias="BLOOD_PRESSURE")  # "120/80"
    vaccination: str | None = Field(default=None, alias="VACCINATION")  # "Yes" / "No"
    visit_date: str | None = Field(default=None, alias="VISIT_DATE")
    estimated_due_date: str | None = Field(default=None, alias="ESTIMATED_DUE_DATE")

    @field_validator(
        "gestational_age_weeks",
        "maternal_weight",
        "fundal_height",
        "hemoglobin_level",
        mode="before",
    )
    @classmethod
    def parse_numbers(cls, value: Any) -> Number | None:
        return lenient_number(value)

    @field_validator("blood_pressure", "visit_date", "estimated_due_date", mode="before")
    @classmethod
    def parse_strings(cls, value: Any) -> str | None:
        return optional_str(value)

    @field_validator("vaccination", mode="before")
    @classmethod
    def parse_vaccination(cls, value: Any) -> str | None:
        if isinstance(value, bool):
            return "Yes" if value else "No"
        return optional_str(value)

    @property
    def is_vaccinated(self) -> bool:
        return self.vaccination == "Yes"


class DeliveryRecord(BackendRecord):
    """Recorded delivery outcome (historical patients only)."""

    delivery_date: str | None = Field(default=None, alias="DELIVERY_DATE")
    delivery_mode: str | None = Field(default=None, alias="DELIVERY_MODE")
    mother_condition: str | None = Field(default=None, alias="MOTHER_CONDITION_POST_DELIVERY")
    gestational_age_at_delivery: Number | None = Field(
        default=None, alias="GESTATIONAL_AGE_AT_DELIVERY"
    )

    @field_validator("gestational_age_at_delivery", mode="before")
    @classmethod
    def parse_numbers(cls, value: Any) -> Number | None:
        return lenient_number(value)

    @field_validator("delivery_date", "delivery_mode", "mother_condition", mode="before")
    @classmethod
    def parse_strings(cls, value: Any) -> str | None:
        return optional_str(value)


class BabyRecord(BackendRecord):
    """Recorded baby outcome (historical patients only)."""

    birth_weight: Number | None = Field(default=None, alias="BIRTH_WEIGHT")
    discharge_date: str | None = Field(default=None, alias="DISCHARGE_DATE")
    term_status: str | None = Field(default=None, alias="SOURCE_SCHEMA")

    @field_validator("birth_weight", mode="before")
    @classmethod
    def parse_numbers(cls, value: Any) -> Number | None:
        return lenient_number(value)

    @field_validator("discharge_date", "term_status", mode="before")
    @classmethod
    def parse_strings(cls, value: Any) -> str | None:
        return optional_str(value)


class PatientHistory(BaseModel):
    """Response of the patient details endpoint."""

    patient: Patient
    visits: list[Visit] = Field(default_factory=list)
    deliveries: list[DeliveryRecord] = Field(default_factory=list)
    babies: list[BabyRecord] = Field(default_factory=list)

    @field_validator("visits", "deliveries", "babies", mode="before")
    @classmethod
    def none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    def backend_payload(self) -> dict[str, Any]:
        """Body accepted by the prediction and insight endpoints."""
        return {
            "patient": self.patient.to_backend(),
            "visits": [visit.to_backend() for visit in self.visits],
        }
