"""Client messages of the live dashboard WebSocket."""

from typing import Any, Literal

from pydantic import BaseModel, field_validator, model_validator

from healthgest.schemas.insight import InsightKind


class LiveAction(BaseModel):
    """One client action: select a patient, refresh an insight, or reload."""

    action: Literal["select", "refresh_insight", "reload_patients"]
    patient_id: str | None = None
    kind: InsightKind | None = None

    @field_validator("patient_id", mode="before")
    @classmethod
    def coerce_patient_id(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @model_validator(mode="after")
    def check_arguments(self) -> "LiveAction":
        if self.action == "select" and not self.patient_id:
            raise ValueError("select requires patient_id")
        if self.action == "refresh_insight" and self.kind is None:
            raise ValueError("refresh_insight requires kind")
        return self
