"""Home (landing view) summary schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class DeliveryTypeBreakdown(BaseModel):
    """Share (percent) and count of each delivery outcome type."""

    matured: float = 0
    premature: float = 0
    mortality: float = 0
    matured_count: int = Field(default=0, alias="maturedCount")
    premature_count: int = Field(default=0, alias="prematureCount")
    mortality_count: int = Field(default=0, alias="mortalityCount")

    model_config = ConfigDict(populate_by_name=True)


class HomeSummary(BaseModel):
    """Aggregate counts returned by the home-summary endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    success: bool | None = None
    error: str | None = None
    total_patients: int = Field(default=0, alias="totalPatients")
    active_pregnancies: int = Field(default=0, alias="activePregnancies")
    historical_patients: int = Field(default=0, alias="historicalPatients")
    normal_delivery_count: int = Field(default=0, alias="normalDeliveryCount")
    c_section_delivery_count: int = Field(default=0, alias="cSectionDeliveryCount")
    total_deliveries: int = Field(default=0, alias="totalDeliveries")
    total_babies: int = Field(default=0, alias="totalBabies")
    todays_appointments: int = Field(default=0, alias="todaysAppointments")
    normal_delivery_rate: float = Field(default=0, alias="normalDeliveryRate")
    c_section_rate: float = Field(default=0, alias="cSectionRate")
    delivery_types: DeliveryTypeBreakdown = Field(
        default_factory=DeliveryTypeBreakdown, alias="deliveryTypes"
    )


class HomeKpi(BaseModel):
    title: str
    value: str
    icon: str
    # Page the card navigates to when clicked, if any
    target: Literal["ONGOING_PATIENTS", "PATIENT_DETAILS"] | None = None


class DeliverySlice(BaseModel):
    label: str
    percent: float
    count: int


class HomeView(BaseModel):
    """Rendered landing view."""

    kpis: list[HomeKpi] = Field(default_factory=list)
    normal_delivery_rate: float = 0
    c_section_rate: float = 0
    delivery_types: list[DeliverySlice] = Field(default_factory=list)
    unassigned_percent: float = 0
    active_pregnancies: int = 0
    historical_patients: int = 0
