"""Dashboard view-model schemas.

These are the shapes the frontend renders directly: KPI cards, grouped
profile panels, probability bars and chart tabs. All of them are rebuilt on
every request and never persisted.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

from healthgest.schemas.insight import InsightResult
from healthgest.schemas.patient import Number

ChangeType = Literal["increase", "decrease", "stable"]
KpiStatus = Literal["stable", "positive", "negative", "critical"]
ChartTabKey = Literal["weight", "growth", "hb", "bp"]
Cohort = Literal["historical", "ongoing"]


class DashboardConfig(BaseModel):
    """Parameters of one dashboard instance (one patient cohort)."""

    cohort: Cohort
    patient_list_endpoint: str
    dashboard_endpoint: str
    selector_label: str
    no_patients_message: str
    is_ongoing: bool


class ChangeResult(BaseModel):
    """Last-change annotation for a KPI badge."""

    change: str = ""
    change_type: ChangeType = "stable"


class KpiCard(BaseModel):
    """A single titled metric card with optional trend indicator."""

    title: str
    value: str
    unit: str = ""
    change: str = ""
    change_type: ChangeType = "stable"
    icon: str
    status: KpiStatus | None = None
    highlighted: bool = False


class ProfileItem(BaseModel):
    """Label/value row inside a group card."""

    icon: str
    label: str
    value: str
    tooltip: str | None = None


class GroupCard(BaseModel):
    """Titled panel grouping profile items."""

    title: str
    items: list[ProfileItem] = Field(default_factory=list)


class ProbabilityBar(BaseModel):
    label: str
    probability: float
    percent_label: str


class ProbabilityPanel(BaseModel):
    """Probability bars for one categorical prediction."""

    title: str
    bars: list[ProbabilityBar] = Field(default_factory=list)
    empty_message: str | None = None


class SeriesDescriptor(BaseModel):
    """How the chart layer should draw one key of the merged rows."""

    data_key: str
    name: str
    style: Literal["actual", "predicted", "average"]
    dashed: bool = False
    connect_nulls: bool = False


class ChartSeries(BaseModel):
    """Merged historical + predicted rows per vital, plus reference curves."""

    maternal_weight: list[dict[str, Any]] = Field(default_factory=list)
    fundal_height: list[dict[str, Any]] = Field(default_factory=list)
    hemoglobin: list[dict[str, Any]] = Field(default_factory=list)
    blood_pressure: list[dict[str, Any]] = Field(default_factory=list)
    average_weight: list[dict[str, Any]] = Field(default_factory=list)
    average_fundal: list[dict[str, Any]] = Field(default_factory=list)
    average_hemoglobin: list[dict[str, Any]] = Field(default_factory=list)
    average_blood_pressure: list[dict[str, Any]] = Field(default_factory=list)


class ChartTab(BaseModel):
    """One tab of the main trend chart area."""

    key: ChartTabKey
    label: str
    unit: str
    kpi: KpiCard
    data: list[dict[str, Any]] = Field(default_factory=list)
    average_data: list[dict[str, Any]] = Field(default_factory=list)
    series: list[SeriesDescriptor] = Field(default_factory=list)


class LatestMeasurements(BaseModel):
    """Values from the most recent visit."""

    maternal_weight: Number | None = None
    fundal_height: Number | None = None
    hemoglobin_level: Number | None = None
    blood_pressure: str | None = None
    gestational_age_weeks: Number | None = None
    estimated_due_date: str | None = None


class DeliverySummary(BaseModel):
    """Recorded or expected delivery outcome."""

    delivery_date: str | None = None
    delivery_mode: str | None = None
    mother_condition: str | None = None
    gestational_age_at_delivery: Number | None = None


class BabySummary(BaseModel):
    birth_weight: Number | None = None
    discharge_date: str | None = None
    term_status: str | None = None


class VisitCounts(BaseModel):
    visit_count: int = 0
    vaccinated_count: int = 0


class PatientProfileSummary(BaseModel):
    date_of_birth: str | None = None
    blood_type: str | None = None
    medical_history: str | None = None
    bmi_status: str | None = None


class DashboardData(BaseModel):
    """Combined per-patient record, before rendering."""

    latest: LatestMeasurements = Field(default_factory=LatestMeasurements)
    delivery: DeliverySummary = Field(default_factory=DeliverySummary)
    visit_counts: VisitCounts = Field(default_factory=VisitCounts)
    baby: BabySummary = Field(default_factory=BabySummary)
    profile: PatientProfileSummary = Field(default_factory=PatientProfileSummary)
    charts: ChartSeries = Field(default_factory=ChartSeries)
    risk_scores: dict[str, float] | None = None
    delivery_type: dict[str, float] | None = None
    delivery_mode: dict[str, float] | None = None


class DashboardView(BaseModel):
    """Fully rendered dashboard for one patient."""

    patient_id: str
    patient_name: str
    is_ongoing: bool
    kpis: list[KpiCard] = Field(default_factory=list)
    panels: list[GroupCard] = Field(default_factory=list)
    probability_panels: list[ProbabilityPanel] = Field(default_factory=list)
    chart_tabs: list[ChartTab] = Field(default_factory=list)


class PatientOption(BaseModel):
    """Entry of the patient selector."""

    value: str
    label: str


class PatientListResponse(BaseModel):
    selector_label: str
    items: list[PatientOption] = Field(default_factory=list)
    total: int = 0
    empty_message: str | None = None


class DashboardState(BaseModel):
    """Snapshot of a live dashboard session, pushed to the client."""

    cohort: Cohort
    selector_label: str
    patients: list[PatientOption] = Field(default_factory=list)
    selected_patient_id: str | None = None
    is_patient_list_loading: bool = False
    is_loading: bool = False
    # Patient list failures are scoped so they never hide a loaded dashboard
    list_error: str | None = None
    error: str | None = None
    message: str | None = None
    view: DashboardView | None = None
    insights: dict[str, InsightResult] = Field(default_factory=dict)
