"""Pydantic schemas."""

from healthgest.schemas.dashboard import (
    ChangeResult,
    ChartSeries,
    ChartTab,
    DashboardConfig,
    DashboardData,
    DashboardState,
    DashboardView,
    GroupCard,
    KpiCard,
    PatientListResponse,
    PatientOption,
    ProbabilityBar,
    ProbabilityPanel,
    ProfileItem,
    SeriesDescriptor,
)
from healthgest.schemas.home import DeliverySlice, HomeKpi, HomeSummary, HomeView
from healthgest.schemas.insight import InsightBlock, InsightKind, InsightResult, TextSpan
from healthgest.schemas.live import LiveAction
from healthgest.schemas.patient import (
    BabyRecord,
    DeliveryRecord,
    Patient,
    PatientHistory,
    PatientSummary,
    Visit,
)
from healthgest.schemas.prediction import PredictionResult, Progression, ProgressionPoint

__all__ = [
    # Backend records
    "BabyRecord",
    "DeliveryRecord",
    "Patient",
    "PatientHistory",
    "PatientSummary",
    "Visit",
    "PredictionResult",
    "Progression",
    "ProgressionPoint",
    # Dashboard view
    "ChangeResult",
    "ChartSeries",
    "ChartTab",
    "DashboardConfig",
    "DashboardData",
    "DashboardState",
    "DashboardView",
    "GroupCard",
    "KpiCard",
    "PatientListResponse",
    "PatientOption",
    "ProbabilityBar",
    "ProbabilityPanel",
    "ProfileItem",
    "SeriesDescriptor",
    "LiveAction",
    # Insights
    "InsightBlock",
    "InsightKind",
    "InsightResult",
    "TextSpan",
    # Home
    "DeliverySlice",
    "HomeKpi",
    "HomeSummary",
    "HomeView",
]
