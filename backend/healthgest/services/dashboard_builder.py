"""Dashboard builder: combines pipeline outputs into the rendered view.

Two steps:
- build_dashboard_data() merges the patient history and (for ongoing
  patients) the predictions into one DashboardData record.
- build_dashboard_view() turns that record into KPI cards, grouped profile
  panels, probability panels and chart tabs.

Both are pure; they are re-run for every request or selection.
"""

from healthgest.config import Settings, settings as default_settings
from healthgest.constants import (
    AVG_DIASTOLIC_KEY,
    AVG_FUNDAL_KEY,
    AVG_HB_KEY,
    AVG_SYSTOLIC_KEY,
    AVG_WEIGHT_KEY,
    DIASTOLIC_KEY,
    FUNDAL_KEY,
    HEMOGLOBIN_KEY,
    NOT_AVAILABLE,
    PREDICTED_DIASTOLIC_KEY,
    PREDICTED_FUNDAL_KEY,
    PREDICTED_HEMOGLOBIN_KEY,
    PREDICTED_SYSTOLIC_KEY,
    PREDICTED_WEIGHT_KEY,
    SYSTOLIC_KEY,
    WEIGHT_KEY,
)
from healthgest.schemas.dashboard import (
    BabySummary,
    ChartTab,
    DashboardConfig,
    DashboardData,
    DashboardView,
    DeliverySummary,
    GroupCard,
    KpiCard,
    KpiStatus,
    LatestMeasurements,
    PatientProfileSummary,
    ProfileItem,
    SeriesDescriptor,
    VisitCounts,
)
from healthgest.schemas.patient import PatientHistory, Visit
from healthgest.schemas.prediction import PredictionResult
from healthgest.services.categorical_resolver import (
    build_probability_panel,
    build_risk_items,
    resolve_prediction,
)
from healthgest.services.delta_calculator import calculate_bp_change, calculate_change
from healthgest.services.series_merger import build_chart_series
from healthgest.utils.formatters import (
    display_value,
    format_birth_weight,
    format_date,
    format_delivery_mode,
    format_number,
    format_one_decimal,
    iso_date,
    sortable_date,
)


def latest_visit(visits: list[Visit]) -> Visit | None:
    """Most recent visit by visit date; ties keep backend order."""
    if not visits:
        return None
    return sorted(visits, key=lambda v: sortable_date(v.visit_date), reverse=True)[0]


# =============================================================================
# Combined record
# =============================================================================


def build_dashboard_data(
    history: PatientHistory,
    predictions: PredictionResult | None,
    *,
    is_ongoing: bool,
) -> DashboardData:
    """Combine history and predictions into one DashboardData record.

    For ongoing patients delivery/baby figures are the expected ones: due
    date from the latest visit, gestational age and birth weight from the
    predictions. For historical patients they come from the first delivery
    and baby records.
    """
    predictions = predictions or PredictionResult.empty()
    latest = latest_visit(history.visits)
    delivery = history.deliveries[0] if history.deliveries else None
    baby = history.babies[0] if history.babies else None

    latest_measurements = LatestMeasurements()
    if latest is not None:
        latest_measurements = LatestMeasurements(
            maternal_weight=latest.maternal_weight,
            fundal_height=latest.fundal_height,
            hemoglobin_level=latest.hemoglobin_level,
            blood_pressure=latest.blood_pressure,
            gestational_age_weeks=latest.gestational_age_weeks,
            estimated_due_date=latest.estimated_due_date,
        )

    if is_ongoing:
        delivery_summary = DeliverySummary(
            delivery_date=iso_date(latest.estimated_due_date) if latest else None,
            delivery_mode=delivery.delivery_mode if delivery else None,
            mother_condition=delivery.mother_condition if delivery else None,
            gestational_age_at_delivery=predictions.expected_gestational_age,
        )
    else:
        delivery_summary = DeliverySummary(
            delivery_date=delivery.delivery_date if delivery else None,
            delivery_mode=delivery.delivery_mode if delivery else None,
            mother_condition=delivery.mother_condition if delivery else None,
            gestational_age_at_delivery=(
                delivery.gestational_age_at_delivery if delivery else None
            ),
        )

    baby_summary = BabySummary(
        birth_weight=(
            predictions.expected_birth_weight
            if is_ongoing
            else (baby.birth_weight if baby else None)
        ),
        discharge_date=baby.discharge_date if baby else None,
        term_status=baby.term_status if baby else None,
    )

    patient = history.patient
    return DashboardData(
        latest=latest_measurements,
        delivery=delivery_summary,
        visit_counts=VisitCounts(
            visit_count=len(history.visits),
            vaccinated_count=sum(1 for v in history.visits if v.is_vaccinated),
        ),
        baby=baby_summary,
        profile=PatientProfileSummary(
            date_of_birth=patient.date_of_birth,
            blood_type=patient.blood_type,
            medical_history=patient.medical_history,
            bmi_status=patient.bmi_status,
        ),
        charts=build_chart_series(history.visits, predictions),
        risk_scores=predictions.risk_scores if is_ongoing else None,
        delivery_type=predictions.delivery_type if is_ongoing else None,
        delivery_mode=predictions.delivery_mode if is_ongoing else None,
    )


# =============================================================================
# KPI cards
# =============================================================================


def condition_status(condition: str | None) -> KpiStatus:
    """Map the post-delivery mother condition to a KPI status."""
    value = (condition or "").lower()
    if value == "stable":
        return "positive"
    if value in ("unstable", "critical"):
        return "critical"
    return "stable"


def _chart_kpis(data: DashboardData, dead_band: float) -> dict[str, KpiCard]:
    charts = data.charts
    latest = data.latest
    weight = calculate_change(charts.maternal_weight, WEIGHT_KEY, "kg", dead_band=dead_band)
    fundal = calculate_change(charts.fundal_height, FUNDAL_KEY, "cm", dead_band=dead_band)
    hb = calculate_change(charts.hemoglobin, HEMOGLOBIN_KEY, "g/dL", dead_band=dead_band)
    bp = calculate_bp_change(charts.blood_pressure, SYSTOLIC_KEY)
    return {
        "weight": KpiCard(
            title="Last Maternal Weight",
            value=display_value(latest.maternal_weight),
            unit="kg",
            change=weight.change,
            change_type=weight.change_type,
            icon="weight",
        ),
        "growth": KpiCard(
            title="Last Fundal Height",
            value=display_value(latest.fundal_height),
            unit="cm",
            change=fundal.change,
            change_type=fundal.change_type,
            icon="ruler",
        ),
        "hb": KpiCard(
            title="Last HB Level",
            value=display_value(latest.hemoglobin_level),
            unit="g/dL",
            change=hb.change,
            change_type=hb.change_type,
            icon="heart",
        ),
        "bp": KpiCard(
            title="Last BP Level",
            value=display_value(latest.blood_pressure),
            unit="mmHg",
            change=bp.change,
            change_type=bp.change_type,
            icon="heart",
        ),
    }


def _summary_kpis(data: DashboardData, is_ongoing: bool) -> list[KpiCard]:
    visits = KpiCard(
        title="Visit Count",
        value=str(data.visit_counts.visit_count),
        icon="ruler",
        highlighted=True,
    )
    if is_ongoing:
        second = KpiCard(
            title="Current Gestational Age",
            value=display_value(data.latest.gestational_age_weeks),
            unit="weeks",
            icon="baby",
            highlighted=True,
        )
    else:
        second = KpiCard(
            title="Mother Condition",
            value=display_value(data.delivery.mother_condition),
            icon="heart",
            status=condition_status(data.delivery.mother_condition),
        )
    return [visits, second]


# =============================================================================
# Panels
# =============================================================================


def _profile_panel(data: DashboardData) -> GroupCard:
    profile = data.profile
    return GroupCard(
        title="Patient Profile",
        items=[
            ProfileItem(icon="baby", label="Date of Birth", value=format_date(profile.date_of_birth)),
            ProfileItem(icon="heart", label="Blood Type", value=display_value(profile.blood_type)),
            ProfileItem(icon="weight", label="BMI Status", value=display_value(profile.bmi_status)),
            ProfileItem(
                icon="heart",
                label="Medical History",
                value=display_value(profile.medical_history),
                tooltip=profile.medical_history,
            ),
        ],
    )


def _delivery_panel(data: DashboardData, is_ongoing: bool) -> GroupCard:
    if is_ongoing:
        mode = resolve_prediction(data.delivery_mode, True)
        term = resolve_prediction(data.delivery_type, False)
    else:
        mode = format_delivery_mode(data.delivery.delivery_mode)
        term = display_value(data.baby.term_status)

    expected = "Expected " if is_ongoing else ""
    return GroupCard(
        title="Expected Delivery & Baby Info" if is_ongoing else "Delivery & Baby Info",
        items=[
            ProfileItem(icon="baby", label=f"{expected}Delivery Mode", value=mode),
            ProfileItem(icon="baby", label=f"{expected}Term Status", value=term),
            ProfileItem(
                icon="baby",
                label="Expected Gestational Age" if is_ongoing else "Gestational Age at Delivery",
                value=f"{format_one_decimal(data.delivery.gestational_age_at_delivery)} weeks",
            ),
            ProfileItem(
                icon="baby",
                label="Expected Birth Weight" if is_ongoing else "Baby Birth Weight",
                value=format_birth_weight(data.baby.birth_weight, is_ongoing=is_ongoing),
            ),
        ],
    )


def _visit_summary_panel(data: DashboardData) -> GroupCard:
    weeks = data.latest.gestational_age_weeks
    return GroupCard(
        title="Visit & Condition Summary",
        items=[
            ProfileItem(
                icon="ruler",
                label="Vaccinated Count",
                value=str(data.visit_counts.vaccinated_count),
            ),
            ProfileItem(
                icon="baby",
                label="Last Gestational Age",
                value=f"{format_number(weeks) if weeks else NOT_AVAILABLE} weeks",
            ),
        ],
    )


def _key_dates_panel(data: DashboardData, is_ongoing: bool) -> GroupCard:
    items = [
        ProfileItem(
            icon="baby",
            label="Expected Delivery Date" if is_ongoing else "Delivery Date",
            value=format_date(data.delivery.delivery_date),
        )
    ]
    if not is_ongoing:
        items.append(
            ProfileItem(
                icon="baby",
                label="Discharge Date",
                value=format_date(data.baby.discharge_date),
            )
        )
    return GroupCard(title="Expected Key Dates" if is_ongoing else "Key Dates", items=items)


# =============================================================================
# Chart tabs
# =============================================================================


def _chart_tabs(data: DashboardData, kpis: dict[str, KpiCard]) -> list[ChartTab]:
    charts = data.charts
    return [
        ChartTab(
            key="weight",
            label="Maternal Weight",
            unit="kg",
            kpi=kpis["weight"],
            data=charts.maternal_weight,
            average_data=charts.average_weight,
            series=[
                SeriesDescriptor(data_key=WEIGHT_KEY, name="Weight (kg)", style="actual"),
                SeriesDescriptor(
                    data_key=PREDICTED_WEIGHT_KEY,
                    name="Predicted Weight",
                    style="predicted",
                    dashed=True,
                ),
                SeriesDescriptor(data_key=AVG_WEIGHT_KEY, name="Average (BMI)", style="average"),
            ],
        ),
        ChartTab(
            key="growth",
            label="Fetal Growth",
            unit="cm",
            kpi=kpis["growth"],
            data=charts.fundal_height,
            average_data=charts.average_fundal,
            series=[
                SeriesDescriptor(data_key=FUNDAL_KEY, name="Fundal Height (cm)", style="actual"),
                SeriesDescriptor(
                    data_key=PREDICTED_FUNDAL_KEY,
                    name="Predicted Height",
                    style="predicted",
                    dashed=True,
                ),
                SeriesDescriptor(data_key=AVG_FUNDAL_KEY, name="Average (BMI)", style="average"),
            ],
        ),
        ChartTab(
            key="hb",
            label="Hemoglobin",
            unit="g/dL",
            kpi=kpis["hb"],
            data=charts.hemoglobin,
            average_data=charts.average_hemoglobin,
            series=[
                SeriesDescriptor(data_key=HEMOGLOBIN_KEY, name="Hb Level (g/dL)", style="actual"),
                SeriesDescriptor(
                    data_key=PREDICTED_HEMOGLOBIN_KEY,
                    name="Predicted Hb",
                    style="predicted",
                    dashed=True,
                ),
                SeriesDescriptor(data_key=AVG_HB_KEY, name="Average (BMI)", style="average"),
            ],
        ),
        ChartTab(
            key="bp",
            label="Blood Pressure",
            unit="mmHg",
            kpi=kpis["bp"],
            data=charts.blood_pressure,
            average_data=charts.average_blood_pressure,
            series=[
                SeriesDescriptor(data_key=SYSTOLIC_KEY, name="Systolic (mmHg)", style="actual"),
                SeriesDescriptor(data_key=DIASTOLIC_KEY, name="Diastolic (mmHg)", style="actual"),
                SeriesDescriptor(
                    data_key=PREDICTED_SYSTOLIC_KEY,
                    name="Predicted Systolic",
                    style="predicted",
                    dashed=True,
                ),
                SeriesDescriptor(
                    data_key=PREDICTED_DIASTOLIC_KEY,
                    name="Predicted Diastolic",
                    style="predicted",
                    dashed=True,
                ),
                SeriesDescriptor(
                    data_key=AVG_SYSTOLIC_KEY, name="Average Systolic (BMI)", style="average"
                ),
                SeriesDescriptor(
                    data_key=AVG_DIASTOLIC_KEY, name="Average Diastolic (BMI)", style="average"
                ),
            ],
        ),
    ]


# =============================================================================
# View
# =============================================================================


def build_dashboard_view(
    history: PatientHistory,
    data: DashboardData,
    config: DashboardConfig,
    settings: Settings | None = None,
) -> DashboardView:
    """Render a patient's DashboardData as a DashboardView."""
    settings = settings or default_settings
    is_ongoing = config.is_ongoing
    chart_kpis = _chart_kpis(data, settings.change_dead_band)

    panels = [_profile_panel(data), _delivery_panel(data, is_ongoing)]
    if is_ongoing:
        panels.append(
            GroupCard(
                title="Risk Factor Analysis",
                items=build_risk_items(data.risk_scores, settings.risk_display_threshold),
            )
        )
    else:
        panels.append(_visit_summary_panel(data))
    panels.append(_key_dates_panel(data, is_ongoing))

    probability_panels = []
    if is_ongoing:
        for title, probabilities in (
            ("Delivery Type Probability", data.delivery_type),
            ("Delivery Mode Probability", data.delivery_mode),
        ):
            panel = build_probability_panel(title, probabilities)
            if panel is not None:
                probability_panels.append(panel)

    return DashboardView(
        patient_id=history.patient.id,
        patient_name=history.patient.name,
        is_ongoing=is_ongoing,
        kpis=_summary_kpis(data, is_ongoing),
        panels=panels,
        probability_panels=probability_panels,
        chart_tabs=_chart_tabs(data, chart_kpis),
    )
