"""Home (landing view) summary."""

import logging

from pydantic import ValidationError

from healthgest.constants import HOME_SUMMARY_PATH
from healthgest.schemas.home import DeliverySlice, HomeKpi, HomeSummary, HomeView
from healthgest.services.backend_client import BackendClient, BackendError

logger = logging.getLogger(__name__)

CONNECTION_ERROR = "Unable to connect to data server"
LOAD_ERROR = "Failed to load data"


async def load_home_summary(client: BackendClient) -> HomeSummary:
    """Fetch aggregate counts for the landing view.

    Raises:
        BackendError: With a user-facing message when the backend is
            unreachable or reports failure.
    """
    try:
        data = await client.get_json(HOME_SUMMARY_PATH)
    except BackendError as e:
        logger.warning("Failed to load home summary: %s", e.message)
        raise BackendError(CONNECTION_ERROR, status_code=e.status_code) from e

    try:
        summary = HomeSummary.model_validate(data)
    except ValidationError as e:
        logger.warning("Malformed home summary: %s", e)
        raise BackendError(LOAD_ERROR, payload=data) from e

    if summary.success is False:
        raise BackendError(summary.error or LOAD_ERROR, payload=data)
    return summary


def _count(value: int) -> str:
    return f"{value:,}"


def build_home_view(summary: HomeSummary) -> HomeView:
    """Render the landing view KPIs and delivery breakdowns."""
    types = summary.delivery_types
    assigned = types.matured + types.premature + types.mortality
    return HomeView(
        kpis=[
            HomeKpi(
                title="Active Pregnancies",
                value=_count(summary.active_pregnancies),
                icon="active_pregnancies",
                target="ONGOING_PATIENTS",
            ),
            HomeKpi(title="Total Deliveries", value=_count(summary.total_deliveries), icon="heart"),
            HomeKpi(title="Normal Deliveries", value=_count(summary.normal_delivery_count), icon="baby"),
            HomeKpi(
                title="C-Section Deliveries",
                value=_count(summary.c_section_delivery_count),
                icon="baby",
            ),
            HomeKpi(title="Babies Born", value=_count(summary.total_babies), icon="baby"),
            HomeKpi(
                title="Today's Appointments",
                value=_count(summary.todays_appointments),
                icon="appointments",
            ),
        ],
        normal_delivery_rate=summary.normal_delivery_rate,
        c_section_rate=summary.c_section_rate,
        delivery_types=[
            DeliverySlice(label="Matured", percent=types.matured, count=types.matured_count),
            DeliverySlice(label="Premature", percent=types.premature, count=types.premature_count),
            DeliverySlice(label="Mortality", percent=types.mortality, count=types.mortality_count),
        ],
        unassigned_percent=max(0.0, 100 - assigned),
        active_pregnancies=summary.active_pregnancies,
        historical_patients=summary.historical_patients,
    )
