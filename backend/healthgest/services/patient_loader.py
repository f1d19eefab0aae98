"""Patient & visit loader.

Fetches a cohort's patient list and, for a selected patient, the patient
record together with its visit, delivery and baby collections. The same
loader serves both the historical and the ongoing cohort; the cohort's
DashboardConfig decides which endpoints are used.
"""

import logging
from typing import Any

from pydantic import ValidationError

from healthgest.config import settings
from healthgest.schemas.dashboard import Cohort, DashboardConfig, PatientOption
from healthgest.schemas.patient import PatientHistory, PatientSummary
from healthgest.services.backend_client import BackendClient, BackendError

logger = logging.getLogger(__name__)

PATIENT_LIST_ERROR = "Could not load patient list from {endpoint}"
PATIENT_DETAILS_ERROR = "Could not load dashboard data for this patient."


def build_dashboard_configs(base_url: str | None = None) -> dict[str, DashboardConfig]:
    """Built-in cohort configurations, keyed by cohort name."""
    base = (base_url or settings.backend_base_url).rstrip("/")
    return {
        "historical": DashboardConfig(
            cohort="historical",
            patient_list_endpoint=f"{base}/api/patients",
            dashboard_endpoint=f"{base}/api/patientDetails",
            selector_label="Select Patient",
            no_patients_message="No patients found",
            is_ongoing=False,
        ),
        "ongoing": DashboardConfig(
            cohort="ongoing",
            patient_list_endpoint=f"{base}/api/ongoing-patients",
            dashboard_endpoint=f"{base}/api/ongoing-patientDetails",
            selector_label="Select Ongoing Patient",
            no_patients_message="No ongoing patients found",
            is_ongoing=True,
        ),
    }


def get_dashboard_config(cohort: Cohort | str) -> DashboardConfig | None:
    """Return the configuration of a cohort, or None if it is unknown."""
    return build_dashboard_configs().get(cohort)


async def load_patient_list(
    client: BackendClient, config: DashboardConfig
) -> list[PatientSummary]:
    """Fetch the cohort's patient list.

    Entries that do not carry a patient ID are skipped.

    Raises:
        BackendError: If the list cannot be fetched or is not a list.
    """
    data = await client.get_json(config.patient_list_endpoint)
    if not isinstance(data, list):
        raise BackendError(
            PATIENT_LIST_ERROR.format(endpoint=config.patient_list_endpoint),
            payload=data,
        )

    patients: list[PatientSummary] = []
    for entry in data:
        try:
            patients.append(PatientSummary.model_validate(entry))
        except ValidationError:
            logger.warning("Skipping malformed patient list entry: %r", entry)
    logger.info(
        "Loaded %d patients from %s", len(patients), config.patient_list_endpoint
    )
    return patients


async def load_patient_history(
    client: BackendClient, config: DashboardConfig, patient_id: str
) -> PatientHistory:
    """Fetch a patient's record with its visits, deliveries and babies.

    Raises:
        BackendError: If the details cannot be fetched or parsed.
    """
    url = f"{config.dashboard_endpoint.rstrip('/')}/{patient_id}"
    logger.debug("Fetching history from %s", url)
    data: Any = await client.get_json(url)
    try:
        return PatientHistory.model_validate(data)
    except ValidationError as e:
        logger.warning("Malformed patient history for %s: %s", patient_id, e)
        raise BackendError(PATIENT_DETAILS_ERROR, payload=data) from e


def build_patient_options(patients: list[PatientSummary]) -> list[PatientOption]:
    """Selector entries labelled '<name> (ID: <id>)'."""
    return [
        PatientOption(value=patient.id, label=f"{patient.name} (ID: {patient.id})")
        for patient in patients
    ]
