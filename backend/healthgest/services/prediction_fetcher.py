"""Best-effort prediction fetcher for ongoing patients.

Predictions are enrichment, not required data: any failure yields the empty
defaults instead of an error.
"""

import logging

from pydantic import ValidationError

from healthgest.constants import PREDICTION_PATH
from healthgest.schemas.patient import PatientHistory
from healthgest.schemas.prediction import PredictionResult
from healthgest.services.backend_client import BackendClient, BackendError

logger = logging.getLogger(__name__)


async def fetch_predictions(
    client: BackendClient, history: PatientHistory
) -> PredictionResult:
    """POST the visit history to the prediction service.

    Returns:
        The parsed predictions, or PredictionResult.empty() (empty maps, empty
        arrays, None scalars) if the call fails or reports no success.
    """
    try:
        data = await client.post_json(PREDICTION_PATH, history.backend_payload())
    except BackendError as e:
        logger.warning(
            "Prediction call failed for patient %s: %s", history.patient.id, e.message
        )
        return PredictionResult.empty()

    if not isinstance(data, dict) or data.get("success") is not True:
        logger.warning("Prediction service reported no success for %s", history.patient.id)
        return PredictionResult.empty()

    try:
        predictions = PredictionResult.model_validate(data)
    except ValidationError:
        logger.exception("Unreadable prediction payload for %s", history.patient.id)
        return PredictionResult.empty()

    logger.info(
        "Predictions received for %s (%d weight points, %d risk factors)",
        history.patient.id,
        len(predictions.progression.weight),
        len(predictions.risk_scores or {}),
    )
    return predictions
