"""Dashboard API routes.

Request/response endpoints render one patient's dashboard per call; the
WebSocket endpoint keeps a DashboardSession alive per connection and pushes
state snapshots as loads and insights complete.
"""

import logging

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from pydantic import ValidationError

from healthgest.auth import is_valid_api_key, verify_api_key, websocket_api_key
from healthgest.config import settings
from healthgest.constants import INSIGHT_PATHS
from healthgest.schemas.dashboard import (
    DashboardConfig,
    DashboardState,
    DashboardView,
    PatientListResponse,
)
from healthgest.schemas.insight import InsightResult
from healthgest.schemas.live import LiveAction
from healthgest.services.backend_client import BackendClient, BackendError, get_backend_client
from healthgest.services.dashboard_builder import build_dashboard_data, build_dashboard_view
from healthgest.services.dashboard_session import DashboardSession
from healthgest.services.insights import fetch_insight
from healthgest.services.patient_loader import (
    PATIENT_DETAILS_ERROR,
    PATIENT_LIST_ERROR,
    build_patient_options,
    get_dashboard_config,
    load_patient_history,
    load_patient_list,
)
from healthgest.services.prediction_fetcher import fetch_predictions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboards", tags=["dashboards"])


def get_cohort_config(cohort: str) -> DashboardConfig:
    """Resolve the cohort path parameter.

    Raises:
        HTTPException: 404 if the cohort is unknown.
    """
    config = get_dashboard_config(cohort)
    if config is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown dashboard: {cohort}",
        )
    return config


@router.get("/{cohort}/patients")
async def list_patients(
    config: DashboardConfig = Depends(get_cohort_config),
    client: BackendClient = Depends(get_backend_client),
    _api_key: str = Depends(verify_api_key),
) -> PatientListResponse:
    """List the cohort's patients as selector options.

    Raises:
        HTTPException: 502 if the backend patient list cannot be loaded.
    """
    try:
        patients = await load_patient_list(client, config)
    except BackendError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=PATIENT_LIST_ERROR.format(endpoint=config.patient_list_endpoint),
        )

    options = build_patient_options(patients)
    return PatientListResponse(
        selector_label=config.selector_label,
        items=options,
        total=len(options),
        empty_message=None if options else config.no_patients_message,
    )


@router.get("/{cohort}/patients/{patient_id}")
async def get_dashboard(
    patient_id: str,
    config: DashboardConfig = Depends(get_cohort_config),
    client: BackendClient = Depends(get_backend_client),
    _api_key: str = Depends(verify_api_key),
) -> DashboardView:
    """Render the full dashboard for one patient.

    Predictions are requested only for the ongoing cohort; a prediction
    failure degrades to empty predicted series.

    Raises:
        HTTPException: 502 if the patient details cannot be loaded.
    """
    try:
        history = await load_patient_history(client, config, patient_id)
    except BackendError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=PATIENT_DETAILS_ERROR,
        )

    predictions = await fetch_predictions(client, history) if config.is_ongoing else None
    data = build_dashboard_data(history, predictions, is_ongoing=config.is_ongoing)
    return build_dashboard_view(history, data, config, settings)


@router.post("/{cohort}/patients/{patient_id}/insights/{kind}")
async def generate_insight(
    patient_id: str,
    kind: str,
    config: DashboardConfig = Depends(get_cohort_config),
    client: BackendClient = Depends(get_backend_client),
    _api_key: str = Depends(verify_api_key),
) -> InsightResult:
    """Generate a diet or exercise plan for one patient.

    Generation failures are reported on the returned result, not as HTTP
    errors.

    Raises:
        HTTPException: 404 for an unknown insight kind, 502 if the patient
            details cannot be loaded.
    """
    if kind not in INSIGHT_PATHS:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown insight: {kind}",
        )

    try:
        history = await load_patient_history(client, config, patient_id)
    except BackendError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=PATIENT_DETAILS_ERROR,
        )

    return await fetch_insight(client, kind, history)


# =============================================================================
# Live dashboard
# =============================================================================


@router.websocket("/{cohort}/live")
async def live_dashboard(websocket: WebSocket, cohort: str) -> None:
    """Drive one dashboard session over a WebSocket.

    The client sends actions (select, refresh_insight, reload_patients); the
    server pushes a DashboardState snapshot after every state change.
    """
    if not is_valid_api_key(websocket_api_key(websocket)):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    config = get_dashboard_config(cohort)
    if config is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()

    async def push_state(state: DashboardState) -> None:
        await websocket.send_json(state.model_dump(mode="json"))

    client: BackendClient = websocket.app.state.backend_client
    session = DashboardSession(client, config, settings=settings, listener=push_state)
    logger.info("Live %s dashboard connected", cohort)

    try:
        await session.load_patients()
        while True:
            message = await websocket.receive_text()
            try:
                action = LiveAction.model_validate_json(message)
            except ValidationError:
                await websocket.send_json({"error": "Invalid action"})
                continue
            await _dispatch(session, action)
    except WebSocketDisconnect:
        logger.info("Live %s dashboard disconnected", cohort)
    finally:
        await session.close()


async def _dispatch(session: DashboardSession, action: LiveAction) -> None:
    if action.action == "select":
        await session.select_patient(action.patient_id)
    elif action.action == "refresh_insight":
        await session.refresh_insight(action.kind)
    elif action.action == "reload_patients":
        await session.load_patients()
