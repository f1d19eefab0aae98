"""Live dashboard session: selection, cancellation and stale-result guard.

One DashboardSession backs one connected dashboard (one WebSocket). It owns
the selection pointer and every task started on behalf of the current
selection:

- select_patient() bumps a generation token and cancels the previous
  selection's load and insight tasks before scheduling a new load.
- A load fetches the history, then (ongoing cohort) the predictions,
  strictly in that order, and applies its result only if its token is still
  current. Selection order wins, not completion order.
- Once an ongoing patient's dashboard is applied, the diet insight starts
  immediately and the exercise insight after a stagger delay.
- close() cancels everything; no snapshot is published afterwards.

State changes are published as DashboardState snapshots to an optional
async listener.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from healthgest.config import Settings, settings as default_settings
from healthgest.schemas.dashboard import DashboardConfig, DashboardState
from healthgest.schemas.insight import InsightKind
from healthgest.schemas.patient import PatientHistory
from healthgest.services.backend_client import BackendClient, BackendError
from healthgest.services.dashboard_builder import build_dashboard_data, build_dashboard_view
from healthgest.services.insights import fetch_insight, pending_insight
from healthgest.services.patient_loader import (
    PATIENT_DETAILS_ERROR,
    PATIENT_LIST_ERROR,
    build_patient_options,
    load_patient_history,
    load_patient_list,
)
from healthgest.services.prediction_fetcher import fetch_predictions

logger = logging.getLogger(__name__)

StateListener = Callable[[DashboardState], Awaitable[None]]


class SessionClosedError(RuntimeError):
    """Raised when a closed session is asked to do more work."""


class DashboardSession:
    """Per-connection dashboard controller."""

    def __init__(
        self,
        client: BackendClient,
        config: DashboardConfig,
        *,
        settings: Settings | None = None,
        listener: StateListener | None = None,
    ) -> None:
        self._client = client
        self._config = config
        self._settings = settings or default_settings
        self._listener = listener
        self._state = DashboardState(
            cohort=config.cohort, selector_label=config.selector_label
        )
        self._generation = 0
        self._history: PatientHistory | None = None
        self._load_task: asyncio.Task | None = None
        self._insight_tasks: dict[str, asyncio.Task] = {}
        self._closed = False

    @property
    def state(self) -> DashboardState:
        """Deep copy of the current state."""
        return self._state.model_copy(deep=True)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def closed(self) -> bool:
        return self._closed

    # -------------------------------------------------------------------------
    # Patient list
    # -------------------------------------------------------------------------

    async def load_patients(self) -> None:
        """Fetch the patient list and auto-select the first patient.

        A failure sets a scoped list error and leaves any loaded dashboard
        untouched.
        """
        self._ensure_open()
        self._state.is_patient_list_loading = True
        self._state.list_error = None
        await self._publish()

        try:
            patients = await load_patient_list(self._client, self._config)
        except BackendError:
            if self._closed:
                return
            logger.warning("Patient list unavailable for %s cohort", self._config.cohort)
            self._state.is_patient_list_loading = False
            self._state.list_error = PATIENT_LIST_ERROR.format(
                endpoint=self._config.patient_list_endpoint
            )
            await self._publish()
            return

        if self._closed:
            return
        self._state.is_patient_list_loading = False
        self._state.patients = build_patient_options(patients)

        if not patients:
            self._generation += 1
            self._cancel_pending()
            self._history = None
            self._state.selected_patient_id = None
            self._state.view = None
            self._state.insights = {}
            self._state.is_loading = False
            self._state.message = self._config.no_patients_message
            await self._publish()
            return

        self._state.message = None
        ids = [patient.id for patient in patients]
        if self._state.selected_patient_id in ids:
            await self._publish()
            return
        await self.select_patient(ids[0])

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    async def select_patient(self, patient_id: str) -> None:
        """Make `patient_id` the current selection and start loading it."""
        self._ensure_open()
        self._generation += 1
        token = self._generation
        self._cancel_pending()
        self._history = None

        self._state.selected_patient_id = patient_id
        self._state.is_loading = True
        self._state.error = None
        self._state.message = None
        self._state.view = None
        self._state.insights = {}
        await self._publish()

        self._load_task = asyncio.create_task(self._load(patient_id, token))

    def _is_current(self, token: int) -> bool:
        return not self._closed and token == self._generation

    async def _load(self, patient_id: str, token: int) -> None:
        try:
            history = await load_patient_history(self._client, self._config, patient_id)
            if not self._is_current(token):
                logger.debug("Discarding stale history for %s", patient_id)
                return

            predictions = None
            if self._config.is_ongoing:
                predictions = await fetch_predictions(self._client, history)
                if not self._is_current(token):
                    logger.debug("Discarding stale predictions for %s", patient_id)
                    return

            data = build_dashboard_data(
                history, predictions, is_ongoing=self._config.is_ongoing
            )
            view = build_dashboard_view(history, data, self._config, self._settings)
        except BackendError:
            if not self._is_current(token):
                return
            logger.warning("Dashboard load failed for patient %s", patient_id)
            self._state.is_loading = False
            self._state.error = PATIENT_DETAILS_ERROR
            self._state.view = None
            await self._publish()
            return

        self._history = history
        self._state.is_loading = False
        self._state.view = view
        if self._config.is_ongoing:
            self._schedule_insights(token)
        await self._publish()

    # -------------------------------------------------------------------------
    # Insights
    # -------------------------------------------------------------------------

    def _schedule_insights(self, token: int) -> None:
        # Stagger the second request to avoid bursting the backend
        delays: dict[InsightKind, float] = {
            "diet": 0.0,
            "exercise": self._settings.insight_stagger_seconds,
        }
        for kind, delay in delays.items():
            self._state.insights[kind] = pending_insight(kind)
            self._insight_tasks[kind] = asyncio.create_task(
                self._run_insight(kind, token, delay)
            )

    async def _run_insight(self, kind: InsightKind, token: int, delay: float) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        if not self._is_current(token):
            return
        result = await fetch_insight(self._client, kind, self._history)
        if not self._is_current(token):
            return
        self._state.insights[kind] = result
        await self._publish()

    async def refresh_insight(self, kind: InsightKind) -> None:
        """Manually re-fetch one insight for the current selection.

        Ignored while the selection is still loading; the load schedules its
        own insights once the dashboard is applied.
        """
        self._ensure_open()
        if self._state.is_loading:
            logger.debug(
                "Ignoring %s refresh while %s is loading", kind, self._state.selected_patient_id
            )
            return
        task = self._insight_tasks.pop(kind, None)
        if task is not None and not task.done():
            task.cancel()
        self._state.insights[kind] = pending_insight(kind)
        await self._publish()
        self._insight_tasks[kind] = asyncio.create_task(
            self._run_insight(kind, self._generation, 0.0)
        )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def _pending_tasks(self) -> list[asyncio.Task]:
        tasks = list(self._insight_tasks.values())
        if self._load_task is not None:
            tasks.append(self._load_task)
        return [task for task in tasks if not task.done()]

    def _cancel_pending(self) -> None:
        for task in self._pending_tasks():
            task.cancel()
        self._load_task = None
        self._insight_tasks = {}

    async def close(self) -> None:
        """Abandon all pending work; no further snapshots are published."""
        if self._closed:
            return
        self._closed = True
        pending = self._pending_tasks()
        self._cancel_pending()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        logger.debug("Dashboard session for %s cohort closed", self._config.cohort)

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionClosedError("Dashboard session is closed")

    async def _publish(self) -> None:
        if self._closed or self._listener is None:
            return
        try:
            await self._listener(self.state)
        except Exception:
            logger.exception("Dashboard state listener failed")
