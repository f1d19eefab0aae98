"""AI insight panels (diet and exercise plans).

Plans are generated by the remote backend; this module posts the patient and
visit history, normalizes the response into an InsightResult, and parses the
plan text into renderable blocks.
"""

import logging
from datetime import datetime, timezone

from healthgest.constants import INSIGHT_FIELDS, INSIGHT_PATHS, INSIGHT_TITLES
from healthgest.schemas.insight import InsightBlock, InsightKind, InsightResult, TextSpan
from healthgest.schemas.patient import PatientHistory
from healthgest.services.backend_client import BackendClient, BackendError

logger = logging.getLogger(__name__)

NO_VISITS_MESSAGE = "Please select a patient with visits to generate insights."
FETCH_FAILED_MESSAGE = "Failed to fetch AI insight from server."
GENERATE_FAILED_MESSAGE = "Failed to generate insight."
NO_PLAN_MESSAGE = "No plan generated."


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def format_insight_text(text: str) -> list[InsightBlock]:
    """Parse plan text into paragraph, bullet and break blocks.

    Lines starting with '* ' are bullets, blank lines are breaks, and
    '**bold**' segments become bold spans.
    """
    if not text:
        return []
    blocks: list[InsightBlock] = []
    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if line.startswith("* "):
            blocks.append(InsightBlock(kind="bullet", spans=_parse_spans(line[2:])))
        elif not line:
            blocks.append(InsightBlock(kind="break"))
        else:
            blocks.append(InsightBlock(kind="paragraph", spans=_parse_spans(line)))
    return blocks


def _parse_spans(line: str) -> list[TextSpan]:
    # Odd-indexed parts sit between '**' markers
    return [
        TextSpan(text=part, bold=index % 2 == 1)
        for index, part in enumerate(line.split("**"))
        if part
    ]


def pending_insight(kind: InsightKind) -> InsightResult:
    """Loading placeholder shown while a plan is scheduled or in flight."""
    return InsightResult(kind=kind, title=INSIGHT_TITLES[kind], is_loading=True)


async def fetch_insight(
    client: BackendClient,
    kind: InsightKind,
    history: PatientHistory | None,
) -> InsightResult:
    """Request a diet or exercise plan for a patient.

    Never raises: failures are reported on the returned InsightResult.
    """
    title = INSIGHT_TITLES[kind]
    if history is None or not history.visits:
        return InsightResult(kind=kind, title=title, text=NO_VISITS_MESSAGE)

    try:
        data = await client.post_json(INSIGHT_PATHS[kind], history.backend_payload())
    except BackendError as e:
        error = FETCH_FAILED_MESSAGE
        if isinstance(e.payload, dict) and e.payload.get("error"):
            error = str(e.payload["error"])
        logger.warning("%s error for patient %s: %s", title, history.patient.id, error)
        return InsightResult(kind=kind, title=title, error=error)

    if not isinstance(data, dict) or not data.get("success"):
        error = GENERATE_FAILED_MESSAGE
        if isinstance(data, dict) and data.get("error"):
            error = str(data["error"])
        logger.warning("%s error for patient %s: %s", title, history.patient.id, error)
        return InsightResult(kind=kind, title=title, error=error)

    text = (
        data.get(INSIGHT_FIELDS[kind])
        or data.get("dietPlan")
        or data.get("exercisePlan")
        or NO_PLAN_MESSAGE
    )
    logger.info("%s generated for patient %s", title, history.patient.id)
    return InsightResult(
        kind=kind,
        title=title,
        text=str(text),
        blocks=format_insight_text(str(text)),
        generated_at=_utc_now(),
    )
