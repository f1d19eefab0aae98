"""Tests for AI insight panels (diet and exercise plans)."""

import httpx
import pytest

from healthgest.schemas.patient import PatientHistory
from healthgest.services.insights import (
    FETCH_FAILED_MESSAGE,
    GENERATE_FAILED_MESSAGE,
    NO_PLAN_MESSAGE,
    NO_VISITS_MESSAGE,
    fetch_insight,
    format_insight_text,
    pending_insight,
)


@pytest.fixture
def history(ongoing_payload) -> PatientHistory:
    return PatientHistory.model_validate(ongoing_payload)


class TestFormatInsightText:
    def test_bullets_breaks_and_paragraphs(self):
        blocks = format_insight_text("Eat well.\n\n* Iron-rich foods\n* Fluids")
        assert [block.kind for block in blocks] == ["paragraph", "break", "bullet", "bullet"]
        assert blocks[2].spans[0].text == "Iron-rich foods"

    def test_bold_segments(self):
        blocks = format_insight_text("Take **folic acid** daily")
        assert [(span.text, span.bold) for span in blocks[0].spans] == [
            ("Take ", False),
            ("folic acid", True),
            (" daily", False),
        ]

    def test_empty_text(self):
        assert format_insight_text("") == []


class TestPendingInsight:
    def test_placeholder_is_loading(self):
        result = pending_insight("exercise")
        assert result.is_loading is True
        assert result.title == "Exercise Plan With AI"
        assert result.text == ""


class TestFetchInsight:
    @pytest.mark.asyncio
    async def test_diet_plan(self, backend_client, fake_backend, history):
        fake_backend.add(
            "POST",
            "/api/ai/diet-plan",
            {"success": True, "dietPlan": "**Breakfast**\n* Oats"},
        )

        result = await fetch_insight(backend_client, "diet", history)

        assert result.title == "Diet Plan With AI"
        assert result.error is None
        assert result.text == "**Breakfast**\n* Oats"
        assert [block.kind for block in result.blocks] == ["paragraph", "bullet"]
        assert result.generated_at is not None

    @pytest.mark.asyncio
    async def test_exercise_plan_field(self, backend_client, fake_backend, history):
        fake_backend.add(
            "POST", "/api/ai/exercise-plan", {"success": True, "exercisePlan": "Walk daily"}
        )
        result = await fetch_insight(backend_client, "exercise", history)
        assert result.text == "Walk daily"

    @pytest.mark.asyncio
    async def test_missing_plan_text(self, backend_client, fake_backend, history):
        fake_backend.add("POST", "/api/ai/diet-plan", {"success": True})
        result = await fetch_insight(backend_client, "diet", history)
        assert result.text == NO_PLAN_MESSAGE

    @pytest.mark.asyncio
    async def test_no_visits_skips_request(self, backend_client, fake_backend, history):
        history.visits = []

        result = await fetch_insight(backend_client, "diet", history)

        assert result.text == NO_VISITS_MESSAGE
        assert fake_backend.requests == []

    @pytest.mark.asyncio
    async def test_no_history(self, backend_client):
        result = await fetch_insight(backend_client, "diet", None)
        assert result.text == NO_VISITS_MESSAGE

    @pytest.mark.asyncio
    async def test_http_error_uses_payload_error(self, backend_client, fake_backend, history):
        fake_backend.add(
            "POST", "/api/ai/diet-plan", httpx.Response(500, json={"error": "Model overloaded"})
        )
        result = await fetch_insight(backend_client, "diet", history)
        assert result.error == "Model overloaded"

    @pytest.mark.asyncio
    async def test_http_error_without_payload(self, backend_client, fake_backend, history):
        fake_backend.add("POST", "/api/ai/diet-plan", httpx.Response(502))
        result = await fetch_insight(backend_client, "diet", history)
        assert result.error == FETCH_FAILED_MESSAGE

    @pytest.mark.asyncio
    async def test_unsuccessful_response(self, backend_client, fake_backend, history):
        fake_backend.add("POST", "/api/ai/exercise-plan", {"success": False})
        result = await fetch_insight(backend_client, "exercise", history)
        assert result.error == GENERATE_FAILED_MESSAGE
        assert result.is_loading is False
