"""Integration tests for API endpoints.

Tests the full API request/response cycle through FastAPI, with the remote
backend replaced by an in-process mock transport.
"""

import httpx
import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from healthgest.config import settings
from healthgest.main import app
from healthgest.services.backend_client import BackendClient
from healthgest.services.patient_loader import PATIENT_DETAILS_ERROR


# =============================================================================
# Health & Root Endpoints
# =============================================================================


class TestHealthEndpoints:
    """Tests for health check and root endpoints."""

    @pytest.mark.asyncio
    async def test_health_returns_healthy(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_root_returns_api_info(self, client):
        response = await client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "HealthGest Dashboard API"
        assert "version" in data
        assert data["docs"] == "/docs"

    @pytest.mark.asyncio
    async def test_security_headers(self, client):
        response = await client.get("/health")
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["X-Content-Type-Options"] == "nosniff"


# =============================================================================
# Authentication Tests
# =============================================================================


class TestAuthentication:
    """Tests for API key authentication across protected endpoints."""

    @pytest.mark.asyncio
    async def test_patients_requires_auth(self, client):
        response = await client.get("/api/dashboards/historical/patients")
        assert response.status_code == 401
        assert response.json()["detail"] == "Missing API key"

    @pytest.mark.asyncio
    async def test_dashboard_requires_auth(self, client):
        response = await client.get("/api/dashboards/ongoing/patients/101")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_insight_requires_auth(self, client):
        response = await client.post("/api/dashboards/ongoing/patients/101/insights/diet")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_api_key_rejected(self, client):
        response = await client.get(
            "/api/dashboards/historical/patients",
            headers={"X-API-Key": "invalid-key"},
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid API key"


# =============================================================================
# Patient list
# =============================================================================


class TestListPatients:
    @pytest.mark.asyncio
    async def test_lists_options(self, client, auth_headers, fake_backend, patient_list):
        fake_backend.add("GET", "/api/patients", patient_list)

        response = await client.get("/api/dashboards/historical/patients", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["selector_label"] == "Select Patient"
        assert data["total"] == 2
        assert data["items"][0] == {"value": "101", "label": "Amara Perera (ID: 101)"}
        assert data["empty_message"] is None

    @pytest.mark.asyncio
    async def test_empty_cohort(self, client, auth_headers, fake_backend):
        fake_backend.add("GET", "/api/ongoing-patients", [])

        response = await client.get("/api/dashboards/ongoing/patients", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["empty_message"] == "No ongoing patients found"

    @pytest.mark.asyncio
    async def test_backend_failure(self, client, auth_headers, fake_backend):
        fake_backend.add("GET", "/api/patients", httpx.Response(500))

        response = await client.get("/api/dashboards/historical/patients", headers=auth_headers)

        assert response.status_code == 502
        assert response.json()["detail"] == (
            "Could not load patient list from "
            f"{settings.backend_base_url.rstrip('/')}/api/patients"
        )

    @pytest.mark.asyncio
    async def test_unknown_cohort(self, client, auth_headers):
        response = await client.get("/api/dashboards/archived/patients", headers=auth_headers)
        assert response.status_code == 404


# =============================================================================
# Patient dashboard
# =============================================================================


class TestGetDashboard:
    @pytest.mark.asyncio
    async def test_historical_dashboard(self, client, auth_headers, fake_backend, history_payload):
        fake_backend.add("GET", "/api/patientDetails/101", history_payload)

        response = await client.get(
            "/api/dashboards/historical/patients/101", headers=auth_headers
        )

        assert response.status_code == 200
        view = response.json()
        assert view["patient_name"] == "Amara Perera"
        assert view["is_ongoing"] is False
        assert [tab["key"] for tab in view["chart_tabs"]] == ["weight", "growth", "hb", "bp"]
        assert fake_backend.calls("/api/ai/ongoing-progression") == []

    @pytest.mark.asyncio
    async def test_ongoing_dashboard_includes_predictions(
        self, client, auth_headers, fake_backend, ongoing_payload, predictions_payload
    ):
        fake_backend.add("GET", "/api/ongoing-patientDetails/101", ongoing_payload)
        fake_backend.add("POST", "/api/ai/ongoing-progression", predictions_payload)

        response = await client.get("/api/dashboards/ongoing/patients/101", headers=auth_headers)

        assert response.status_code == 200
        view = response.json()
        assert view["is_ongoing"] is True
        assert len(view["chart_tabs"][0]["data"]) == 4
        assert len(view["probability_panels"]) == 2

    @pytest.mark.asyncio
    async def test_prediction_failure_degrades(
        self, client, auth_headers, fake_backend, ongoing_payload
    ):
        fake_backend.add("GET", "/api/ongoing-patientDetails/101", ongoing_payload)
        fake_backend.add("POST", "/api/ai/ongoing-progression", httpx.Response(500))

        response = await client.get("/api/dashboards/ongoing/patients/101", headers=auth_headers)

        assert response.status_code == 200
        assert len(response.json()["chart_tabs"][0]["data"]) == 2

    @pytest.mark.asyncio
    async def test_details_failure(self, client, auth_headers):
        response = await client.get(
            "/api/dashboards/historical/patients/404", headers=auth_headers
        )
        assert response.status_code == 502
        assert response.json()["detail"] == PATIENT_DETAILS_ERROR


# =============================================================================
# Insights
# =============================================================================


class TestGenerateInsight:
    @pytest.mark.asyncio
    async def test_exercise_plan(self, client, auth_headers, fake_backend, ongoing_payload):
        fake_backend.add("GET", "/api/ongoing-patientDetails/101", ongoing_payload)
        fake_backend.add(
            "POST", "/api/ai/exercise-plan", {"success": True, "exercisePlan": "* Walk"}
        )

        response = await client.post(
            "/api/dashboards/ongoing/patients/101/insights/exercise", headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Exercise Plan With AI"
        assert data["blocks"][0]["kind"] == "bullet"

    @pytest.mark.asyncio
    async def test_generation_failure_is_reported_in_body(
        self, client, auth_headers, fake_backend, ongoing_payload
    ):
        fake_backend.add("GET", "/api/ongoing-patientDetails/101", ongoing_payload)
        fake_backend.add("POST", "/api/ai/diet-plan", {"success": False, "error": "Quota"})

        response = await client.post(
            "/api/dashboards/ongoing/patients/101/insights/diet", headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["error"] == "Quota"

    @pytest.mark.asyncio
    async def test_unknown_kind(self, client, auth_headers):
        response = await client.post(
            "/api/dashboards/ongoing/patients/101/insights/sleep", headers=auth_headers
        )
        assert response.status_code == 404


# =============================================================================
# Live dashboard WebSocket
# =============================================================================


@pytest.fixture
def live_client(fake_backend):
    """Sync TestClient with the mock backend installed on app.state."""
    app.state.backend_client = BackendClient(
        "http://backend.test", transport=httpx.MockTransport(fake_backend.handler)
    )
    yield TestClient(app)
    del app.state.backend_client


def _receive_until(websocket, predicate, limit: int = 20) -> dict:
    for _ in range(limit):
        message = websocket.receive_json()
        if predicate(message):
            return message
    raise AssertionError("expected snapshot was not pushed")


class TestLiveDashboard:
    def test_pushes_loaded_dashboard(self, live_client, fake_backend, patient_list, history_payload):
        fake_backend.add("GET", "/api/patients", patient_list)
        fake_backend.add("GET", "/api/patientDetails/101", history_payload)

        with live_client.websocket_connect(
            "/api/dashboards/historical/live", headers={"X-API-Key": settings.api_key}
        ) as websocket:
            state = _receive_until(websocket, lambda m: m.get("view") is not None)

        assert state["cohort"] == "historical"
        assert state["selected_patient_id"] == "101"
        assert state["view"]["patient_name"] == "Amara Perera"

    def test_select_action(self, live_client, fake_backend, patient_list, history_payload):
        second = {**history_payload, "patient": {"PATIENT_ID": 102, "PATIENT_NAME": "Nimali Silva"}}
        fake_backend.add("GET", "/api/patients", patient_list)
        fake_backend.add("GET", "/api/patientDetails/101", history_payload)
        fake_backend.add("GET", "/api/patientDetails/102", second)

        with live_client.websocket_connect(
            "/api/dashboards/historical/live", headers={"X-API-Key": settings.api_key}
        ) as websocket:
            _receive_until(websocket, lambda m: m.get("view") is not None)
            websocket.send_json({"action": "select", "patient_id": 102})
            state = _receive_until(
                websocket,
                lambda m: (m.get("view") or {}).get("patient_name") == "Nimali Silva",
            )

        assert state["selected_patient_id"] == "102"

    def test_invalid_action(self, live_client, fake_backend):
        fake_backend.add("GET", "/api/patients", [])

        with live_client.websocket_connect(
            "/api/dashboards/historical/live", headers={"X-API-Key": settings.api_key}
        ) as websocket:
            _receive_until(websocket, lambda m: m.get("message") == "No patients found")
            websocket.send_text("not json")
            assert websocket.receive_json() == {"error": "Invalid action"}

    def test_rejects_missing_api_key(self, live_client):
        with pytest.raises(WebSocketDisconnect):
            with live_client.websocket_connect("/api/dashboards/historical/live") as websocket:
                websocket.receive_json()

    def test_rejects_unknown_cohort(self, live_client):
        with pytest.raises(WebSocketDisconnect):
            with live_client.websocket_connect(
                "/api/dashboards/archived/live", headers={"X-API-Key": settings.api_key}
            ) as websocket:
                websocket.receive_json()
