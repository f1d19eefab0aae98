"""Pytest configuration and shared fixtures.

This module provides centralized test fixtures for:
- A BackendClient wired to an in-process httpx.MockTransport
- An HTTP client for API testing (ASGITransport)
- Common patient, visit and prediction payloads
"""

import copy
from collections.abc import Callable
from typing import Any

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from healthgest.config import settings
from healthgest.main import app
from healthgest.services.backend_client import BackendClient, get_backend_client

BASE_URL = "http://backend.test"

Handler = Callable[[httpx.Request], httpx.Response]


# =============================================================================
# Sample payloads
# =============================================================================

PATIENT_LIST = [
    {"PATIENT_ID": 101, "PATIENT_NAME": "Amara Perera"},
    {"PATIENT_ID": "102", "PATIENT_NAME": "Nimali Silva"},
]

PATIENT_RECORD = {
    "PATIENT_ID": 101,
    "PATIENT_NAME": "Amara Perera",
    "AGE": 29,
    "DATE_OF_BIRTH": "1995-03-05",
    "BLOOD_TYPE": "O+",
    "MEDICAL_HISTORY": "Mild asthma",
    "BMI_STATUS": "Normal",
}

VISITS = [
    {
        "GESTATIONAL_AGE_WEEKS": 12,
        "MATERNAL_WEIGHT": 60,
        "FUNDAL_HEIGHT": 12,
        "HEMOGLOBIN_LEVEL": 11.5,
        "BLOOD_PRESSURE": "110/70",
        "VACCINATION": "Yes",
        "VISIT_DATE": "2024-01-10",
        "ESTIMATED_DUE_DATE": "2024-07-20T00:00:00.000Z",
    },
    {
        "GESTATIONAL_AGE_WEEKS": 16,
        "MATERNAL_WEIGHT": 62,
        "FUNDAL_HEIGHT": 16,
        "HEMOGLOBIN_LEVEL": 11.8,
        "BLOOD_PRESSURE": "114/74",
        "VACCINATION": "No",
        "VISIT_DATE": "2024-02-07",
        "ESTIMATED_DUE_DATE": "2024-07-22T00:00:00.000Z",
    },
]

DELIVERIES = [
    {
        "DELIVERY_DATE": "2024-07-18",
        "DELIVERY_MODE": "Vaginal",
        "MOTHER_CONDITION_POST_DELIVERY": "Stable",
        "GESTATIONAL_AGE_AT_DELIVERY": 39.4,
    }
]

BABIES = [
    {
        "BIRTH_WEIGHT": 3200,
        "DISCHARGE_DATE": "2024-07-21",
        "SOURCE_SCHEMA": "FullTerm",
    }
]

PREDICTIONS = {
    "success": True,
    "progression": {
        "weight": [{"week": 20, "value": 64}, {"week": 24, "value": 66}],
        "fundal": [{"week": 20, "value": 20}],
        "hb": [{"week": 20, "value": 11.6}],
        "systolic": [{"week": 20, "value": 116}, {"week": 24, "value": 118}],
        "diastolic": [{"week": 20, "value": 76}],
    },
    "deliveryType": {"FullTerm": 0.8, "Premature": 0.15, "MortalityRisk": 0.05},
    "deliveryMode": {"Normal": 0.3, "CSection": 0.7},
    "riskScores": {"gestationalDiabetes": 0.35, "preeclampsia": 0.2},
    "expectedGestationalAge": 39.1,
    "expectedBirthWeight": 3.25,
    "averages": {
        "averageWeight": [{"GESTATIONAL_AGE_WEEKS": 12, "AVG_WEIGHT": 59}],
    },
}


@pytest.fixture
def patient_list() -> list[dict]:
    return copy.deepcopy(PATIENT_LIST)


@pytest.fixture
def history_payload() -> dict:
    """Historical patient details: record, visits, delivery and baby."""
    return {
        "patient": copy.deepcopy(PATIENT_RECORD),
        "visits": copy.deepcopy(VISITS),
        "deliveries": copy.deepcopy(DELIVERIES),
        "babies": copy.deepcopy(BABIES),
    }


@pytest.fixture
def ongoing_payload() -> dict:
    """Ongoing patient details: no delivery or baby records yet."""
    return {
        "patient": copy.deepcopy(PATIENT_RECORD),
        "visits": copy.deepcopy(VISITS),
        "deliveries": [],
        "babies": [],
    }


@pytest.fixture
def predictions_payload() -> dict:
    return copy.deepcopy(PREDICTIONS)


# =============================================================================
# Backend client fixtures
# =============================================================================


class FakeBackend:
    """Route table for httpx.MockTransport keyed by (method, path).

    A route value is a JSON body (served with status 200), an
    httpx.Response, or a callable receiving the request.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Any] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, response: Any) -> None:
        self.routes[(method.upper(), path)] = response

    def calls(self, path: str) -> list[httpx.Request]:
        return [request for request in self.requests if request.url.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": "Not found"})
        if callable(route):
            return route(request)
        if isinstance(route, httpx.Response):
            return route
        return httpx.Response(200, json=route)


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest_asyncio.fixture
async def backend_client(fake_backend):
    """BackendClient whose requests are served by fake_backend."""
    client = BackendClient(BASE_URL, transport=httpx.MockTransport(fake_backend.handler))
    yield client
    await client.close()


# =============================================================================
# HTTP Client Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def client(backend_client):
    """Async test client for the FastAPI app backed by fake_backend."""
    app.dependency_overrides[get_backend_client] = lambda: backend_client

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.pop(get_backend_client, None)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Headers with valid API key for authenticated requests."""
    return {"X-API-Key": settings.api_key}
