"""
Program generation API tests.

The orchestrator dependency is overridden with one wired to a fake client,
so nothing here talks to the network.
"""
import json

import pytest
from fastapi.testclient import TestClient

from main import app
from routers.program_generation import get_program_orchestrator
from services.program_framework.errors import GenerationError
from services.program_framework.orchestrator import ProgramOrchestrator

from fixtures.program_fixtures import FakeGenerationClient

PROFILE = {
    "goals": ["hypertrophy"],
    "trainingAgeYears": 1,
    "daysPerWeek": 4,
    "sessionDurationMinutes": 60,
    "equipment": ["full-gym"],
    "injuries": [],
}


@pytest.fixture
def use_client():
    """Install an orchestrator around the given fake client for one test."""
    def _install(fake_client):
        app.dependency_overrides[get_program_orchestrator] = (
            lambda: ProgramOrchestrator(client=fake_client)
        )
        return fake_client

    yield _install
    app.dependency_overrides.pop(get_program_orchestrator, None)


@pytest.fixture
def client():
    return TestClient(app)


class TestGenerateEndpoint:

    def test_accepted_candidate(self, client, use_client, candidate):
        use_client(FakeGenerationClient(response=json.dumps(candidate)))
        response = client.post("/v1/programs/generate", json=PROFILE)

        assert response.status_code == 200
        program = response.json()["program"]
        assert program["generationSource"] == "external"
        assert program["isAiGenerated"] is True
        assert program["schedule"] == candidate["schedule"]

    def test_generator_failure_still_succeeds(self, client, use_client):
        use_client(FakeGenerationClient(error=GenerationError("boom")))
        response = client.post("/v1/programs/generate", json=PROFILE)

        assert response.status_code == 200
        program = response.json()["program"]
        assert program["generationSource"] == "fallback"
        assert program["isAiGenerated"] is False
        assert len(program["schedule"]) == 4
        assert len(program["weeklyProgressionNotes"]) == 8

    def test_response_is_camel_case(self, client, use_client):
        use_client(FakeGenerationClient(error=GenerationError("boom")))
        program = client.post("/v1/programs/generate", json=PROFILE).json()["program"]
        assert "daysPerWeek" in program
        assert "exerciseId" in program["schedule"][0]["exercises"][0]
        assert "restSeconds" in program["schedule"][0]["exercises"][0]["scheme"]

    @pytest.mark.parametrize("body", [
        {"trainingAgeYears": 1},
        {**PROFILE, "goals": "hypertrophy"},
        {**PROFILE, "goals": []},
        [1, 2, 3],
    ])
    def test_bad_profile_is_400(self, client, use_client, body):
        fake = use_client(FakeGenerationClient(response="{}"))
        response = client.post("/v1/programs/generate", json=body)

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_PROFILE"
        assert fake.calls == []

    def test_missing_body_is_400(self, client, use_client):
        use_client(FakeGenerationClient(response="{}"))
        response = client.post("/v1/programs/generate")
        assert response.status_code == 400

    def test_non_json_body_is_400(self, client, use_client):
        fake = use_client(FakeGenerationClient(response="{}"))
        response = client.post(
            "/v1/programs/generate",
            content=b"{goals: hypertrophy",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_PROFILE"
        assert fake.calls == []

    def test_zero_days_is_a_two_day_program(self, client, use_client):
        use_client(FakeGenerationClient(error=GenerationError("boom")))
        response = client.post("/v1/programs/generate", json={**PROFILE, "daysPerWeek": 0})

        assert response.status_code == 200
        program = response.json()["program"]
        assert program["daysPerWeek"] == 2
        assert len(program["schedule"]) == 2

    def test_unconfigured_service_is_503(self, client):
        app.dependency_overrides[get_program_orchestrator] = lambda: ProgramOrchestrator()
        try:
            response = client.post("/v1/programs/generate", json=PROFILE)
        finally:
            app.dependency_overrides.pop(get_program_orchestrator, None)

        assert response.status_code == 503
        assert response.json()["error_code"] == "SERVICE_NOT_CONFIGURED"


class TestCatalogueAndPreview:

    def test_list_exercises(self, client):
        response = client.get("/v1/programs/exercises")
        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 37
        assert "plank" in body["patterns"]["core"]

    def test_preview_constraints(self, client):
        response = client.post(
            "/v1/programs/constraints",
            json={**PROFILE, "daysPerWeek": 9, "equipment": ["bodyweight"], "injuries": ["knee"]},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["constraints"]["equipment"]["bodyweightOnly"] is True
        assert body["constraints"]["injurySubstitutions"][0]["family"] == "knee"
        assert body["split"]["name"] == "push-pull-legs-six"
        assert body["split"]["days"] == 7
        assert body["split"]["deviations"][0]["requested"] == 9
        assert len(body["split"]["layout"]) == 7

    def test_preview_bad_profile_is_400(self, client):
        response = client.post("/v1/programs/constraints", json={"goals": ["yoga"]})
        assert response.status_code == 400


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ping(self, client):
        assert client.get("/ping").json() == {"pong": True}


class TestRequestTracing:

    def test_request_id_generated(self, client):
        response = client.get("/ping")
        assert len(response.headers["X-Request-ID"]) == 32

    def test_request_id_echoed(self, client):
        response = client.get("/ping", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"

    def test_bad_profile_reports_field(self, client):
        response = client.post("/v1/programs/constraints", json={**PROFILE, "goals": ["yoga"]})
        assert response.status_code == 400
        assert response.json()["field"].startswith("goals")
