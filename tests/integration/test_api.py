"""
Integration Tests for the FastAPI Backend

Tests for sessions, parameter updates, advisories, parts and chat.
Uses async httpx for ASGI app testing; the explanation service is swapped
through FastAPI's dependency overrides.
"""
import pytest
import httpx

from crrt_advisor.main import app, get_explainer
from crrt_advisor.services import AdvisoryExplainer
from crrt_advisor.utils import AdvisoryServiceError


@pytest.fixture
async def async_client(explainer):
    """Create async test client with the fake explainer installed."""
    app.dependency_overrides[get_explainer] = lambda: explainer
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
async def session_id(async_client) -> str:
    response = await async_client.post("/api/v1/sessions")
    assert response.status_code == 201
    return response.json()["session_id"]


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    async def test_root_endpoint(self, async_client):
        response = await async_client.get("/")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data

    async def test_health_endpoint(self, async_client):
        response = await async_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_parameter_specs(self, async_client):
        response = await async_client.get("/api/v1/parameters")
        assert response.status_code == 200

        data = response.json()
        assert len(data["parameters"]) == 27
        assert data["citrate_dose_presets"] == [2.8, 3.0, 3.2]


class TestSessionEndpoints:
    """Tests for circuit session lifecycle and updates."""

    async def test_snapshot(self, async_client, session_id):
        response = await async_client.get(f"/api/v1/sessions/{session_id}")
        assert response.status_code == 200

        data = response.json()
        assert data["version"] == 0
        assert data["parameters"]["qb"] == 200
        assert data["derived"]["ff_percent"] == 16.2
        assert len(data["parts"]) == 9

    async def test_unknown_session(self, async_client):
        response = await async_client.get("/api/v1/sessions/NONEXISTENT")
        assert response.status_code == 404

    async def test_update_parameter(self, async_client, session_id):
        url = f"/api/v1/sessions/{session_id}/parameters"
        await async_client.patch(url, json={"field": "dilution", "value": "Post"})
        response = await async_client.patch(url, json={"field": "q_rep", "value": 2200})
        assert response.status_code == 200

        data = response.json()
        assert data["version"] == 2
        assert data["derived"]["ff_percent"] == 27.4
        assert data["risks"]["ff_risk"] == "high"

    async def test_invalid_enum_rejected(self, async_client, session_id):
        response = await async_client.patch(
            f"/api/v1/sessions/{session_id}/parameters",
            json={"field": "mode", "value": "SCUF"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_PARAMETER"

        snapshot = (await async_client.get(f"/api/v1/sessions/{session_id}")).json()
        assert snapshot["version"] == 0
        assert snapshot["parameters"]["mode"] == "CVVH"

    async def test_batch_update(self, async_client, session_id):
        response = await async_client.put(
            f"/api/v1/sessions/{session_id}/parameters",
            json={"values": {"anticoagulation": "CitrateCa", "citrate_flow": 140}},
        )
        assert response.status_code == 200
        assert "Citrate dose low" in response.json()["advisories"]["clinical"]

    async def test_citrate_dose(self, async_client, session_id):
        response = await async_client.post(
            f"/api/v1/sessions/{session_id}/citrate-dose", json={"target_dose": 3.0}
        )
        assert response.status_code == 200
        assert response.json()["parameters"]["citrate_flow"] == 265

    async def test_citrate_dose_overflow_rejected(self, async_client, session_id):
        response = await async_client.post(
            f"/api/v1/sessions/{session_id}/citrate-dose", json={"target_dose": 1e308}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_PARAMETER"

        snapshot = (await async_client.get(f"/api/v1/sessions/{session_id}")).json()
        assert snapshot["version"] == 0

    async def test_delete_session(self, async_client, session_id):
        response = await async_client.delete(f"/api/v1/sessions/{session_id}")
        assert response.status_code == 204

        response = await async_client.get(f"/api/v1/sessions/{session_id}")
        assert response.status_code == 404


class TestAdvisoryAndPartEndpoints:
    """Tests for advisories and click-to-ask."""

    async def test_advisories(self, async_client, session_id):
        response = await async_client.get(f"/api/v1/sessions/{session_id}/advisories")
        assert response.status_code == 200

        data = response.json()
        assert data["pressure"] == "Pressures within normal range."
        assert data["is_warning"] is True

    async def test_parts(self, async_client, session_id):
        response = await async_client.get(f"/api/v1/sessions/{session_id}/parts")
        assert response.status_code == 200
        assert response.json()["parts"][0]["identifier"] == "filter"

    async def test_activate_part(self, async_client, session_id):
        response = await async_client.post(
            f"/api/v1/sessions/{session_id}/parts/filter/activate"
        )
        assert response.status_code == 200

        data = response.json()
        assert "hollow fibres" in data["query"]
        assert data["text"] is None

    async def test_activate_part_with_explanation(self, async_client, session_id):
        response = await async_client.post(
            f"/api/v1/sessions/{session_id}/parts/calcium_pump/activate",
            params={"explain": True},
        )
        assert response.status_code == 200

        data = response.json()
        assert data["text"] == "**Core Causes**: stasis."
        assert data["is_current"] is True

    async def test_activate_unknown_part(self, async_client, session_id):
        response = await async_client.post(
            f"/api/v1/sessions/{session_id}/parts/heat_exchanger/activate"
        )
        assert response.status_code == 404
        assert response.json()["error"] == "UNKNOWN_PART"


class TestChatEndpoints:
    """Tests for free-text chat."""

    async def test_suggestions(self, async_client):
        response = await async_client.get("/api/v1/chat/suggestions")
        assert response.status_code == 200
        assert len(response.json()["suggestions"]) == 4

    async def test_chat(self, async_client):
        response = await async_client.post("/api/v1/chat", json={"query": "Why clotting?"})
        assert response.status_code == 200
        assert response.json()["text"] == "**Core Causes**: stasis."

    async def test_chat_service_failure(self, async_client, fake_client):
        fake_client.generate_async.side_effect = AdvisoryServiceError("quota exceeded")

        response = await async_client.post("/api/v1/chat", json={"query": "Why clotting?"})
        assert response.status_code == 503

        data = response.json()
        assert data["error"] == "ADVISORY_SERVICE_ERROR"
        assert "try again" in data["user_message"]

    async def test_chat_offline_client(self, async_client, offline_client):
        app.dependency_overrides[get_explainer] = lambda: AdvisoryExplainer(client=offline_client)

        response = await async_client.post("/api/v1/chat", json={"query": "Why clotting?"})
        assert response.status_code == 503
