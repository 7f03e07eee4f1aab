"""
HTTP-level tests for the FastAPI app (collaborators overridden, no network)
"""
import asyncio
import importlib.util
import json
import logging
import sys
import os

import httpx
import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from crop_advisor.dependencies import (
    get_current_user_id,
    get_image_analyzer,
    get_prediction_service,
    get_weather_provider,
)
from crop_advisor.errors import UpstreamError
from crop_advisor.main import app
from crop_advisor.services.history import InMemoryHistoryStore
from crop_advisor.services.image_analysis import CropImageAnalyzer
from crop_advisor.services.prediction import PredictionService
from crop_advisor.services.weather import OpenWeatherProvider
from crop_advisor.utils.rate_limiter import limiter

from test_image_analysis import IMAGE, mock_client
from test_prediction_service import FULL_INPUT, SOIL, FakeWeather
from test_weather import OPENWEATHER_BODY


@pytest.fixture
def state():
    """Wire the app to in-memory collaborators; returns a handle to tweak them"""
    handle = {
        "user_id": None,
        "weather": FakeWeather(),
        "history": InMemoryHistoryStore(),
    }
    handle["service"] = PredictionService(handle["weather"], handle["history"])

    app.dependency_overrides[get_prediction_service] = lambda: handle["service"]
    app.dependency_overrides[get_current_user_id] = lambda: handle["user_id"]
    app.dependency_overrides[get_weather_provider] = lambda: OpenWeatherProvider(
        api_key="test-key",
        cache_ttl=0,
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=OPENWEATHER_BODY)),
    )
    app.dependency_overrides[get_image_analyzer] = lambda: CropImageAnalyzer(mock_client())
    limiter.enabled = False
    yield handle
    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture
def client(state):
    return TestClient(app)


class TestServiceEndpoints:
    def test_root(self, client):
        body = client.get("/").json()
        assert body["status"] == "online"
        assert body["crops"] == ["Rice", "Wheat", "Maize", "Cotton", "Sugarcane", "Potato", "Tomato"]

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert set(body["services"]) == {"supabase", "openweather", "image_analysis"}


class TestPredictCrop:
    def test_success(self, client):
        response = client.post("/api/predict-crop", json=FULL_INPUT)
        assert response.status_code == 200
        body = response.json()
        assert body["crop"] == "Sugarcane"
        assert body["confidence"] == 1.0
        assert body["alternativeCrops"] == ["Maize", "Cotton"]
        assert [f["nutrient"] for f in body["fertilizer"]] == ["Nitrogen", "Phosphorus", "Potassium", "pH"]
        assert body["fertilizer"][3]["color"] == "green"

    def test_out_of_range(self, client):
        response = client.post("/api/predict-crop", json={**FULL_INPUT, "ph": 15})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid input parameters"}

    def test_rejection_details_are_logged(self, client, caplog):
        caplog.set_level(logging.WARNING, logger="crop_advisor.main")
        response = client.post("/api/predict-crop", json={**FULL_INPUT, "ph": 15})
        assert response.status_code == 400
        logged = [r.getMessage() for r in caplog.records if r.name == "crop_advisor.main"]
        assert any("ValidationError details on /api/predict-crop" in m and "'ph'" in m for m in logged)

    def test_not_json(self, client):
        response = client.post("/api/predict-crop", content=b"nitrogen=90", headers={"content-type": "text/plain"})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid input parameters"}


class TestRecommend:
    def test_with_location_for_signed_in_user(self, client, state):
        state["user_id"] = "user-123"
        response = client.post("/api/recommend", json={**SOIL, "location": {"lat": 18.52, "lon": 73.85}})
        assert response.status_code == 200
        body = response.json()
        assert body["crop"] == "Sugarcane"
        assert body["weather"]["location"] == "Pune"
        assert body["soil"]["nitrogen"] == 95
        assert body["saved"] is True
        assert body["cached"] is False
        assert "timestamp" in body

    def test_upstream_error_without_cache(self, client, state):
        state["service"].weather_provider = FakeWeather(error=UpstreamError("Weather service timed out"))
        response = client.post("/api/recommend", json={**SOIL, "location": {"lat": 18.52, "lon": 73.85}})
        assert response.status_code == 502
        assert response.json() == {"error": "Weather service timed out"}

    def test_upstream_error_with_cache(self, client, state):
        state["user_id"] = "user-123"
        client.post("/api/recommend", json={**SOIL, "location": {"lat": 18.52, "lon": 73.85}})

        state["service"].weather_provider = FakeWeather(error=UpstreamError())
        response = client.post("/api/recommend", json={**SOIL, "location": {"lat": 18.52, "lon": 73.85}})
        assert response.status_code == 200
        assert response.json()["cached"] is True


class TestWeather:
    def test_success(self, client):
        response = client.post("/api/weather", json={"lat": 18.52, "lon": 73.85})
        assert response.status_code == 200
        assert response.json() == {"temperature": 27.5, "humidity": 83.0, "description": "light rain", "location": "Pune"}

    @pytest.mark.parametrize("body", [{"lat": 95, "lon": 0}, {"lat": 10}, [1, 2]])
    def test_invalid(self, client, body):
        response = client.post("/api/weather", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid input parameters"}


class TestAnalyzeCropImage:
    def test_success(self, client):
        response = client.post("/api/analyze-crop-image", json={"imageBase64": IMAGE})
        assert response.status_code == 200
        assert response.json()["analysis"].startswith("Crop: Tomato")

    def test_invalid_image(self, client):
        response = client.post("/api/analyze-crop-image", json={"imageBase64": "not-an-image"})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid image data"}


class TestHistory:
    def test_requires_user(self, client):
        response = client.get("/api/history")
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    def test_lists_newest_first(self, client, state):
        state["user_id"] = "user-123"
        client.post("/api/recommend", json=FULL_INPUT)
        client.post("/api/recommend", json={**FULL_INPUT, "nitrogen": 85, "rainfall": 250, "humidity": 85})

        response = client.get("/api/history", params={"limit": 10})
        assert response.status_code == 200
        assert [r["predicted_crop"] for r in response.json()] == ["Rice", "Sugarcane"]

    def test_limit_out_of_range(self, client, state):
        state["user_id"] = "user-123"
        response = client.get("/api/history", params={"limit": 0})
        assert response.status_code == 400


def load_entrypoint():
    path = os.path.join(os.path.dirname(__file__), "..", "api", "index.py")
    spec = importlib.util.spec_from_file_location("serverless_index", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestServerlessEntrypoint:
    def test_exports_app(self):
        assert load_entrypoint().app is app

    def test_import_failure_returns_generic_500(self, monkeypatch):
        monkeypatch.setitem(sys.modules, "crop_advisor.main", None)
        entrypoint = load_entrypoint()

        sent = []

        async def send(message):
            sent.append(message)

        asyncio.run(entrypoint.app({"type": "http"}, None, send))

        assert sent[0]["status"] == 500
        assert json.loads(sent[1]["body"]) == {"error": "Service failed to start"}
