"""Tests for application wiring and health endpoints."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from refine_engine.config import settings
from refine_engine.main import app
from refine_engine.services.providers import ChatCompletionsProvider
from refine_engine.services.refine_service import PromptRefiner


@pytest.fixture
def openai_settings(monkeypatch):
    monkeypatch.setattr(settings, "LLM_PROVIDER", "openai")
    monkeypatch.setattr(settings, "ENVIRONMENT", "development")
    monkeypatch.setattr(settings, "SENTRY_DSN", None)
    return settings


class TestLifespan:
    def test_refiner_created_once(self, openai_settings, monkeypatch):
        monkeypatch.setattr(settings, "OPENAI_API_KEY", "sk-test")

        with TestClient(app) as client:
            refiner = app.state.refiner
            assert isinstance(refiner, PromptRefiner)
            assert isinstance(refiner.provider, ChatCompletionsProvider)
            assert refiner.provider is app.state.provider
            assert refiner.min_length == settings.MIN_IDEA_LENGTH

            client.get("/health")
            assert app.state.refiner is refiner


class TestHealth:
    def test_root(self, openai_settings):
        body = TestClient(app).get("/").json()
        assert body["status"] == "running"
        assert body["provider"] == "openai"
        assert body["model"] == settings.OPENAI_MODEL

    def test_healthy_with_credential(self, openai_settings, monkeypatch):
        monkeypatch.setattr(settings, "OPENAI_API_KEY", "sk-test")

        with TestClient(app) as client:
            health = client.get("/health").json()
            ready = client.get("/readiness")

        assert health["status"] == "healthy"
        assert health["checks"]["provider"]["configured"] is True
        assert ready.status_code == 200
        assert ready.json() == {"status": "ready"}

    def test_degraded_without_credential(self, openai_settings, monkeypatch):
        monkeypatch.setattr(settings, "OPENAI_API_KEY", "")

        with TestClient(app) as client:
            health = client.get("/health").json()
            ready = client.get("/readiness")

        assert health["status"] == "degraded"
        assert health["checks"]["provider"]["status"] == "missing"
        assert ready.status_code == 503
        assert ready.json()["status"] == "not_ready"
