"""Tests for POST /api/refine."""

from __future__ import annotations

import httpx
import pytest

from refine_engine.main import app
from refine_engine.routers import refine
from refine_engine.services.errors import ProviderNotConfiguredError
from refine_engine.services.refine_service import PromptRefiner

from tests.conftest import StubProvider


def _override(provider: StubProvider) -> None:
    app.dependency_overrides[refine.get_refiner] = lambda: PromptRefiner(provider)


class TestRefineSuccess:
    def test_relays_provider_text(self, client, stub_provider):
        response = client.post("/api/refine", json={"prompt": "Portfolio for a photographer"})

        assert response.status_code == 200
        assert response.json() == "Hello world"
        assert len(stub_provider.calls) == 1

    def test_same_input_same_payload(self, client):
        body = {"prompt": "Restaurant website with menu"}
        first = client.post("/api/refine", json=body)
        second = client.post("/api/refine", json=body)
        assert first.json() == second.json() == "Hello world"

    def test_boundary_eleven_characters_accepted(self, client, stub_provider):
        response = client.post("/api/refine", json={"prompt": "  01234567890  "})
        assert response.status_code == 200
        assert stub_provider.calls[0][1]["content"].count("  01234567890  ") == 1

    def test_extra_fields_ignored(self, client):
        response = client.post(
            "/api/refine", json={"prompt": "Personal blog with newsletter", "model": "gpt-4"}
        )
        assert response.status_code == 200


class TestRefineValidation:
    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"prompt": None},
            {"prompt": 12345678901234},
            {"prompt": ""},
            {"prompt": "0123456789"},
            {"prompt": "    short     "},
            ["Portfolio for a photographer"],
        ],
    )
    def test_rejected_without_provider_call(self, client, stub_provider, body):
        response = client.post("/api/refine", json=body)

        assert response.status_code == 400
        assert "more detailed idea" in response.json()["error"]
        assert stub_provider.calls == []

    def test_malformed_json_rejected(self, client, stub_provider):
        response = client.post(
            "/api/refine",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert stub_provider.calls == []


class TestRefineProviderFailures:
    def test_api_key_error_is_generic(self, client):
        _override(StubProvider(error=RuntimeError("Incorrect API key provided: sk-secret")))

        response = client.post("/api/refine", json={"prompt": "E-commerce store for clothing"})

        assert response.status_code == 500
        error = response.json()["error"]
        assert error == "API configuration error. Please check server setup."
        assert "API key" not in error
        assert "sk-secret" not in response.text

    def test_missing_credential(self, client):
        _override(StubProvider(error=ProviderNotConfiguredError("OPENAI_API_KEY not configured")))

        response = client.post("/api/refine", json={"prompt": "E-commerce store for clothing"})

        assert response.status_code == 500
        assert "OPENAI_API_KEY" not in response.text

    def test_network_error_is_generic(self, client):
        _override(StubProvider(error=httpx.ConnectError("dns lookup failed for api host")))

        response = client.post("/api/refine", json={"prompt": "SaaS landing page with pricing"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to refine your idea. Please try again."}


class TestRateLimit:
    def test_limit_returns_429(self, client):
        refine.limiter.enabled = True
        refine.limiter.reset()

        limit = int(refine.settings.RATE_LIMIT.split("/")[0])
        statuses = [
            client.post("/api/refine", json={"prompt": "short"}).status_code
            for _ in range(limit + 1)
        ]

        assert statuses[:limit] == [400] * limit
        assert statuses[-1] == 429
        assert "error" in client.post("/api/refine", json={"prompt": "short"}).json()
