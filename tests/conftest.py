"""Shared test fixtures."""

from __future__ import annotations

from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from refine_engine.main import app
from refine_engine.routers import refine
from refine_engine.services.providers import TextGenerationProvider
from refine_engine.services.refine_service import PromptRefiner


class StubProvider(TextGenerationProvider):
    """Deterministic provider recording every call."""

    name = "stub"
    model = "stub-model"

    def __init__(self, text: str = "Hello world", error: Optional[BaseException] = None):
        self.text = text
        self.error = error
        self.calls: List[List[Dict[str, str]]] = []

    @property
    def is_configured(self) -> bool:
        return True

    async def generate(self, messages: List[Dict[str, str]]) -> str:
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def stub_provider() -> StubProvider:
    return StubProvider()


@pytest.fixture
def refiner(stub_provider: StubProvider) -> PromptRefiner:
    return PromptRefiner(stub_provider)


@pytest.fixture
def client(refiner: PromptRefiner):
    """TestClient wired to the stub provider, rate limiting off."""
    app.dependency_overrides[refine.get_refiner] = lambda: refiner
    was_enabled = refine.limiter.enabled
    refine.limiter.enabled = False
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        refine.limiter.enabled = was_enabled
        refine.limiter.reset()
