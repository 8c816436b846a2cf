"""Pytest configuration and fixtures."""
import sys
from pathlib import Path
from types import SimpleNamespace

import httpx
import pytest

# Add backend to path
backend_path = Path(__file__).parent.parent
sys.path.insert(0, str(backend_path))

from fruitguard.config import Settings  # noqa: E402

GATEWAY_URL = "https://gateway.test/v1/chat/completions"

APPLE_RESULT_TEXT = (
    "```json\n"
    '{"fruitType":"Apple","isHealthy":true,"disease":{"name":"None","severity":"Healthy",'
    '"confidence":98,"description":"No visible symptoms"},'
    '"treatment":{"immediate":[],"prevention":[],"chemicals":[]},"additionalNotes":""}'
    "\n```"
)

APPLE_RESULT = {
    "fruitType": "Apple",
    "isHealthy": True,
    "disease": {
        "name": "None",
        "severity": "Healthy",
        "confidence": 98,
        "description": "No visible symptoms",
    },
    "treatment": {"immediate": [], "prevention": [], "chemicals": []},
    "additionalNotes": "",
}

DISEASED_ORANGE = {
    "fruitType": "Orange",
    "isHealthy": False,
    "healthStatus": "Poor",
    "isEdible": False,
    "edibilityReason": "Green mold has spread into the pulp.",
    "affectedPercentage": 45,
    "disease": {
        "name": "Green Mold",
        "severity": "Moderate",
        "confidence": 87,
        "description": "Powdery green spores on the peel.",
    },
    "treatment": {
        "immediate": ["Remove the fruit from storage", "Discard neighbouring fruit with spots"],
        "prevention": ["Keep storage below 8°C"],
        "chemicals": [],
    },
    "additionalNotes": "Whole fruit, external infection.",
}


class DummyCompletions:
    """Stand-in for ``client.chat.completions`` recording every call."""

    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(role="assistant", content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(index=0, message=message)])


class DummyGateway:
    """Replaces the OpenAI SDK inside the analyzer module."""

    def __init__(self):
        self.completions = DummyCompletions()
        self.client_kwargs = []

    def respond_with(self, content):
        self.completions.content = content
        self.completions.error = None

    def fail_with_status(self, status_code, body=None):
        from openai import APIStatusError

        response = httpx.Response(
            status_code,
            json=body or {"error": {"message": "upstream failure"}},
            request=httpx.Request("POST", GATEWAY_URL),
        )
        self.completions.error = APIStatusError("upstream failure", response=response, body=body)

    def fail_with_connection_error(self):
        from openai import APIConnectionError

        self.completions.error = APIConnectionError(request=httpx.Request("POST", GATEWAY_URL))

    @property
    def calls(self):
        return self.completions.calls

    def __call__(self, **kwargs):
        self.client_kwargs.append(kwargs)
        return SimpleNamespace(chat=SimpleNamespace(completions=self.completions))


@pytest.fixture
def gateway(monkeypatch):
    """Install a dummy AI gateway in place of the OpenAI client."""
    dummy = DummyGateway()
    monkeypatch.setattr("fruitguard.analyzers.fruit_analyzer.OpenAI", dummy)
    return dummy


@pytest.fixture
def settings():
    return Settings(gateway_api_key="test-key", gateway_base_url="https://gateway.test/v1")


@pytest.fixture
def relay_env(monkeypatch):
    """Environment for API tests: upstream key set, no inbound token."""
    monkeypatch.setenv("AI_GATEWAY_API_KEY", "test-key")
    monkeypatch.setenv("AI_GATEWAY_BASE_URL", "https://gateway.test/v1")
    monkeypatch.delenv("RELAY_AUTH_TOKEN", raising=False)
    monkeypatch.delenv("STRICT_RESULT_VALIDATION", raising=False)
    monkeypatch.delenv("SAMPLES_FILE", raising=False)
