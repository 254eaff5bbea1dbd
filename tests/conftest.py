"""Shared fixtures: isolate every test from real credentials and the network."""

import pytest

from agentflow.errors import ToolError
from agentflow.skills import web_search

CREDENTIAL_ENV = [
    "AGENTFLOW_PROVIDER",
    "AGENTFLOW_MODEL",
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "GOOGLE_API_KEY",
    "GEMINI_API_KEY",
    "OLLAMA_HOST",
    "GOOGLE_SEARCH_API_KEY",
    "GOOGLE_SEARCH_ENGINE_ID",
]


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    for var in CREDENTIAL_ENV:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("AGENTFLOW_DATA_DIR", str(tmp_path / "data"))


def _unreachable(query, num_results=5, timeout=10.0):
    raise ToolError("network disabled in tests")


@pytest.fixture
def offline_search(monkeypatch):
    """Make every live search stage fail so google_search ends on mock results."""
    monkeypatch.setattr(web_search, "FALLBACK_SEARCHES", [_unreachable, _unreachable, _unreachable])
