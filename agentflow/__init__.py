"""
AgentFlow - conversational agent loop with pluggable LLM backends

Wires a user, one LLM provider and a small fixed tool set together:
- Provider adapters (OpenAI, Anthropic, Gemini, Ollama, offline simulator)
- Concurrent tool dispatch with ordered write-back
- Web search, AI pipe workflows and sandboxed JavaScript
"""

__version__ = "0.1.0"

from pathlib import Path

# Package paths
PACKAGE_DIR = Path(__file__).parent


def get_data_dir() -> Path:
    """Get the user data directory for AgentFlow."""
    import os

    custom_dir = os.environ.get("AGENTFLOW_DATA_DIR")
    if custom_dir:
        return Path(custom_dir)

    return Path.home() / ".agentflow"


def ensure_data_dir() -> Path:
    """Ensure the data directory exists."""
    data_dir = get_data_dir()
    (data_dir / "logs").mkdir(parents=True, exist_ok=True)
    return data_dir
