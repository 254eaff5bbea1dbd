"""
LLM Providers - One interface over several AI backends

Supported:
- OpenAI (native tool calling)
- Anthropic (native tool calling)
- Google Gemini (text tool-call protocol)
- Ollama (native or text protocol, per model)
- Offline simulator (used whenever a credential is missing)
"""

from .base import BaseProvider
from .openai import OpenAIProvider
from .anthropic import AnthropicProvider
from .gemini import GeminiProvider
from .ollama import OllamaProvider
from .offline import OfflineSimulator

PROVIDERS = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
    "gemini": GeminiProvider,
    "ollama": OllamaProvider,
    "offline": OfflineSimulator,
}


def get_provider(name: str, **kwargs) -> BaseProvider:
    """Get a provider instance by name."""
    if name not in PROVIDERS:
        raise ValueError(f"Unknown provider: {name}. Available: {list(PROVIDERS.keys())}")
    return PROVIDERS[name](**kwargs)


def list_providers() -> list[str]:
    """List available provider names."""
    return list(PROVIDERS.keys())


def create_provider(settings, offline: OfflineSimulator = None) -> BaseProvider:
    """Build the provider named in settings with its credential and model.

    ``offline`` is the simulator that answers while the provider has no
    credential, and the provider itself when settings name "offline".
    """
    if settings.provider == "offline":
        return offline or OfflineSimulator()
    return get_provider(
        settings.provider,
        model=settings.model or None,
        api_key=settings.api_key or None,
        offline=offline,
        timeout=settings.provider_timeout,
    )


__all__ = [
    "BaseProvider",
    "OpenAIProvider",
    "AnthropicProvider",
    "GeminiProvider",
    "OllamaProvider",
    "OfflineSimulator",
    "PROVIDERS",
    "get_provider",
    "list_providers",
    "create_provider",
]
