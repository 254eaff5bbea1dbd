"""Settings loading: .env, settings.yaml, then environment overrides."""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

from . import get_data_dir
from .errors import ConfigError

load_dotenv()


DEFAULT_MODELS = {
    "openai": "gpt-3.5-turbo",
    "anthropic": "claude-3-sonnet-20240229",
    "gemini": "gemini-1.5-flash",
    "ollama": "llama3.1",
}

# Provider name -> env vars checked (in order) for its credential
API_KEY_ENV = {
    "openai": ["OPENAI_API_KEY"],
    "anthropic": ["ANTHROPIC_API_KEY"],
    "gemini": ["GOOGLE_API_KEY", "GEMINI_API_KEY"],
    "ollama": ["OLLAMA_HOST"],
}

# Older configs and the browser build used "google" for Gemini
PROVIDER_ALIASES = {"google": "gemini"}

TOP_LEVEL_KEYS = {"provider", "api_key", "model", "agent", "tools"}


@dataclass
class Settings:
    """Everything the agent needs from the outside world.

    Credentials are opaque strings; the core only checks presence.
    """
    provider: str = "openai"
    api_key: str = ""
    model: str = ""
    search_api_key: str = ""
    search_engine_id: str = ""

    # Agent loop
    max_tool_rounds: int = 8
    provider_timeout: float = 120.0
    tool_timeout: float = 30.0
    max_parallel: int = 5

    # Tools
    ai_pipe_latency: float = 1.0
    search_timeout: float = 10.0
    javascript_enabled: bool = True
    javascript_timeout: float = 5.0
    javascript_memory_mb: int = 64
    node_path: str = "node"

    def __post_init__(self):
        self.provider = PROVIDER_ALIASES.get(self.provider, self.provider)
        if not self.model:
            self.model = DEFAULT_MODELS.get(self.provider, "")
        if self.max_tool_rounds < 1:
            raise ConfigError(f"max_tool_rounds must be >= 1, got {self.max_tool_rounds}")
        if self.max_parallel < 1:
            raise ConfigError(f"max_parallel must be >= 1, got {self.max_parallel}")
        for name in ("provider_timeout", "tool_timeout", "search_timeout", "javascript_timeout"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive")

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key)

    @property
    def has_search_credentials(self) -> bool:
        return bool(self.search_api_key and self.search_engine_id)

    def with_provider(self, provider: str, model: Optional[str] = None) -> "Settings":
        """Copy for another provider; picks up that provider's key and default model."""
        provider = PROVIDER_ALIASES.get(provider, provider)
        return replace(
            self,
            provider=provider,
            model=model or DEFAULT_MODELS.get(provider, ""),
            api_key=_env_api_key(provider),
        )


def _env_api_key(provider: str) -> str:
    for var in API_KEY_ENV.get(provider, []):
        value = os.getenv(var)
        if value:
            return value
    return ""


def _flatten(config: dict) -> dict:
    """Map the nested settings.yaml layout onto Settings field names."""
    flat = {}
    agent_cfg = config.get("agent", {}) or {}
    tools_cfg = config.get("tools", {}) or {}
    search_cfg = tools_cfg.get("google_search", {}) or {}
    pipe_cfg = tools_cfg.get("ai_pipe", {}) or {}
    js_cfg = tools_cfg.get("execute_javascript", {}) or {}

    for key in ("provider", "api_key", "model"):
        if key in config:
            flat[key] = config[key]

    for key in ("max_tool_rounds", "provider_timeout", "tool_timeout", "max_parallel"):
        if key in agent_cfg:
            flat[key] = agent_cfg[key]

    if "api_key" in search_cfg:
        flat["search_api_key"] = search_cfg["api_key"]
    if "engine_id" in search_cfg:
        flat["search_engine_id"] = search_cfg["engine_id"]
    if "timeout" in search_cfg:
        flat["search_timeout"] = search_cfg["timeout"]
    if "latency" in pipe_cfg:
        flat["ai_pipe_latency"] = pipe_cfg["latency"]
    if "enabled" in js_cfg:
        flat["javascript_enabled"] = js_cfg["enabled"]
    if "timeout" in js_cfg:
        flat["javascript_timeout"] = js_cfg["timeout"]
    if "memory_mb" in js_cfg:
        flat["javascript_memory_mb"] = js_cfg["memory_mb"]
    if "node_path" in js_cfg:
        flat["node_path"] = js_cfg["node_path"]

    return flat


def load_config(path: Optional[Path] = None) -> dict:
    """Load raw configuration from settings.yaml."""
    config_path = path or (get_data_dir() / "settings.yaml")
    if config_path.exists():
        with open(config_path) as f:
            try:
                return yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
    return {}


def _canonical(provider: str) -> str:
    return PROVIDER_ALIASES.get(provider, provider)


def load_settings(path: Optional[Path] = None, **overrides) -> Settings:
    """Build Settings from settings.yaml, environment and explicit overrides.

    The file's ``api_key`` and ``model`` belong to the file's provider; they
    are dropped when the environment or an override selects another one.
    """
    load_dotenv(get_data_dir() / ".env")
    config = load_config(path)
    if not isinstance(config, dict):
        raise ConfigError("settings.yaml must contain a mapping")

    unknown_keys = set(config) - TOP_LEVEL_KEYS
    if unknown_keys:
        raise ConfigError(f"Unknown keys in settings.yaml: {', '.join(sorted(unknown_keys))}")

    values = _flatten(config)
    overrides = {k: v for k, v in overrides.items() if v is not None}

    file_provider = _canonical(values.get("provider", "openai"))
    env_provider = _canonical(os.getenv("AGENTFLOW_PROVIDER") or file_provider)
    provider = _canonical(overrides.pop("provider", env_provider))

    if provider != file_provider:
        values.pop("api_key", None)
        values.pop("model", None)
    if os.getenv("AGENTFLOW_MODEL") and provider == env_provider:
        values["model"] = os.environ["AGENTFLOW_MODEL"]
    values["provider"] = provider

    # Environment wins over the file
    env_key = _env_api_key(provider)
    if env_key:
        values["api_key"] = env_key
    if os.getenv("GOOGLE_SEARCH_API_KEY"):
        values["search_api_key"] = os.environ["GOOGLE_SEARCH_API_KEY"]
    if os.getenv("GOOGLE_SEARCH_ENGINE_ID"):
        values["search_engine_id"] = os.environ["GOOGLE_SEARCH_ENGINE_ID"]

    values.update(overrides)

    known = {f.name for f in fields(Settings)}
    unknown = set(values) - known
    if unknown:
        raise ConfigError(f"Unknown settings: {', '.join(sorted(unknown))}")

    try:
        return Settings(**values)
    except TypeError as e:
        raise ConfigError(str(e)) from e
