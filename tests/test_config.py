"""Tests for settings loading and validation."""

import pytest

from agentflow import get_data_dir
from agentflow.config import Settings, load_settings
from agentflow.errors import ConfigError


@pytest.fixture
def settings_file(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text(
        "provider: anthropic\n"
        "agent:\n"
        "  max_tool_rounds: 3\n"
        "  tool_timeout: 12\n"
        "tools:\n"
        "  google_search:\n"
        "    api_key: file-key\n"
        "    engine_id: file-cx\n"
        "  ai_pipe:\n"
        "    latency: 0\n"
        "  execute_javascript:\n"
        "    enabled: false\n"
        "    memory_mb: 32\n"
    )
    return path


class TestSettingsDefaults:

    def test_defaults(self):
        settings = Settings()
        assert settings.provider == "openai"
        assert settings.model == "gpt-3.5-turbo"
        assert settings.max_tool_rounds == 8
        assert not settings.has_credentials
        assert not settings.has_search_credentials

    def test_default_model_per_provider(self):
        assert Settings(provider="anthropic").model == "claude-3-sonnet-20240229"
        assert Settings(provider="gemini").model == "gemini-1.5-flash"
        assert Settings(provider="ollama").model == "llama3.1"

    @pytest.mark.parametrize("field,value", [
        ("max_tool_rounds", 0),
        ("max_parallel", 0),
        ("provider_timeout", 0),
        ("tool_timeout", -1),
    ])
    def test_invalid_values(self, field, value):
        with pytest.raises(ConfigError):
            Settings(**{field: value})

    def test_with_provider_picks_env_key(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "gem-key")
        other = Settings(api_key="sk-openai").with_provider("google")
        assert other.provider == "gemini"
        assert other.api_key == "gem-key"
        assert other.model == "gemini-1.5-flash"


class TestLoadSettings:

    def test_missing_file(self, tmp_path):
        settings = load_settings(tmp_path / "nope.yaml")
        assert settings.provider == "openai"

    def test_data_dir_from_env(self, tmp_path):
        assert get_data_dir() == tmp_path / "data"

    def test_reads_yaml(self, settings_file):
        settings = load_settings(settings_file)
        assert settings.provider == "anthropic"
        assert settings.model == "claude-3-sonnet-20240229"
        assert settings.max_tool_rounds == 3
        assert settings.tool_timeout == 12
        assert settings.search_api_key == "file-key"
        assert settings.has_search_credentials
        assert settings.ai_pipe_latency == 0
        assert settings.javascript_enabled is False
        assert settings.javascript_memory_mb == 32

    def test_env_overrides_file(self, settings_file, monkeypatch):
        monkeypatch.setenv("AGENTFLOW_PROVIDER", "openai")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        monkeypatch.setenv("GOOGLE_SEARCH_API_KEY", "env-search")
        settings = load_settings(settings_file)
        assert settings.provider == "openai"
        assert settings.api_key == "sk-env"
        assert settings.search_api_key == "env-search"

    def test_explicit_overrides_win(self, settings_file, monkeypatch):
        monkeypatch.setenv("AGENTFLOW_MODEL", "from-env")
        settings = load_settings(settings_file, model="from-cli", provider=None)
        assert settings.model == "from-cli"
        assert settings.provider == "anthropic"

    def test_unknown_override(self, tmp_path):
        with pytest.raises(ConfigError):
            load_settings(tmp_path / "nope.yaml", colour="blue")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("provider: [unclosed\n")
        with pytest.raises(ConfigError):
            load_settings(path)

    def test_non_mapping_yaml(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigError):
            load_settings(path)

    def test_invalid_value_in_file(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("agent:\n  max_parallel: 0\n")
        with pytest.raises(ConfigError):
            load_settings(path)

    def test_unknown_top_level_key(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("provider: openai\ntheme: dark\n")
        with pytest.raises(ConfigError, match="theme"):
            load_settings(path)


# ──────────────────────────────────────────────
# Switching provider
# ──────────────────────────────────────────────

class TestProviderSwitch:

    def test_override_picks_that_providers_key(self, tmp_path, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-openai")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant")
        settings = load_settings(tmp_path / "nope.yaml", provider="anthropic")
        assert settings.provider == "anthropic"
        assert settings.api_key == "sk-ant"
        assert settings.model.startswith("claude")

    def test_override_without_key_stays_unconfigured(self, tmp_path, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-openai")
        settings = load_settings(tmp_path / "nope.yaml", provider="anthropic")
        assert settings.api_key == ""
        assert not settings.has_credentials

    def test_file_key_and_model_dropped_for_other_provider(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("provider: openai\napi_key: sk-file\nmodel: gpt-4o\n")
        settings = load_settings(path, provider="anthropic")
        assert settings.api_key == ""
        assert settings.model == "claude-3-sonnet-20240229"

    def test_file_key_and_model_kept_for_same_provider(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("provider: openai\napi_key: sk-file\nmodel: gpt-4o\n")
        settings = load_settings(path, provider="openai")
        assert settings.api_key == "sk-file"
        assert settings.model == "gpt-4o"

    def test_alias_counts_as_same_provider(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("provider: google\nmodel: gemini-1.5-pro\n")
        settings = load_settings(path, provider="gemini")
        assert settings.model == "gemini-1.5-pro"

    def test_env_model_ignored_when_override_switches(self, tmp_path, monkeypatch):
        monkeypatch.setenv("AGENTFLOW_PROVIDER", "openai")
        monkeypatch.setenv("AGENTFLOW_MODEL", "gpt-4o")
        settings = load_settings(tmp_path / "nope.yaml", provider="gemini")
        assert settings.model == "gemini-1.5-flash"

    def test_explicit_model_with_switch(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("provider: openai\nmodel: gpt-4o\n")
        settings = load_settings(path, provider="anthropic", model="claude-3-haiku-20240307")
        assert settings.model == "claude-3-haiku-20240307"

    def test_data_dir_env_file(self, tmp_path):
        data_dir = tmp_path / "data"
        data_dir.mkdir()
        (data_dir / ".env").write_text("ANTHROPIC_API_KEY=sk-from-dotenv\n")
        settings = load_settings(tmp_path / "nope.yaml", provider="anthropic")
        assert settings.api_key == "sk-from-dotenv"
