"""
Tests for configuration loading and validation.
"""

import json
import pytest
import os
import sys

import yaml

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from securityagent.config import (
    AgentConfig, load_config, find_config, load_agent_config, create_default_config,
)
from securityagent.core.findings import Category
from securityagent.exceptions import ConfigurationError


class TestAgentConfig:
    """Tests for the config dataclass."""

    def test_defaults(self):
        config = AgentConfig()
        assert config.provider == "gemini"
        assert config.gemini_model == "gemini-2.5-flash"
        assert config.ollama_url == "http://host.docker.internal:11434"
        assert config.base_ref == "main"
        assert config.extensions == [".js"]
        assert config.exclude_paths == ["scripts/", "securityagent/"]
        assert set(config.enabled_categories) == set(Category)
        assert config.request_timeout == 120.0
        assert config.max_retries == 2

    def test_from_nested_dict(self):
        config = AgentConfig.from_dict({
            "provider": "ollama",
            "ollama": {"model": "codellama", "url": "http://localhost:11434"},
            "changes": {"base_ref": "develop", "exclude": ["tools/"], "extensions": [".js", ".ts"]},
            "detection": {"categories": ["xss"]},
            "remediation": {"dry_run": True, "max_retries": 5},
            "output": {"format": "json"},
            "unknown_key": 1,
        })
        assert config.provider == "ollama"
        assert config.ollama_model == "codellama"
        assert config.ollama_url == "http://localhost:11434"
        assert config.base_ref == "develop"
        assert config.exclude_paths == ["tools/"]
        assert config.extensions == [".js", ".ts"]
        assert config.enabled_categories == [Category.XSS]
        assert config.dry_run is True
        assert config.max_retries == 5
        assert config.output_format == "json"

    def test_to_dict_masks_api_key(self):
        config = AgentConfig(gemini_api_key="very-secret")
        assert config.to_dict()["gemini_api_key"] == "***"
        assert AgentConfig().to_dict()["gemini_api_key"] is None

    def test_unknown_category(self):
        config = AgentConfig(categories=["sql_injection", "csrf"])
        with pytest.raises(ConfigurationError, match="csrf"):
            config.enabled_categories


class TestEnvironment:
    """Tests for environment variable overrides."""

    def test_env_overrides(self):
        config = AgentConfig().apply_env({
            "AI_PROVIDER": "ollama",
            "GEMINI_API_KEY": "k",
            "OLLAMA_MODEL": "mistral",
            "GITHUB_BASE_REF": "release",
            "SECURITYAGENT_TIMEOUT": "30",
            "SECURITYAGENT_MAX_RETRIES": "0",
        })
        assert config.provider == "ollama"
        assert config.gemini_api_key == "k"
        assert config.ollama_model == "mistral"
        assert config.base_ref == "release"
        assert config.request_timeout == 30.0
        assert config.max_retries == 0

    def test_empty_values_ignored(self):
        config = AgentConfig().apply_env({"GITHUB_BASE_REF": "", "AI_PROVIDER": ""})
        assert config.base_ref == "main"
        assert config.provider == "gemini"

    def test_invalid_number(self):
        with pytest.raises(ConfigurationError, match="SECURITYAGENT_MAX_RETRIES"):
            AgentConfig().apply_env({"SECURITYAGENT_MAX_RETRIES": "many"})


class TestValidation:
    """Tests for startup validation."""

    def test_gemini_requires_key(self):
        with pytest.raises(ConfigurationError, match="GEMINI_API_KEY"):
            AgentConfig(provider="gemini").validate()

    def test_gemini_with_key(self):
        AgentConfig(provider="gemini", gemini_api_key="k").validate()

    def test_ollama_needs_no_key(self):
        AgentConfig(provider="local").validate()

    @pytest.mark.parametrize("kwargs", [
        {"provider": "openai"},
        {"provider": "ollama", "request_timeout": 0},
        {"provider": "ollama", "max_retries": -1},
        {"provider": "ollama", "extensions": []},
        {"provider": "ollama", "categories": []},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ConfigurationError):
            AgentConfig(**kwargs).validate()


class TestConfigFiles:
    """Tests for loading config files."""

    def test_load_yaml(self, tmp_path):
        path = tmp_path / ".securityagent.yaml"
        path.write_text("provider: ollama\nchanges:\n  base_ref: develop\n", encoding="utf-8")
        assert load_config(str(path)) == {"provider": "ollama", "changes": {"base_ref": "develop"}}

    def test_load_json(self, tmp_path):
        path = tmp_path / ".securityagent.json"
        path.write_text(json.dumps({"provider": "local"}), encoding="utf-8")
        assert load_config(str(path)) == {"provider": "local"}

    def test_empty_file(self, tmp_path):
        path = tmp_path / ".securityagent.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(str(path)) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(str(tmp_path / "nope.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / ".securityagent.yaml"
        path.write_text("provider: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(str(path))

    def test_non_mapping(self, tmp_path):
        path = tmp_path / ".securityagent.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(str(path))

    def test_find_config_searches_parents(self, tmp_path):
        config_path = tmp_path / ".securityagent.yaml"
        config_path.write_text("provider: ollama\n", encoding="utf-8")
        nested = tmp_path / "src" / "routes"
        nested.mkdir(parents=True)

        assert find_config(str(nested)) == str(config_path.resolve())

    def test_layering_env_over_file(self, tmp_path):
        path = tmp_path / ".securityagent.yaml"
        path.write_text("provider: ollama\nchanges:\n  base_ref: develop\n", encoding="utf-8")

        config = load_agent_config(str(path), environ={"AI_PROVIDER": "gemini"})

        assert config.provider == "gemini"
        assert config.base_ref == "develop"

    def test_default_config_round_trip(self):
        data = yaml.safe_load(create_default_config())
        config = AgentConfig.from_dict(data)
        defaults = AgentConfig()

        assert config.provider == defaults.provider
        assert config.ollama_url == defaults.ollama_url
        assert config.exclude_paths == defaults.exclude_paths
        assert config.categories == defaults.categories
        assert "api_key" not in data["gemini"]
