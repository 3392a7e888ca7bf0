"""
Configuration system for the security agent.

Settings are layered: built-in defaults, then a YAML or JSON config
file, then environment variables, then command-line flags.
"""

import os
import json
from pathlib import Path
from typing import Dict, Any, Optional, List, Mapping
from dataclasses import dataclass, field, asdict

import yaml

from securityagent.core.findings import Category
from securityagent.exceptions import ConfigurationError


# Default configuration file names to search for
CONFIG_FILE_NAMES = [
    ".securityagent.yaml",
    ".securityagent.yml",
    ".securityagent.json",
    "securityagent.yaml",
    "securityagent.yml",
    "securityagent.json",
]

PROVIDERS = ("gemini", "ollama", "local")

# Nested file sections flattened onto AgentConfig fields
SECTION_FIELDS: Dict[str, Dict[str, str]] = {
    "gemini": {"model": "gemini_model", "api_key": "gemini_api_key"},
    "ollama": {"model": "ollama_model", "url": "ollama_url"},
    "changes": {
        "base_ref": "base_ref",
        "remote": "remote",
        "extensions": "extensions",
        "exclude": "exclude_paths",
    },
    "detection": {"categories": "categories"},
    "remediation": {
        "dry_run": "dry_run",
        "fail_on_error": "fail_on_error",
        "request_timeout": "request_timeout",
        "max_retries": "max_retries",
        "retry_delay": "retry_delay",
    },
    "output": {"format": "output_format"},
}

# Environment variable -> (field, converter)
ENV_VARS = {
    "AI_PROVIDER": ("provider", str),
    "GEMINI_API_KEY": ("gemini_api_key", str),
    "GEMINI_MODEL": ("gemini_model", str),
    "OLLAMA_MODEL": ("ollama_model", str),
    "OLLAMA_URL": ("ollama_url", str),
    "GITHUB_BASE_REF": ("base_ref", str),
    "SECURITYAGENT_TIMEOUT": ("request_timeout", float),
    "SECURITYAGENT_MAX_RETRIES": ("max_retries", int),
}


@dataclass
class AgentConfig:
    """
    Main configuration for the security agent.

    Example YAML config:

    ```yaml
    provider: gemini        # gemini, ollama (alias: local)

    gemini:
      model: gemini-2.5-flash
    ollama:
      model: llama3
      url: http://host.docker.internal:11434

    changes:
      base_ref: main
      remote: origin
      extensions: [".js"]
      exclude: ["scripts/", "securityagent/"]

    detection:
      categories: [secret_like, sql_injection, xss, command_injection]

    remediation:
      dry_run: false
      fail_on_error: false
      request_timeout: 120
      max_retries: 2
    ```

    The Gemini API key should come from the GEMINI_API_KEY environment
    variable rather than the file.
    """
    # Backend selection
    provider: str = "gemini"
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash"
    ollama_model: str = "llama3"
    ollama_url: str = "http://host.docker.internal:11434"

    # Change set
    root: str = "."
    base_ref: str = "main"
    remote: Optional[str] = "origin"
    extensions: List[str] = field(default_factory=lambda: [".js"])
    exclude_paths: List[str] = field(default_factory=lambda: ["scripts/", "securityagent/"])

    # Detection
    categories: List[str] = field(default_factory=lambda: [c.value for c in Category])

    # Remediation
    dry_run: bool = False
    fail_on_error: bool = False
    request_timeout: float = 120.0
    max_retries: int = 2
    retry_delay: float = 1.0

    # Output
    output_format: str = "text"

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to a dictionary, without the API key."""
        data = asdict(self)
        if data.get("gemini_api_key"):
            data["gemini_api_key"] = "***"
        return data

    @property
    def enabled_categories(self) -> List[Category]:
        """Parse the configured category names."""
        try:
            return [Category(name.lower()) for name in self.categories]
        except ValueError as e:
            raise ConfigurationError(f"Unknown category in configuration: {e}") from e

    def validate(self) -> None:
        """
        Check that the run can start.

        Raises:
            ConfigurationError: for an unknown provider, a missing Gemini
                API key when Gemini is selected, or bad numeric settings.
        """
        provider = self.provider.lower()
        if provider not in PROVIDERS:
            raise ConfigurationError(
                f"Unknown provider '{self.provider}' (expected one of: {', '.join(PROVIDERS)})"
            )
        if provider == "gemini" and not self.gemini_api_key:
            raise ConfigurationError("GEMINI_API_KEY is not set but the gemini provider is selected")
        if self.request_timeout <= 0:
            raise ConfigurationError("request_timeout must be positive")
        if self.max_retries < 0:
            raise ConfigurationError("max_retries cannot be negative")
        if not self.extensions:
            raise ConfigurationError("At least one source file extension is required")
        if not self.enabled_categories:
            raise ConfigurationError("At least one detection category is required")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AgentConfig":
        """Create config from a (possibly nested) dictionary."""
        data = dict(data)

        for section, mapping in SECTION_FIELDS.items():
            section_data = data.pop(section, None)
            if isinstance(section_data, dict):
                for key, field_name in mapping.items():
                    if key in section_data:
                        data[field_name] = section_data[key]

        # Filter to only known fields
        known_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered_data = {k: v for k, v in data.items() if k in known_fields}

        return cls(**filtered_data)

    def apply_env(self, environ: Optional[Mapping[str, str]] = None) -> "AgentConfig":
        """Override settings from environment variables. Returns self."""
        environ = os.environ if environ is None else environ

        for var, (field_name, convert) in ENV_VARS.items():
            value = environ.get(var)
            if not value:
                continue
            try:
                setattr(self, field_name, convert(value))
            except ValueError as e:
                raise ConfigurationError(f"Invalid value for {var}: {value!r}") from e

        return self


def load_config(path: str) -> Dict[str, Any]:
    """
    Load configuration from a file.

    Supports YAML and JSON formats.
    """
    path = Path(path)

    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    content = path.read_text(encoding="utf-8")

    try:
        if path.suffix == ".json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Could not parse configuration file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping")
    return data


def find_config(start_path: str = ".") -> Optional[str]:
    """
    Find a configuration file by searching up the directory tree.

    Returns the path to the first config file found, or None.
    """
    current = Path(start_path).resolve()

    while True:
        for name in CONFIG_FILE_NAMES:
            config_path = current / name
            if config_path.exists():
                return str(config_path)
        if current == current.parent:
            return None
        current = current.parent


def load_agent_config(
    path: Optional[str] = None,
    start_dir: str = ".",
    environ: Optional[Mapping[str, str]] = None,
) -> AgentConfig:
    """
    Load an AgentConfig from defaults, a config file and the environment.

    If path is None, searches for a config file starting from start_dir.
    """
    if path is None:
        path = find_config(start_dir)

    data = load_config(path) if path else {}
    config = AgentConfig.from_dict(data)
    return config.apply_env(environ)


def create_default_config() -> str:
    """
    Create a default configuration file content.
    """
    config = {
        "provider": "gemini",
        "gemini": {
            "model": "gemini-2.5-flash",
        },
        "ollama": {
            "model": "llama3",
            "url": "http://host.docker.internal:11434",
        },
        "changes": {
            "base_ref": "main",
            "remote": "origin",
            "extensions": [".js"],
            "exclude": ["scripts/", "securityagent/"],
        },
        "detection": {
            "categories": [c.value for c in Category],
        },
        "remediation": {
            "dry_run": False,
            "fail_on_error": False,
            "request_timeout": 120,
            "max_retries": 2,
        },
        "output": {
            "format": "text",
        },
    }

    return yaml.dump(config, default_flow_style=False, sort_keys=False)
