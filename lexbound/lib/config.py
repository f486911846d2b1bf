"""Configuration loader for thresholds, model access and the HTTP server."""

import copy
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "retrieval": {
        "node_threshold": 0.15,
    },
    "validation": {
        "rule_similarity_threshold": 0.65,
    },
    "generation": {
        "max_iterations": 3,
        "timeout_seconds": 60.0,
        "temperature": 0.2,
        "max_tokens": 2000,
        "assistant_name": "Lexbound",
    },
    "model": {
        "provider": "openrouter",
        "model_name": "anthropic/claude-sonnet-4",
        "base_url": None,
    },
    "server": {
        "host": "0.0.0.0",
        "port": 9000,
        "reload": False,
    },
    "cors": {
        "enabled": True,
        "allow_origins": ["*"],
        "allow_methods": ["GET", "POST", "OPTIONS"],
        "allow_headers": ["Content-Type", "Authorization"],
    },
    "logging": {
        "level": "INFO",
        "structured": False,
        "file": None,
    },
}


@dataclass
class RetrievalSettings:
    """Node selection settings."""

    node_threshold: float


@dataclass
class ValidationSettings:
    """Validation engine settings."""

    rule_similarity_threshold: float


@dataclass
class GenerationSettings:
    """Generation loop settings."""

    max_iterations: int
    timeout_seconds: float | None
    temperature: float
    max_tokens: int | None
    assistant_name: str


@dataclass
class ModelSettings:
    """Text-completion provider settings."""

    provider: str
    model_name: str
    base_url: str | None
    api_key: str | None


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigLoader:
    """Loads and manages application configuration."""

    def __init__(self, config_path: str | None = None, env_file: str | None = None):
        """Initialize configuration loader.

        Args:
            config_path: YAML config file (default: $LEXBOUND_CONFIG or config/lexbound.yaml)
            env_file: Path to .env file (default: ./.env)
        """
        self.env_file = Path(env_file or ".env")

        if self.env_file.exists():
            load_dotenv(self.env_file)
            logger.info(f"Loaded environment from {self.env_file}")

        self.config_path = Path(
            config_path or os.getenv("LEXBOUND_CONFIG", os.path.join("config", "lexbound.yaml"))
        )
        self.config = self._load_config()

    def _load_config(self) -> dict[str, Any]:
        """Load configuration from YAML, layered over the defaults."""
        if not self.config_path.exists():
            logger.warning(f"Config file not found: {self.config_path}, using defaults")
            return copy.deepcopy(DEFAULT_CONFIG)

        with open(self.config_path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Config file {self.config_path} must contain a mapping")

        logger.info(f"Loaded configuration from {self.config_path}")
        return _merge(DEFAULT_CONFIG, data)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dot-separated key.

        Args:
            key: Dot-separated key path (e.g., "server.port")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value: Any = self.config
        for k in key.split("."):
            if not isinstance(value, dict):
                return default
            value = value.get(k)
            if value is None:
                return default
        return value

    def get_retrieval_settings(self) -> RetrievalSettings:
        return RetrievalSettings(node_threshold=float(self.get("retrieval.node_threshold")))

    def get_validation_settings(self) -> ValidationSettings:
        return ValidationSettings(
            rule_similarity_threshold=float(self.get("validation.rule_similarity_threshold"))
        )

    def get_generation_settings(self) -> GenerationSettings:
        timeout = self.get("generation.timeout_seconds")
        max_tokens = self.get("generation.max_tokens")
        return GenerationSettings(
            max_iterations=int(self.get("generation.max_iterations")),
            timeout_seconds=float(timeout) if timeout else None,
            temperature=float(self.get("generation.temperature")),
            max_tokens=int(max_tokens) if max_tokens else None,
            assistant_name=str(self.get("generation.assistant_name")),
        )

    def get_model_settings(self) -> ModelSettings:
        """Model settings; credentials and URLs come from the environment."""
        provider = self.get("model.provider", "openrouter")
        base_url = self.get("model.base_url")
        if provider == "ollama":
            base_url = os.getenv("OLLAMA_BASE_URL", base_url or "http://localhost:11434")

        return ModelSettings(
            provider=provider,
            model_name=self.get("model.model_name"),
            base_url=base_url,
            api_key=os.getenv("OPENROUTER_API_KEY"),
        )
