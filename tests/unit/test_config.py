"""Tests for configuration loading."""

import pytest
import yaml

from lexbound.lib.config import ConfigLoader


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # setenv first so values loaded from a .env file are removed at teardown
    for name in ("LEXBOUND_CONFIG", "OPENROUTER_API_KEY", "OLLAMA_BASE_URL"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def _write(tmp_path, data, name="lexbound.yaml"):
    path = tmp_path / name
    path.write_text(yaml.safe_dump(data))
    return str(path)


def test_defaults_when_file_missing(tmp_path):
    config = ConfigLoader(config_path=str(tmp_path / "absent.yaml"), env_file=str(tmp_path / ".env"))

    assert config.get_retrieval_settings().node_threshold == 0.15
    assert config.get_validation_settings().rule_similarity_threshold == 0.65
    generation = config.get_generation_settings()
    assert generation.max_iterations == 3
    assert generation.assistant_name == "Lexbound"
    assert config.get("server.port") == 9000


def test_yaml_overrides_merge_with_defaults(tmp_path):
    path = _write(tmp_path, {"validation": {"rule_similarity_threshold": 0.5}, "server": {"port": 8080}})
    config = ConfigLoader(config_path=path, env_file=str(tmp_path / ".env"))

    assert config.get_validation_settings().rule_similarity_threshold == 0.5
    assert config.get("server.port") == 8080
    assert config.get("server.host") == "0.0.0.0"
    assert config.get_retrieval_settings().node_threshold == 0.15


def test_config_path_from_environment(tmp_path, monkeypatch):
    path = _write(tmp_path, {"generation": {"max_iterations": 5}})
    monkeypatch.setenv("LEXBOUND_CONFIG", path)

    config = ConfigLoader(env_file=str(tmp_path / ".env"))
    assert config.get_generation_settings().max_iterations == 5


def test_get_missing_key_returns_default(tmp_path):
    config = ConfigLoader(config_path=str(tmp_path / "absent.yaml"), env_file=str(tmp_path / ".env"))
    assert config.get("server.nothing", "fallback") == "fallback"
    assert config.get("server.port.deeper", 1) == 1


def test_non_mapping_file_rejected(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ValueError, match="mapping"):
        ConfigLoader(config_path=str(path), env_file=str(tmp_path / ".env"))


def test_zero_timeout_disables_it(tmp_path):
    path = _write(tmp_path, {"generation": {"timeout_seconds": 0}})
    config = ConfigLoader(config_path=path, env_file=str(tmp_path / ".env"))
    assert config.get_generation_settings().timeout_seconds is None


def test_model_credentials_from_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("OPENROUTER_API_KEY=sk-from-dotenv\n")

    config = ConfigLoader(config_path=str(tmp_path / "absent.yaml"), env_file=str(env_file))
    settings = config.get_model_settings()

    assert settings.provider == "openrouter"
    assert settings.api_key == "sk-from-dotenv"


def test_ollama_base_url_from_environment(tmp_path, monkeypatch):
    path = _write(tmp_path, {"model": {"provider": "ollama", "model_name": "llama3"}})
    monkeypatch.setenv("OLLAMA_BASE_URL", "http://gpu-box:11434")

    settings = ConfigLoader(config_path=path, env_file=str(tmp_path / ".env")).get_model_settings()
    assert settings.base_url == "http://gpu-box:11434"
    assert settings.model_name == "llama3"
