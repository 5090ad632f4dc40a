import json

import pytest

from cosmicbuilder.config.settings import DEFAULT_SETTINGS, load_config, resolve_api_key, save_config
from cosmicbuilder.services.config_service import ConfigService


def test_config_service_dot_notation(tmp_path):
    service = ConfigService(config_path=tmp_path / "config.json")
    service.set("providers.gemini.api_key", "g-key")
    service.set("active_provider", "gemini")
    assert service.get("providers.gemini.api_key") == "g-key"
    assert service.get("providers.openai.api_key", "none") == "none"
    assert service.get("active_provider.nested", "x") == "x"

    assert service.save()
    reloaded = ConfigService(config_path=tmp_path / "config.json")
    assert reloaded.load()["providers"]["gemini"]["api_key"] == "g-key"


def test_config_service_errors(tmp_path):
    service = ConfigService(config_path=tmp_path / "config.json")
    assert not service.exists()
    with pytest.raises(FileNotFoundError):
        service.load()

    (tmp_path / "config.json").write_text("{oops", encoding="utf-8")
    with pytest.raises(ValueError):
        service.load()

    (tmp_path / "config.json").write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        service.load()


def test_load_config_defaults_without_file(tmp_path):
    config = load_config(tmp_path / "absent.json")
    assert config == DEFAULT_SETTINGS
    config["providers"]["gemini"]["model"] = "changed"
    assert DEFAULT_SETTINGS["providers"]["gemini"]["model"] == "gemini-2.5-flash"


def test_load_config_merges_file_over_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps({"active_provider": "ollama", "providers": {"ollama": {"model": "qwen2.5"}}}),
        encoding="utf-8",
    )
    config = load_config(path)
    assert config["active_provider"] == "ollama"
    assert config["providers"]["ollama"] == {"model": "qwen2.5", "base_url": "http://127.0.0.1:11434"}
    assert config["providers"]["gemini"]["model"] == "gemini-2.5-flash"
    assert config["interpreter"]["missing_parent"] == "root"


def test_save_config_roundtrip(tmp_path):
    path = tmp_path / "nested" / "config.json"
    assert save_config({"active_provider": "claude"}, path)
    assert load_config(path)["active_provider"] == "claude"


def test_resolve_api_key_prefers_config_then_env_order():
    config = {"providers": {"openai": {"api_key": "from-config"}}}
    env = {"OPENAI_API_KEY": "from-env", "API_KEY": "generic", "GEMINI_API_KEY": "gemini"}

    assert resolve_api_key(config, "openai", env) == "from-config"
    assert resolve_api_key({}, "openai", env) == "from-env"
    assert resolve_api_key({}, "gemini", env) == "generic"
    assert resolve_api_key({}, "gemini", {"GEMINI_API_KEY": "gemini"}) == "gemini"
    assert resolve_api_key({}, "claude", env) is None
    assert resolve_api_key({}, "ollama", env) is None
    assert resolve_api_key({}, "unknown", env) is None
