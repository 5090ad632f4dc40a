"""
Settings

Defaults merged with the user's config file, plus API-key resolution
from the environment.
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from cosmicbuilder.core.constants import DEFAULT_MODEL, PREVIEW_ROOT, get_model_info
from cosmicbuilder.services.config_service import ConfigService

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: Dict[str, Any] = {
    "active_provider": DEFAULT_MODEL,
    "providers": {
        "gemini": {"model": "gemini-2.5-flash"},
        "deepseek": {"model": "deepseek-chat"},
        "openai": {"model": "gpt-4o-mini"},
        "claude": {"model": "claude-3-5-sonnet-latest"},
        "ollama": {"model": "llama3.1", "base_url": "http://127.0.0.1:11434"},
    },
    "interpreter": {"missing_parent": "root"},
    "preview": {"root": PREVIEW_ROOT},
    "storage": {"path": str(Path.home() / ".cosmicbuilder" / "session.json")},
}

# Global config service instance
_config_service: Optional[ConfigService] = None


def _get_config_service(config_path: Optional[Path] = None) -> ConfigService:
    """Get or create global config service instance."""
    global _config_service
    if config_path is not None:
        _config_service = ConfigService(config_path=config_path)
    elif _config_service is None:
        _config_service = ConfigService()
    return _config_service


def _deep_merge(base: Dict[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Defaults overlaid with the config file, when there is one.

    Raises:
        ValueError: If the config file exists but is not valid JSON.
    """
    service = _get_config_service(config_path)
    if not service.exists():
        logger.debug(f"No config file at {service.config_path}; using defaults")
        return copy.deepcopy(DEFAULT_SETTINGS)
    return _deep_merge(DEFAULT_SETTINGS, service.load())


def save_config(data: Dict[str, Any], config_path: Optional[Path] = None) -> bool:
    """Write configuration back to the config file."""
    return _get_config_service(config_path).save(data)


def provider_settings(config: Mapping[str, Any], provider: str) -> Dict[str, Any]:
    return dict((config.get("providers") or {}).get(provider) or {})


def resolve_api_key(
    config: Mapping[str, Any],
    provider: str,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """
    API key for ``provider``: the config file wins, then the provider's
    environment variables in order.
    """
    key = provider_settings(config, provider).get("api_key")
    if key:
        return key
    environ = os.environ if environ is None else environ
    try:
        env_vars = get_model_info(provider).api_key_env_vars
    except KeyError:
        return None
    for var in env_vars:
        if environ.get(var):
            return environ[var]
    return None
