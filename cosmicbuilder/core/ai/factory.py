"""
AI Provider Factory

Factory pattern for creating AI provider instances, plus the gateway the
correction engine calls to reach whichever backend is selected.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Type

from cosmicbuilder.config.settings import provider_settings, resolve_api_key
from cosmicbuilder.core.ai.anthropic_provider import ClaudeProvider
from cosmicbuilder.core.ai.base import (
    BaseAIProvider,
    AIProviderConfig,
    ProviderType,
)
from cosmicbuilder.core.ai.gemini_provider import GeminiProvider
from cosmicbuilder.core.ai.ollama_provider import OllamaProvider
from cosmicbuilder.core.ai.openai_provider import DeepSeekProvider, OpenAIProvider
from cosmicbuilder.core.errors import ProviderError

logger = logging.getLogger(__name__)


class AIProviderFactory:
    """
    Factory for creating AI provider instances.

    Supports:
    - Dynamic provider registration
    - Configuration-based provider creation
    """

    _providers: Dict[ProviderType, Type[BaseAIProvider]] = {
        ProviderType.GEMINI: GeminiProvider,
        ProviderType.DEEPSEEK: DeepSeekProvider,
        ProviderType.OPENAI: OpenAIProvider,
        ProviderType.CLAUDE: ClaudeProvider,
        ProviderType.OLLAMA: OllamaProvider,
    }

    @classmethod
    def register_provider(
        cls,
        provider_type: ProviderType,
        provider_class: Type[BaseAIProvider]
    ) -> None:
        """
        Register a new provider type.

        Args:
            provider_type: Provider type enum
            provider_class: Provider class implementing BaseAIProvider
        """
        cls._providers[provider_type] = provider_class
        logger.info(f"Registered provider: {provider_type.value}")

    @classmethod
    def create(
        cls,
        provider_type: ProviderType,
        config: AIProviderConfig
    ) -> BaseAIProvider:
        """
        Create a provider instance.

        Raises:
            ProviderError: If provider type is not registered
            MissingCredentialError: If the provider needs a key and has none
        """
        provider_class = cls._providers.get(provider_type)
        if not provider_class:
            raise ProviderError(
                f"Provider type {provider_type.value} not registered", code="invalid_model"
            )
        return provider_class(config)

    @classmethod
    def create_from_config(
        cls,
        config: Mapping[str, Any],
        provider_name: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> BaseAIProvider:
        """
        Create provider from the settings dictionary.

        Args:
            config: Settings (see config.settings.DEFAULT_SETTINGS)
            provider_name: Provider to build (defaults to ``active_provider``)
            environ: Environment used for API-key fallback
        """
        name = (provider_name or config.get("active_provider") or "").lower()
        try:
            provider_type = ProviderType(name)
        except ValueError:
            raise ProviderError(f"Unsupported AI model selected: {name}.", code="invalid_model")

        settings = provider_settings(config, name)
        provider_config = AIProviderConfig(
            provider_type=provider_type,
            api_key=resolve_api_key(config, name, environ),
            base_url=settings.get("base_url"),
            default_model=settings.get("model", AIProviderConfig.default_model),
            temperature=settings.get("temperature", 0.7),
            max_tokens=settings.get("max_tokens", 8192),
        )
        return cls.create(provider_type, provider_config)

    @classmethod
    def get_available_providers(cls) -> list:
        return [pt.value for pt in cls._providers.keys()]


class ModelGateway:
    """
    ``complete(prompt, model) -> text`` over the configured providers.

    Providers are built on first use and cached per name, so a missing key
    only fails the call that needs it.
    """

    def __init__(self, config: Mapping[str, Any], environ: Optional[Mapping[str, str]] = None):
        self.config = config
        self.environ = environ
        self._cache: Dict[str, BaseAIProvider] = {}

    def provider_for(self, model: str) -> BaseAIProvider:
        provider = self._cache.get(model)
        if provider is None:
            provider = AIProviderFactory.create_from_config(self.config, model, self.environ)
            self._cache[model] = provider
        return provider

    async def complete(self, prompt: str, model: str) -> str:
        provider = self.provider_for(model)
        response = await provider.complete(prompt)
        if response.usage:
            logger.debug(f"{model} usage: {response.usage}")
        return response.content
