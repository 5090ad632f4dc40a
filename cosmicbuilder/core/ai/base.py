"""
Base AI Provider Interface

Abstract base class for all model backends.
Implements strategy pattern for provider abstraction: the core only ever
calls ``complete(prompt)`` and receives text.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional
from enum import Enum

from cosmicbuilder.core.errors import MissingCredentialError


class ProviderType(Enum):
    """Supported AI provider types."""
    GEMINI = "gemini"
    DEEPSEEK = "deepseek"
    OPENAI = "openai"
    CLAUDE = "claude"
    OLLAMA = "ollama"


@dataclass
class AIProviderConfig:
    """Configuration for an AI provider."""
    provider_type: ProviderType
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    default_model: str = "gemini-2.5-flash"
    temperature: float = 0.7
    max_tokens: int = 8192
    timeout: int = 120


@dataclass
class AIResponse:
    """Standardized AI response."""
    content: str
    model: str
    provider: ProviderType
    usage: Optional[Dict[str, int]] = None


class BaseAIProvider(ABC):
    """
    Abstract base class for all AI providers.

    Providers ask their backend for a JSON reply and return the raw text;
    parsing belongs to the core.
    """

    requires_api_key = True

    def __init__(self, config: AIProviderConfig):
        """
        Initialize the AI provider.

        Args:
            config: Provider configuration

        Raises:
            MissingCredentialError: If the provider needs a key and none is set
        """
        self.config = config
        self.provider_type = config.provider_type
        self._validate_config()

    def _validate_config(self) -> None:
        """Validate provider configuration."""
        if self.requires_api_key and not self.config.api_key:
            raise MissingCredentialError(
                f"{self.provider_type.value} API key is not configured."
            )

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        system: Optional[str] = None,
        model: Optional[str] = None,
        **kwargs
    ) -> AIResponse:
        """
        Get a complete (non-streaming) response.

        Args:
            prompt: Full user prompt
            system: System instruction (defaults to the shared instruction)
            model: Model name (overrides default)
            **kwargs: Additional provider-specific parameters

        Returns:
            AIResponse with complete content

        Raises:
            ProviderError: If the call fails or the reply is empty
        """
        pass

    def _resolve(self, model: Optional[str], **kwargs) -> Dict[str, Any]:
        """Merge per-call overrides with configured defaults."""
        temperature = kwargs.get("temperature")
        max_tokens = kwargs.get("max_tokens")
        return {
            "model": model or self.config.default_model,
            "temperature": temperature if temperature is not None else self.config.temperature,
            "max_tokens": max_tokens or self.config.max_tokens,
        }
