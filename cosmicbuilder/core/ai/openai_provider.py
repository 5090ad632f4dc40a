"""
OpenAI-compatible Providers

Concrete implementations of BaseAIProvider for the OpenAI API and for
DeepSeek, which serves the same chat-completions protocol.
"""

import logging
from typing import Optional

from openai import AsyncOpenAI, OpenAIError

from cosmicbuilder.core.ai.base import (
    BaseAIProvider,
    AIProviderConfig,
    AIResponse,
    ProviderType,
)
from cosmicbuilder.core.errors import ProviderError
from cosmicbuilder.core.prompt_builder import compose_for_chat

logger = logging.getLogger(__name__)


class OpenAIProvider(BaseAIProvider):
    """OpenAI API provider implementation."""

    label = "OpenAI"

    def __init__(self, config: AIProviderConfig):
        """Initialize OpenAI provider."""
        super().__init__(config)
        self.client = AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout,
        )
        logger.info(f"{self.label} provider initialized with model: {config.default_model}")

    async def complete(
        self,
        prompt: str,
        system: Optional[str] = None,
        model: Optional[str] = None,
        **kwargs
    ) -> AIResponse:
        """Get complete JSON-mode response."""
        params = self._resolve(model, **kwargs)

        try:
            response = await self.client.chat.completions.create(
                model=params["model"],
                messages=compose_for_chat(prompt, system),
                temperature=params["temperature"],
                max_tokens=params["max_tokens"],
                response_format={"type": "json_object"},
                stream=False,
            )
        except OpenAIError as e:
            logger.error(f"{self.label} API Error: {e}", exc_info=True)
            raise ProviderError(f"{self.label} API request failed: {e}")

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ProviderError(f"{self.label} returned an empty or invalid response.")

        return AIResponse(
            content=content,
            model=params["model"],
            provider=self.provider_type,
            usage={
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            } if response.usage else None,
        )


class DeepSeekProvider(OpenAIProvider):
    """DeepSeek chat completions through the OpenAI SDK."""

    label = "DeepSeek"
    DEFAULT_BASE_URL = "https://api.deepseek.com"

    def __init__(self, config: AIProviderConfig):
        if not config.base_url:
            config.base_url = self.DEFAULT_BASE_URL
        super().__init__(config)
