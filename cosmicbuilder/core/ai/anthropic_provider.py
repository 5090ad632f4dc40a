"""
Claude Provider Implementation

Uses the Anthropic SDK. The system instruction goes in the dedicated
``system`` field rather than the message list.
"""

import logging
from typing import Optional

import anthropic

from cosmicbuilder.core.ai.base import (
    BaseAIProvider,
    AIProviderConfig,
    AIResponse,
    ProviderType,
)
from cosmicbuilder.core.errors import ProviderError
from cosmicbuilder.core.prompt_builder import SYSTEM_INSTRUCTION

logger = logging.getLogger(__name__)


class ClaudeProvider(BaseAIProvider):
    """Anthropic Claude provider implementation."""

    def __init__(self, config: AIProviderConfig):
        super().__init__(config)
        self.client = anthropic.AsyncAnthropic(api_key=config.api_key, timeout=config.timeout)
        logger.info(f"ClaudeProvider initialized with model: {config.default_model}")

    async def complete(
        self,
        prompt: str,
        system: Optional[str] = None,
        model: Optional[str] = None,
        **kwargs
    ) -> AIResponse:
        """Get complete response from Claude."""
        params = self._resolve(model, **kwargs)

        try:
            response = await self.client.messages.create(
                model=params["model"],
                system=system or SYSTEM_INSTRUCTION,
                messages=[{"role": "user", "content": prompt}],
                temperature=params["temperature"],
                max_tokens=params["max_tokens"],
            )
        except anthropic.APIError as e:
            logger.error(f"Claude API Error: {e}", exc_info=True)
            raise ProviderError(f"Claude API request failed: {e}")

        text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        if not text:
            raise ProviderError("Claude returned an empty response.")

        return AIResponse(
            content=text,
            model=params["model"],
            provider=ProviderType.CLAUDE,
            usage={
                "prompt_tokens": response.usage.input_tokens,
                "completion_tokens": response.usage.output_tokens,
                "total_tokens": response.usage.input_tokens + response.usage.output_tokens,
            } if response.usage else None,
        )
