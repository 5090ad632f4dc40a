"""
Gemini Provider Implementation

Uses the Google Generative AI Python SDK with JSON output constrained by
the shared response schema. The SDK call is blocking, so it runs in a
worker thread.
"""

import asyncio
import logging
from typing import Optional

import google.generativeai as genai

from cosmicbuilder.core.ai.base import (
    BaseAIProvider,
    AIProviderConfig,
    AIResponse,
    ProviderType,
)
from cosmicbuilder.core.errors import ProviderError
from cosmicbuilder.core.prompt_builder import RESPONSE_SCHEMA, SYSTEM_INSTRUCTION

logger = logging.getLogger(__name__)


class GeminiProvider(BaseAIProvider):
    """Google Gemini provider implementation."""

    def __init__(self, config: AIProviderConfig):
        super().__init__(config)
        genai.configure(api_key=config.api_key)
        logger.info(f"GeminiProvider initialized with model: {config.default_model}")

    @staticmethod
    def _normalize_model(model_name: str) -> str:
        # SDK expects the bare lowercase model name
        model_name = model_name.lower()
        if model_name.startswith("models/"):
            model_name = model_name[len("models/"):]
        return model_name

    async def complete(
        self,
        prompt: str,
        system: Optional[str] = None,
        model: Optional[str] = None,
        **kwargs
    ) -> AIResponse:
        """Get complete JSON response from Gemini."""
        params = self._resolve(model, **kwargs)
        model_name = self._normalize_model(params["model"])

        def _call() -> str:
            client = genai.GenerativeModel(
                model_name,
                system_instruction=system or SYSTEM_INSTRUCTION,
            )
            response = client.generate_content(
                prompt,
                generation_config=genai.GenerationConfig(
                    response_mime_type="application/json",
                    response_schema=RESPONSE_SCHEMA,
                    temperature=params["temperature"],
                    max_output_tokens=params["max_tokens"],
                ),
            )
            return response.text

        try:
            text = await asyncio.to_thread(_call)
        except Exception as e:
            logger.error(f"Gemini API Error: {e}", exc_info=True)
            raise ProviderError(f"Failed to get response from Gemini. {e}")

        if not text:
            raise ProviderError("Received an empty response from Gemini.")

        return AIResponse(content=text, model=model_name, provider=ProviderType.GEMINI)
