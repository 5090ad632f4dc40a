"""
Ollama Provider Implementation

Talks to a local Ollama daemon over HTTP (``/api/generate``) with JSON
output mode. No API key is needed.
"""

import asyncio
import logging
from typing import Optional

import requests

from cosmicbuilder.core.ai.base import (
    BaseAIProvider,
    AIProviderConfig,
    AIResponse,
    ProviderType,
)
from cosmicbuilder.core.errors import ProviderError
from cosmicbuilder.core.prompt_builder import SYSTEM_INSTRUCTION

logger = logging.getLogger(__name__)

DEFAULT_OLLAMA_URL = "http://127.0.0.1:11434"


class OllamaProvider(BaseAIProvider):
    """Local Ollama provider implementation."""

    requires_api_key = False

    def __init__(self, config: AIProviderConfig):
        super().__init__(config)
        self.base_url = (config.base_url or DEFAULT_OLLAMA_URL).rstrip("/")

    async def complete(
        self,
        prompt: str,
        system: Optional[str] = None,
        model: Optional[str] = None,
        **kwargs
    ) -> AIResponse:
        """Get complete response from Ollama."""
        params = self._resolve(model, **kwargs)
        url = self.base_url + "/api/generate"
        payload = {
            "model": params["model"],
            "prompt": prompt,
            "system": system or SYSTEM_INSTRUCTION,
            "stream": False,
            "format": "json",
            "options": {
                "temperature": params["temperature"],
                "num_predict": params["max_tokens"],
            },
        }

        def _call() -> str:
            resp = requests.post(url, json=payload, timeout=self.config.timeout)
            resp.raise_for_status()
            return resp.json().get("response", "")

        try:
            text = await asyncio.to_thread(_call)
        except requests.ConnectionError as e:
            logger.error(f"Ollama connection failed: {e}")
            raise ProviderError(
                f"Cannot connect to Ollama at {self.base_url}. Is the Ollama daemon running?",
                code="network_error",
            )
        except requests.RequestException as e:
            logger.error(f"Ollama request failed: {e}", exc_info=True)
            raise ProviderError(f"Ollama request failed: {e}")
        except ValueError as e:
            raise ProviderError(f"Ollama returned a non-JSON body: {e}")

        if not text:
            raise ProviderError("Ollama returned an empty response.")

        return AIResponse(content=text, model=params["model"], provider=ProviderType.OLLAMA)
