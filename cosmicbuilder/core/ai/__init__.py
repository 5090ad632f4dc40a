"""
AI Provider Abstraction Layer

Provides a unified interface for all model backends (Gemini, DeepSeek,
OpenAI, Claude, Ollama). Uses strategy pattern for provider switching.
"""

from cosmicbuilder.core.ai.base import BaseAIProvider, AIProviderConfig, AIResponse, ProviderType
from cosmicbuilder.core.ai.factory import AIProviderFactory, ModelGateway

__all__ = [
    "BaseAIProvider",
    "AIProviderConfig",
    "AIResponse",
    "ProviderType",
    "AIProviderFactory",
    "ModelGateway",
]
