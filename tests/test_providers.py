"""
Provider factory and backend adapters. Network calls are monkeypatched out.
"""

import asyncio
import json

import pytest
import requests

from cosmicbuilder.config.settings import DEFAULT_SETTINGS
from cosmicbuilder.core.ai import ollama_provider
from cosmicbuilder.core.ai.base import AIProviderConfig, AIResponse, ProviderType
from cosmicbuilder.core.ai.factory import AIProviderFactory, ModelGateway
from cosmicbuilder.core.ai.ollama_provider import OllamaProvider
from cosmicbuilder.core.ai.openai_provider import DeepSeekProvider
from cosmicbuilder.core.errors import MissingCredentialError, ProviderError
from cosmicbuilder.core.prompt_builder import SYSTEM_INSTRUCTION


def run_async(coro):
    return asyncio.run(coro)


class FakeResponse:
    def __init__(self, body):
        self.body = body

    def raise_for_status(self):
        pass

    def json(self):
        return self.body


def test_available_providers():
    assert set(AIProviderFactory.get_available_providers()) == {
        "gemini", "deepseek", "openai", "claude", "ollama",
    }


def test_unknown_provider_is_rejected():
    with pytest.raises(ProviderError) as exc:
        AIProviderFactory.create_from_config(DEFAULT_SETTINGS, "llamaphone", environ={})
    assert exc.value.code == "invalid_model"
    assert exc.value.message == "Unsupported AI model selected: llamaphone."


@pytest.mark.parametrize("name", ["gemini", "deepseek", "openai", "claude"])
def test_keyed_providers_require_a_key(name):
    with pytest.raises(MissingCredentialError) as exc:
        AIProviderFactory.create_from_config(DEFAULT_SETTINGS, name, environ={})
    assert exc.value.code == "missing_key"


def test_deepseek_defaults_base_url():
    provider = AIProviderFactory.create_from_config(
        DEFAULT_SETTINGS, "deepseek", environ={"DEEPSEEK_API_KEY": "sk-test"}
    )
    assert isinstance(provider, DeepSeekProvider)
    assert provider.config.base_url == "https://api.deepseek.com"
    assert provider.config.default_model == "deepseek-chat"


def test_ollama_needs_no_key_and_uses_configured_url():
    provider = AIProviderFactory.create_from_config(DEFAULT_SETTINGS, "ollama", environ={})
    assert isinstance(provider, OllamaProvider)
    assert provider.base_url == "http://127.0.0.1:11434"


def test_ollama_complete_posts_json_request(monkeypatch):
    captured = {}

    def fake_post(url, json=None, timeout=None):
        captured.update(url=url, payload=json, timeout=timeout)
        return FakeResponse({"response": '{"actions": []}'})

    monkeypatch.setattr(ollama_provider.requests, "post", fake_post)
    provider = OllamaProvider(AIProviderConfig(ProviderType.OLLAMA, default_model="llama3.1"))
    response = run_async(provider.complete("do it"))

    assert response.content == '{"actions": []}'
    assert captured["url"] == "http://127.0.0.1:11434/api/generate"
    assert captured["payload"]["format"] == "json"
    assert captured["payload"]["system"] == SYSTEM_INSTRUCTION
    assert captured["payload"]["model"] == "llama3.1"
    assert captured["payload"]["stream"] is False


def test_ollama_connection_error(monkeypatch):
    def refuse(*args, **kwargs):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(ollama_provider.requests, "post", refuse)
    provider = OllamaProvider(AIProviderConfig(ProviderType.OLLAMA))
    with pytest.raises(ProviderError) as exc:
        run_async(provider.complete("hi"))
    assert exc.value.code == "network_error"


def test_ollama_empty_reply(monkeypatch):
    monkeypatch.setattr(ollama_provider.requests, "post", lambda *a, **k: FakeResponse({"response": ""}))
    provider = OllamaProvider(AIProviderConfig(ProviderType.OLLAMA))
    with pytest.raises(ProviderError):
        run_async(provider.complete("hi"))


def test_gateway_caches_providers_and_returns_text(monkeypatch):
    monkeypatch.setattr(
        ollama_provider.requests,
        "post",
        lambda *a, **k: FakeResponse({"response": json.dumps({"actions": [{"type": "chat", "message": "hi"}]})}),
    )
    gateway = ModelGateway(DEFAULT_SETTINGS, environ={})
    assert gateway.provider_for("ollama") is gateway.provider_for("ollama")

    text = run_async(gateway.complete("hello", "ollama"))
    assert json.loads(text)["actions"][0]["message"] == "hi"


def test_gateway_missing_key_surfaces_on_call():
    gateway = ModelGateway(DEFAULT_SETTINGS, environ={})
    with pytest.raises(MissingCredentialError):
        run_async(gateway.complete("hello", "claude"))


def test_register_provider_overrides_backend(monkeypatch):
    class EchoProvider(OllamaProvider):
        async def complete(self, prompt, system=None, model=None, **kwargs):
            return AIResponse(content=prompt, model="echo", provider=ProviderType.OLLAMA)

    monkeypatch.setattr(AIProviderFactory, "_providers", dict(AIProviderFactory._providers))
    AIProviderFactory.register_provider(ProviderType.OLLAMA, EchoProvider)

    gateway = ModelGateway(DEFAULT_SETTINGS, environ={})
    assert run_async(gateway.complete('{"actions": []}', "ollama")) == '{"actions": []}'
