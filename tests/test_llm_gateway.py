"""Tests for the LiteLLM gateway and its runtime config."""

import asyncio
from types import SimpleNamespace

import pytest

from feedback_translator.config import Settings
from feedback_translator.core.llm import LiteLLMGateway, LLMRuntimeConfig
from feedback_translator.core.llm import gateway as gateway_module
from feedback_translator.core.translation.models import PromptBundle


def fake_completion(content):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(prompt_tokens=12, completion_tokens=3, total_tokens=15),
    )


@pytest.mark.parametrize(
    "provider, model, expected",
    [
        ("gemini", "gemini-2.5-flash", "gemini/gemini-2.5-flash"),
        ("openai", "gpt-4o-mini", "gpt-4o-mini"),
        ("anthropic", "anthropic/claude-3-haiku", "anthropic/claude-3-haiku"),
    ],
)
def test_litellm_model_name(provider, model, expected):
    assert LLMRuntimeConfig(provider=provider, model=model).get_litellm_model() == expected


def test_runtime_config_from_settings():
    settings = Settings(
        llm_provider="openai",
        llm_model="gpt-4o-mini",
        openai_api_key="sk-test",
        llm_base_url="http://localhost:8080",
        _env_file=None,
    )

    kwargs = LLMRuntimeConfig.from_settings(settings).to_litellm_kwargs()

    assert kwargs["model"] == "gpt-4o-mini"
    assert kwargs["api_key"] == "sk-test"
    assert kwargs["api_base"] == "http://localhost:8080"
    assert kwargs["temperature"] == 0.2


def test_call_model_requests_json_mode(monkeypatch):
    captured = {}

    async def acompletion(**kwargs):
        captured.update(kwargs)
        return fake_completion('{"ok": true}')

    monkeypatch.setattr(gateway_module, "acompletion", acompletion)
    gateway = LiteLLMGateway(LLMRuntimeConfig(provider="gemini", model="gemini-2.5-flash"))

    content = asyncio.run(gateway.call_model("hello"))

    assert content == '{"ok": true}'
    assert captured["model"] == "gemini/gemini-2.5-flash"
    assert captured["response_format"] == {"type": "json_object"}
    assert captured["messages"] == [{"role": "user", "content": "hello"}]
    assert "api_key" not in captured


def test_call_propagates_backend_errors(monkeypatch):
    async def acompletion(**kwargs):
        raise ConnectionError("503 Service Unavailable")

    monkeypatch.setattr(gateway_module, "acompletion", acompletion)
    gateway = LiteLLMGateway(LLMRuntimeConfig(provider="gemini", model="gemini-2.5-flash"))

    with pytest.raises(ConnectionError):
        asyncio.run(gateway.call_model("hello"))
    assert asyncio.run(gateway.health_check()) is False


def test_call_reports_usage(monkeypatch):
    async def acompletion(**kwargs):
        return fake_completion("{}")

    monkeypatch.setattr(gateway_module, "acompletion", acompletion)
    gateway = LiteLLMGateway(LLMRuntimeConfig(provider="gemini", model="gemini-2.5-flash"))

    response = asyncio.run(gateway.call(PromptBundle.from_prompt("hello")))

    assert response.provider == "gemini"
    assert response.usage.total_tokens == 15
    assert response.latency_ms >= 0
