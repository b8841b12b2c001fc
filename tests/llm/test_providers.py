"""Tests for model providers and the factory (no network: httpx.MockTransport)."""
import json
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import httpx
import pytest

from app.services.llm import LLMProviderError, LLMProviderFactory, LLMRequest, split_data_url
from app.services.llm.providers.anthropic import AnthropicProvider
from app.services.llm.providers.openai import OpenAIProvider


def _anthropic(handler, **config):
    return AnthropicProvider({"api_key": "sk-test", "transport": httpx.MockTransport(handler), **config})


def test_split_data_url():
    assert split_data_url("data:image/png;base64,AAAA") == ("image/png", "AAAA")
    assert split_data_url("data:image/jpg;base64,BBBB") == ("image/jpeg", "BBBB")
    assert split_data_url("data:application/pdf;base64,CCCC") == ("image/jpeg", "CCCC")
    assert split_data_url("DDDD") == ("image/jpeg", "DDDD")


def test_anthropic_vision_request_shape():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={
            "model": "claude-opus-4-20250514",
            "content": [{"type": "text", "text": '{"verified": true}'}],
        })

    provider = _anthropic(handler, model="claude-opus-4-20250514")
    response = provider.generate(LLMRequest(prompt="check", image_b64="AAAA", image_media_type="image/png"))

    assert response.text == '{"verified": true}'
    assert response.provider == "anthropic"
    assert seen["url"] == "https://api.anthropic.com/v1/messages"
    assert seen["headers"]["x-api-key"] == "sk-test"
    assert seen["headers"]["anthropic-version"] == "2023-06-01"
    content = seen["body"]["messages"][0]["content"]
    assert content[0]["type"] == "image"
    assert content[0]["source"] == {"type": "base64", "media_type": "image/png", "data": "AAAA"}
    assert content[1] == {"type": "text", "text": "check"}
    assert seen["body"]["max_tokens"] == 1000
    assert "temperature" not in seen["body"]


def test_anthropic_text_request_with_temperature():
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"content": [
            {"type": "text", "text": "part one, "},
            {"type": "text", "text": "part two"},
        ]})

    response = _anthropic(handler).generate(LLMRequest(prompt="read", max_tokens=2000, temperature=0.8))

    assert response.text == "part one, part two"
    assert seen["body"]["messages"][0]["content"] == "read"
    assert seen["body"]["temperature"] == 0.8
    assert seen["body"]["max_tokens"] == 2000


def test_anthropic_error_keeps_status_and_body():
    def handler(request):
        return httpx.Response(429, json={"type": "error", "error": {"type": "rate_limit_error"}})

    with pytest.raises(LLMProviderError) as exc_info:
        _anthropic(handler).generate(LLMRequest(prompt="x"))
    assert exc_info.value.status_code == 429
    assert exc_info.value.detail["error"]["type"] == "rate_limit_error"


def test_anthropic_error_with_text_body():
    def handler(request):
        return httpx.Response(502, text="Bad Gateway")

    with pytest.raises(LLMProviderError) as exc_info:
        _anthropic(handler).generate(LLMRequest(prompt="x"))
    assert exc_info.value.status_code == 502
    assert exc_info.value.detail == "Bad Gateway"


def test_anthropic_transport_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(LLMProviderError) as exc_info:
        _anthropic(handler).generate(LLMRequest(prompt="x"))
    assert exc_info.value.status_code is None


def test_anthropic_unavailable_without_key():
    assert AnthropicProvider({"api_key": ""}).is_available() is False


def test_openai_vision_messages():
    with patch("app.services.llm.providers.openai.OpenAI") as client_cls:
        client = MagicMock()
        client.chat.completions.create.return_value = SimpleNamespace(
            model="gpt-4o",
            choices=[SimpleNamespace(message=SimpleNamespace(content=" {\"verified\": false} "))],
        )
        client_cls.return_value = client

        provider = OpenAIProvider({"api_key": "sk-test"})
        response = provider.generate(LLMRequest(prompt="check", image_b64="AAAA", image_media_type="image/png"))

    assert response.text == '{"verified": false}'
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["max_completion_tokens"] == 1000
    parts = kwargs["messages"][0]["content"]
    assert parts[1]["image_url"]["url"] == "data:image/png;base64,AAAA"


def test_openai_falls_back_to_max_tokens():
    with patch("app.services.llm.providers.openai.OpenAI") as client_cls:
        client = MagicMock()
        ok = SimpleNamespace(model="gpt-4o", choices=[SimpleNamespace(message=SimpleNamespace(content="hi"))])
        client.chat.completions.create.side_effect = [TypeError("unexpected kwarg"), ok]
        client_cls.return_value = client

        response = OpenAIProvider({"api_key": "sk-test"}).generate(LLMRequest(prompt="read"))

    assert response.text == "hi"
    assert client.chat.completions.create.call_args.kwargs["max_tokens"] == 1000


def test_factory_unknown_provider():
    with pytest.raises(ValueError):
        LLMProviderFactory.create("gemini", {})


def test_factory_picks_model_per_purpose():
    settings = SimpleNamespace(
        llm_provider="anthropic",
        claude_api_key="sk-test",
        anthropic_api_url="https://api.anthropic.com",
        anthropic_version="2023-06-01",
        verification_model="vision-model",
        reading_model="text-model",
        llm_request_timeout=30,
    )
    vision = LLMProviderFactory.create_from_settings(settings, purpose="verification")
    text = LLMProviderFactory.create_from_settings(settings, purpose="reading")
    assert isinstance(vision, AnthropicProvider)
    assert vision.default_model == "vision-model"
    assert text.default_model == "text-model"
    assert vision.timeout == 30


def test_factory_provider_override():
    settings = SimpleNamespace(
        llm_provider="anthropic",
        openai_api_key="",
        openai_vision_model="gpt-4o",
        openai_text_model="gpt-4o-mini",
        llm_request_timeout=30,
    )
    provider = LLMProviderFactory.create_from_settings(settings, purpose="reading", provider_override="openai")
    assert isinstance(provider, OpenAIProvider)
    assert provider.default_model == "gpt-4o-mini"
    assert provider.is_available() is False
