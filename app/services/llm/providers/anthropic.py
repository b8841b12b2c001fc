"""
Anthropic Messages API provider (Claude), called over plain HTTP.
"""
from typing import Any

import httpx

from app.services.llm.base import (
    LLMProvider,
    LLMProviderError,
    LLMRequest,
    LLMResponse,
)


class AnthropicProvider(LLMProvider):
    """Claude text + vision via POST /v1/messages."""

    name = "anthropic"

    def __init__(self, config: dict):
        super().__init__(config)
        self.api_key = config.get("api_key")
        self.api_url = (config.get("api_url") or "https://api.anthropic.com").rstrip("/")
        self.api_version = config.get("api_version", "2023-06-01")
        self.default_model = config.get("model", "claude-opus-4-20250514")
        self.timeout = config.get("timeout", 120.0)
        # Injected in tests (httpx.MockTransport)
        self.transport = config.get("transport")

    def is_available(self) -> bool:
        return bool(self.api_key)

    def _build_payload(self, request: LLMRequest) -> dict[str, Any]:
        if request.image_b64:
            content: Any = [
                {
                    "type": "image",
                    "source": {
                        "type": "base64",
                        "media_type": request.image_media_type or "image/jpeg",
                        "data": request.image_b64,
                    },
                },
                {"type": "text", "text": request.prompt},
            ]
        else:
            content = request.prompt

        payload: dict[str, Any] = {
            "model": request.model or self.default_model,
            "max_tokens": request.max_tokens,
            "messages": [{"role": "user", "content": content}],
        }
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        return payload

    def generate(self, request: LLMRequest) -> LLMResponse:
        if not self.is_available():
            raise ValueError("Anthropic provider not configured")

        payload = self._build_payload(request)
        headers = {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": self.api_version,
        }

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(f"{self.api_url}/v1/messages", headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise LLMProviderError(f"Anthropic request failed: {e}", detail=str(e)) from e

        if response.is_error:
            try:
                detail = response.json()
            except ValueError:
                detail = response.text
            raise LLMProviderError(
                f"Anthropic API error {response.status_code}",
                status_code=response.status_code,
                detail=detail,
            )

        data = response.json()
        blocks = data.get("content") or []
        text = "".join(b.get("text", "") for b in blocks if b.get("type") == "text")
        return LLMResponse(
            text=text,
            model=data.get("model") or payload["model"],
            provider=self.name,
            raw={k: v for k, v in data.items() if k != "content"},
        )
