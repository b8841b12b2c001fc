"""
OpenAI chat completions provider (text + vision).
"""
from typing import Any

from openai import APIConnectionError, APIError, APIStatusError, OpenAI

from app.services.llm.base import (
    LLMProvider,
    LLMProviderError,
    LLMRequest,
    LLMResponse,
)


class OpenAIProvider(LLMProvider):
    """OpenAI chat completions; image sent as a data URL."""

    name = "openai"

    def __init__(self, config: dict):
        super().__init__(config)
        self.api_key = config.get("api_key")
        self.default_model = config.get("model", "gpt-4o")
        self.timeout = config.get("timeout", 120.0)

        if self.api_key:
            self.client = OpenAI(api_key=self.api_key, timeout=self.timeout)
        else:
            self.client = None

    def is_available(self) -> bool:
        return bool(self.api_key and self.client)

    def _build_messages(self, request: LLMRequest) -> list[dict[str, Any]]:
        if not request.image_b64:
            return [{"role": "user", "content": request.prompt}]
        mime = request.image_media_type or "image/jpeg"
        return [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": request.prompt},
                    {"type": "image_url", "image_url": {"url": f"data:{mime};base64,{request.image_b64}"}},
                ],
            }
        ]

    def generate(self, request: LLMRequest) -> LLMResponse:
        if not self.is_available():
            raise ValueError("OpenAI provider not configured")

        model = request.model or self.default_model
        kwargs: dict[str, Any] = {"model": model, "messages": self._build_messages(request)}
        if request.temperature is not None:
            kwargs["temperature"] = request.temperature

        # Newer models want max_completion_tokens; older clients only know max_tokens
        try:
            try:
                response = self.client.chat.completions.create(
                    **kwargs, max_completion_tokens=request.max_tokens
                )
            except TypeError:
                response = self.client.chat.completions.create(**kwargs, max_tokens=request.max_tokens)
        except APIStatusError as e:
            raise LLMProviderError(
                f"OpenAI API error {e.status_code}",
                status_code=e.status_code,
                detail=e.body,
            ) from e
        except (APIConnectionError, APIError) as e:
            raise LLMProviderError(f"OpenAI request failed: {e}", detail=str(e)) from e

        text = (response.choices[0].message.content or "").strip()
        return LLMResponse(text=text, model=response.model or model, provider=self.name)
