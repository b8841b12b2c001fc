"""
Base classes and types for text/vision model providers.
Used by factory and all providers (anthropic, openai).
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

SUPPORTED_IMAGE_TYPES = ("image/png", "image/jpeg", "image/webp", "image/gif")


@dataclass
class LLMRequest:
    """One synchronous call: a prompt, optionally paired with one image."""
    prompt: str
    model: str | None = None
    max_tokens: int = 1000
    temperature: float | None = None
    image_b64: str | None = None
    image_media_type: str | None = None


@dataclass
class LLMResponse:
    """Generated text plus what produced it."""
    text: str
    model: str
    provider: str
    raw: dict[str, Any] | None = None


class LLMProviderError(Exception):
    """Upstream call failed; status_code/detail carry the upstream answer when there was one."""
    def __init__(self, message: str, status_code: int | None = None, detail: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


def split_data_url(image: str) -> tuple[str, str]:
    """
    'data:image/png;base64,AAAA' -> ('image/png', 'AAAA').
    Bare base64 is accepted and treated as JPEG.
    """
    header, sep, data = image.partition(",")
    if not sep:
        return "image/jpeg", image.strip()
    media_type = header.removeprefix("data:").split(";")[0].strip().lower()
    if media_type == "image/jpg":
        media_type = "image/jpeg"
    if media_type not in SUPPORTED_IMAGE_TYPES:
        media_type = "image/jpeg"
    return media_type, data.strip()


class LLMProvider(ABC):
    """Base class for model providers."""

    name: str = ""

    def __init__(self, config: dict) -> None:
        self.config = config

    @abstractmethod
    def is_available(self) -> bool:
        """Check if provider is configured (API key present)."""
        pass

    @abstractmethod
    def generate(self, request: LLMRequest) -> LLMResponse:
        """Run one request. Raises LLMProviderError on upstream/transport failure."""
        pass
