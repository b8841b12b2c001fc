"""
Factory for creating model providers based on configuration.
"""
import logging
from typing import Optional

from app.services.llm.base import LLMProvider
from app.services.llm.providers.anthropic import AnthropicProvider
from app.services.llm.providers.openai import OpenAIProvider

logger = logging.getLogger(__name__)

PURPOSE_VERIFICATION = "verification"
PURPOSE_READING = "reading"


class LLMProviderFactory:
    """Factory for creating model providers."""

    PROVIDERS: dict[str, type[LLMProvider]] = {
        "anthropic": AnthropicProvider,
        "openai": OpenAIProvider,
    }

    @classmethod
    def create(cls, provider_name: str, config: dict) -> LLMProvider:
        """
        Create provider instance by name.

        Raises:
            ValueError: If provider name is unknown
        """
        provider_class = cls.PROVIDERS.get(provider_name.lower())

        if not provider_class:
            available = ", ".join(cls.PROVIDERS.keys())
            raise ValueError(
                f"Unknown provider: {provider_name}. "
                f"Available providers: {available}"
            )

        provider = provider_class(config)
        if not provider.is_available():
            logger.warning("llm_provider_not_configured", extra={"provider": provider_name})
        return provider

    @classmethod
    def create_from_settings(
        cls,
        settings,
        purpose: str = PURPOSE_VERIFICATION,
        provider_override: Optional[str] = None,
    ) -> LLMProvider:
        """
        Create provider from application settings.

        Args:
            settings: Application settings object
            purpose: "verification" (vision model) or "reading" (text model)
            provider_override: use this provider name instead of settings.llm_provider
        """
        provider_name = (provider_override or "").strip() or settings.llm_provider

        if provider_name == "anthropic":
            model = settings.verification_model if purpose == PURPOSE_VERIFICATION else settings.reading_model
            config = {
                "api_key": settings.claude_api_key,
                "api_url": settings.anthropic_api_url,
                "api_version": settings.anthropic_version,
                "model": model,
                "timeout": settings.llm_request_timeout,
            }
        elif provider_name == "openai":
            model = settings.openai_vision_model if purpose == PURPOSE_VERIFICATION else settings.openai_text_model
            config = {
                "api_key": settings.openai_api_key,
                "model": model,
                "timeout": settings.llm_request_timeout,
            }
        else:
            raise ValueError(f"Provider {provider_name} not supported in settings")

        return cls.create(provider_name, config)
