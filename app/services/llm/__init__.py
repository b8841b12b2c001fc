"""
Model service with multi-provider support (payment screenshots, tarot readings).
"""
from .base import (
    LLMProvider,
    LLMProviderError,
    LLMRequest,
    LLMResponse,
    split_data_url,
)
from .factory import PURPOSE_READING, PURPOSE_VERIFICATION, LLMProviderFactory
from .runner import run_request

__all__ = [
    "LLMProvider",
    "LLMProviderError",
    "LLMRequest",
    "LLMResponse",
    "split_data_url",
    "LLMProviderFactory",
    "PURPOSE_READING",
    "PURPOSE_VERIFICATION",
    "run_request",
]
