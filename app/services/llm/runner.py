"""
Single entry point for model calls: timing, metrics and failure logging.
No retries: a failed call is reported to the caller as is.
"""
import logging
import time

from app.services.llm.base import LLMProvider, LLMProviderError, LLMRequest, LLMResponse
from app.utils.metrics import llm_request_duration_seconds, llm_requests_total

logger = logging.getLogger(__name__)


def run_request(provider: LLMProvider, request: LLMRequest) -> LLMResponse:
    """Call provider.generate once and record the outcome."""
    started = time.monotonic()
    try:
        response = provider.generate(request)
    except LLMProviderError as e:
        llm_requests_total.labels(provider=provider.name, status="error").inc()
        logger.error(
            "llm_request_failed",
            extra={
                "provider": provider.name,
                "model": request.model,
                "upstream_status": e.status_code,
                "error": str(e),
            },
        )
        raise
    finally:
        llm_request_duration_seconds.labels(provider=provider.name).observe(time.monotonic() - started)

    llm_requests_total.labels(provider=provider.name, status="ok").inc()
    logger.info(
        "llm_request_done",
        extra={
            "provider": provider.name,
            "model": response.model,
            "latency_ms": int((time.monotonic() - started) * 1000),
        },
    )
    return response
