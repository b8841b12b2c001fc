"""
ReadingService: builds the tarot prompt and makes one text call.
"""
import logging

from app.core.config import settings
from app.schemas.readings import TarotReadingIn
from app.services.llm import LLMProvider, LLMRequest, run_request
from app.services.readings.prompt import build_tarot_prompt
from app.utils.metrics import readings_generated_total

logger = logging.getLogger(__name__)


class ReadingService:
    def __init__(self, provider: LLMProvider) -> None:
        self.provider = provider

    def generate(self, payload: TarotReadingIn) -> str:
        """
        Generate a reading for a validated request (topic and question present).

        Raises:
            LLMProviderError: the model call failed.
        """
        prompt = build_tarot_prompt(
            topic=payload.topic,
            topic_name=payload.topic_name,
            question=payload.question,
            package_type=payload.package_type,
            card_count=payload.card_count,
            user_profile=payload.user_profile,
            is_follow_up=bool(payload.is_follow_up),
            conversation_history=payload.conversation_history,
        )
        response = run_request(
            self.provider,
            LLMRequest(
                prompt=prompt,
                max_tokens=settings.reading_max_tokens,
                temperature=settings.reading_temperature,
            ),
        )
        mode = "follow_up" if payload.is_follow_up else "full"
        readings_generated_total.labels(mode=mode).inc()
        logger.info("reading_generated", extra={"package_type": payload.package_type, "model": response.model})
        return response.text
