"""
POST /api/tarot-reading: personalised reading (full or follow-up) from the text model.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_reading_provider
from app.api.errors import API_KEY_NOT_CONFIGURED, reported_as
from app.schemas.readings import TarotReadingIn, TarotReadingOut
from app.services.llm import LLMProvider, LLMProviderError
from app.services.readings.service import ReadingService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["readings"])


@router.post("/tarot-reading", response_model=TarotReadingOut)
def tarot_reading(payload: TarotReadingIn, provider: LLMProvider = Depends(get_reading_provider)):
    if not payload.question or not payload.topic:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing required fields")
    if not provider.is_available():
        logger.error("reading_provider_not_configured", extra={"provider": provider.name})
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=API_KEY_NOT_CONFIGURED)

    with reported_as("Internal server error", message_key="message"):
        try:
            reading = ReadingService(provider).generate(payload)
        except LLMProviderError as e:
            raise HTTPException(
                status_code=e.status_code or status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail={"error": "Failed to generate reading", "details": e.detail},
            ) from e

    return TarotReadingOut(reading=reading)
