"""
Parse the vision model's answer into a VerificationRecord.

The model is asked for bare JSON but may wrap it in a ```json fence or add
prose around it; the outermost {...} span is taken.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from app.verification.models import VerificationRecord

logger = logging.getLogger(__name__)

_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def _strip_fence(text: str) -> str:
    if "```" not in text:
        return text
    start = text.find("```")
    rest = text[start + 3:]
    if rest.lower().startswith("json"):
        rest = rest[4:].lstrip()
    end = rest.find("```")
    return rest[:end].strip() if end != -1 else rest.strip()


def extract_json_object(raw: str | None) -> dict[str, Any] | None:
    """Return the JSON object embedded in free-form model output, or None."""
    if not raw:
        return None
    match = _OBJECT_RE.search(_strip_fence(raw.strip()))
    if not match:
        return None
    try:
        data = json.loads(match.group(0))
    except (json.JSONDecodeError, TypeError):
        return None
    return data if isinstance(data, dict) else None


def parse_verification(raw: str | None) -> VerificationRecord | None:
    """VerificationRecord from model output; None when unreadable."""
    data = extract_json_object(raw)
    if data is None:
        logger.warning("verification_unparseable", extra={"error": "no_json_object"})
        return None
    try:
        return VerificationRecord.from_model_output(data)
    except ValidationError as e:
        logger.warning("verification_unparseable", extra={"error": str(e)})
        return None
