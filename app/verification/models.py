"""
DTO verification: VerificationRecord (what the vision model extracted from a
payment screenshot) and VerificationDecision (result of a policy).
"""
from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

_AMOUNT_RE = re.compile(r"(\d[\d\s,]*(?:\.\d{1,2})?)")


def parse_amount(value: Any) -> float | None:
    """Lenient amount: numbers pass through, strings like '1,500.00 บาท' are cleaned."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    if not text or text.lower() in ("null", "none", "not_found"):
        return None
    match = _AMOUNT_RE.search(text)
    if not match:
        return None
    raw = match.group(1).replace(" ", "").replace(",", "")
    try:
        return float(raw)
    except ValueError:
        return None


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


class VerificationRecord(BaseModel):
    """
    Structured judgment produced by the vision model.

    The sub-flags are advisory; unknown keys the model adds are kept so the
    raw payload can be stored and returned as is.
    """

    model_config = ConfigDict(extra="allow")

    amount: float | None = None
    amount_match: bool = False
    recipient_match: bool = False
    account_match: bool = False
    status_success: bool = False
    timestamp: str | None = None
    reference: str | None = None
    verified: bool = False

    # JSON object exactly as the model returned it (set by from_model_output)
    _raw: dict[str, Any] | None = PrivateAttr(default=None)

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> float | None:
        return parse_amount(v)

    @field_validator(
        "amount_match", "recipient_match", "account_match", "status_success", "verified",
        mode="before",
    )
    @classmethod
    def coerce_flag(cls, v: Any) -> bool:
        return _as_bool(v)

    @field_validator("timestamp", "reference", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str | None:
        if v is None:
            return None
        text = str(v).strip()
        if not text or text.lower() in ("null", "none"):
            return None
        return text

    @classmethod
    def from_model_output(cls, data: dict[str, Any]) -> VerificationRecord:
        """Validate the model's JSON object and keep it untouched for as_payload()."""
        record = cls.model_validate(data)
        record._raw = data
        return record

    def as_payload(self) -> dict[str, Any]:
        """The model's own object for storage and API responses; coerced fields when there is none."""
        if self._raw is not None:
            return dict(self._raw)
        return self.model_dump()


class VerificationDecision(BaseModel):
    """Result of evaluate(): verified flag, Thai message for the customer, policy name."""

    verified: bool
    message: str = Field(..., description="Human-readable Thai message")
    policy: str

    model_config = {"frozen": True}
