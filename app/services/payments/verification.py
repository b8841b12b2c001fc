"""
Payment screenshot verification: vision model -> VerificationRecord -> policy -> PaymentStore.

Not idempotent: two verified submissions of the same transfer create two
records. The reference marker only logs reuse.
"""
import logging
from dataclasses import dataclass
from typing import Any

from app.core.config import settings
from app.services.llm import LLMProvider, LLMRequest, run_request, split_data_url
from app.services.payments.service import PaymentStore
from app.utils.metrics import payment_verifications_total
from app.verification import (
    MSG_UNREADABLE,
    VerificationPolicy,
    evaluate,
    parse_verification,
)

logger = logging.getLogger(__name__)


@dataclass
class VerificationOutcome:
    verified: bool
    message: str
    payment_id: str | None = None
    verification_data: dict[str, Any] | None = None
    raw_response: str | None = None


class PaymentVerificationService:
    def __init__(self, store: PaymentStore, provider: LLMProvider, policy: VerificationPolicy) -> None:
        self.store = store
        self.provider = provider
        self.policy = policy

    def build_request(self, image: str, expected_amount: float) -> LLMRequest:
        media_type, data = split_data_url(image)
        prompt = self.policy.prompt_rules(expected_amount, settings.payee_name, settings.payee_account)
        return LLMRequest(
            prompt=prompt,
            max_tokens=settings.verification_max_tokens,
            image_b64=data,
            image_media_type=media_type,
        )

    def verify(self, image: str, expected_amount: float, package_type: str | None) -> VerificationOutcome:
        """
        Run one verification.

        Raises:
            LLMProviderError: the model call failed (caller maps it to a 5xx).
        """
        response = run_request(self.provider, self.build_request(image, expected_amount))

        record = parse_verification(response.text)
        if record is None:
            payment_verifications_total.labels(result="unreadable").inc()
            logger.warning("payment_unreadable", extra={"policy": self.policy.name, "package_type": package_type})
            return VerificationOutcome(verified=False, message=MSG_UNREADABLE, raw_response=response.text)

        decision = evaluate(record, expected_amount, self.policy)
        if not decision.verified:
            payment_verifications_total.labels(result="rejected").inc()
            logger.info(
                "payment_rejected",
                extra={
                    "policy": decision.policy,
                    "amount": record.amount,
                    "expected_amount": expected_amount,
                    "package_type": package_type,
                },
            )
            return VerificationOutcome(
                verified=False,
                message=decision.message,
                verification_data=record.as_payload(),
            )

        payment = self.store.create(
            amount=record.amount,
            expected_amount=expected_amount,
            package_type=package_type,
            reference=record.reference,
            transfer_timestamp=record.timestamp,
            verification_data=record.as_payload(),
        )
        if record.reference:
            self.store.remember_reference(record.reference, payment.id)

        payment_verifications_total.labels(result="verified").inc()
        logger.info(
            "payment_verified",
            extra={
                "payment_id": payment.id,
                "policy": decision.policy,
                "amount": record.amount,
                "package_type": package_type,
            },
        )
        return VerificationOutcome(verified=True, message=decision.message, payment_id=payment.id)
