"""
Payment verification policies: evaluate(record, expected_amount, policy) -> VerificationDecision.

Pure logic, no I/O. A policy owns two things:
- the acceptance criteria written into the vision prompt (prompt_rules);
- the local decision over the extracted record (is_verified).

Variants trusting the upstream `verified` flag keep the model as the trust
boundary; `recomputed` derives the decision from the sub-flags instead.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from app.verification.models import VerificationDecision, VerificationRecord

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Customer-facing messages (Thai)
# ---------------------------------------------------------------------------
MSG_SUCCESS = "ชำระเงินสำเร็จ! ขอบคุณครับ"
MSG_UNREADABLE = "ไม่สามารถอ่านข้อมูลจากภาพได้ กรุณาตรวจสอบว่าภาพชัดเจนและลองใหม่อีกครั้ง"
MSG_GENERIC = "ไม่สามารถยืนยันการชำระเงินได้"
MSG_AMOUNT = "จำนวนเงินไม่ตรงกัน (ได้รับ {amount} บาท แต่ต้องการ {expected} บาท)"
MSG_RECIPIENT = "ชื่อผู้รับไม่ตรงกัน กรุณาตรวจสอบบัญชีที่โอน"
MSG_ACCOUNT = "เลขบัญชีไม่ตรงกัน กรุณาตรวจสอบบัญชีที่โอน"
MSG_STATUS = "การโอนเงินยังไม่สำเร็จ กรุณาตรวจสอบสถานะ"

PROMPT_TEMPLATE = """You are a payment verification AI. Analyze this Thai bank transfer screenshot and extract the following information:

1. Transfer amount (in Thai Baht)
2. Recipient name ({recipient_rule})
3. Bank account number ({account_rule})
4. Transfer status (should be สำเร็จ, Success, or completed)
5. Transfer date and time
6. Transaction reference/ID

Expected amount: {expected} Baht

Respond ONLY with a JSON object in this exact format:
{{
  "amount": <number or null>,
  "amount_match": <true or false>,
  "recipient_match": <true or false>,
  "account_match": <true or false>,
  "status_success": <true or false>,
  "timestamp": "<date time string or null>",
  "reference": "<transaction ID or null>",
  "verified": <true or false>
}}

Set "amount_match" to true ONLY if amount equals exactly {expected}.
Set "verified" to true ONLY if ALL these are true:
- Amount matches exactly ({expected})
- {recipient_check}
- {account_check}
- Status is success
- Timestamp is within last 60 minutes

{closing}"""


def format_amount(value: float | int | str) -> str:
    """150.0 -> '150', 150.5 -> '150.5'."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return str(value)
    if number.is_integer():
        return str(int(number))
    return f"{number:.2f}".rstrip("0").rstrip(".")


def account_hint(account: str) -> str:
    """Longest digit group of the account number ('847-2-10962-7' -> '10962')."""
    groups = [g for g in account.replace(" ", "-").split("-") if g.isdigit()]
    if not groups:
        return account
    return max(groups, key=len)


def rejection_message(record: VerificationRecord, expected_amount: float) -> str:
    """Pick the customer message for a rejected record; first failing check wins."""
    if not record.amount_match and record.amount:
        return MSG_AMOUNT.format(
            amount=format_amount(record.amount),
            expected=format_amount(expected_amount),
        )
    if not record.recipient_match:
        return MSG_RECIPIENT
    if not record.account_match:
        return MSG_ACCOUNT
    if not record.status_success:
        return MSG_STATUS
    return MSG_GENERIC


class VerificationPolicy(ABC):
    """Base class for payment verification policies."""

    name: str = ""
    closing = (
        "Be strict in verification. If any field is unclear or doesn't match, "
        "set verified to false."
    )

    def recipient_rule(self, payee_name: str) -> str:
        return f"should match: {payee_name} or Mr. {payee_name}"

    def account_rule(self, payee_account: str) -> str:
        return f"should match: {payee_account} or contain {account_hint(payee_account)}"

    def recipient_check(self, payee_name: str) -> str:
        return f"Recipient name matches ({payee_name})"

    def account_check(self, payee_account: str) -> str:
        return f"Account number matches ({payee_account})"

    def prompt_rules(self, expected_amount: float, payee_name: str, payee_account: str) -> str:
        """Full instruction text for the vision model."""
        return PROMPT_TEMPLATE.format(
            expected=format_amount(expected_amount),
            recipient_rule=self.recipient_rule(payee_name),
            account_rule=self.account_rule(payee_account),
            recipient_check=self.recipient_check(payee_name),
            account_check=self.account_check(payee_account),
            closing=self.closing,
        )

    @abstractmethod
    def is_verified(self, record: VerificationRecord) -> bool:
        """Decide acceptance for an extracted record."""
        pass


class StrictPolicy(VerificationPolicy):
    """Strict prompt; the model's own `verified` flag is the decision."""

    name = "strict"

    def is_verified(self, record: VerificationRecord) -> bool:
        return record.verified


class EWalletPolicy(StrictPolicy):
    """Also accepts PromptPay / e-wallet transfers where the account shows a phone or wallet id."""

    name = "ewallet"

    def account_rule(self, payee_account: str) -> str:
        return (
            f"{super().account_rule(payee_account)}; for PromptPay or e-wallet transfers "
            "the account may appear as a masked phone number or e-wallet ID, "
            "which counts as a match when the recipient name matches"
        )

    def account_check(self, payee_account: str) -> str:
        return (
            f"Account number matches ({payee_account}) or it is a PromptPay/e-wallet "
            "transfer to the recipient"
        )


class FuzzyNamePolicy(EWalletPolicy):
    """E-wallet rules plus partial, masked or transliterated recipient names."""

    name = "fuzzy_name"
    closing = (
        "Be careful in verification. Accept reasonable variations of the recipient "
        "name, but if the amount or status is unclear, set verified to false."
    )

    def recipient_rule(self, payee_name: str) -> str:
        parts = payee_name.split()
        first = parts[0] if parts else payee_name
        short = f"{first} {parts[-1][0]}." if len(parts) > 1 else first
        return (
            f"should match: {payee_name}; also accept partial or masked forms such as "
            f"\"Mr. {first}\", \"{short}\", upper-case forms, "
            "and the Thai transliteration of the name"
        )

    def recipient_check(self, payee_name: str) -> str:
        return f"Recipient name matches ({payee_name}) allowing partial, masked or Thai forms"


class RecomputedPolicy(StrictPolicy):
    """Strict prompt; ignores the upstream flag and requires every sub-check."""

    name = "recomputed"

    def is_verified(self, record: VerificationRecord) -> bool:
        return all((
            record.amount_match,
            record.recipient_match,
            record.account_match,
            record.status_success,
        ))


POLICIES: dict[str, type[VerificationPolicy]] = {
    StrictPolicy.name: StrictPolicy,
    EWalletPolicy.name: EWalletPolicy,
    FuzzyNamePolicy.name: FuzzyNamePolicy,
    RecomputedPolicy.name: RecomputedPolicy,
}


def get_policy(name: str) -> VerificationPolicy:
    """Create policy by name (strict, ewallet, fuzzy_name, recomputed)."""
    policy_class = POLICIES.get((name or "").strip().lower())
    if not policy_class:
        available = ", ".join(POLICIES.keys())
        raise ValueError(f"Unknown verification policy: {name}. Available policies: {available}")
    return policy_class()


def evaluate(
    record: VerificationRecord,
    expected_amount: float,
    policy: VerificationPolicy,
) -> VerificationDecision:
    """Apply policy to an extracted record."""
    if policy.is_verified(record):
        return VerificationDecision(verified=True, message=MSG_SUCCESS, policy=policy.name)

    if record.verified:
        # Upstream said yes, local rule said no (recomputed policy only)
        logger.warning(
            "verification_overruled",
            extra={"policy": policy.name, "amount": record.amount},
        )
    return VerificationDecision(
        verified=False,
        message=rejection_message(record, expected_amount),
        policy=policy.name,
    )
