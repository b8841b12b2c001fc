"""
Payment verification: decision (policy) separated from extraction (parser).
Contract between them is VerificationRecord.
"""
from app.verification.models import VerificationDecision, VerificationRecord, parse_amount
from app.verification.parser import extract_json_object, parse_verification
from app.verification.policy import (
    MSG_SUCCESS,
    MSG_UNREADABLE,
    POLICIES,
    VerificationPolicy,
    evaluate,
    get_policy,
    rejection_message,
)

__all__ = [
    "MSG_SUCCESS",
    "MSG_UNREADABLE",
    "POLICIES",
    "VerificationDecision",
    "VerificationPolicy",
    "VerificationRecord",
    "evaluate",
    "extract_json_object",
    "get_policy",
    "parse_amount",
    "parse_verification",
    "rejection_message",
]
