"""
FastAPI dependencies: stores bound to the shared KV client, model providers, policy.
Tests replace these through app.dependency_overrides.
"""
from fastapi import Depends

from app.core.config import settings
from app.services.llm import PURPOSE_READING, PURPOSE_VERIFICATION, LLMProvider, LLMProviderFactory
from app.services.payments.service import PaymentStore
from app.services.reviews.service import ReviewStore
from app.storage.kv import KVStore, get_kv
from app.verification import VerificationPolicy, get_policy


def get_payment_store(kv: KVStore = Depends(get_kv)) -> PaymentStore:
    return PaymentStore(kv)


def get_review_store(kv: KVStore = Depends(get_kv)) -> ReviewStore:
    return ReviewStore(kv)


def get_verification_provider() -> LLMProvider:
    return LLMProviderFactory.create_from_settings(settings, purpose=PURPOSE_VERIFICATION)


def get_reading_provider() -> LLMProvider:
    return LLMProviderFactory.create_from_settings(settings, purpose=PURPOSE_READING)


def get_verification_policy() -> VerificationPolicy:
    return get_policy(settings.verification_policy)
