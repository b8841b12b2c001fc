"""
Payments API (paths kept from the deployed frontend):

POST /api/verify-payment      screenshot -> vision model -> policy -> record
GET  /api/get-payments        recent payments + scan-derived stats
POST /api/delete-payment      delete one payment
POST /api/reconcile-payments  rebuild payment counters from the records
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.deps import get_payment_store, get_verification_policy, get_verification_provider
from app.api.errors import API_KEY_NOT_CONFIGURED, reported_as
from app.schemas.payments import (
    DeletePaymentIn,
    MessageOut,
    PaymentsListOut,
    ReconcileOut,
    VerifyPaymentIn,
    VerifyPaymentOut,
)
from app.services.llm import LLMProvider, LLMProviderError
from app.services.payments.service import PaymentStore
from app.services.payments.verification import PaymentVerificationService
from app.utils.metrics import counters_reconciled_total, payment_verifications_total, records_deleted_total
from app.verification import VerificationPolicy

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["payments"])


@router.post("/verify-payment", response_model=VerifyPaymentOut, response_model_exclude_none=True)
def verify_payment(
    payload: VerifyPaymentIn,
    store: PaymentStore = Depends(get_payment_store),
    provider: LLMProvider = Depends(get_verification_provider),
    policy: VerificationPolicy = Depends(get_verification_policy),
):
    if not payload.image or not payload.expected_amount:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing required fields")
    if not provider.is_available():
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=API_KEY_NOT_CONFIGURED)

    service = PaymentVerificationService(store, provider, policy)
    with reported_as("Internal server error", message_key="message"):
        try:
            outcome = service.verify(payload.image, payload.expected_amount, payload.package_type)
        except LLMProviderError as e:
            payment_verifications_total.labels(result="upstream_error").inc()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail={"error": "Failed to verify payment", "details": e.detail},
            ) from e

    return VerifyPaymentOut(
        verified=outcome.verified,
        message=outcome.message,
        payment_id=outcome.payment_id,
        verification_data=outcome.verification_data,
        raw_response=outcome.raw_response,
    )


@router.get("/get-payments", response_model=PaymentsListOut)
def get_payments(
    limit: int = Query(25),
    status_filter: str = Query("all", alias="status"),
    sort: str = Query("recent"),
    store: PaymentStore = Depends(get_payment_store),
):
    with reported_as("Failed to fetch payments"):
        payments = store.list_recent(limit=limit, status=status_filter, sort=sort)
        stats = store.compute_stats()
    return PaymentsListOut(stats=stats, payments=payments)


@router.post("/delete-payment", response_model=MessageOut)
def delete_payment(payload: DeletePaymentIn, store: PaymentStore = Depends(get_payment_store)):
    if not payload.payment_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing paymentId")

    with reported_as("Failed to delete payment"):
        record = store.delete(payload.payment_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment not found")

    records_deleted_total.labels(kind="payment").inc()
    logger.info("payment_deleted", extra={"payment_id": payload.payment_id})
    return MessageOut(message="Payment deleted successfully")


@router.post("/reconcile-payments", response_model=ReconcileOut)
def reconcile_payments(store: PaymentStore = Depends(get_payment_store)):
    with reported_as("Failed to reconcile payments"):
        before, after = store.reconcile()
    counters_reconciled_total.labels(kind="payment", drift="yes" if before != after else "no").inc()
    return ReconcileOut(before=before, after=after)
