from fastapi import APIRouter, Depends

from app.api.deps import get_payment_store
from app.api.errors import reported_as
from app.pricing import resolve_tier
from app.services.payments.service import PaymentStore


router = APIRouter(prefix="/api", tags=["pricing"])


@router.get("/get-pricing")
def get_pricing(store: PaymentStore = Depends(get_payment_store)) -> dict:
    """Current tier from a fresh count of verified payments."""
    with reported_as("Failed to get pricing"):
        resolution = resolve_tier(store.count_verified())
    return {"success": True, **resolution.model_dump(by_alias=True)}
