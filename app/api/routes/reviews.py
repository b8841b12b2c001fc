"""
Reviews API:

POST /api/submit-review      store a 1..5 rating with optional feedback
GET  /api/get-reviews        recent reviews + counter-based stats
POST /api/delete-review      delete one review, roll back counters
POST /api/reconcile-reviews  rebuild review counters from the records
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.deps import get_review_store
from app.api.errors import reported_as
from app.core.config import settings
from app.schemas.payments import MessageOut, ReconcileOut
from app.schemas.reviews import (
    DeleteReviewIn,
    ReviewsListOut,
    SubmitReviewIn,
    SubmitReviewOut,
)
from app.services.reviews.service import ReviewStore, is_valid_rating
from app.utils.metrics import counters_reconciled_total, records_deleted_total, reviews_submitted_total

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["reviews"])

THANK_YOU_MESSAGE = "ขอบคุณสำหรับความคิดเห็นของคุณครับ! 🙏"


@router.post("/submit-review", response_model=SubmitReviewOut)
def submit_review(payload: SubmitReviewIn, store: ReviewStore = Depends(get_review_store)):
    if not is_valid_rating(payload.rating):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid rating")
    if payload.feedback and len(payload.feedback) > settings.feedback_max_length:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Feedback too long")

    with reported_as("Failed to submit review"):
        review = store.submit(
            rating=payload.rating,
            feedback=payload.feedback,
            package=payload.package,
            topic=payload.topic,
            helpful=payload.helpful,
            would_recommend=payload.would_recommend,
        )

    reviews_submitted_total.labels(rating=str(review.rating)).inc()
    logger.info("review_submitted", extra={"review_id": review.id, "rating": review.rating})
    return SubmitReviewOut(review_id=review.id, message=THANK_YOU_MESSAGE)


@router.get("/get-reviews", response_model=ReviewsListOut)
def get_reviews(
    limit: int = Query(10),
    min_rating: int = Query(0, alias="minRating"),
    mode: str = Query("recent"),
    store: ReviewStore = Depends(get_review_store),
):
    with reported_as("Failed to fetch reviews"):
        stats = store.stats()
        reviews = store.list_recent(limit=limit, min_rating=min_rating, mode=mode)
    return ReviewsListOut(stats=stats, reviews=reviews)


@router.post("/delete-review", response_model=MessageOut)
def delete_review(payload: DeleteReviewIn, store: ReviewStore = Depends(get_review_store)):
    if not payload.review_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Review ID is required")

    with reported_as("Failed to delete review"):
        record = store.delete(payload.review_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Review not found")

    records_deleted_total.labels(kind="review").inc()
    logger.info("review_deleted", extra={"review_id": payload.review_id, "rating": record.rating})
    return MessageOut(message="Review deleted successfully")


@router.post("/reconcile-reviews", response_model=ReconcileOut)
def reconcile_reviews(store: ReviewStore = Depends(get_review_store)):
    with reported_as("Failed to reconcile reviews"):
        before, after = store.reconcile()
    counters_reconciled_total.labels(kind="review", drift="yes" if before != after else "no").inc()
    return ReconcileOut(before=before, after=after)
