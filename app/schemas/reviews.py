from typing import Any

from pydantic import ConfigDict

from app.schemas.base import CamelModel


class ReviewRecord(CamelModel):
    id: str
    timestamp: str
    rating: int
    feedback: str = ""
    package: str = "Unknown"
    topic: str = "Unknown"
    helpful: bool = False
    would_recommend: bool = False


class ReviewStats(CamelModel):
    total_reviews: int = 0
    average_rating: float = 0


class SubmitReviewIn(CamelModel):
    model_config = ConfigDict(extra="ignore")

    # Checked by the route (is_valid_rating) so any non-integer answers "Invalid rating"
    rating: Any = None
    feedback: str | None = None
    package: str | None = None
    topic: str | None = None
    # Frontend sends booleans or "true"/"false" strings
    helpful: Any = None
    would_recommend: Any = None


class SubmitReviewOut(CamelModel):
    success: bool = True
    review_id: str
    message: str


class ReviewsListOut(CamelModel):
    success: bool = True
    stats: ReviewStats
    reviews: list[ReviewRecord]


class DeleteReviewIn(CamelModel):
    model_config = ConfigDict(extra="ignore")

    review_id: str | None = None
