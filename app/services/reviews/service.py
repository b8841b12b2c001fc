"""
ReviewStore: customer reviews in the key-value store.

Layout:
- review:{id}         record JSON
- reviews:all         sorted set, score = creation epoch ms
- reviews:count       number of reviews (counter)
- reviews:rating_sum  sum of ratings (counter)

stats() reads the counters directly; they are only right if every delete
goes through delete(). reconcile() rebuilds them from the records.
"""
import logging
from typing import Any, Iterator

from pydantic import ValidationError

from app.schemas.reviews import ReviewRecord, ReviewStats
from app.storage.kv import KVStore
from app.utils.ids import iso_timestamp, new_record_id, now_ms

logger = logging.getLogger(__name__)

REVIEWS_INDEX = "reviews:all"
COUNT_KEY = "reviews:count"
RATING_SUM_KEY = "reviews:rating_sum"

MIN_RATING = 1
MAX_RATING = 5
SCAN_FACTOR = 2
MAX_ID_ATTEMPTS = 5

LIST_MODES = ("recent", "top")


def review_key(review_id: str) -> str:
    return f"review:{review_id}"


def is_valid_rating(rating: Any) -> bool:
    """Whole number in 1..5: 4 and 4.0 pass, 4.5, "4" and True do not."""
    if isinstance(rating, bool) or not isinstance(rating, (int, float)):
        return False
    return float(rating).is_integer() and MIN_RATING <= rating <= MAX_RATING


def _truthy_flag(value: Any) -> bool:
    return value is True or value == "true"


def _average(total: float, rating_sum: float) -> float:
    return round(rating_sum / total, 1) if total > 0 else 0


class ReviewStore:
    def __init__(self, kv: KVStore) -> None:
        self.kv = kv

    def submit(
        self,
        *,
        rating: int,
        feedback: str | None = None,
        package: str | None = None,
        topic: str | None = None,
        helpful: Any = None,
        would_recommend: Any = None,
    ) -> ReviewRecord:
        """Store review, index it, bump count and rating sum. Rating must already be 1..5."""
        if not is_valid_rating(rating):
            raise ValueError(f"rating must be an integer in {MIN_RATING}..{MAX_RATING}")

        for _ in range(MAX_ID_ATTEMPTS):
            created = now_ms()
            record = ReviewRecord(
                id=new_record_id("rev", created),
                timestamp=iso_timestamp(created),
                rating=int(rating),
                feedback=feedback or "",
                package=package or "Unknown",
                topic=topic or "Unknown",
                helpful=_truthy_flag(helpful),
                would_recommend=_truthy_flag(would_recommend),
            )
            if self.kv.set_json(review_key(record.id), record.model_dump(by_alias=True), nx=True):
                break
            logger.warning("review_id_collision", extra={"review_id": record.id})
        else:
            raise RuntimeError("Could not allocate a unique review id")

        self.kv.zadd(REVIEWS_INDEX, created, record.id)
        self.kv.incr(COUNT_KEY)
        self.kv.incrby(RATING_SUM_KEY, record.rating)
        return record

    def get(self, review_id: str) -> ReviewRecord | None:
        data = self.kv.get_json(review_key(review_id))
        if not isinstance(data, dict):
            return None
        try:
            return ReviewRecord.model_validate(data)
        except ValidationError:
            logger.warning("review_record_invalid", extra={"review_id": review_id})
            return None

    def delete(self, review_id: str) -> ReviewRecord | None:
        """Remove record and index entry; subtract it from count and rating sum."""
        record = self.get(review_id)
        if record is None:
            return None
        self.kv.delete(review_key(review_id))
        self.kv.zrem(REVIEWS_INDEX, review_id)
        self.kv.decr(COUNT_KEY)
        self.kv.decrby(RATING_SUM_KEY, record.rating)
        return record

    def list_recent(self, limit: int = 10, min_rating: int = 0, mode: str = "recent") -> list[ReviewRecord]:
        """
        Newest-first reviews with rating >= min_rating.
        Looks at no more than SCAN_FACTOR * limit ids; mode="top" reorders by rating.
        Unknown modes fall back to "recent".
        """
        if mode not in LIST_MODES:
            mode = "recent"
        if limit <= 0:
            return []
        ids = self.kv.zrange(REVIEWS_INDEX, 0, -1, desc=True)
        reviews: list[ReviewRecord] = []
        for review_id in ids[: limit * SCAN_FACTOR]:
            record = self.get(review_id)
            if record is None or record.rating < min_rating:
                continue
            reviews.append(record)
            if len(reviews) >= limit:
                break

        if mode == "top":
            # stable: equal ratings keep newest-first order
            reviews.sort(key=lambda r: r.rating, reverse=True)
        return reviews

    def iter_all(self) -> Iterator[ReviewRecord]:
        for review_id in self.kv.zrange(REVIEWS_INDEX, 0, -1):
            record = self.get(review_id)
            if record is not None:
                yield record

    def stats(self) -> ReviewStats:
        """Counter fast path."""
        total = self.kv.get_number(COUNT_KEY)
        rating_sum = self.kv.get_number(RATING_SUM_KEY)
        return ReviewStats(total_reviews=int(total), average_rating=_average(total, rating_sum))

    def compute_stats(self) -> ReviewStats:
        """Stats from a full scan of the records."""
        ratings = [record.rating for record in self.iter_all()]
        return ReviewStats(total_reviews=len(ratings), average_rating=_average(len(ratings), sum(ratings)))

    def counters(self) -> dict[str, float]:
        return {
            "count": self.kv.get_number(COUNT_KEY),
            "ratingSum": self.kv.get_number(RATING_SUM_KEY),
        }

    def reconcile(self) -> tuple[dict[str, float], dict[str, float]]:
        """Overwrite counters with scan-derived values. Returns (before, after)."""
        before = self.counters()
        ratings = [record.rating for record in self.iter_all()]
        self.kv.set(COUNT_KEY, str(len(ratings)))
        self.kv.set(RATING_SUM_KEY, str(sum(ratings)))
        after = self.counters()
        logger.info("review_counters_reconciled", extra={"before": before, "after": after})
        return before, after
