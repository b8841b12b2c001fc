"""
PaymentStore: payment records in the key-value store.

Layout:
- payment:{id}            record JSON
- payments:all            sorted set, score = creation epoch ms (recency index)
- payment_ref:{reference} payment id, 24h TTL (advisory replay marker)
- payments:count / payments:verified_count / payments:revenue  counters

Counters are a fast path only; compute_stats() scans the record set and
reconcile() rewrites the counters from it. No multi-key transactions: a
reader may briefly see a counter that disagrees with the index.
"""
import logging
from datetime import datetime, timezone
from typing import Iterator

from pydantic import ValidationError

from app.core.config import settings
from app.schemas.payments import PaymentRecord, PaymentStats
from app.storage.kv import KVStore
from app.utils.ids import iso_timestamp, new_record_id, now_ms

logger = logging.getLogger(__name__)

PAYMENTS_INDEX = "payments:all"
COUNT_KEY = "payments:count"
VERIFIED_COUNT_KEY = "payments:verified_count"
REVENUE_KEY = "payments:revenue"

# list_recent looks at most this many ids per requested record
SCAN_FACTOR = 2
MAX_ID_ATTEMPTS = 5

STATUS_FILTERS = ("all", "verified", "pending")
SORT_MODES = ("recent", "amount")


def payment_key(payment_id: str) -> str:
    return f"payment:{payment_id}"


def reference_key(reference: str) -> str:
    return f"payment_ref:{reference}"


class PaymentStore:
    def __init__(self, kv: KVStore) -> None:
        self.kv = kv

    # ------------------------------------------------------------------
    # Create / read / delete
    # ------------------------------------------------------------------

    def create(
        self,
        *,
        amount: float | None,
        expected_amount: float,
        package_type: str | None,
        reference: str | None = None,
        transfer_timestamp: str | None = None,
        verification_data: dict | None = None,
        verified: bool = True,
    ) -> PaymentRecord:
        """Write record (set-if-absent, fresh id on collision), index it, bump counters."""
        for _ in range(MAX_ID_ATTEMPTS):
            created = now_ms()
            record = PaymentRecord(
                id=new_record_id("pay", created),
                timestamp=iso_timestamp(created),
                amount=amount,
                expected_amount=expected_amount,
                package_type=package_type,
                reference=reference,
                transfer_timestamp=transfer_timestamp,
                verified=verified,
                verification_data=verification_data or {},
            )
            if self.kv.set_json(payment_key(record.id), record.model_dump(by_alias=True), nx=True):
                break
            logger.warning("payment_id_collision", extra={"payment_id": record.id})
        else:
            raise RuntimeError("Could not allocate a unique payment id")

        self.kv.zadd(PAYMENTS_INDEX, created, record.id)
        self._apply_counters(record, sign=1)
        return record

    def get(self, payment_id: str) -> PaymentRecord | None:
        data = self.kv.get_json(payment_key(payment_id))
        if not isinstance(data, dict):
            return None
        try:
            return PaymentRecord.model_validate(data)
        except ValidationError:
            logger.warning("payment_record_invalid", extra={"payment_id": payment_id})
            return None

    def delete(self, payment_id: str) -> PaymentRecord | None:
        """Remove record, its index entry, its reference marker; roll back its counters."""
        record = self.get(payment_id)
        if record is None:
            return None
        self.kv.delete(payment_key(payment_id))
        self.kv.zrem(PAYMENTS_INDEX, payment_id)
        if record.reference:
            self.kv.delete(reference_key(record.reference))
        self._apply_counters(record, sign=-1)
        return record

    # ------------------------------------------------------------------
    # Reference marker (best effort, never blocks a payment)
    # ------------------------------------------------------------------

    def find_by_reference(self, reference: str) -> str | None:
        return self.kv.get(reference_key(reference))

    def remember_reference(self, reference: str, payment_id: str) -> str | None:
        """Point the reference at payment_id for 24h; returns the previous owner if any."""
        previous = self.find_by_reference(reference)
        if previous and previous != payment_id:
            logger.warning(
                "payment_reference_reused",
                extra={"reference": reference, "payment_id": payment_id},
            )
        self.kv.set(reference_key(reference), payment_id, ex=settings.payment_reference_ttl)
        return previous

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list_recent(self, limit: int = 25, status: str = "all", sort: str = "recent") -> list[PaymentRecord]:
        """
        Newest-first records, filtered by status (all | verified | pending).

        Looks at no more than SCAN_FACTOR * limit ids; ids whose record is
        gone are skipped. sort="amount" reorders the page by amount, largest first.
        Unknown status or sort values fall back to "all" and "recent".
        """
        if status not in STATUS_FILTERS:
            status = "all"
        if sort not in SORT_MODES:
            sort = "recent"
        if limit <= 0:
            return []
        ids = self.kv.zrange(PAYMENTS_INDEX, 0, -1, desc=True)
        payments: list[PaymentRecord] = []
        for payment_id in ids[: limit * SCAN_FACTOR]:
            record = self.get(payment_id)
            if record is None:
                continue
            if status == "verified" and not record.verified:
                continue
            if status == "pending" and record.verified:
                continue
            payments.append(record)
            if len(payments) >= limit:
                break

        if sort == "amount":
            payments.sort(key=lambda p: p.amount or 0, reverse=True)
        return payments

    def iter_all(self) -> Iterator[PaymentRecord]:
        for payment_id in self.kv.zrange(PAYMENTS_INDEX, 0, -1):
            record = self.get(payment_id)
            if record is not None:
                yield record

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def compute_stats(self, now: datetime | None = None) -> PaymentStats:
        """Canonical stats from a full scan; 'today' is the UTC calendar day of now."""
        today = (now or datetime.now(timezone.utc)).astimezone(timezone.utc).date()
        stats = PaymentStats()
        for record in self.iter_all():
            stats.total += 1
            if not record.verified:
                continue
            amount = record.amount or 0
            stats.verified += 1
            stats.total_revenue += amount
            if _record_date(record) == today:
                stats.today_revenue += amount
        return stats

    def count_verified(self) -> int:
        return sum(1 for record in self.iter_all() if record.verified)

    def counters(self) -> dict[str, float]:
        """Fast-path aggregates (may drift from compute_stats under partial failures)."""
        return {
            "total": self.kv.get_number(COUNT_KEY),
            "verified": self.kv.get_number(VERIFIED_COUNT_KEY),
            "totalRevenue": self.kv.get_number(REVENUE_KEY),
        }

    def reconcile(self) -> tuple[dict[str, float], dict[str, float]]:
        """Overwrite counters with scan-derived values. Returns (before, after)."""
        before = self.counters()
        stats = self.compute_stats()
        self.kv.set(COUNT_KEY, str(stats.total))
        self.kv.set(VERIFIED_COUNT_KEY, str(stats.verified))
        self.kv.set(REVENUE_KEY, str(stats.total_revenue))
        after = self.counters()
        logger.info("payment_counters_reconciled", extra={"before": before, "after": after})
        return before, after

    def _apply_counters(self, record: PaymentRecord, sign: int) -> None:
        if sign > 0:
            self.kv.incr(COUNT_KEY)
        else:
            self.kv.decr(COUNT_KEY)
        if not record.verified:
            return
        if sign > 0:
            self.kv.incr(VERIFIED_COUNT_KEY)
        else:
            self.kv.decr(VERIFIED_COUNT_KEY)
        if record.amount:
            self.kv.incrbyfloat(REVENUE_KEY, sign * record.amount)


def _record_date(record: PaymentRecord):
    try:
        created = datetime.fromisoformat(record.timestamp.replace("Z", "+00:00"))
    except ValueError:
        return None
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created.astimezone(timezone.utc).date()
