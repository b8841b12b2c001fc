"""Tests for PaymentStore against the in-memory Redis double."""
from datetime import datetime, timezone
from unittest.mock import patch

from app.services.payments.service import (
    COUNT_KEY,
    PAYMENTS_INDEX,
    REVENUE_KEY,
    VERIFIED_COUNT_KEY,
    payment_key,
    reference_key,
)

T0 = 1700000000000  # 2023-11-14T22:13:20Z


def _create(store, amount=150, **kwargs):
    kwargs.setdefault("expected_amount", amount)
    kwargs.setdefault("package_type", "premium")
    return store.create(amount=amount, **kwargs)


def _create_at(store, ms, amount=150, **kwargs):
    with patch("app.services.payments.service.now_ms", return_value=ms):
        return _create(store, amount=amount, **kwargs)


def test_create_writes_record_index_and_counters(payment_store, redis_double):
    payment = _create(payment_store, amount=150, reference="REF1")

    assert payment.id.startswith("pay_")
    assert payment.timestamp.endswith("Z")
    assert payment.verified is True
    assert payment_key(payment.id) in redis_double.values
    assert payment.id in redis_double.zsets[PAYMENTS_INDEX]
    assert payment_store.counters() == {"total": 1, "verified": 1, "totalRevenue": 150}


def test_record_is_camel_case_json(payment_store, kv):
    payment = _create(payment_store, amount=150, transfer_timestamp="14:30")
    stored = kv.get_json(payment_key(payment.id))
    assert stored["expectedAmount"] == 150
    assert stored["packageType"] == "premium"
    assert stored["transferTimestamp"] == "14:30"


def test_get_roundtrip(payment_store):
    payment = _create(payment_store, amount=99, verification_data={"amount": 99})
    loaded = payment_store.get(payment.id)
    assert loaded == payment
    assert loaded.verification_data == {"amount": 99}


def test_get_missing(payment_store):
    assert payment_store.get("pay_nope") is None


def test_delete_rolls_back_everything(payment_store, redis_double):
    payment = _create(payment_store, amount=150, reference="REF1")
    payment_store.remember_reference("REF1", payment.id)

    deleted = payment_store.delete(payment.id)

    assert deleted.id == payment.id
    assert payment_store.get(payment.id) is None
    assert payment.id not in redis_double.zsets[PAYMENTS_INDEX]
    assert reference_key("REF1") not in redis_double.values
    assert payment_store.counters() == {"total": 0, "verified": 0, "totalRevenue": 0}


def test_delete_missing_changes_nothing(payment_store):
    _create(payment_store)
    assert payment_store.delete("pay_nope") is None
    assert payment_store.counters()["total"] == 1


def test_list_recent_newest_first(payment_store):
    first = _create_at(payment_store, T0, amount=20)
    second = _create_at(payment_store, T0 + 1000, amount=40)
    third = _create_at(payment_store, T0 + 2000, amount=80)

    ids = [p.id for p in payment_store.list_recent(limit=10)]
    assert ids == [third.id, second.id, first.id]


def test_list_recent_limit(payment_store):
    for i in range(5):
        _create_at(payment_store, T0 + i, amount=20)
    assert len(payment_store.list_recent(limit=2)) == 2
    assert payment_store.list_recent(limit=0) == []


def test_list_recent_sort_by_amount(payment_store):
    _create_at(payment_store, T0, amount=80)
    _create_at(payment_store, T0 + 1, amount=20)
    _create_at(payment_store, T0 + 2, amount=40)
    amounts = [p.amount for p in payment_store.list_recent(limit=10, sort="amount")]
    assert amounts == [80, 40, 20]


def test_list_recent_status_filter(payment_store):
    verified = _create_at(payment_store, T0, amount=20)
    pending = _create_at(payment_store, T0 + 1, amount=40, verified=False)

    assert [p.id for p in payment_store.list_recent(limit=10, status="verified")] == [verified.id]
    assert [p.id for p in payment_store.list_recent(limit=10, status="pending")] == [pending.id]
    assert len(payment_store.list_recent(limit=10, status="all")) == 2



def test_list_recent_unknown_filters_fall_back(payment_store):
    first = _create_at(payment_store, T0, amount=80)
    second = _create_at(payment_store, T0 + 1, amount=20, verified=False)

    listed = payment_store.list_recent(limit=10, status="refunded", sort="cheapest")
    assert [p.id for p in listed] == [second.id, first.id]

def test_list_recent_skips_dangling_ids(payment_store, redis_double):
    kept = _create_at(payment_store, T0, amount=20)
    gone = _create_at(payment_store, T0 + 1, amount=40)
    del redis_double.values[payment_key(gone.id)]

    assert [p.id for p in payment_store.list_recent(limit=10)] == [kept.id]


def test_list_recent_scans_bounded_window(payment_store):
    # 3 newest are pending: a verified filter with limit=1 only looks at 2 ids
    _create_at(payment_store, T0, amount=20)
    for i in range(1, 4):
        _create_at(payment_store, T0 + i, amount=40, verified=False)
    assert payment_store.list_recent(limit=1, status="verified") == []


def test_compute_stats_today_is_utc_day(payment_store):
    _create_at(payment_store, T0, amount=150)
    _create_at(payment_store, T0 - 24 * 3600 * 1000, amount=20)
    _create_at(payment_store, T0, amount=40, verified=False)

    stats = payment_store.compute_stats(now=datetime(2023, 11, 14, 23, 59, tzinfo=timezone.utc))
    assert stats.total == 3
    assert stats.verified == 2
    assert stats.total_revenue == 170
    assert stats.today_revenue == 150

    next_day = payment_store.compute_stats(now=datetime(2023, 11, 15, 0, 1, tzinfo=timezone.utc))
    assert next_day.today_revenue == 0


def test_count_verified(payment_store):
    _create(payment_store)
    _create(payment_store)
    _create(payment_store, verified=False)
    assert payment_store.count_verified() == 2


def test_reconcile_repairs_drift(payment_store, kv):
    _create(payment_store, amount=150)
    _create(payment_store, amount=20)
    kv.set(COUNT_KEY, "9")
    kv.set(VERIFIED_COUNT_KEY, "-1")
    kv.set(REVENUE_KEY, "5")

    before, after = payment_store.reconcile()

    assert before == {"total": 9, "verified": -1, "totalRevenue": 5}
    assert after == {"total": 2, "verified": 2, "totalRevenue": 170}


def test_reconcile_is_noop_without_drift(payment_store):
    _create(payment_store, amount=150)
    before, after = payment_store.reconcile()
    assert before == after


def test_remember_reference_reports_previous_owner(payment_store, redis_double):
    assert payment_store.remember_reference("REF1", "pay_a") is None
    assert payment_store.remember_reference("REF1", "pay_b") == "pay_a"
    assert payment_store.find_by_reference("REF1") == "pay_b"
    assert redis_double.expiry[reference_key("REF1")] == 86400


def test_id_collision_retries(payment_store, redis_double):
    with patch("app.services.payments.service.new_record_id", side_effect=["pay_dup", "pay_dup", "pay_new"]):
        first = _create(payment_store)
        second = _create(payment_store)
    assert first.id == "pay_dup"
    assert second.id == "pay_new"
    assert payment_store.counters()["total"] == 2
