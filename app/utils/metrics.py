"""
Prometheus-based metrics for production monitoring.
Provides /metrics endpoint for scraping.
"""
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import APIRouter, Response


# Counters
payment_verifications_total = Counter(
    "payment_verifications_total",
    "Payment screenshot verifications by outcome",
    ["result"],  # verified, rejected, unreadable, upstream_error
)

reviews_submitted_total = Counter(
    "reviews_submitted_total",
    "Total reviews submitted",
    ["rating"],
)

records_deleted_total = Counter(
    "records_deleted_total",
    "Records deleted through the API",
    ["kind"],  # payment, review
)

counters_reconciled_total = Counter(
    "counters_reconciled_total",
    "Aggregate counter reconciliations",
    ["kind", "drift"],  # drift: yes / no
)

llm_requests_total = Counter(
    "llm_requests_total",
    "Total model API requests",
    ["provider", "status"],
)

readings_generated_total = Counter(
    "readings_generated_total",
    "Tarot readings generated",
    ["mode"],  # full, follow_up
)

# Histograms
llm_request_duration_seconds = Histogram(
    "llm_request_duration_seconds",
    "Model API request duration",
    ["provider"],
    buckets=[1, 5, 10, 30, 60, 120],
)


# Metrics endpoint router
router = APIRouter()


@router.get("/metrics")
def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint for scraping."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
