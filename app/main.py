"""
Main FastAPI application for the Wizard Tarot API.
Serves payments, pricing, reviews, readings, health and metrics.
"""
import logging
import time
import uuid

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.logging import configure_logging
from app.api.errors import register_exception_handlers
from app.api.routes import health, payments, pricing, readings, reviews
from app.utils.metrics import router as metrics_router


configure_logging()
logger = logging.getLogger("api.access")

app = FastAPI(
    title="Wizard Tarot API",
    description="Payment verification, pricing tiers, reviews and tarot readings",
    version="1.0.0",
)

# CORS: the frontend origin only
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = request.headers.get(settings.request_id_header) or uuid.uuid4().hex
    started = time.monotonic()
    response = await call_next(request)
    latency_ms = int((time.monotonic() - started) * 1000)
    response.headers[settings.request_id_header] = request_id
    logger.info(
        "request",
        extra={
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "latency_ms": latency_ms,
        },
    )
    return response


register_exception_handlers(app)

# Routers
app.include_router(health.router, tags=["health"])
app.include_router(payments.router)
app.include_router(pricing.router)
app.include_router(reviews.router)
app.include_router(readings.router)
app.include_router(metrics_router)


@app.options("/api/{path:path}", include_in_schema=False)
def answer_options(path: str) -> Response:
    """Plain OPTIONS (no Origin / Access-Control-Request-Method) is not a CORS preflight; still 200."""
    return Response(status_code=200)
