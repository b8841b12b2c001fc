"""
Error responses: every error body is {"error": ..., ...}.

Routes raise HTTPException with a string detail (client errors) or a dict
detail (already shaped, e.g. upstream failures). reported_as() turns any
other exception inside a route into a 500 carrying the exception message.
"""
import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("api.errors")

API_KEY_NOT_CONFIGURED = "API key not configured"


@contextmanager
def reported_as(error: str, message_key: str = "details") -> Iterator[None]:
    """Map unexpected exceptions to 500 {"error": error, message_key: str(exc)}."""
    try:
        yield
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(error, extra={"error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": error, message_key: str(e)},
        ) from e


def _error_body(exc: StarletteHTTPException) -> dict:
    if isinstance(exc.detail, dict):
        return exc.detail
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return {"error": "Method not allowed"}
    return {"error": exc.detail}


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(_error_body(exc)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({"error": "Invalid request", "details": exc.errors()}),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", extra={"path": request.url.path, "error": str(exc)})
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "message": str(exc)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
