from fastapi import APIRouter, Depends, Response, status

from app.storage.kv import KVStore, get_kv


router = APIRouter()


@router.get("/health")
def health() -> dict:
    """Liveness: the process answers."""
    return {"status": "ok"}


@router.get("/ready")
def readiness(response: Response, kv: KVStore = Depends(get_kv)) -> dict:
    """Readiness: payments, reviews and pricing all need the key-value store."""
    try:
        kv.ping()
    except Exception as e:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "not_ready", "store": "unreachable", "error": str(e)}
    return {"status": "ready"}
