import logging
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request):
    """Liveness plus a database round trip."""
    service = getattr(request.app.state, "chat_service", None)
    if service is None:
        logger.warning("Health check before the database was initialized")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "database": "not initialized"},
        )
    try:
        await service.ping()
    except Exception:
        logger.exception("Health check failed to ping MongoDB")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "database": "unreachable"},
        )
    return {"status": "healthy", "database": "connected"}
