from datetime import datetime

from fastapi import APIRouter, Request, status

router = APIRouter()


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check(request: Request):
    """Liveness probe with the serving mode."""
    settings = request.app.state.settings
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "mode": request.app.state.mode,
        "version": settings.APP_VERSION,
        "timestamp": datetime.utcnow().isoformat() + "Z"
    }
