"""
Health Routes
=============

FastAPI route reporting whether the shared browser is alive.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from src.api.dependencies import get_browser_manager
from src.config.logging import get_logger
from src.core.rendering.browser_manager import BrowserManager
from src.models.schemas import HealthStatus, utc_now

logger = get_logger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthStatus)
async def health_check(
    browser_manager: BrowserManager = Depends(get_browser_manager),
):
    """
    Get browser health status.

    Launches the shared browser if it is not running yet, then reports
    whether it is connected. Launch failures are reported as a 500 with
    ``status: unhealthy`` rather than raised.
    """
    try:
        await browser_manager.ensure_browser()
        healthy = browser_manager.is_connected()
    except Exception as e:
        logger.error("Health check failed", error=str(e))
        return JSONResponse(
            status_code=500,
            content={
                "status": "unhealthy",
                "error": str(e),
                "timestamp": utc_now().isoformat(),
            },
        )

    return HealthStatus(
        status="healthy" if healthy else "unhealthy",
        browser="connected" if healthy else "disconnected",
    )
