# pixelbridge_project/apis/health_routes.py
import time

from fastapi import APIRouter, Depends, Request

from config.settings import Settings
from ..core.dependencies import get_app_settings
from ..core.error_handlers import utc_timestamp
from ..models.event_models import HealthStatus

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthStatus)
async def health_check(request: Request, settings: Settings = Depends(get_app_settings)):
    """Liveness probe. Does not call the Conversions API."""
    uptime = time.monotonic() - request.app.state.started_at
    return HealthStatus(
        timestamp=utc_timestamp(),
        version=settings.VERSION,
        uptime=round(uptime, 3),
    )
