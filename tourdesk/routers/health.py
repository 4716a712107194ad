from fastapi import APIRouter, Depends

from tourdesk.config.settings import Settings
from tourdesk.deps import get_settings

router = APIRouter(tags=["Health"])


@router.get("")
def health(settings: Settings = Depends(get_settings)):
    """Liveness check. Does not touch the record store or the gateway."""
    return {
        "status": "ok",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
    }
