from datetime import datetime, timezone
from fastapi import APIRouter
from worklog.core.config import settings
from worklog.utils.response import api_response
from worklog import __version__

router = APIRouter()


@router.get("")
def health():
    return api_response(
        {
            "status": "ok",
            "environment": settings.ENVIRONMENT,
            "version": __version__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        "Server is running",
    )
