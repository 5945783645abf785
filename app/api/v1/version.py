"""
Version and calendar metadata endpoint
"""
from fastapi import APIRouter
from app.core.config import settings

router = APIRouter()


@router.get("/version")
async def get_version():
    """
    Service version plus the working-time calendar hours are billed against,
    so clients can explain a computed `hours` value.
    """
    return {
        "service": "leave-ledger-backend",
        "version": settings.VERSION or "1.0.0",
        "env": settings.APP_ENV,
        "calendar": {
            "timezone": settings.CALENDAR_TZ,
            "workday_start_hour": settings.WORKDAY_START_HOUR,
            "workday_end_hour": settings.WORKDAY_END_HOUR,
            "working_weekdays": sorted(settings.get_working_weekdays()),
        },
    }
