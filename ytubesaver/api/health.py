from datetime import datetime, timezone

from fastapi import APIRouter

from ytubesaver.config.settings import config
from ytubesaver.core.state import state
from ytubesaver.i18n import i18n
from ytubesaver.models.response import HealthResponse
from ytubesaver.services.cleanup import CleanupService

router = APIRouter()


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@router.get("/")
async def root():
    """Root endpoint"""
    return {
        "status": i18n.get("response.backend_running"),
        "service": config.api.title,
        "version": config.api.version,
        "environment": config.server.environment,
        "ytdlp_version": state.ytdlp_version,
    }


@router.get("/api/health", response_model=HealthResponse)
async def health_check():
    """Lightweight health check"""
    return HealthResponse(
        status=i18n.get("health.status"),
        message=i18n.get("response.backend_running"),
        timestamp=utc_timestamp(),
    )


@router.get("/api/health/full")
async def health_check_full():
    """Detailed health check"""
    redis_status = i18n.get("response.redis_disabled")
    if state.redis:
        try:
            await state.redis.ping()
            redis_status = i18n.get("response.redis_connected")
        except Exception:
            redis_status = i18n.get("response.redis_disconnected")

    return {
        "status": i18n.get("health.status"),
        "timestamp": utc_timestamp(),
        "ytdlp_command": state.ytdlp_command,
        "ytdlp_version": state.ytdlp_version,
        "redis_status": redis_status,
        "output_dir": config.download.output_dir,
        "stored_files": await CleanupService.count_files(config.download.output_dir),
    }
