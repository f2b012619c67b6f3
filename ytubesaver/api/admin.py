from fastapi import APIRouter, Depends, Request, Security
from fastapi.security import APIKeyHeader
from ytubesaver.config.settings import config
from ytubesaver.core.errors import ForbiddenError, ServiceError
from ytubesaver.core.logging import log_error, log_info
from ytubesaver.models.response import CleanupResponse
from ytubesaver.services.cleanup import CleanupService
from ytubesaver.utils.locale import get_locale
from ytubesaver.i18n import i18n
import functools
import os

router = APIRouter()

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)

async def verify_api_key(api_key: str = Security(api_key_header)):
    """Verify API key for admin endpoints; open when ADMIN_API_KEY is unset"""
    expected_key = os.getenv("ADMIN_API_KEY")
    if not expected_key:
        return None

    if api_key != expected_key:
        raise ForbiddenError(i18n.get("error.invalid_api_key"))
    return api_key

@router.post("/cleanup", response_model=CleanupResponse, dependencies=[Depends(verify_api_key)])
async def cleanup(request: Request):
    """Delete downloads older than cleanup.max_age_seconds"""
    locale = get_locale(request.headers.get("accept-language"))
    _ = functools.partial(i18n.get, locale=locale)
    directory = config.download.output_dir

    try:
        deleted = await CleanupService.sweep(directory, config.cleanup.max_age_seconds)
    except OSError as e:
        log_error(request, f"Cleanup error: {str(e)}")
        raise ServiceError(_("error.cleanup_failed"), error=str(e))

    log_info(request, _("log.cleanup_done", count=deleted, directory=directory))
    return CleanupResponse(success=True, message=_("response.cleanup_done", count=deleted), deleted=deleted)
