from fastapi import APIRouter, Request, Depends
from ytubesaver.models.request import DownloadRequest
from ytubesaver.models.response import DownloadResponse
from ytubesaver.services.download import DownloadService
from ytubesaver.core.classifier import is_valid_url
from ytubesaver.core.errors import InvalidUrlError
from ytubesaver.core.logging import log_info
from ytubesaver.infra.rate_limit import rate_limiter
from ytubesaver.utils.locale import get_locale, safe_url_for_log
from ytubesaver.i18n import i18n
import functools

router = APIRouter()

@router.post("/download", response_model=DownloadResponse, response_model_exclude_none=True,
             dependencies=[Depends(rate_limiter)])
async def download_video(request: Request, download_request: DownloadRequest):
    """Download into the output directory and return its static URL"""

    locale = get_locale(request.headers.get("accept-language"))
    _ = functools.partial(i18n.get, locale=locale)

    if not is_valid_url(download_request.url):
        raise InvalidUrlError(_("error.invalid_url"))

    log_info(request, _(
        "log.starting_download",
        url=safe_url_for_log(download_request.url),
        format=download_request.format,
        quality=download_request.quality
    ))

    result = await DownloadService.download(download_request, locale)
    log_info(request, _("log.download_finished", filename=result.filename))

    return DownloadResponse(
        success=True,
        message=_("response.download_complete"),
        downloadUrl=str(request.url_for("downloads", path=result.filename)),
        filename=result.filename,
    )
