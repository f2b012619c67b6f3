from fastapi import APIRouter, Request, Depends
from ytubesaver.models.request import InfoRequest
from ytubesaver.models.response import VideoInfoResponse
from ytubesaver.services.info import VideoInfoService
from ytubesaver.core.classifier import is_valid_url
from ytubesaver.core.errors import InvalidUrlError
from ytubesaver.core.logging import log_info
from ytubesaver.infra.rate_limit import rate_limiter
from ytubesaver.utils.locale import get_locale, safe_url_for_log
from ytubesaver.i18n import i18n
import functools

router = APIRouter()

@router.post("/video-info", response_model=VideoInfoResponse, dependencies=[Depends(rate_limiter)])
async def get_video_info(request: Request, info_request: InfoRequest):
    """Get video information through yt-dlp"""

    locale = get_locale(request.headers.get("accept-language"))
    _ = functools.partial(i18n.get, locale=locale)

    if not is_valid_url(info_request.url):
        raise InvalidUrlError(_("error.invalid_url"))

    log_info(request, _("log.fetching_info", url=safe_url_for_log(info_request.url)))

    video_info = await VideoInfoService.fetch(info_request.url, locale)
    log_info(request, _("log.info_retrieved", title=video_info.title))
    return VideoInfoResponse(success=True, videoInfo=video_info)
