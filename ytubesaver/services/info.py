import asyncio
import functools
import json
from typing import Any, Dict, List
from ytubesaver.config.settings import config
from ytubesaver.core.classifier import classify, thumbnail_url
from ytubesaver.core.errors import (
    InvalidUrlError,
    ToolInvocationError,
    ToolOutputParseError,
    ToolTimeoutError,
)
from ytubesaver.models.internal import ClassifiedUrl
from ytubesaver.models.response import VideoFormat, VideoInfo
from ytubesaver.services.ytdlp import YTDLPCommandBuilder, SubprocessExecutor
from ytubesaver.utils.duration import format_duration
from ytubesaver.i18n import i18n

STDERR_MAX_CHARS = 2000

class VideoInfoService:
    """Video info fetching service"""

    @staticmethod
    async def fetch(url: str, locale: str) -> VideoInfo:
        """
        Fetch video information through yt-dlp metadata mode.
        Nothing is cached; every call runs the tool once.
        """
        _ = functools.partial(i18n.get, locale=locale)

        classified = classify(url)
        if classified is None:
            raise InvalidUrlError(_("error.invalid_url"))

        cmd = YTDLPCommandBuilder.build_info_command(classified.url)
        timeout = config.download.info_timeout_seconds

        try:
            result = await SubprocessExecutor.run(cmd, timeout=timeout)
        except asyncio.TimeoutError:
            raise ToolTimeoutError(_("error.timeout", seconds=timeout))
        except OSError as e:
            raise ToolInvocationError(_("error.tool_unavailable", reason=str(e)), error=str(e))

        if result.returncode != 0:
            error_msg = result.stderr.decode(errors="ignore").strip()
            raise ToolInvocationError(
                _("error.fetch_info_failed"),
                error=error_msg[-STDERR_MAX_CHARS:]
            )

        try:
            info = json.loads(result.stdout.decode(errors="ignore"))
        except json.JSONDecodeError:
            raise ToolOutputParseError(_("error.parse_failed"))

        if not isinstance(info, dict):
            raise ToolOutputParseError(_("error.parse_failed"))

        return VideoInfoService.from_tool_output(info, classified)

    @staticmethod
    def from_tool_output(info: Dict[str, Any], classified: ClassifiedUrl) -> VideoInfo:
        """Map yt-dlp's JSON onto VideoInfo, defaulting missing fields"""
        duration = info.get("duration_string") or format_duration(info.get("duration"))

        return VideoInfo(
            id=str(info.get("id") or classified.content_id),
            title=info.get("title") or "Unknown Title",
            thumbnail=info.get("thumbnail") or "",
            duration=duration,
            uploader=info.get("uploader") or info.get("channel") or "Unknown",
            platform=classified.platform,
            formats=VideoInfoService.map_formats(info.get("formats") or []),
        )

    @staticmethod
    def map_formats(formats: List[Dict[str, Any]]) -> List[VideoFormat]:
        mapped = []
        for f in formats:
            if not isinstance(f, dict) or f.get("format_id") is None:
                continue
            height = f.get("height")
            size = f.get("filesize") or f.get("filesize_approx")
            mapped.append(VideoFormat(
                format_id=str(f.get("format_id")),
                ext=f.get("ext"),
                quality=f"{height}p" if height else (f.get("format_note") or "unknown"),
                filesize=int(size) if size else None,
                url=f.get("url"),
                format_note=f.get("format_note"),
            ))
        return mapped

    @staticmethod
    def from_url(classified: ClassifiedUrl) -> VideoInfo:
        """Sparse VideoInfo built only from the URL; never fails"""
        return VideoInfo(
            id=classified.content_id,
            title="Video Title (Info not available)",
            thumbnail=thumbnail_url(classified),
            duration="00:00",
            uploader="Unknown",
            platform=classified.platform,
            formats=[],
        )
