import asyncio
import functools
import logging
import os
from datetime import datetime, timezone
from typing import NamedTuple, Optional
import aiofiles.os
from ytubesaver.config.settings import config
from ytubesaver.core.classifier import classify
from ytubesaver.core.errors import (
    InvalidUrlError,
    OutputNotFoundError,
    ToolInvocationError,
    ToolTimeoutError,
)
from ytubesaver.models.request import DownloadRequest
from ytubesaver.services.format import FormatDecision
from ytubesaver.services.ytdlp import YTDLPCommandBuilder, SubprocessExecutor
from ytubesaver.i18n import i18n

logger = logging.getLogger(__name__)

STDERR_MAX_CHARS = 2000
INCOMPLETE_SUFFIXES = ('.part', '.ytdl', '.temp')

class DownloadResult(NamedTuple):
    filename: str
    path: str
    size: int

def output_stem(content_id: str, now: Optional[datetime] = None) -> str:
    """{contentId}_{ISO-8601 timestamp with ':' and '.' replaced by '-'}"""
    now = now or datetime.now(timezone.utc)
    timestamp = now.strftime('%Y-%m-%dT%H:%M:%S.') + f"{now.microsecond // 1000:03d}Z"
    return f"{content_id}_{timestamp.replace(':', '-').replace('.', '-')}"

async def find_output(directory: str, prefix: str) -> Optional[str]:
    """First finished file in directory whose name starts with prefix"""
    try:
        names = sorted(await aiofiles.os.listdir(directory))
    except FileNotFoundError:
        return None

    for name in names:
        if not name.startswith(prefix) or name.endswith(INCOMPLETE_SUFFIXES):
            continue
        if await aiofiles.os.path.isfile(os.path.join(directory, name)):
            return name
    return None

async def remove_partial_outputs(directory: str, prefix: str) -> int:
    """Delete every file left behind by an unfinished run; returns the count"""
    try:
        names = await aiofiles.os.listdir(directory)
    except FileNotFoundError:
        return 0

    removed = 0
    for name in names:
        if not name.startswith(prefix):
            continue
        path = os.path.join(directory, name)
        try:
            await aiofiles.os.remove(path)
        except OSError as e:
            logger.warning(f"Could not remove partial output {path}: {e}")
            continue
        removed += 1
    return removed

class DownloadService:
    """Run one yt-dlp download into the output directory"""

    @staticmethod
    async def download(request: DownloadRequest, locale: str) -> DownloadResult:
        _ = functools.partial(i18n.get, locale=locale)

        classified = classify(request.url)
        if classified is None:
            raise InvalidUrlError(_("error.invalid_url"))

        output_dir = config.download.output_dir
        await aiofiles.os.makedirs(output_dir, exist_ok=True)

        plan = FormatDecision.plan(request)
        stem = output_stem(classified.content_id)
        # yt-dlp picks the final extension (audio is transcoded to mp3 afterwards)
        output_template = os.path.join(output_dir, f"{stem}.%(ext)s")

        cmd = YTDLPCommandBuilder.build_download_command(
            classified.url,
            plan.format_str,
            output_template,
            plan.audio_only
        )
        timeout = config.download.timeout_seconds
        logger.info(f"Executing: {' '.join(cmd)}")

        try:
            result = await SubprocessExecutor.run(cmd, timeout=timeout)
        except asyncio.TimeoutError:
            logger.error(f"Download of {classified.content_id} timed out after {timeout}s")
            await remove_partial_outputs(output_dir, stem)
            raise ToolTimeoutError(_("error.timeout", seconds=timeout))
        except OSError as e:
            await remove_partial_outputs(output_dir, stem)
            raise ToolInvocationError(_("error.tool_unavailable", reason=str(e)), error=str(e))

        if result.returncode != 0:
            error_msg = result.stderr.decode(errors="ignore").strip()
            logger.error(f"Download error: {error_msg[-500:]}")
            await remove_partial_outputs(output_dir, stem)
            raise ToolInvocationError(_("error.download_failed"), error=error_msg[-STDERR_MAX_CHARS:])

        filename = await find_output(output_dir, stem)
        if filename is None:
            await remove_partial_outputs(output_dir, stem)
            raise OutputNotFoundError(_("error.output_not_found"))

        path = os.path.join(output_dir, filename)
        size = await aiofiles.os.path.getsize(path)
        logger.info(f"Download finished: {filename} ({size / 1024 / 1024:.1f} MB)")
        return DownloadResult(filename=filename, path=path, size=size)
