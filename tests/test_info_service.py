import asyncio
import json

import pytest

from ytubesaver.core.classifier import classify
from ytubesaver.core.errors import (
    InvalidUrlError,
    ToolInvocationError,
    ToolOutputParseError,
    ToolTimeoutError,
)
from ytubesaver.services.info import VideoInfoService

URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"

TOOL_OUTPUT = {
    "id": "dQw4w9WgXcQ",
    "title": "Never Gonna Give You Up",
    "thumbnail": "https://i.ytimg.com/vi/dQw4w9WgXcQ/maxresdefault.jpg",
    "duration": 213,
    "duration_string": "3:33",
    "uploader": "Rick Astley",
    "formats": [
        {"format_id": "140", "ext": "m4a", "format_note": "medium", "filesize": 3433514, "url": "https://a"},
        {"format_id": "22", "ext": "mp4", "height": 720, "format_note": "720p", "url": "https://b"},
        {"format_id": "sb0", "ext": "mhtml", "url": "https://c"},
    ],
}


@pytest.mark.asyncio
async def test_fetch_maps_tool_output(fake_ytdlp):
    fake_ytdlp.stdout = json.dumps(TOOL_OUTPUT).encode()

    info = await VideoInfoService.fetch(URL, "en")

    assert info.id == "dQw4w9WgXcQ"
    assert info.title == "Never Gonna Give You Up"
    assert info.duration == "3:33"
    assert info.uploader == "Rick Astley"
    assert info.platform == "youtube"
    assert [f.quality for f in info.formats] == ["medium", "720p", "unknown"]
    assert info.formats[0].filesize == 3433514
    assert "--dump-json" in fake_ytdlp.calls[0]


@pytest.mark.asyncio
async def test_fetch_defaults_missing_fields(fake_ytdlp):
    fake_ytdlp.stdout = b'{"channel": "Some Channel", "duration": 3725}'

    info = await VideoInfoService.fetch("https://instagram.com/reel/XYZ789/", "en")

    assert info.id == "XYZ789"
    assert info.title == "Unknown Title"
    assert info.thumbnail == ""
    assert info.duration == "1:02:05"
    assert info.uploader == "Some Channel"
    assert info.platform == "instagram"
    assert info.formats == []


@pytest.mark.asyncio
async def test_fetch_defaults_duration_and_uploader(fake_ytdlp):
    fake_ytdlp.stdout = b'{}'

    info = await VideoInfoService.fetch(URL, "en")

    assert info.duration == "00:00"
    assert info.uploader == "Unknown"


@pytest.mark.asyncio
async def test_unparsable_output_is_a_parse_error(fake_ytdlp):
    fake_ytdlp.stdout = b"WARNING: something\n{not json"

    with pytest.raises(ToolOutputParseError) as exc:
        await VideoInfoService.fetch(URL, "en")

    assert exc.value.status_code == 500
    assert exc.value.message == "Failed to parse video information"


@pytest.mark.asyncio
async def test_nonzero_exit_is_an_invocation_error(fake_ytdlp):
    fake_ytdlp.returncode = 1
    fake_ytdlp.stderr = b"ERROR: [youtube] dQw4w9WgXcQ: Video unavailable"

    with pytest.raises(ToolInvocationError) as exc:
        await VideoInfoService.fetch(URL, "en")

    assert not isinstance(exc.value, ToolOutputParseError)
    assert exc.value.message == "Failed to fetch video information"
    assert "Video unavailable" in exc.value.error


@pytest.mark.asyncio
async def test_timeout_is_reported(fake_ytdlp):
    fake_ytdlp.raises = asyncio.TimeoutError()

    with pytest.raises(ToolTimeoutError) as exc:
        await VideoInfoService.fetch(URL, "en")

    assert exc.value.status_code == 504


@pytest.mark.asyncio
async def test_missing_executable_is_an_invocation_error(fake_ytdlp):
    fake_ytdlp.raises = FileNotFoundError(2, "No such file or directory", "yt-dlp")

    with pytest.raises(ToolInvocationError):
        await VideoInfoService.fetch(URL, "en")


@pytest.mark.asyncio
async def test_unsupported_url_never_reaches_the_tool(fake_ytdlp):
    with pytest.raises(InvalidUrlError):
        await VideoInfoService.fetch("https://vimeo.com/123456", "en")

    assert fake_ytdlp.calls == []


def test_from_url_is_sparse():
    info = VideoInfoService.from_url(classify("https://youtu.be/dQw4w9WgXcQ"))

    assert info.id == "dQw4w9WgXcQ"
    assert info.thumbnail == "https://img.youtube.com/vi/dQw4w9WgXcQ/maxresdefault.jpg"
    assert info.duration == "00:00"
    assert info.uploader == "Unknown"
    assert info.formats == []
