import asyncio
import re
import sys
import time
from datetime import datetime, timezone

import pytest

from conftest import write_output
from ytubesaver.config.settings import config
from ytubesaver.core.errors import InvalidUrlError, OutputNotFoundError, ToolInvocationError, ToolTimeoutError
from ytubesaver.core.state import state
from ytubesaver.models.request import DownloadRequest
from ytubesaver.services.download import DownloadService, find_output, output_stem, remove_partial_outputs
from ytubesaver.services.ytdlp import SubprocessExecutor

URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


def test_output_stem_replaces_separators():
    now = datetime(2024, 5, 17, 8, 30, 15, 123456, tzinfo=timezone.utc)
    assert output_stem("dQw4w9WgXcQ", now) == "dQw4w9WgXcQ_2024-05-17T08-30-15-123Z"


def test_output_stem_defaults_to_now():
    assert re.fullmatch(r"abc_\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{3}Z", output_stem("abc"))


@pytest.mark.asyncio
async def test_find_output_skips_partial_files(tmp_path):
    (tmp_path / "abc_1.mp4.part").write_bytes(b"x")
    (tmp_path / "other_1.mp4").write_bytes(b"x")
    assert await find_output(str(tmp_path), "abc_1") is None

    (tmp_path / "abc_1.webm").write_bytes(b"x")
    assert await find_output(str(tmp_path), "abc_1") == "abc_1.webm"


@pytest.mark.asyncio
async def test_video_download(fake_ytdlp, output_dir):
    fake_ytdlp.on_call = write_output

    result = await DownloadService.download(DownloadRequest(url=URL, format="video", quality="1080p"), "en")

    cmd = fake_ytdlp.calls[0]
    assert cmd[cmd.index("-f") + 1] == "best[height<=1080]"
    assert cmd[cmd.index("-o") + 1].startswith(str(output_dir))
    assert result.filename.startswith("dQw4w9WgXcQ_")
    assert result.filename.endswith(".mp4")
    assert result.size == len(b"media")
    assert (output_dir / result.filename).exists()


@pytest.mark.asyncio
async def test_audio_download_finds_transcoded_file(fake_ytdlp, output_dir):
    fake_ytdlp.on_call = lambda cmd: write_output(cmd, ext="mp3")

    result = await DownloadService.download(DownloadRequest(url=URL, format="audio", quality="192kbps"), "en")

    assert "--extract-audio" in fake_ytdlp.calls[0]
    assert result.filename.endswith(".mp3")


@pytest.mark.asyncio
async def test_successful_exit_without_file_is_output_not_found(fake_ytdlp, output_dir):
    # A file from an earlier request for the same video must not be picked up
    (output_dir / "dQw4w9WgXcQ_2020-01-01T00-00-00-000Z.mp4").write_bytes(b"old")

    with pytest.raises(OutputNotFoundError) as exc:
        await DownloadService.download(DownloadRequest(url=URL), "en")

    assert exc.value.message == "Downloaded file not found"


@pytest.mark.asyncio
async def test_tool_failure_passes_stderr_through(fake_ytdlp, output_dir):
    fake_ytdlp.returncode = 1
    fake_ytdlp.stderr = b"ERROR: Requested format is not available"

    with pytest.raises(ToolInvocationError) as exc:
        await DownloadService.download(DownloadRequest(url=URL, quality="2160p (4K)"), "en")

    assert exc.value.message == "Download failed"
    assert "Requested format is not available" in exc.value.error


@pytest.mark.asyncio
async def test_failed_download_removes_truncated_output(fake_ytdlp, output_dir):
    keep = output_dir / "dQw4w9WgXcQ_2020-01-01T00-00-00-000Z.mp4"
    keep.write_bytes(b"old")
    fake_ytdlp.on_call = lambda cmd: write_output(cmd, content=b"trunc")
    fake_ytdlp.returncode = 1
    fake_ytdlp.stderr = b"ERROR: interrupted"

    with pytest.raises(ToolInvocationError):
        await DownloadService.download(DownloadRequest(url=URL), "en")

    assert list(output_dir.iterdir()) == [keep]


@pytest.mark.asyncio
async def test_remove_partial_outputs_only_touches_prefix(tmp_path):
    (tmp_path / "abc_1.mp4").write_bytes(b"x")
    (tmp_path / "abc_1.f137.mp4.part").write_bytes(b"x")
    (tmp_path / "abc_2.mp4").write_bytes(b"x")

    assert await remove_partial_outputs(str(tmp_path), "abc_1") == 2
    assert [p.name for p in tmp_path.iterdir()] == ["abc_2.mp4"]
    assert await remove_partial_outputs(str(tmp_path / "missing"), "abc_1") == 0


@pytest.mark.asyncio
async def test_invalid_url_is_rejected_before_the_tool(fake_ytdlp, output_dir):
    with pytest.raises(InvalidUrlError):
        await DownloadService.download(DownloadRequest(url="https://example.com/video.mp4"), "en")
    assert fake_ytdlp.calls == []


@pytest.mark.asyncio
async def test_executor_kills_process_on_timeout():
    started = time.monotonic()
    with pytest.raises(asyncio.TimeoutError):
        await SubprocessExecutor.run([sys.executable, "-c", "import time; time.sleep(30)"], timeout=0.5)
    assert time.monotonic() - started < 10


@pytest.mark.asyncio
async def test_download_timeout_yields_failure(output_dir, monkeypatch):
    # A "yt-dlp" that writes part of its output and then hangs
    hang = (
        "import sys, time; "
        "t = sys.argv[sys.argv.index('-o') + 1]; "
        "open(t.replace('%(ext)s', 'mp4'), 'wb').write(b'trunc'); "
        "time.sleep(30)"
    )
    monkeypatch.setattr(state, "ytdlp_command", [sys.executable, "-c", hang])
    monkeypatch.setattr(config.download, "timeout_seconds", 2)

    started = time.monotonic()
    with pytest.raises(ToolTimeoutError) as exc:
        await DownloadService.download(DownloadRequest(url=URL), "en")

    assert time.monotonic() - started < 10
    assert exc.value.status_code == 504
    assert list(output_dir.iterdir()) == []
