from typing import List, Optional, NamedTuple
import asyncio
import importlib.util
import shlex
import shutil
import sys
from ytubesaver.config.settings import config
from ytubesaver.core.state import state

class CompletedProcess(NamedTuple):
    """Subprocess result"""
    returncode: int
    stdout: bytes
    stderr: bytes

class SubprocessExecutor:
    """Execute subprocess with consistent error handling"""

    @staticmethod
    async def run(
        cmd: List[str],
        timeout: float
    ) -> CompletedProcess:
        """
        Run subprocess with timeout and proper cleanup.
        The child is killed and reaped before asyncio.TimeoutError propagates.
        """
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            stdin=asyncio.subprocess.DEVNULL
        )

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(),
                timeout=timeout
            )

            return CompletedProcess(
                returncode=process.returncode,
                stdout=stdout,
                stderr=stderr
            )

        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise
        except BaseException:
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise

def resolve_ytdlp_command() -> List[str]:
    """
    Locate yt-dlp at runtime.
    Order: configured binary, `yt-dlp` on PATH, then `python -m yt_dlp`.
    """
    if state.ytdlp_command:
        return list(state.ytdlp_command)

    if config.ytdlp.binary:
        command = shlex.split(config.ytdlp.binary)
    elif shutil.which("yt-dlp"):
        command = [shutil.which("yt-dlp")]
    elif importlib.util.find_spec("yt_dlp") is not None:
        command = [sys.executable, "-m", "yt_dlp"]
    else:
        # Left for the OS to resolve; spawning fails with a clear error
        command = ["yt-dlp"]

    state.ytdlp_command = command
    return list(command)

async def detect_ytdlp_version() -> Optional[str]:
    """Return yt-dlp's version string, or None when it cannot be run"""
    try:
        result = await SubprocessExecutor.run(YTDLPCommandBuilder.build_version_command(), timeout=15.0)
    except (OSError, asyncio.TimeoutError):
        return None
    if result.returncode != 0:
        return None
    return result.stdout.decode(errors="ignore").strip() or None

class YTDLPCommandBuilder:
    """Build yt-dlp commands"""

    @staticmethod
    def _base() -> List[str]:
        return resolve_ytdlp_command() + [
            '--no-playlist',
            '--socket-timeout', str(config.download.socket_timeout),
            '--retries', str(config.download.retries),
        ]

    @staticmethod
    def build_version_command() -> List[str]:
        return resolve_ytdlp_command() + ['--version']

    @staticmethod
    def build_info_command(url: str) -> List[str]:
        """Build command for fetching video info (one JSON object on stdout)"""
        cmd = YTDLPCommandBuilder._base()
        cmd.extend(['--dump-json', '--no-download'])
        cmd.append(url)
        return cmd

    @staticmethod
    def build_download_command(
        url: str,
        format_str: str,
        output_template: str,
        audio_only: bool
    ) -> List[str]:
        """Build command that writes a single media file to output_template"""
        cmd = YTDLPCommandBuilder._base()
        cmd.extend([
            '-f', format_str,
            '-o', output_template,
            '--no-progress',
        ])

        if audio_only:
            # Extract audio and transcode to mp3 at the best VBR setting
            cmd.extend(['--extract-audio', '--audio-format', 'mp3', '--audio-quality', '0'])

        cmd.append(url)
        return cmd
