import os
import tempfile

# Keep the app's import-time download directory out of the working tree
os.environ.setdefault("DOWNLOAD_DIR", tempfile.mkdtemp(prefix="ytubesaver-test-"))

import pytest

from ytubesaver.config.settings import config
from ytubesaver.core.state import state
from ytubesaver.services.ytdlp import CompletedProcess, SubprocessExecutor


@pytest.fixture
def anyio_backend():
    return 'asyncio'


@pytest.fixture
def output_dir(tmp_path, monkeypatch):
    """Point downloads at a fresh directory"""
    monkeypatch.setattr(config.download, "output_dir", str(tmp_path))
    return tmp_path


class FakeYtDlp:
    """Stands in for SubprocessExecutor.run and records every command"""

    def __init__(self):
        self.calls = []
        self.returncode = 0
        self.stdout = b""
        self.stderr = b""
        self.raises = None
        self.on_call = None

    async def run(self, cmd, timeout):
        self.calls.append(cmd)
        if self.raises is not None:
            raise self.raises
        if self.on_call is not None:
            self.on_call(cmd)
        return CompletedProcess(returncode=self.returncode, stdout=self.stdout, stderr=self.stderr)


@pytest.fixture
def fake_ytdlp(monkeypatch):
    fake = FakeYtDlp()
    monkeypatch.setattr(state, "ytdlp_command", ["yt-dlp"])
    monkeypatch.setattr(SubprocessExecutor, "run", staticmethod(fake.run))
    return fake


def write_output(cmd, ext="mp4", content=b"media"):
    """Emulate yt-dlp writing the file named by the -o template"""
    template = cmd[cmd.index('-o') + 1]
    with open(template.replace("%(ext)s", ext), "wb") as f:
        f.write(content)
