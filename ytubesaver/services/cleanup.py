import logging
import os
import stat
import time
from typing import Optional
import aiofiles.os

logger = logging.getLogger(__name__)

class CleanupService:
    """Age-based sweep of the download directory"""

    @staticmethod
    async def sweep(directory: str, max_age_seconds: float, now: Optional[float] = None) -> int:
        """
        Delete regular files whose mtime is older than max_age_seconds.
        Returns the number of files removed; a missing directory counts as empty.
        Does not coordinate with downloads still writing into the directory.
        """
        now = time.time() if now is None else now

        try:
            names = await aiofiles.os.listdir(directory)
        except FileNotFoundError:
            return 0

        deleted = 0
        for name in names:
            path = os.path.join(directory, name)
            try:
                st = await aiofiles.os.stat(path)
            except FileNotFoundError:
                continue

            if not stat.S_ISREG(st.st_mode):
                continue

            if now - st.st_mtime > max_age_seconds:
                try:
                    await aiofiles.os.remove(path)
                except FileNotFoundError:
                    continue
                except OSError as e:
                    logger.warning(f"Could not remove {path}: {e}")
                    continue
                deleted += 1
                logger.debug(f"Removed {path}")

        return deleted

    @staticmethod
    async def count_files(directory: str) -> int:
        try:
            names = await aiofiles.os.listdir(directory)
        except FileNotFoundError:
            return 0
        return len(names)
