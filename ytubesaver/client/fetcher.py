from typing import Dict, Optional
from urllib.parse import urlparse

import aiofiles
import httpx

UA_CHROME = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)

UA_SAFARI = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/605.1.15 (KHTML, like Gecko) "
    "Version/17.0 Safari/605.1.15"
)

LANG_US = "en-US,en;q=0.9"
LANG_GB = "en-GB,en;q=0.8"

MEDIA_TYPES = ("video", "audio", "octet-stream")
CHUNK_SIZE = 1024 * 1024


class MediaFetchError(Exception):
    """Media URL could not be fetched as audio/video bytes"""


class MediaFetcher:
    """
    Fetch media bytes onto local disk.
    Adjusts headers step by step when a CDN answers 403.
    """

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    def _get_base_headers(self, url: str) -> Dict[str, str]:
        parsed = urlparse(url)
        referer = f"{parsed.scheme}://{parsed.netloc}/"

        return {
            "User-Agent": UA_CHROME,
            "Accept": "video/mp4,video/*,audio/*,*/*",
            "Accept-Language": LANG_US,
            "Accept-Encoding": "identity",
            "Referer": referer,
        }

    async def fetch_with_retry(self, url: str, original_page_url: Optional[str] = None) -> httpx.Response:
        """
        Open a streamed GET, retrying 403 answers with adjusted headers.
        Returns the first non-403 response or the last failed one; the caller closes it.
        """
        headers = self._get_base_headers(url)

        resp = await self._send(url, headers)
        if resp.status_code != 403:
            return resp

        if original_page_url:
            await resp.aclose()
            headers["Referer"] = original_page_url
            resp = await self._send(url, headers)
            if resp.status_code != 403:
                return resp

        await resp.aclose()
        headers["Accept-Language"] = LANG_GB
        headers.update({
            "Sec-Fetch-Site": "same-origin",
            "Sec-Fetch-Mode": "no-cors",
            "Sec-Fetch-Dest": "video",
        })
        resp = await self._send(url, headers)
        if resp.status_code != 403:
            return resp

        await resp.aclose()
        headers["Range"] = "bytes=0-"
        headers["User-Agent"] = UA_SAFARI
        return await self._send(url, headers)

    async def save(self, url: str, path: str, original_page_url: Optional[str] = None) -> int:
        """Stream url into path; returns bytes written"""
        try:
            resp = await self.fetch_with_retry(url, original_page_url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise MediaFetchError(f"request failed ({e.__class__.__name__})") from e

        try:
            if resp.status_code not in (200, 206):
                raise MediaFetchError(f"responded with {resp.status_code}")

            content_type = resp.headers.get("content-type", "").lower()
            if not any(kind in content_type for kind in MEDIA_TYPES):
                raise MediaFetchError(f"unexpected content type {content_type or 'none'}")

            written = 0
            async with aiofiles.open(path, "wb") as f:
                async for chunk in resp.aiter_bytes(CHUNK_SIZE):
                    await f.write(chunk)
                    written += len(chunk)
            return written
        except httpx.HTTPError as e:
            raise MediaFetchError(f"transfer failed ({e.__class__.__name__})") from e
        except OSError as e:
            raise MediaFetchError(f"could not write {path}: {e}") from e
        finally:
            await resp.aclose()

    async def _send(self, url: str, headers: Dict[str, str]) -> httpx.Response:
        req = self.client.build_request("GET", url, headers=headers)
        return await self.client.send(req, stream=True)
