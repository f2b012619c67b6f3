import logging
import os
from contextlib import suppress
from typing import List, Optional

import httpx

from ytubesaver.client.fetcher import MediaFetcher, MediaFetchError
from ytubesaver.client.providers import DownloadProvider, ProviderError, build_providers, is_media_url
from ytubesaver.config.settings import config
from ytubesaver.core.classifier import YOUTUBE, classify, thumbnail_url, watch_url
from ytubesaver.models.internal import ClassifiedUrl
from ytubesaver.models.request import DownloadRequest
from ytubesaver.models.response import DownloadResponse, VideoInfo
from ytubesaver.services.format import FormatDecision
from ytubesaver.services.info import VideoInfoService
from ytubesaver.utils.filename import available_path, sanitize_filename

logger = logging.getLogger(__name__)

OEMBED_URL = "https://www.youtube.com/oembed"

REMEDIATION = (
    "Direct download not available. Please try: 1) Check if URL is correct, "
    "2) Try a different quality, 3) Use desktop apps like yt-dlp."
)


class UnsupportedUrlError(ValueError):
    """URL is not a supported YouTube or Instagram link"""


class BackendUnavailableError(Exception):
    """The API could not be reached or answered with a failure"""


class DownloadClient:
    """
    Client for the YTubeSaver API.

    Metadata and downloads go to the API first. When it fails, metadata is
    derived from the URL alone and downloads walk the provider list once, in
    order, saving the first media URL that can be fetched.
    """

    def __init__(
        self,
        backend_url: Optional[str] = None,
        providers: Optional[List[DownloadProvider]] = None,
        save_dir: str = ".",
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self.backend_url = (backend_url or config.client.backend_url).rstrip("/")
        self.providers = providers if providers is not None else build_providers(config.client.providers)
        self.save_dir = save_dir
        self._owns_client = http_client is None
        self.http = http_client or httpx.AsyncClient(
            follow_redirects=True,
            timeout=timeout or config.client.timeout_seconds
        )
        self.fetcher = MediaFetcher(self.http)

    async def __aenter__(self) -> "DownloadClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.http.aclose()

    # Metadata

    async def get_video_info(self, url: str) -> VideoInfo:
        classified = self._classify(url)
        try:
            return await self._backend_video_info(classified)
        except BackendUnavailableError as e:
            logger.warning(f"Backend video info failed, using fallback: {e}")
            return await self.fallback_video_info(classified)

    async def _backend_video_info(self, classified: ClassifiedUrl) -> VideoInfo:
        data = await self._post_backend("/video-info", {"url": classified.url})
        if not data.get("success") or not isinstance(data.get("videoInfo"), dict):
            raise BackendUnavailableError(data.get("message") or "no video info in response")
        try:
            return VideoInfo(**data["videoInfo"])
        except ValueError as e:
            raise BackendUnavailableError(f"malformed video info: {e}") from e

    async def fallback_video_info(self, classified: ClassifiedUrl) -> VideoInfo:
        """URL-derived info, enriched from YouTube oEmbed when it answers"""
        info = VideoInfoService.from_url(classified)
        if classified.platform != YOUTUBE:
            return info

        try:
            response = await self.http.get(
                OEMBED_URL,
                params={"url": watch_url(classified.content_id), "format": "json"}
            )
            if response.status_code != 200:
                return info
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.info(f"oEmbed lookup failed: {e}")
            return info

        if not isinstance(data, dict):
            return info
        return info.model_copy(update={
            "title": data.get("title") or "YouTube Video",
            "uploader": data.get("author_name") or "YouTube",
            "thumbnail": data.get("thumbnail_url") or thumbnail_url(classified),
        })

    # Downloads

    async def download(self, request: DownloadRequest) -> DownloadResponse:
        classified = classify(request.url)
        if classified is None:
            return DownloadResponse(success=False, message="Invalid or missing URL")

        try:
            return await self._backend_download(request)
        except BackendUnavailableError as e:
            logger.warning(f"Backend download failed, trying fallback services: {e}")
            return await self.fallback_download(request, classified)

    async def _backend_download(self, request: DownloadRequest) -> DownloadResponse:
        data = await self._post_backend("/download", request.model_dump())
        download_url = data.get("downloadUrl")
        if not data.get("success") or not is_media_url(download_url):
            raise BackendUnavailableError(data.get("message") or "backend download failed")

        filename = data.get("filename")
        if not isinstance(filename, str) or not filename:
            filename = os.path.basename(download_url)
        try:
            path = await self.save_from_url(download_url, filename)
        except (MediaFetchError, httpx.InvalidURL, OSError) as e:
            raise BackendUnavailableError(f"could not fetch {download_url}: {e}") from e

        return DownloadResponse(
            success=True,
            message=f"Download completed successfully! Saved to {path}",
            downloadUrl=download_url,
            filename=os.path.basename(path),
        )

    async def fallback_download(
        self,
        request: DownloadRequest,
        classified: Optional[ClassifiedUrl] = None
    ) -> DownloadResponse:
        """Try each provider once, in order; no retries"""
        classified = classified or classify(request.url)
        if classified is None:
            return DownloadResponse(success=False, message="Invalid or missing URL")

        ext = FormatDecision.plan(request).ext
        filename = f"{classified.platform}_{classified.content_id}.{ext}"
        failures = []

        for provider in self.providers:
            try:
                media_url = await provider.resolve(self.http, request)
                path = await self.save_from_url(media_url, filename, original_page_url=classified.url)
            except ProviderError as e:
                failures.append(str(e))
                logger.info(f"Provider failed: {e}")
                continue
            except (MediaFetchError, httpx.InvalidURL, OSError) as e:
                failures.append(f"{provider.name}: {e}")
                logger.info(f"Provider {provider.name} media fetch failed: {e}")
                continue

            return DownloadResponse(
                success=True,
                message=f"Download completed via {provider.name}! Saved to {path}",
                downloadUrl=media_url,
                filename=os.path.basename(path),
            )

        detail = "; ".join(failures) if failures else "no fallback services configured"
        return DownloadResponse(success=False, message=f"{REMEDIATION} ({detail})")

    async def save_from_url(self, url: str, filename: str, original_page_url: Optional[str] = None) -> str:
        """Write url's bytes into save_dir without overwriting; returns the path"""
        os.makedirs(self.save_dir, exist_ok=True)
        path = available_path(self.save_dir, sanitize_filename(filename))
        try:
            await self.fetcher.save(url, path, original_page_url)
        except MediaFetchError:
            with suppress(FileNotFoundError):
                os.remove(path)
            raise
        logger.info(f"Saved {url} to {path}")
        return path

    # Helpers

    def _classify(self, url: str) -> ClassifiedUrl:
        classified = classify(url)
        if classified is None:
            raise UnsupportedUrlError(f"Unsupported URL: {url}")
        return classified

    async def _post_backend(self, path: str, payload: dict) -> dict:
        try:
            response = await self.http.post(f"{self.backend_url}{path}", json=payload)
        except httpx.HTTPError as e:
            raise BackendUnavailableError(f"request failed ({e.__class__.__name__})") from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if response.status_code >= 400 or not isinstance(data, dict):
            message = data.get("message") if isinstance(data, dict) else None
            raise BackendUnavailableError(message or f"backend responded with {response.status_code}")
        return data
