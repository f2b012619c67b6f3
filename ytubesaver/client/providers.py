"""
Third-party download services used when the API is unreachable.

Each adapter turns a DownloadRequest into a direct media URL or raises
ProviderError. The client walks an ordered list of adapters and stops at the
first URL it can actually fetch.
"""
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import httpx

from ytubesaver.config.settings import ProviderConfig
from ytubesaver.models.request import DownloadRequest
from ytubesaver.services.format import FormatDecision

logger = logging.getLogger(__name__)

JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


def is_media_url(value: Any) -> bool:
    """An absolute http(s) URL string"""
    if not isinstance(value, str):
        return False
    parsed = urlparse(value.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class ProviderError(Exception):
    """A provider could not produce a usable media URL"""

    def __init__(self, provider: str, reason: str):
        super().__init__(f"{provider}: {reason}")
        self.provider = provider
        self.reason = reason


class DownloadProvider:
    """Base adapter: POST a JSON payload, read a media URL from the JSON reply"""

    name = "provider"

    def __init__(self, endpoint: str):
        self.endpoint = endpoint

    def build_payload(self, request: DownloadRequest) -> Dict[str, Any]:
        raise NotImplementedError

    def extract_url(self, data: Dict[str, Any]) -> Optional[str]:
        raise NotImplementedError

    async def resolve(self, client: httpx.AsyncClient, request: DownloadRequest) -> str:
        try:
            response = await client.post(
                self.endpoint,
                json=self.build_payload(request),
                headers=JSON_HEADERS
            )
        except httpx.HTTPError as e:
            raise ProviderError(self.name, f"request failed ({e.__class__.__name__})") from e

        if response.status_code >= 400:
            raise ProviderError(self.name, f"responded with {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(self.name, "response was not JSON") from e

        url = self.extract_url(data) if isinstance(data, dict) else None
        if not is_media_url(url):
            raise ProviderError(self.name, "no media URL in response")
        return url.strip()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.endpoint!r})"


class CobaltProvider(DownloadProvider):
    """cobalt-style API: {status: success|stream|redirect|tunnel, url}"""

    name = "cobalt"
    OK_STATUSES = ("success", "stream", "redirect", "tunnel")

    def build_payload(self, request: DownloadRequest) -> Dict[str, Any]:
        height = FormatDecision.height_for(request.quality)
        is_audio = request.format == "audio"
        return {
            "url": request.url,
            "vQuality": str(height) if height and not is_audio else "max",
            "aFormat": "mp3" if is_audio else "best",
            "isAudioOnly": is_audio,
        }

    def extract_url(self, data: Dict[str, Any]) -> Optional[str]:
        if data.get("status") in self.OK_STATUSES:
            return data.get("url")
        return None


class GenericJsonProvider(DownloadProvider):
    """Converter services that answer with one of url / download_url / link"""

    name = "generic"

    def build_payload(self, request: DownloadRequest) -> Dict[str, Any]:
        is_audio = request.format == "audio"
        return {
            "url": request.url,
            "vQuality": "max" if is_audio else request.quality,
            "vFormat": "mp3" if is_audio else "mp4",
            "aFormat": "mp3",
            "isAudioOnly": is_audio,
        }

    def extract_url(self, data: Dict[str, Any]) -> Optional[str]:
        candidates = [data.get("download_url"), data.get("link")]
        if data.get("status") in ("success", "stream"):
            candidates.insert(0, data.get("url"))
        return next((c for c in candidates if is_media_url(c)), None)


PROVIDER_KINDS = {
    "cobalt": CobaltProvider,
    "generic": GenericJsonProvider,
}


def build_providers(configs: List[ProviderConfig]) -> List[DownloadProvider]:
    """Instantiate adapters in configured order"""
    return [PROVIDER_KINDS[c.kind](c.endpoint) for c in configs]
