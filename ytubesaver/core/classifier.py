"""
URL classification shared by the API and the client.

Every supported URL shape lives in PATTERNS, in priority order. Validation and
id extraction both walk the same list; the first match wins.
"""
import re
from typing import Optional, Tuple

from ytubesaver.models.internal import ClassifiedUrl

YOUTUBE = "youtube"
INSTAGRAM = "instagram"

_PREFIX = r"^\s*(?:https?://)?"
_YT_HOST = r"(?:(?:www|m)\.)?youtube\.com"
_IG_HOST = r"(?:www\.)?instagram\.com"
# 11 id characters, not followed by another id character
_YT_ID = r"([A-Za-z0-9_-]{11})(?![A-Za-z0-9_-])"
_IG_ID = r"([A-Za-z0-9_-]+)"

PATTERNS: Tuple[Tuple[str, "re.Pattern[str]"], ...] = (
    (YOUTUBE, re.compile(_PREFIX + _YT_HOST + r"/watch/?\?(?:[^#]*?&)?v=" + _YT_ID)),
    (YOUTUBE, re.compile(_PREFIX + _YT_HOST + r"/shorts/" + _YT_ID)),
    (YOUTUBE, re.compile(_PREFIX + r"youtu\.be/" + _YT_ID)),
    (YOUTUBE, re.compile(_PREFIX + _YT_HOST + r"/embed/" + _YT_ID)),
    (YOUTUBE, re.compile(_PREFIX + _YT_HOST + r"/v/" + _YT_ID)),
    (INSTAGRAM, re.compile(_PREFIX + _IG_HOST + r"/p/" + _IG_ID)),
    (INSTAGRAM, re.compile(_PREFIX + _IG_HOST + r"/reel/" + _IG_ID)),
    (INSTAGRAM, re.compile(_PREFIX + _IG_HOST + r"/tv/" + _IG_ID)),
    (INSTAGRAM, re.compile(_PREFIX + _IG_HOST + r"/stories/[A-Za-z0-9_.]+/([0-9]+)")),
)


def classify(url: Optional[str]) -> Optional[ClassifiedUrl]:
    """Return platform and content id for a supported URL, else None"""
    if not url or not isinstance(url, str):
        return None

    for platform, pattern in PATTERNS:
        match = pattern.search(url)
        if match:
            return ClassifiedUrl(platform=platform, content_id=match.group(1), url=url.strip())

    return None


def is_valid_url(url: Optional[str]) -> bool:
    return classify(url) is not None


def extract_content_id(url: Optional[str]) -> Optional[str]:
    classified = classify(url)
    return classified.content_id if classified else None


def detect_platform(url: Optional[str]) -> Optional[str]:
    classified = classify(url)
    return classified.platform if classified else None


def thumbnail_url(classified: ClassifiedUrl) -> str:
    """Conventional thumbnail location; Instagram has none without an API call"""
    if classified.platform == YOUTUBE:
        return f"https://img.youtube.com/vi/{classified.content_id}/maxresdefault.jpg"
    return ""


def watch_url(content_id: str) -> str:
    return f"https://www.youtube.com/watch?v={content_id}"
