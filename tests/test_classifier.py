import pytest

from ytubesaver.core.classifier import (
    INSTAGRAM,
    YOUTUBE,
    classify,
    detect_platform,
    extract_content_id,
    is_valid_url,
    thumbnail_url,
)


@pytest.mark.parametrize("url, platform, content_id", [
    ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", YOUTUBE, "dQw4w9WgXcQ"),
    ("https://www.youtube.com/watch?v=dQw4w9WgXcQ&list=PL123&t=42s", YOUTUBE, "dQw4w9WgXcQ"),
    ("https://www.youtube.com/watch?feature=share&v=dQw4w9WgXcQ", YOUTUBE, "dQw4w9WgXcQ"),
    ("youtube.com/watch?v=dQw4w9WgXcQ", YOUTUBE, "dQw4w9WgXcQ"),
    ("https://m.youtube.com/watch?v=dQw4w9WgXcQ", YOUTUBE, "dQw4w9WgXcQ"),
    ("https://www.youtube.com/shorts/Zdscg2Q2IQQ", YOUTUBE, "Zdscg2Q2IQQ"),
    ("https://www.youtube.com/shorts/Zdscg2Q2IQQ?feature=share", YOUTUBE, "Zdscg2Q2IQQ"),
    ("https://youtu.be/Zdscg2Q2IQQ", YOUTUBE, "Zdscg2Q2IQQ"),
    ("https://youtu.be/Zdscg2Q2IQQ?si=abcdef", YOUTUBE, "Zdscg2Q2IQQ"),
    ("https://www.youtube.com/embed/dQw4w9WgXcQ", YOUTUBE, "dQw4w9WgXcQ"),
    ("https://www.youtube.com/v/dQw4w9WgXcQ", YOUTUBE, "dQw4w9WgXcQ"),
    ("https://instagram.com/p/ABC123/", INSTAGRAM, "ABC123"),
    ("https://instagram.com/reel/XYZ789/", INSTAGRAM, "XYZ789"),
    ("https://instagram.com/reel/XYZ789/?utm_source=ig_web_copy_link", INSTAGRAM, "XYZ789"),
    ("https://www.instagram.com/reel/XYZ789/?utm_source=ig_web_copy_link", INSTAGRAM, "XYZ789"),
    ("https://www.instagram.com/tv/CdE_f-1/", INSTAGRAM, "CdE_f-1"),
    ("https://www.instagram.com/stories/some.user/3141592653589793/", INSTAGRAM, "3141592653589793"),
    ("  https://youtu.be/dQw4w9WgXcQ  ", YOUTUBE, "dQw4w9WgXcQ"),
])
def test_supported_urls(url, platform, content_id):
    classified = classify(url)
    assert classified is not None
    assert classified.platform == platform
    assert classified.content_id == content_id
    assert is_valid_url(url)
    assert extract_content_id(url) == content_id
    assert detect_platform(url) == platform


@pytest.mark.parametrize("url", [
    None,
    "",
    "not a url",
    "https://vimeo.com/123456",
    "https://www.youtube.com/",
    "https://www.youtube.com/watch?v=short",
    "https://www.youtube.com/watch?av=dQw4w9WgXcQ",
    "https://youtu.be/dQw4w9WgXcQextra",
    "https://www.youtube.com/shorts/Zdscg2Q2IQ",
    "https://www.instagram.com/explore/",
    "https://www.instagram.com/p/",
    "https://www.instagram.com/stories/some.user/",
    "https://evil.example/?next=https://www.youtube.com/watch?v=dQw4w9WgXcQ",
])
def test_unsupported_urls(url):
    assert classify(url) is None
    assert not is_valid_url(url)
    assert extract_content_id(url) is None
    assert detect_platform(url) is None


def test_watch_url_wins_over_later_patterns():
    classified = classify("https://www.youtube.com/watch?v=aaaaaaaaaaa&embed=/embed/bbbbbbbbbbb")
    assert classified.content_id == "aaaaaaaaaaa"


def test_thumbnail_url():
    assert thumbnail_url(classify("https://youtu.be/dQw4w9WgXcQ")) == \
        "https://img.youtube.com/vi/dQw4w9WgXcQ/maxresdefault.jpg"
    assert thumbnail_url(classify("https://instagram.com/p/ABC123/")) == ""
